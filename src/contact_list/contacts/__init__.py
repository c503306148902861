from contact_list.contacts.models import Contact, PhoneNumber

__all__ = ["Contact", "PhoneNumber"]
