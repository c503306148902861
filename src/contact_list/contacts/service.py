"""
Contact service for business logic.

Each mutating operation runs as one transaction on the injected session:
committed when every statement succeeded, rolled back otherwise.
"""

from collections import Counter
from collections.abc import Iterator

from sqlalchemy.ext.asyncio import AsyncSession

from contact_list.contacts.csv_export import iter_contacts_csv
from contact_list.contacts.models import MAX_CONTACT_ID
from contact_list.contacts.repository import ContactRecord, ContactRepository
from contact_list.shared.exceptions import (
    AppException,
    ContactNotFoundError,
    DuplicatePhoneNumberError,
    StoreError,
)
from contact_list.shared.logging import get_logger

logger = get_logger(__name__)


def _storable_id(contact_id: int) -> bool:
    return 1 <= contact_id <= MAX_CONTACT_ID


class ContactService:
    """Service for contact management operations."""

    def __init__(
        self,
        session: AsyncSession,
        contact_repository: ContactRepository | None = None,
    ) -> None:
        """Initialize contact service.

        Args:
            session: Async database session.
            contact_repository: Optional contact repository (for DI).
        """
        self._session = session
        self._contact_repo = contact_repository or ContactRepository(session)

    async def _rollback(self, message: str, exc: StoreError) -> StoreError:
        await self._session.rollback()
        logger.exception(message, extra={"operation": exc.details.get("operation")})
        return StoreError(message, exc.details)

    async def find_duplicates(self, phone_numbers: list[str]) -> list[str]:
        """Return submitted numbers that are repeated or already stored.

        Matching is exact on the stripped string.
        """
        repeated = {number for number, count in Counter(phone_numbers).items() if count > 1}
        existing = await self._contact_repo.find_existing_phone_numbers(
            list(dict.fromkeys(phone_numbers))
        )
        return sorted(repeated | existing)

    async def create(
        self,
        name: str,
        image: str | None,
        phone_numbers: list[str],
    ) -> int:
        """Create a contact with its phone numbers.

        Args:
            name: Contact name.
            image: Optional image reference.
            phone_numbers: Numbers to attach to the contact.

        Returns:
            The new contact id.

        Raises:
            DuplicatePhoneNumberError: If any number is already in use.
            StoreError: If a statement fails; nothing is persisted.
        """
        try:
            duplicates = await self.find_duplicates(phone_numbers)
            if duplicates:
                logger.info(
                    "Rejected contact with duplicate phone numbers",
                    extra={"duplicates": duplicates},
                )
                raise DuplicatePhoneNumberError(duplicates)

            contact_id = await self._contact_repo.insert_contact(name, image)
            await self._contact_repo.insert_phone_numbers(contact_id, phone_numbers)
            await self._session.commit()
        except StoreError as exc:
            raise await self._rollback("Error creating contact", exc) from exc
        except AppException:
            await self._session.rollback()
            raise

        logger.info(
            "Created contact",
            extra={"contact_id": contact_id, "phone_number_count": len(phone_numbers)},
        )
        return contact_id

    async def remove(self, contact_id: int) -> None:
        """Delete a contact and every phone number it owns.

        Phone numbers go first so no number is ever left without its
        contact. Unknown ids are a no-op.
        """
        if not _storable_id(contact_id):
            logger.info("Deleted contact", extra={"contact_id": contact_id, "found": False})
            return

        try:
            numbers_deleted = await self._contact_repo.delete_phone_numbers(contact_id)
            contacts_deleted = await self._contact_repo.delete_contact(contact_id)
            await self._session.commit()
        except StoreError as exc:
            raise await self._rollback("Error deleting contact", exc) from exc

        logger.info(
            "Deleted contact",
            extra={
                "contact_id": contact_id,
                "found": bool(contacts_deleted),
                "phone_numbers_deleted": numbers_deleted,
            },
        )

    async def update(
        self,
        contact_id: int,
        name: str,
        image: str | None,
        phone_numbers: list[str],
    ) -> None:
        """Overwrite a contact and replace its phone numbers wholesale.

        Raises:
            ContactNotFoundError: If no contact has this id.
            StoreError: If a statement fails; nothing is persisted.
        """
        if not _storable_id(contact_id):
            raise ContactNotFoundError(contact_id)

        try:
            matched = await self._contact_repo.update_contact(contact_id, name, image)
            if not matched:
                raise ContactNotFoundError(contact_id)

            await self._contact_repo.delete_phone_numbers(contact_id)
            await self._contact_repo.insert_phone_numbers(contact_id, phone_numbers)
            await self._session.commit()
        except StoreError as exc:
            raise await self._rollback("Error updating contact", exc) from exc
        except AppException:
            await self._session.rollback()
            raise

        logger.info(
            "Updated contact",
            extra={"contact_id": contact_id, "phone_number_count": len(phone_numbers)},
        )

    async def list_contacts(self, search: str | None = None) -> list[ContactRecord]:
        """List all contacts, or those whose name or phone number contains ``search``."""
        try:
            return await self._contact_repo.list_contacts(search)
        except StoreError as exc:
            message = "Error searching contacts" if search else "Error fetching contacts"
            raise await self._rollback(message, exc) from exc

    async def export_csv(self) -> Iterator[str]:
        """Fetch every contact and return the CSV chunks to stream."""
        try:
            contacts = await self._contact_repo.list_contacts()
        except StoreError as exc:
            raise await self._rollback("Error exporting contacts to CSV", exc) from exc

        logger.info("Exporting contacts to CSV", extra={"contact_count": len(contacts)})
        return iter_contacts_csv(contacts)
