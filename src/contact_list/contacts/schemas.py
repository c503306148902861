"""
Pydantic schemas for the contact API.

Field names are snake_case in Python and camelCase on the wire.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

from contact_list.contacts.repository import PHONE_NUMBER_SEPARATOR, ContactRecord

PhoneNumberStr = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=50),
]


class CamelModel(BaseModel):
    """Base model serialising with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ContactPayload(CamelModel):
    """Request body for creating or replacing a contact."""

    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)] = Field(
        ...,
        description="Contact display name",
    )
    phone_numbers: list[PhoneNumberStr] = Field(
        default_factory=list,
        description="Phone numbers owned by the contact",
    )
    image: str | None = Field(
        default=None,
        max_length=1024,
        description="Image path or URL",
    )

    @field_validator("phone_numbers")
    @classmethod
    def reject_separator(cls, v: list[str]) -> list[str]:
        """Numbers are stored joined by commas, so they cannot hold one."""
        for number in v:
            if PHONE_NUMBER_SEPARATOR in number:
                raise ValueError(f"Phone number must not contain '{PHONE_NUMBER_SEPARATOR}': {number}")
        return v


class ContactResponse(CamelModel):
    """A contact with its phone numbers comma-joined."""

    id: int
    name: str
    image: str | None
    phone_numbers: str = Field(
        ...,
        description="Comma-joined phone numbers, order not guaranteed",
    )

    @classmethod
    def from_record(cls, record: ContactRecord) -> "ContactResponse":
        return cls(
            id=record.id,
            name=record.name,
            image=record.image,
            phone_numbers=record.phone_numbers,
        )


class MessageResponse(BaseModel):
    """Plain acknowledgement body."""

    message: str
