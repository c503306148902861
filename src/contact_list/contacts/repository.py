"""
Contact repository for database operations.

Every statement failure surfaces as ``StoreError`` with the driver
exception chained.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from sqlalchemy import String, delete, func, insert, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import FunctionElement

from contact_list.contacts.models import Contact, PhoneNumber
from contact_list.shared.exceptions import StoreError

PHONE_NUMBER_SEPARATOR = ","


class aggregate_phone_numbers(FunctionElement):
    """Comma-joined aggregate of phone numbers within a group."""

    type = String()
    name = "aggregate_phone_numbers"
    inherit_cache = True


@compiles(aggregate_phone_numbers)
def _compile_group_concat(element: Any, compiler: Any, **kw: Any) -> str:
    # MySQL and SQLite both default to a comma separator
    return f"group_concat({compiler.process(element.clauses, **kw)})"


@compiles(aggregate_phone_numbers, "postgresql")
def _compile_string_agg(element: Any, compiler: Any, **kw: Any) -> str:
    return f"string_agg({compiler.process(element.clauses, **kw)}, '{PHONE_NUMBER_SEPARATOR}')"


@dataclass(frozen=True)
class ContactRecord:
    """A contact row with its phone numbers aggregated into one string."""

    id: int
    name: str
    image: str | None
    phone_numbers: str

    @property
    def phone_number_list(self) -> list[str]:
        """Split the aggregated phone numbers."""
        if not self.phone_numbers:
            return []
        return self.phone_numbers.split(PHONE_NUMBER_SEPARATOR)


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise StoreError(f"Failed to {operation}", {"operation": operation}) from exc


class ContactRepository:
    """Repository for contact database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async database session.
        """
        self._session = session

    async def insert_contact(self, name: str, image: str | None) -> int:
        """Insert a contact row.

        Args:
            name: Contact name.
            image: Optional image reference.

        Returns:
            The store-assigned contact id.
        """
        with _store_errors("insert contact"):
            contact = Contact(name=name, image=image)
            self._session.add(contact)
            await self._session.flush()
            return contact.id

    async def insert_phone_numbers(self, contact_id: int, numbers: list[str]) -> None:
        """Bulk insert phone numbers bound to a contact.

        Args:
            contact_id: Owning contact id.
            numbers: Phone numbers to insert; nothing is issued when empty.
        """
        if not numbers:
            return

        with _store_errors("insert phone numbers"):
            await self._session.execute(
                insert(PhoneNumber),
                [
                    {"contact_id": contact_id, "phone_number": number}
                    for number in numbers
                ],
            )

    async def delete_contact(self, contact_id: int) -> int:
        """Delete a contact row.

        Args:
            contact_id: Contact id.

        Returns:
            Number of rows deleted (0 for an unknown id).
        """
        with _store_errors("delete contact"):
            result = await self._session.execute(
                delete(Contact).where(Contact.id == contact_id)
            )
            return result.rowcount

    async def delete_phone_numbers(self, contact_id: int) -> int:
        """Delete all phone numbers owned by a contact.

        Args:
            contact_id: Contact id.

        Returns:
            Number of rows deleted.
        """
        with _store_errors("delete phone numbers"):
            result = await self._session.execute(
                delete(PhoneNumber).where(PhoneNumber.contact_id == contact_id)
            )
            return result.rowcount

    async def update_contact(self, contact_id: int, name: str, image: str | None) -> int:
        """Overwrite name and image of a contact.

        Args:
            contact_id: Contact id.
            name: New name.
            image: New image reference.

        Returns:
            Number of rows matched.
        """
        with _store_errors("update contact"):
            result = await self._session.execute(
                update(Contact)
                .where(Contact.id == contact_id)
                .values(name=name, image=image)
            )
            return result.rowcount

    async def find_existing_phone_numbers(self, numbers: list[str]) -> set[str]:
        """Return which of the given numbers are already stored on any contact."""
        if not numbers:
            return set()

        with _store_errors("look up phone numbers"):
            result = await self._session.execute(
                select(PhoneNumber.phone_number)
                .where(PhoneNumber.phone_number.in_(numbers))
                .distinct()
            )
            return set(result.scalars().all())

    async def list_contacts(self, search: str | None = None) -> list[ContactRecord]:
        """List contacts with their phone numbers aggregated.

        Args:
            search: Optional case-insensitive substring matched against the
                name or any phone number of a contact.

        Returns:
            Contacts ordered by id.
        """
        stmt = (
            select(
                Contact.id,
                Contact.name,
                Contact.image,
                func.coalesce(
                    aggregate_phone_numbers(PhoneNumber.phone_number), ""
                ).label("phone_numbers"),
            )
            .outerjoin(PhoneNumber, PhoneNumber.contact_id == Contact.id)
            .group_by(Contact.id, Contact.name, Contact.image)
            .order_by(Contact.id)
        )

        if search:
            # Filter on contact ids so the aggregate keeps every number
            matching_numbers = select(PhoneNumber.contact_id).where(
                PhoneNumber.phone_number.icontains(search, autoescape=True)
            )
            stmt = stmt.where(
                or_(
                    Contact.name.icontains(search, autoescape=True),
                    Contact.id.in_(matching_numbers),
                )
            )

        with _store_errors("list contacts"):
            result = await self._session.execute(stmt)
            return [
                ContactRecord(
                    id=row.id,
                    name=row.name,
                    image=row.image,
                    phone_numbers=row.phone_numbers,
                )
                for row in result
            ]
