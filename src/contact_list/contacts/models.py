"""
SQLAlchemy models for contacts and their phone numbers.
"""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contact_list.shared.database import Base

# Largest value of a 32-bit Integer primary key on every supported backend
MAX_CONTACT_ID = 2**31 - 1


class Contact(Base):
    """A named contact with an optional image reference."""

    __tablename__ = "contacts"
    # Never reuse ids of deleted contacts on SQLite
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    image: Mapped[str | None] = mapped_column(
        String(1024),
        nullable=True,
    )

    # Deletion of phone numbers is done explicitly by the service
    phone_numbers: Mapped[list["PhoneNumber"]] = relationship(
        "PhoneNumber",
        back_populates="contact",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Contact(id={self.id}, name={self.name})>"


class PhoneNumber(Base):
    """A phone number row owned by exactly one contact."""

    __tablename__ = "phone_numbers"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    contact_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("contacts.id"),
        nullable=False,
        index=True,
    )
    phone_number: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
    )

    contact: Mapped["Contact"] = relationship(
        "Contact",
        back_populates="phone_numbers",
    )

    def __repr__(self) -> str:
        return f"<PhoneNumber(contact_id={self.contact_id}, phone={self.phone_number})>"
