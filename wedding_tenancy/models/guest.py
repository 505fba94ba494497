from enum import Enum as PyEnum
from typing import Any

from sqlalchemy import Boolean, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy_utils import JSONType

from wedding_tenancy.config.table_names import TableNames
from wedding_tenancy.models.base import Base, TenantScoped, TimeStamp


class GuestStatus(str, PyEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"


class GuestSide(str, PyEnum):
    BRIDE = "bride"
    GROOM = "groom"


class Guest(Base, TenantScoped, TimeStamp):
    __tablename__ = TableNames.GUESTS.value

    first_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    side: Mapped[GuestSide] = mapped_column(
        Enum(GuestSide, name="guest_side_enum", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    relationship: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # RSVP status
    rsvp_status: Mapped[GuestStatus] = mapped_column(
        Enum(GuestStatus, name="guest_status_enum", values_callable=lambda x: [e.value for e in x]),
        default=GuestStatus.PENDING,
        nullable=False,
        index=True,
    )

    # Plus one
    plus_one_allowed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    plus_one_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    plus_one_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    plus_one_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Children: list of {name, age, ...}; legacy rows hold the list as an encoded string
    children_details: Mapped[Any] = mapped_column(JSONType, default=list, nullable=True)
    children_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    dietary_restrictions: Mapped[str | None] = mapped_column(Text, nullable=True)
    allergies: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Accommodation
    needs_accommodation: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    accommodation_preference: Mapped[str | None] = mapped_column(String(255), nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Guest {self.first_name} {self.last_name} - {self.rsvp_status.value}>"
