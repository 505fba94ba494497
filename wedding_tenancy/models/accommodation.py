from datetime import date

from sqlalchemy import Boolean, CheckConstraint, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from wedding_tenancy.config.table_names import TableNames
from wedding_tenancy.models.base import Base, TenantScoped


class Accommodation(Base, TenantScoped):
    __tablename__ = TableNames.ACCOMMODATIONS.value
    __table_args__ = (
        CheckConstraint("allocated_rooms >= 0", name="ck_accommodations_allocated_rooms_non_negative"),
        CheckConstraint("total_rooms >= 0", name="ck_accommodations_total_rooms_non_negative"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    room_type: Mapped[str] = mapped_column(String(255), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    total_rooms: Mapped[int] = mapped_column(Integer, nullable=False)
    # Must equal the number of room_allocations rows pointing here
    allocated_rooms: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )
    price_per_night: Mapped[str | None] = mapped_column(String(50), nullable=True)
    special_features: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Accommodation {self.name} {self.allocated_rooms}/{self.total_rooms}>"


class RoomAllocation(Base):
    """Guest to accommodation link. Has no tenant column of its own."""

    __tablename__ = TableNames.ROOM_ALLOCATIONS.value

    accommodation_id: Mapped[int] = mapped_column(
        ForeignKey(f"{TableNames.ACCOMMODATIONS.value}.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    guest_id: Mapped[int] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    room_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    check_in_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    # pending, confirmed, checked-in, no-show
    check_in_status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)
    check_in_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    check_out_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    # pending, checked-out
    check_out_status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)
    check_out_time: Mapped[str | None] = mapped_column(String(5), nullable=True)

    special_requests: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Accompanying guests sharing the room
    includes_plus_one: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    includes_children: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    children_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    additional_guests_info: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<RoomAllocation guest {self.guest_id} in {self.accommodation_id}>"
