from datetime import date

from sqlalchemy import Boolean, Date, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from wedding_tenancy.config.table_names import TableNames
from wedding_tenancy.models.base import Base, CreatedAt


class WeddingEvent(Base, CreatedAt):
    """The tenant. Every other row is owned by exactly one wedding event."""

    __tablename__ = TableNames.WEDDING_EVENTS.value

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    couple_names: Mapped[str] = mapped_column(String(255), nullable=False)
    bride_name: Mapped[str] = mapped_column(String(255), nullable=False)
    groom_name: Mapped[str] = mapped_column(String(255), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    location: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    rsvp_deadline: Mapped[date | None] = mapped_column(Date, nullable=True)

    # RSVP settings
    allow_plus_ones: Mapped[bool] = mapped_column(Boolean, default=True)
    allow_children_details: Mapped[bool] = mapped_column(Boolean, default=True)

    created_by: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<WeddingEvent {self.title} on {self.start_date}>"
