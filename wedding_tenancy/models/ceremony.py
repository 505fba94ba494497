import datetime as dt

from sqlalchemy import Date, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from wedding_tenancy.config.table_names import TableNames
from wedding_tenancy.models.base import Base, TenantScoped


class Ceremony(Base, TenantScoped):
    __tablename__ = TableNames.CEREMONIES.value

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    # "HH:MM", kept as text like the invitation cards show it
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    location: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    attire_code: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Ceremony {self.name} on {self.date}>"
