from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy_utils import JSONType

from wedding_tenancy.config.table_names import TableNames
from wedding_tenancy.models.base import Base, CreatedAt, TenantScoped


class MessageTemplate(Base, TenantScoped, CreatedAt):
    __tablename__ = TableNames.MESSAGE_TEMPLATES.value

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # invitation, rsvp, reminder, ceremony, travel, accommodation
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    # Template id registered with the messaging provider
    template_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    parameters: Mapped[Any] = mapped_column(JSONType, default=list, nullable=True)
    language: Mapped[str] = mapped_column(String(10), default="en_US", nullable=False)
    last_used: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<MessageTemplate {self.name} ({self.category})>"
