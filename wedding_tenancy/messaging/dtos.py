from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from wedding_tenancy.tenancy.dtos import RowDTO


class MessageTemplateCreate(BaseModel):
    name: str
    category: str
    template_id: Optional[str] = None
    content: str
    parameters: list[Any] = []
    language: str = "en_US"


class MessageTemplateUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    template_id: Optional[str] = None
    content: Optional[str] = None
    parameters: Optional[list[Any]] = None
    language: Optional[str] = None


@dataclass(frozen=True)
class MessageTemplateDTO(RowDTO):
    id: int
    event_id: int
    name: str
    category: str
    template_id: str | None
    content: str
    parameters: list[Any]
    language: str
    created_at: datetime
    last_used: datetime | None

    @classmethod
    def from_row(cls, row: Any, **extra: Any) -> "MessageTemplateDTO":
        extra.setdefault("parameters", list(row.parameters or []))
        return super().from_row(row, **extra)
