import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr

from wedding_tenancy.models.guest import GuestSide, GuestStatus
from wedding_tenancy.tenancy.dtos import RowDTO

logger = logging.getLogger(__name__)


def parse_children_details(raw: Any) -> list[dict]:
    """Normalise the ``children_details`` column to a list of child dicts.

    Older rows hold the list JSON-encoded as a string; anything unreadable
    counts as no children.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        if not raw.strip():
            return []
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning(f"Unreadable children_details value: {raw[:50]!r}")
            return []
    if not isinstance(raw, list):
        return []
    return [child for child in raw if isinstance(child, dict)]


class ChildDetail(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    age: Optional[int] = None


class GuestCreate(BaseModel):
    first_name: str
    last_name: str
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    side: GuestSide
    relationship: Optional[str] = None
    rsvp_status: GuestStatus = GuestStatus.PENDING
    plus_one_allowed: bool = False
    plus_one_name: Optional[str] = None
    plus_one_email: Optional[EmailStr] = None
    plus_one_phone: Optional[str] = None
    children_details: list[ChildDetail] = []
    children_notes: Optional[str] = None
    dietary_restrictions: Optional[str] = None
    allergies: Optional[str] = None
    needs_accommodation: bool = False
    accommodation_preference: Optional[str] = None
    notes: Optional[str] = None


class GuestUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    side: Optional[GuestSide] = None
    relationship: Optional[str] = None
    rsvp_status: Optional[GuestStatus] = None
    plus_one_allowed: Optional[bool] = None
    plus_one_name: Optional[str] = None
    plus_one_email: Optional[EmailStr] = None
    plus_one_phone: Optional[str] = None
    children_details: Optional[list[ChildDetail]] = None
    children_notes: Optional[str] = None
    dietary_restrictions: Optional[str] = None
    allergies: Optional[str] = None
    needs_accommodation: Optional[bool] = None
    accommodation_preference: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class GuestDTO(RowDTO):
    """DTO for guest data transfer. Children details are always a parsed list."""

    id: int
    event_id: int
    first_name: str
    last_name: str
    email: str | None
    phone: str | None
    side: GuestSide
    relationship: str | None
    rsvp_status: GuestStatus
    plus_one_allowed: bool
    plus_one_name: str | None
    plus_one_email: str | None
    plus_one_phone: str | None
    children_details: list[dict]
    children_notes: str | None
    dietary_restrictions: str | None
    allergies: str | None
    needs_accommodation: bool
    accommodation_preference: str | None
    notes: str | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Any, **extra: Any) -> "GuestDTO":
        extra.setdefault("children_details", parse_children_details(row.children_details))
        return super().from_row(row, **extra)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class GuestStatisticsDTO:
    total: int = 0
    confirmed: int = 0
    declined: int = 0
    pending: int = 0
    with_plus_ones: int = 0
    with_children: int = 0
    needing_accommodation: int = 0
