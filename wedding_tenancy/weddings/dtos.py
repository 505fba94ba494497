from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from wedding_tenancy.tenancy.dtos import RowDTO


class WeddingEventCreate(BaseModel):
    title: str
    couple_names: str
    bride_name: str
    groom_name: str
    start_date: date
    end_date: date
    location: str
    description: Optional[str] = None
    rsvp_deadline: Optional[date] = None
    allow_plus_ones: bool = True
    allow_children_details: bool = True
    created_by: int = Field(gt=0)


class WeddingEventUpdate(BaseModel):
    title: Optional[str] = None
    couple_names: Optional[str] = None
    bride_name: Optional[str] = None
    groom_name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    location: Optional[str] = None
    description: Optional[str] = None
    rsvp_deadline: Optional[date] = None
    allow_plus_ones: Optional[bool] = None
    allow_children_details: Optional[bool] = None


@dataclass(frozen=True)
class WeddingEventDTO(RowDTO):
    """DTO for a wedding event (the tenant)."""

    id: int
    title: str
    couple_names: str
    bride_name: str
    groom_name: str
    start_date: date
    end_date: date
    location: str
    description: str | None
    rsvp_deadline: date | None
    allow_plus_ones: bool
    allow_children_details: bool
    created_by: int
    created_at: datetime
