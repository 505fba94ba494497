from dataclasses import dataclass
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from wedding_tenancy.tenancy.dtos import RowDTO


class AccommodationCreate(BaseModel):
    name: str
    room_type: str
    capacity: int = Field(gt=0)
    total_rooms: int = Field(ge=0)
    price_per_night: Optional[str] = None
    special_features: Optional[str] = None


class AccommodationUpdate(BaseModel):
    name: Optional[str] = None
    room_type: Optional[str] = None
    capacity: Optional[int] = Field(default=None, gt=0)
    total_rooms: Optional[int] = Field(default=None, ge=0)
    price_per_night: Optional[str] = None
    special_features: Optional[str] = None


@dataclass(frozen=True)
class AccommodationDTO(RowDTO):
    id: int
    event_id: int
    name: str
    room_type: str
    capacity: int
    total_rooms: int
    allocated_rooms: int
    price_per_night: str | None
    special_features: str | None

    @property
    def available_rooms(self) -> int:
        """Negative when the accommodation is over-allocated."""
        return self.total_rooms - self.allocated_rooms


@dataclass(frozen=True)
class AccommodationAllocationDTO(AccommodationDTO):
    """An accommodation together with its live allocation count."""

    guests_assigned: int = 0


@dataclass(frozen=True)
class AccommodationStatsDTO:
    total_rooms: int = 0
    allocated_rooms: int = 0
    available_rooms: int = 0
    accommodation_types: int = 0


class RoomAllocationCreate(BaseModel):
    accommodation_id: int = Field(gt=0)
    guest_id: int = Field(gt=0)
    room_number: Optional[str] = None
    check_in_date: Optional[date] = None
    check_in_status: str = "pending"
    check_in_time: Optional[str] = None
    check_out_date: Optional[date] = None
    check_out_status: str = "pending"
    check_out_time: Optional[str] = None
    special_requests: Optional[str] = None
    includes_plus_one: bool = False
    includes_children: bool = False
    children_count: int = Field(default=0, ge=0)
    additional_guests_info: Optional[str] = None


class RoomAllocationUpdate(BaseModel):
    accommodation_id: Optional[int] = Field(default=None, gt=0)
    guest_id: Optional[int] = Field(default=None, gt=0)
    room_number: Optional[str] = None
    check_in_date: Optional[date] = None
    check_in_status: Optional[str] = None
    check_in_time: Optional[str] = None
    check_out_date: Optional[date] = None
    check_out_status: Optional[str] = None
    check_out_time: Optional[str] = None
    special_requests: Optional[str] = None
    includes_plus_one: Optional[bool] = None
    includes_children: Optional[bool] = None
    children_count: Optional[int] = Field(default=None, ge=0)
    additional_guests_info: Optional[str] = None


@dataclass(frozen=True)
class RoomAllocationDTO(RowDTO):
    id: int
    accommodation_id: int
    guest_id: int
    room_number: str | None
    check_in_date: date | None
    check_in_status: str
    check_in_time: str | None
    check_out_date: date | None
    check_out_status: str
    check_out_time: str | None
    special_requests: str | None
    includes_plus_one: bool
    includes_children: bool
    children_count: int
    additional_guests_info: str | None
