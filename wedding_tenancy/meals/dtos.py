from dataclasses import dataclass
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from wedding_tenancy.tenancy.dtos import RowDTO


class MealOptionCreate(BaseModel):
    ceremony_id: int = Field(gt=0)
    name: str
    description: Optional[str] = None
    is_vegetarian: bool = False
    is_vegan: bool = False
    is_gluten_free: bool = False
    is_nut_free: bool = False


class MealOptionUpdate(BaseModel):
    ceremony_id: Optional[int] = Field(default=None, gt=0)
    name: Optional[str] = None
    description: Optional[str] = None
    is_vegetarian: Optional[bool] = None
    is_vegan: Optional[bool] = None
    is_gluten_free: Optional[bool] = None
    is_nut_free: Optional[bool] = None


@dataclass(frozen=True)
class MealOptionDTO(RowDTO):
    id: int
    event_id: int
    ceremony_id: int
    name: str
    description: str | None
    is_vegetarian: bool
    is_vegan: bool
    is_gluten_free: bool
    is_nut_free: bool


@dataclass(frozen=True)
class MealOptionCountDTO(MealOptionDTO):
    selection_count: int = 0


@dataclass(frozen=True)
class GuestMealSelectionDTO(RowDTO):
    """A guest's meal choice with the names needed to display it."""

    id: int
    guest_id: int
    meal_option_id: int
    ceremony_id: int
    notes: str | None
    meal_name: str
    meal_description: str | None
    ceremony_name: str
    ceremony_date: date
