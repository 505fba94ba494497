import datetime as dt
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field

from wedding_tenancy.tenancy.dtos import RowDTO

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class CeremonyCreate(BaseModel):
    name: str
    date: dt.date
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)
    location: str
    description: Optional[str] = None
    attire_code: Optional[str] = None


class CeremonyUpdate(BaseModel):
    name: Optional[str] = None
    date: Optional[dt.date] = None
    start_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    location: Optional[str] = None
    description: Optional[str] = None
    attire_code: Optional[str] = None


@dataclass(frozen=True)
class CeremonyDTO(RowDTO):
    id: int
    event_id: int
    name: str
    date: dt.date
    start_time: str
    end_time: str
    location: str
    description: str | None
    attire_code: str | None
