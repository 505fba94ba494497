from .base import Base, BaseModel
from .event import WeddingEvent
from .guest import Guest, GuestSide, GuestStatus
from .ceremony import Ceremony
from .accommodation import Accommodation, RoomAllocation
from .meal import GuestMealSelection, MealOption
from .message_template import MessageTemplate

__all__ = [
    "Base",
    "BaseModel",
    "WeddingEvent",
    "Guest",
    "GuestSide",
    "GuestStatus",
    "Ceremony",
    "Accommodation",
    "RoomAllocation",
    "MealOption",
    "GuestMealSelection",
    "MessageTemplate",
]
