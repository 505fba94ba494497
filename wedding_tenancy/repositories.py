from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from wedding_tenancy.accommodations.repository.accommodation_repository import AccommodationRepository
from wedding_tenancy.accommodations.repository.room_allocation_repository import RoomAllocationRepository
from wedding_tenancy.ceremonies.repository.ceremony_repository import CeremonyRepository
from wedding_tenancy.guests.repository.guest_repository import GuestRepository
from wedding_tenancy.meals.repository.meal_repository import MealRepository
from wedding_tenancy.messaging.repository.message_template_repository import MessageTemplateRepository
from wedding_tenancy.weddings.repository.event_repository import EventRepository


@dataclass(frozen=True)
class TenantRepositories:
    """Every repository, optionally bound to one caller-owned session."""

    events: EventRepository
    guests: GuestRepository
    ceremonies: CeremonyRepository
    accommodations: AccommodationRepository
    room_allocations: RoomAllocationRepository
    meals: MealRepository
    message_templates: MessageTemplateRepository

    @classmethod
    def for_session(cls, session: AsyncSession | None = None) -> "TenantRepositories":
        return cls(
            events=EventRepository(session_overwrite=session),
            guests=GuestRepository(session_overwrite=session),
            ceremonies=CeremonyRepository(session_overwrite=session),
            accommodations=AccommodationRepository(session_overwrite=session),
            room_allocations=RoomAllocationRepository(session_overwrite=session),
            meals=MealRepository(session_overwrite=session),
            message_templates=MessageTemplateRepository(session_overwrite=session),
        )
