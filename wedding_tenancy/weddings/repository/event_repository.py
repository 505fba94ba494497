"""Repository for the wedding events themselves.

Events are the tenants, so nothing here is tenant-filtered; callers use it to
check that an event exists and that a user may act on it before touching any
tenant-scoped repository.
"""

import logging
from typing import Any

from sqlalchemy import or_, select, update

from wedding_tenancy.models import (
    Accommodation,
    Ceremony,
    Guest,
    GuestMealSelection,
    MealOption,
    MessageTemplate,
    RoomAllocation,
    WeddingEvent,
)
from wedding_tenancy.tenancy import predicates
from wedding_tenancy.tenancy.errors import InvalidEntityIdError, InvalidTenantContextError
from wedding_tenancy.tenancy.repository import SqlRepository
from wedding_tenancy.weddings.dtos import WeddingEventDTO

logger = logging.getLogger(__name__)

# Tables with an event_id column, children before parents
TENANT_TABLES = (MealOption, MessageTemplate, Accommodation, Ceremony, Guest)


class EventRepository(SqlRepository):
    """SQL implementation of wedding event storage. Returns DTOs, never ORM models."""

    entity_name = WeddingEvent.__tablename__

    async def _get(self, session, event_id: int) -> WeddingEvent | None:
        stmt = (
            select(WeddingEvent)
            .where(WeddingEvent.id == event_id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, event_id: Any) -> WeddingEventDTO | None:
        event_id = predicates.validate_entity_id(event_id)
        with self._store_errors("get", event_id):
            async with self._session() as session:
                event = await self._get(session, event_id)
                return WeddingEventDTO.from_row(event) if event is not None else None

    async def require_event(self, event_id: Any) -> WeddingEventDTO:
        """The event for ``event_id``; InvalidTenantContextError when there is none."""
        tenant_id = predicates.validate_tenant_context(event_id)
        event = await self.get_by_id(tenant_id)
        if event is None:
            raise InvalidTenantContextError(event_id)
        return event

    async def get_all(self) -> list[WeddingEventDTO]:
        with self._store_errors("get all", None):
            async with self._session() as session:
                stmt = select(WeddingEvent).order_by(WeddingEvent.start_date.desc(), WeddingEvent.id.desc())
                result = await session.execute(stmt)
                return [WeddingEventDTO.from_row(event) for event in result.scalars().all()]

    async def get_by_user(self, user_id: Any) -> list[WeddingEventDTO]:
        """Events created by ``user_id``, newest first."""
        user_id = predicates.validate_entity_id(user_id)
        with self._store_errors(f"get user {user_id}", None):
            async with self._session() as session:
                stmt = (
                    select(WeddingEvent)
                    .where(WeddingEvent.created_by == user_id)
                    .order_by(WeddingEvent.start_date.desc(), WeddingEvent.id.desc())
                )
                result = await session.execute(stmt)
                return [WeddingEventDTO.from_row(event) for event in result.scalars().all()]

    async def create(self, data: predicates.Payload) -> WeddingEventDTO:
        values = predicates.payload_to_dict(data)
        values.pop("id", None)
        try:
            values["created_by"] = predicates.validate_entity_id(values.get("created_by"))
        except InvalidEntityIdError:
            raise ValueError("created_by is required for event creation") from None
        predicates.check_columns(WeddingEvent, values)
        with self._store_errors("create", None):
            async with self._session() as session:
                event = WeddingEvent(**values)
                session.add(event)
                await session.flush()
                await session.refresh(event)
                logger.info(f"Created wedding event {event.id} for user {event.created_by}")
                return WeddingEventDTO.from_row(event)

    async def update(self, event_id: Any, data: predicates.Payload) -> WeddingEventDTO | None:
        event_id = predicates.validate_entity_id(event_id)
        values = predicates.payload_to_dict(data)
        values.pop("id", None)
        predicates.check_columns(WeddingEvent, values)
        with self._store_errors("update", event_id):
            async with self._session() as session:
                event = await self._get(session, event_id)
                if event is None:
                    return None
                if values:
                    stmt = (
                        update(WeddingEvent)
                        .where(WeddingEvent.id == event_id)
                        .values(values)
                        .returning(WeddingEvent)
                        .execution_options(populate_existing=True)
                    )
                    event = (await session.scalars(stmt)).one()
                return WeddingEventDTO.from_row(event)

    async def delete(self, event_id: Any) -> bool:
        """Delete the event and every row scoped to it in one transaction."""
        event_id = predicates.validate_entity_id(event_id)
        with self._store_errors("delete", event_id):
            async with self._session() as session:
                event = await self._get(session, event_id)
                if event is None:
                    return False

                guest_ids = select(Guest.id).where(Guest.event_id == event_id)
                await session.execute(
                    GuestMealSelection.__table__.delete().where(
                        or_(
                            GuestMealSelection.guest_id.in_(guest_ids),
                            GuestMealSelection.meal_option_id.in_(
                                select(MealOption.id).where(MealOption.event_id == event_id)
                            ),
                            GuestMealSelection.ceremony_id.in_(
                                select(Ceremony.id).where(Ceremony.event_id == event_id)
                            ),
                        )
                    )
                )
                await session.execute(
                    RoomAllocation.__table__.delete().where(
                        or_(
                            RoomAllocation.guest_id.in_(guest_ids),
                            RoomAllocation.accommodation_id.in_(
                                select(Accommodation.id).where(Accommodation.event_id == event_id)
                            ),
                        )
                    )
                )
                for model in TENANT_TABLES:
                    await session.execute(model.__table__.delete().where(model.event_id == event_id))
                result = await session.execute(
                    WeddingEvent.__table__.delete().where(WeddingEvent.id == event_id)
                )
                # the ORM instance loaded above is gone from the database
                session.expunge(event)
        logger.info(f"Deleted wedding event {event_id} and all of its rows")
        return result.rowcount > 0

    async def has_access(self, event_id: Any, user_id: Any, is_admin: bool) -> bool:
        """Admins see every event; other users only the events they created."""
        if is_admin:
            return True
        try:
            event_id = predicates.validate_entity_id(event_id)
            user_id = predicates.validate_entity_id(user_id)
        except InvalidEntityIdError:
            return False
        event = await self.get_by_id(event_id)
        if event is None:
            return False
        return event.created_by == user_id
