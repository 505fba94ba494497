"""Room allocations and the ``accommodations.allocated_rooms`` counter.

Allocations carry no tenant column; a row belongs to an event when both its
guest and its accommodation do. Every write adjusts the counter in the same
transaction, with the accommodation row locked and the arithmetic done by the
database, so concurrent allocations cannot lose an increment.
"""

import logging
from typing import Any

from sqlalchemy import ColumnElement, Select, case, delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_tenancy.accommodations.dtos import RoomAllocationDTO
from wedding_tenancy.models import Accommodation, Guest, RoomAllocation
from wedding_tenancy.tenancy import predicates
from wedding_tenancy.tenancy.errors import CrossTenantReferenceError
from wedding_tenancy.tenancy.repository import SqlRepository

logger = logging.getLogger(__name__)


async def lock_accommodation(session: AsyncSession, accommodation_id: int) -> tuple[int, int] | None:
    """Lock the accommodation row and return ``(total_rooms, allocated_rooms)``.

    SQLite has no row locks; there the write transaction itself serialises.
    """
    stmt = (
        select(Accommodation.total_rooms, Accommodation.allocated_rooms)
        .where(Accommodation.id == accommodation_id)
        .with_for_update()
    )
    row = (await session.execute(stmt)).first()
    return (row.total_rooms, row.allocated_rooms) if row is not None else None


async def increment_allocated_rooms(session: AsyncSession, accommodation_id: int, by: int = 1) -> None:
    await session.execute(
        update(Accommodation)
        .where(Accommodation.id == accommodation_id)
        .values(allocated_rooms=Accommodation.allocated_rooms + by)
        .execution_options(synchronize_session=False)
    )
    logger.debug(f"Accommodation {accommodation_id} allocated_rooms +{by}")


async def decrement_allocated_rooms(session: AsyncSession, accommodation_id: int, by: int = 1) -> None:
    """Lower the counter by ``by``, never below zero."""
    await session.execute(
        update(Accommodation)
        .where(Accommodation.id == accommodation_id)
        .values(
            allocated_rooms=case(
                (Accommodation.allocated_rooms >= by, Accommodation.allocated_rooms - by),
                else_=0,
            )
        )
        .execution_options(synchronize_session=False)
    )
    logger.debug(f"Accommodation {accommodation_id} allocated_rooms -{by}")


async def release_allocations(session: AsyncSession, condition: ColumnElement[bool]) -> int:
    """Delete the allocations matching ``condition`` and give their rooms back.

    Used when guests are removed so the counters of the accommodations they
    were staying in stay in step with the remaining allocations.
    """
    stmt = (
        select(RoomAllocation.accommodation_id, func.count())
        .where(condition)
        .group_by(RoomAllocation.accommodation_id)
        .order_by(RoomAllocation.accommodation_id)
    )
    released = (await session.execute(stmt)).all()
    for accommodation_id, count in released:
        await lock_accommodation(session, accommodation_id)
        await decrement_allocated_rooms(session, accommodation_id, count)
    await session.execute(delete(RoomAllocation).where(condition).execution_options(synchronize_session=False))
    return sum(count for _, count in released)


class RoomAllocationRepository(SqlRepository):
    entity_name = RoomAllocation.__tablename__

    def _owned(self, tenant_id: Any, *conditions: ColumnElement[bool]) -> Select:
        """Allocations whose accommodation and guest both belong to ``tenant_id``."""
        return (
            select(RoomAllocation)
            .join(Accommodation, Accommodation.id == RoomAllocation.accommodation_id)
            .join(Guest, Guest.id == RoomAllocation.guest_id)
            .where(
                predicates.tenant_predicate(Accommodation, tenant_id),
                predicates.tenant_predicate(Guest, tenant_id),
                *conditions,
            )
            .execution_options(populate_existing=True)
        )

    def _ordered(self, stmt: Select) -> Select:
        return stmt.order_by(RoomAllocation.check_in_date.desc(), RoomAllocation.id.desc())

    async def _require_parent(self, session: AsyncSession, model: type, entity_id: int, tenant_id: int) -> None:
        if not await self._belongs_to_tenant(session, model, entity_id, tenant_id):
            raise CrossTenantReferenceError(model.__name__, entity_id, tenant_id)

    async def get_by_id(self, allocation_id: Any, tenant_id: Any) -> RoomAllocationDTO | None:
        allocation_id = predicates.validate_entity_id(allocation_id)
        stmt = self._owned(tenant_id, RoomAllocation.id == allocation_id)
        with self._store_errors(f"get id {allocation_id} of", tenant_id):
            async with self._session() as session:
                allocation = (await session.execute(stmt)).scalar_one_or_none()
                return RoomAllocationDTO.from_row(allocation) if allocation is not None else None

    async def get_by_guest(self, guest_id: Any, tenant_id: Any) -> list[RoomAllocationDTO]:
        """Allocations of ``guest_id``, latest check-in first; [] for a guest of another event."""
        guest_id = predicates.validate_entity_id(guest_id)
        stmt = self._ordered(self._owned(tenant_id, RoomAllocation.guest_id == guest_id))
        with self._store_errors(f"get guest {guest_id}", tenant_id):
            async with self._session() as session:
                result = await session.execute(stmt)
                return [RoomAllocationDTO.from_row(allocation) for allocation in result.scalars().all()]

    async def get_by_accommodation(self, accommodation_id: Any, tenant_id: Any) -> list[RoomAllocationDTO]:
        accommodation_id = predicates.validate_entity_id(accommodation_id)
        stmt = self._ordered(self._owned(tenant_id, RoomAllocation.accommodation_id == accommodation_id))
        with self._store_errors(f"get accommodation {accommodation_id}", tenant_id):
            async with self._session() as session:
                result = await session.execute(stmt)
                return [RoomAllocationDTO.from_row(allocation) for allocation in result.scalars().all()]

    async def create(self, data: predicates.Payload, tenant_id: Any) -> RoomAllocationDTO:
        """Allocate a room and count it against the accommodation.

        Raises CrossTenantReferenceError when the accommodation or the guest
        belongs to another event.
        """
        tenant_id = predicates.validate_tenant_context(tenant_id)
        values = predicates.payload_to_dict(data)
        values.pop("id", None)
        predicates.check_columns(RoomAllocation, values)
        accommodation_id = values["accommodation_id"] = predicates.validate_entity_id(values.get("accommodation_id"))
        guest_id = values["guest_id"] = predicates.validate_entity_id(values.get("guest_id"))

        with self._store_errors("create", tenant_id):
            async with self._session() as session:
                await self._require_parent(session, Accommodation, accommodation_id, tenant_id)
                await self._require_parent(session, Guest, guest_id, tenant_id)

                total_rooms, allocated_rooms = await lock_accommodation(session, accommodation_id)
                if allocated_rooms >= total_rooms:
                    logger.warning(
                        f"Accommodation {accommodation_id} of event {tenant_id} is over-allocated "
                        f"({allocated_rooms + 1}/{total_rooms})"
                    )

                stmt = insert(RoomAllocation).values(values).returning(RoomAllocation)
                allocation = (await session.scalars(stmt)).one()
                await increment_allocated_rooms(session, accommodation_id)
                logger.info(f"Allocated guest {guest_id} to accommodation {accommodation_id} for event {tenant_id}")
                return RoomAllocationDTO.from_row(allocation)

    async def update(self, allocation_id: Any, data: predicates.Payload, tenant_id: Any) -> RoomAllocationDTO | None:
        """Partial update. Moving to another accommodation moves the room count with it."""
        allocation_id = predicates.validate_entity_id(allocation_id)
        tenant_id = predicates.validate_tenant_context(tenant_id)
        values = predicates.payload_to_dict(data)
        values.pop("id", None)
        predicates.check_columns(RoomAllocation, values)
        for field in ("accommodation_id", "guest_id"):
            if field in values:
                values[field] = predicates.validate_entity_id(values[field])

        with self._store_errors(f"update id {allocation_id} of", tenant_id):
            async with self._session() as session:
                existing = (
                    await session.execute(self._owned(tenant_id, RoomAllocation.id == allocation_id))
                ).scalar_one_or_none()
                if existing is None:
                    return None
                old_accommodation_id = existing.accommodation_id
                new_accommodation_id = values.get("accommodation_id") or old_accommodation_id
                new_guest_id = values.get("guest_id") or existing.guest_id

                if new_accommodation_id != old_accommodation_id:
                    await self._require_parent(session, Accommodation, new_accommodation_id, tenant_id)
                if new_guest_id != existing.guest_id:
                    await self._require_parent(session, Guest, new_guest_id, tenant_id)

                if not values:
                    return RoomAllocationDTO.from_row(existing)

                if new_accommodation_id != old_accommodation_id:
                    # fixed lock order so two opposite moves cannot deadlock
                    for accommodation_id in sorted((old_accommodation_id, new_accommodation_id)):
                        await lock_accommodation(session, accommodation_id)
                    await decrement_allocated_rooms(session, old_accommodation_id)
                    await increment_allocated_rooms(session, new_accommodation_id)
                    logger.info(
                        f"Moved allocation {allocation_id} from accommodation {old_accommodation_id} "
                        f"to {new_accommodation_id} for event {tenant_id}"
                    )

                stmt = (
                    update(RoomAllocation)
                    .where(RoomAllocation.id == allocation_id)
                    .values(values)
                    .returning(RoomAllocation)
                    .execution_options(populate_existing=True)
                )
                allocation = (await session.scalars(stmt)).one()
                return RoomAllocationDTO.from_row(allocation)

    async def delete(self, allocation_id: Any, tenant_id: Any) -> bool:
        allocation_id = predicates.validate_entity_id(allocation_id)
        tenant_id = predicates.validate_tenant_context(tenant_id)
        with self._store_errors(f"delete id {allocation_id} of", tenant_id):
            async with self._session() as session:
                existing = (
                    await session.execute(self._owned(tenant_id, RoomAllocation.id == allocation_id))
                ).scalar_one_or_none()
                if existing is None:
                    return False
                accommodation_id = existing.accommodation_id
                await lock_accommodation(session, accommodation_id)
                result = await session.execute(
                    delete(RoomAllocation)
                    .where(RoomAllocation.id == allocation_id)
                    .execution_options(synchronize_session=False)
                )
                await decrement_allocated_rooms(session, accommodation_id)
                session.expunge(existing)
                return result.rowcount > 0
