import logging
from typing import Any

from sqlalchemy import ColumnElement, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_tenancy.accommodations.dtos import (
    AccommodationAllocationDTO,
    AccommodationDTO,
    AccommodationStatsDTO,
)
from wedding_tenancy.models import Accommodation, RoomAllocation
from wedding_tenancy.tenancy.repository import TenantRepository

logger = logging.getLogger(__name__)


def _live_allocation_count():
    return (
        select(func.count(RoomAllocation.id))
        .where(RoomAllocation.accommodation_id == Accommodation.id)
        .correlate(Accommodation)
        .scalar_subquery()
    )


class AccommodationRepository(TenantRepository[Accommodation, AccommodationDTO]):
    """Accommodations of an event.

    ``allocated_rooms`` is owned by the room allocation writes and cannot be
    set through ``create`` or ``update``.
    """

    model = Accommodation
    dto = AccommodationDTO
    read_only_fields = ("allocated_rooms",)

    async def _before_delete(self, session: AsyncSession, condition: ColumnElement[bool]) -> None:
        await session.execute(
            delete(RoomAllocation)
            .where(RoomAllocation.accommodation_id.in_(select(Accommodation.id).where(condition)))
            .execution_options(synchronize_session=False)
        )

    async def get_stats(self, tenant_id: Any) -> AccommodationStatsDTO:
        """Room totals across the event; all zeros when it has no accommodations."""
        condition = self._tenant(tenant_id)
        stmt = select(
            func.coalesce(func.sum(Accommodation.total_rooms), 0),
            func.coalesce(func.sum(Accommodation.allocated_rooms), 0),
            func.count(Accommodation.id),
        ).where(condition)
        with self._store_errors("get stats of", tenant_id):
            async with self._session() as session:
                total_rooms, allocated_rooms, accommodation_types = (await session.execute(stmt)).one()
        return AccommodationStatsDTO(
            total_rooms=total_rooms,
            allocated_rooms=allocated_rooms,
            available_rooms=total_rooms - allocated_rooms,
            accommodation_types=accommodation_types,
        )

    async def get_accommodations_with_allocation(self, tenant_id: Any) -> list[AccommodationAllocationDTO]:
        condition = self._tenant(tenant_id)
        stmt = (
            select(Accommodation, _live_allocation_count().label("guests_assigned"))
            .where(condition)
            .order_by(*self._default_ordering())
            .execution_options(populate_existing=True)
        )
        with self._store_errors("get allocations of", tenant_id):
            async with self._session() as session:
                rows = (await session.execute(stmt)).all()
                return [
                    AccommodationAllocationDTO.from_row(accommodation, guests_assigned=guests_assigned)
                    for accommodation, guests_assigned in rows
                ]

    async def get_available_accommodations(self, tenant_id: Any) -> list[AccommodationDTO]:
        """Accommodations with at least one room left."""
        return await self.get_all_by_tenant(tenant_id, Accommodation.total_rooms > Accommodation.allocated_rooms)

    async def reconcile_allocated_rooms(self, tenant_id: Any) -> int:
        """Rewrite each counter from the live allocation rows. Returns how many were wrong."""
        live = _live_allocation_count()
        condition = self._tenant(tenant_id, Accommodation.allocated_rooms != live)
        with self._store_errors("reconcile", tenant_id):
            async with self._session() as session:
                drifted = (await session.execute(select(Accommodation.id).where(condition).with_for_update())).scalars().all()
                if not drifted:
                    return 0
                await session.execute(
                    update(Accommodation)
                    .where(Accommodation.id.in_(drifted))
                    .values(allocated_rooms=_live_allocation_count())
                    .execution_options(synchronize_session=False)
                )
        logger.info(f"Reconciled allocated_rooms of {len(drifted)} accommodations for event {tenant_id}")
        return len(drifted)
