import logging
from typing import Any

from sqlalchemy import ColumnElement, case, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_tenancy.accommodations.repository.room_allocation_repository import release_allocations
from wedding_tenancy.config import settings
from wedding_tenancy.guests.dtos import GuestDTO, GuestStatisticsDTO, parse_children_details
from wedding_tenancy.models import Guest, GuestMealSelection, GuestStatus, RoomAllocation
from wedding_tenancy.tenancy.repository import TenantRepository

logger = logging.getLogger(__name__)


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _count_where(condition: ColumnElement[bool]):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


class GuestRepository(TenantRepository[Guest, GuestDTO]):
    """Guests of a wedding event."""

    model = Guest
    dto = GuestDTO

    async def _before_delete(self, session: AsyncSession, condition: ColumnElement[bool]) -> None:
        guest_ids = select(Guest.id).where(condition)
        released = await release_allocations(session, RoomAllocation.guest_id.in_(guest_ids))
        if released:
            logger.info(f"Released {released} room allocations of deleted guests")
        await session.execute(
            delete(GuestMealSelection)
            .where(GuestMealSelection.guest_id.in_(guest_ids))
            .execution_options(synchronize_session=False)
        )

    async def find_by_email(self, email: str, tenant_id: Any) -> GuestDTO | None:
        """First guest of the event with this email, compared case-insensitively."""
        condition = self._tenant(tenant_id)
        if not email or not email.strip():
            return None
        stmt = (
            self._select(condition)
            .where(func.lower(Guest.email) == email.strip().lower())
            .order_by(Guest.id)
            .limit(1)
        )
        with self._store_errors("find by email", tenant_id):
            async with self._session() as session:
                guest = (await session.execute(stmt)).scalar_one_or_none()
                return self._to_dto(guest) if guest is not None else None

    async def search(self, term: str, tenant_id: Any, limit: int | None = None) -> list[GuestDTO]:
        """Guests whose first name, last name or email contains ``term``, newest first."""
        pattern = f"%{_escape_like(term.strip())}%"
        condition = self._tenant(
            tenant_id,
            or_(
                Guest.first_name.ilike(pattern, escape="\\"),
                Guest.last_name.ilike(pattern, escape="\\"),
                Guest.email.ilike(pattern, escape="\\"),
            ),
        )
        stmt = (
            self._select(condition)
            .order_by(Guest.created_at.desc(), Guest.id.desc())
            .limit(limit or settings.guest_search_limit)
        )
        with self._store_errors(f"search {term!r} in", tenant_id):
            async with self._session() as session:
                result = await session.execute(stmt)
                return [self._to_dto(guest) for guest in result.scalars().all()]

    async def get_by_rsvp_status(self, status: GuestStatus | str, tenant_id: Any) -> list[GuestDTO]:
        status = GuestStatus(status)
        return await self.get_all_by_tenant(tenant_id, Guest.rsvp_status == status)

    async def get_needing_accommodation(self, tenant_id: Any) -> list[GuestDTO]:
        return await self.get_all_by_tenant(tenant_id, Guest.needs_accommodation.is_(True))

    async def get_statistics(self, tenant_id: Any) -> GuestStatisticsDTO:
        condition = self._tenant(tenant_id)
        counts = select(
            func.count(Guest.id),
            _count_where(Guest.rsvp_status == GuestStatus.CONFIRMED),
            _count_where(Guest.rsvp_status == GuestStatus.DECLINED),
            _count_where(Guest.rsvp_status == GuestStatus.PENDING),
            _count_where(
                Guest.plus_one_allowed.is_(True)
                & Guest.plus_one_name.is_not(None)
                & (Guest.plus_one_name != "")
            ),
            _count_where(Guest.needs_accommodation.is_(True)),
        ).where(condition)
        # children_details may be an encoded string, so it is counted in Python
        children = select(Guest.children_details).where(condition, Guest.children_details.is_not(None))

        with self._store_errors("get statistics of", tenant_id):
            async with self._session() as session:
                total, confirmed, declined, pending, with_plus_ones, needing_accommodation = (
                    await session.execute(counts)
                ).one()
                details = (await session.execute(children)).scalars().all()

        return GuestStatisticsDTO(
            total=total,
            confirmed=confirmed,
            declined=declined,
            pending=pending,
            with_plus_ones=with_plus_ones,
            with_children=sum(1 for raw in details if parse_children_details(raw)),
            needing_accommodation=needing_accommodation,
        )
