import datetime as dt
from typing import Any

from sqlalchemy import ColumnElement, delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_tenancy.ceremonies.dtos import CeremonyDTO
from wedding_tenancy.models import Ceremony, GuestMealSelection, MealOption
from wedding_tenancy.tenancy.repository import TenantRepository


class CeremonyRepository(TenantRepository[Ceremony, CeremonyDTO]):
    """Ceremonies of an event, in calendar order."""

    model = Ceremony
    dto = CeremonyDTO

    def _default_ordering(self) -> list:
        return [Ceremony.date.asc(), Ceremony.start_time.asc(), Ceremony.id.asc()]

    async def _before_delete(self, session: AsyncSession, condition: ColumnElement[bool]) -> None:
        ceremony_ids = select(Ceremony.id).where(condition)
        option_ids = select(MealOption.id).where(MealOption.ceremony_id.in_(ceremony_ids))
        await session.execute(
            delete(GuestMealSelection)
            .where(
                or_(
                    GuestMealSelection.ceremony_id.in_(ceremony_ids),
                    GuestMealSelection.meal_option_id.in_(option_ids),
                )
            )
            .execution_options(synchronize_session=False)
        )
        await session.execute(
            delete(MealOption)
            .where(MealOption.ceremony_id.in_(ceremony_ids))
            .execution_options(synchronize_session=False)
        )

    async def get_upcoming(self, tenant_id: Any, from_date: dt.date | None = None) -> list[CeremonyDTO]:
        """Ceremonies on or after ``from_date`` (today by default)."""
        from_date = from_date or dt.date.today()
        return await self.get_all_by_tenant(tenant_id, Ceremony.date >= from_date)

    async def get_by_date(self, tenant_id: Any, date: dt.date) -> list[CeremonyDTO]:
        return await self.get_all_by_tenant(tenant_id, Ceremony.date == date)

    async def get_date_summary(self, tenant_id: Any) -> list[dt.date]:
        """Distinct ceremony dates, earliest first."""
        condition = self._tenant(tenant_id)
        stmt = select(Ceremony.date).where(condition).distinct().order_by(Ceremony.date)
        with self._store_errors("get date summary of", tenant_id):
            async with self._session() as session:
                return list((await session.execute(stmt)).scalars().all())
