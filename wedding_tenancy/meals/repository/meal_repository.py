"""Meal options and the guests' meal selections.

A guest has at most one selection per ceremony, enforced by a unique
constraint; choosing again replaces the earlier choice.
"""

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import ColumnElement, delete, func, insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_tenancy.meals.dtos import GuestMealSelectionDTO, MealOptionCountDTO, MealOptionDTO
from wedding_tenancy.models import Ceremony, Guest, GuestMealSelection, MealOption
from wedding_tenancy.tenancy import predicates
from wedding_tenancy.tenancy.errors import CrossTenantReferenceError
from wedding_tenancy.tenancy.repository import TenantRepository

logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO UPDATE
UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class MealRepository(TenantRepository[MealOption, MealOptionDTO]):
    model = MealOption
    dto = MealOptionDTO

    async def _require_ceremonies(self, session: AsyncSession, ceremony_ids: set[int], tenant_id: Any) -> None:
        condition = predicates.entity_list_and_tenant_predicate(
            Ceremony, Ceremony.id, list(ceremony_ids), Ceremony.event_id, tenant_id
        )
        found = set((await session.execute(select(Ceremony.id).where(condition))).scalars().all())
        missing = sorted(ceremony_ids - found)
        if missing:
            raise CrossTenantReferenceError("Ceremony", missing[0], predicates.validate_tenant_context(tenant_id))

    async def _before_insert(self, session: AsyncSession, rows: list[dict[str, Any]], tenant_id: Any) -> None:
        await self._require_ceremonies(session, {row["ceremony_id"] for row in rows}, tenant_id)

    async def _before_update(
        self, session: AsyncSession, existing: MealOption, values: dict[str, Any], tenant_id: Any
    ) -> None:
        ceremony_id = values.get("ceremony_id", existing.ceremony_id)
        if ceremony_id == existing.ceremony_id:
            return
        await self._require_ceremonies(session, {ceremony_id}, tenant_id)
        # selections pin the option to the ceremony they were made for
        chosen = await session.scalar(
            select(func.count(GuestMealSelection.id)).where(GuestMealSelection.meal_option_id == existing.id)
        )
        if chosen:
            raise ValueError(
                f"Meal option {existing.id} was chosen by {chosen} guests for ceremony "
                f"{existing.ceremony_id} and cannot move to ceremony {ceremony_id}"
            )

    async def _before_delete(self, session: AsyncSession, condition: ColumnElement[bool]) -> None:
        await session.execute(
            delete(GuestMealSelection)
            .where(GuestMealSelection.meal_option_id.in_(select(MealOption.id).where(condition)))
            .execution_options(synchronize_session=False)
        )

    async def create(self, data: predicates.Payload, tenant_id: Any) -> MealOptionDTO:
        """Create a meal option for one of the event's ceremonies."""
        values = predicates.attach_tenant(data, tenant_id)
        self._check_writable(values)
        values["ceremony_id"] = predicates.validate_entity_id(values.get("ceremony_id"))
        return await super().create(values, tenant_id)

    async def bulk_create(self, data_list: Sequence[predicates.Payload], tenant_id: Any) -> list[MealOptionDTO]:
        rows = predicates.attach_tenant_bulk(data_list, tenant_id) if data_list else []
        for row in rows:
            self._check_writable(row)
            row["ceremony_id"] = predicates.validate_entity_id(row.get("ceremony_id"))
        return await super().bulk_create(rows, tenant_id)

    async def update(self, entity_id: Any, data: predicates.Payload, tenant_id: Any) -> MealOptionDTO | None:
        """Partial update. An option already chosen by guests stays with its ceremony."""
        values = predicates.payload_to_dict(data)
        self._check_writable(values)
        if "ceremony_id" in values:
            values["ceremony_id"] = predicates.validate_entity_id(values["ceremony_id"])
        return await super().update(entity_id, values, tenant_id)

    async def get_options_for_ceremony(self, ceremony_id: Any, tenant_id: Any) -> list[MealOptionDTO]:
        ceremony_id = predicates.validate_entity_id(ceremony_id)
        return await self.get_all_by_tenant(tenant_id, MealOption.ceremony_id == ceremony_id)

    async def get_options_with_counts(self, ceremony_id: Any, tenant_id: Any) -> list[MealOptionCountDTO]:
        """Options of a ceremony with how many of the event's guests picked each."""
        ceremony_id = predicates.validate_entity_id(ceremony_id)
        selection_count = (
            select(func.count(GuestMealSelection.id))
            .join(Guest, Guest.id == GuestMealSelection.guest_id)
            .where(
                GuestMealSelection.meal_option_id == MealOption.id,
                predicates.tenant_predicate(Guest, tenant_id),
            )
            .correlate(MealOption)
            .scalar_subquery()
        )
        stmt = (
            select(MealOption, selection_count.label("selection_count"))
            .where(self._tenant(tenant_id, MealOption.ceremony_id == ceremony_id))
            .order_by(*self._default_ordering())
            .execution_options(populate_existing=True)
        )
        with self._store_errors(f"get counts for ceremony {ceremony_id} of", tenant_id):
            async with self._session() as session:
                rows = (await session.execute(stmt)).all()
                return [MealOptionCountDTO.from_row(option, selection_count=count) for option, count in rows]

    async def get_guest_selections(self, guest_id: Any, tenant_id: Any) -> list[GuestMealSelectionDTO]:
        guest_id = predicates.validate_entity_id(guest_id)
        stmt = (
            select(
                GuestMealSelection.id,
                GuestMealSelection.guest_id,
                GuestMealSelection.meal_option_id,
                GuestMealSelection.ceremony_id,
                GuestMealSelection.notes,
                MealOption.name.label("meal_name"),
                MealOption.description.label("meal_description"),
                Ceremony.name.label("ceremony_name"),
                Ceremony.date.label("ceremony_date"),
            )
            .join(Guest, Guest.id == GuestMealSelection.guest_id)
            .join(MealOption, MealOption.id == GuestMealSelection.meal_option_id)
            .join(Ceremony, Ceremony.id == GuestMealSelection.ceremony_id)
            .where(
                GuestMealSelection.guest_id == guest_id,
                predicates.tenant_predicate(Guest, tenant_id),
                predicates.tenant_predicate(MealOption, tenant_id),
                predicates.tenant_predicate(Ceremony, tenant_id),
            )
            .order_by(Ceremony.date, Ceremony.start_time, GuestMealSelection.id)
        )
        with self._store_errors(f"get selections of guest {guest_id} in", tenant_id):
            async with self._session() as session:
                rows = (await session.execute(stmt)).all()
                return [GuestMealSelectionDTO.from_row(row) for row in rows]

    async def create_selection(
        self,
        guest_id: Any,
        meal_option_id: Any,
        ceremony_id: Any,
        notes: str | None,
        tenant_id: Any,
    ) -> int:
        """Record the guest's meal for a ceremony, replacing any earlier choice.

        Returns the selection id. Raises CrossTenantReferenceError when the
        guest, meal option or ceremony is not part of the event, or when the
        meal option is not served at that ceremony.
        """
        tenant_id = predicates.validate_tenant_context(tenant_id)
        guest_id = predicates.validate_entity_id(guest_id)
        meal_option_id = predicates.validate_entity_id(meal_option_id)
        ceremony_id = predicates.validate_entity_id(ceremony_id)
        values = {
            "guest_id": guest_id,
            "meal_option_id": meal_option_id,
            "ceremony_id": ceremony_id,
            "notes": notes,
        }

        with self._store_errors("create selection for", tenant_id):
            async with self._session() as session:
                if not await self._belongs_to_tenant(session, Guest, guest_id, tenant_id):
                    raise CrossTenantReferenceError("Guest", guest_id, tenant_id)
                if not await self._belongs_to_tenant(
                    session, MealOption, meal_option_id, tenant_id, MealOption.ceremony_id == ceremony_id
                ):
                    raise CrossTenantReferenceError(
                        "MealOption", meal_option_id, tenant_id, f"or is not served at ceremony {ceremony_id}"
                    )
                if not await self._belongs_to_tenant(session, Ceremony, ceremony_id, tenant_id):
                    raise CrossTenantReferenceError("Ceremony", ceremony_id, tenant_id)

                dialect = session.get_bind().dialect.name
                if dialect in UPSERT_INSERTS:
                    stmt = UPSERT_INSERTS[dialect](GuestMealSelection).values(values)
                    stmt = stmt.on_conflict_do_update(
                        index_elements=["guest_id", "ceremony_id"],
                        set_={"meal_option_id": stmt.excluded.meal_option_id, "notes": stmt.excluded.notes},
                    ).returning(GuestMealSelection.id)
                    selection_id = (await session.execute(stmt)).scalar_one()
                else:
                    selection_id = await self._write_selection(session, values)

        logger.debug(f"Guest {guest_id} selected meal {meal_option_id} for ceremony {ceremony_id}")
        return selection_id

    async def _write_selection(self, session: AsyncSession, values: dict[str, Any]) -> int:
        existing = (
            await session.execute(
                select(GuestMealSelection.id)
                .where(
                    GuestMealSelection.guest_id == values["guest_id"],
                    GuestMealSelection.ceremony_id == values["ceremony_id"],
                )
                .with_for_update()
            )
        ).scalar_one_or_none()
        if existing is None:
            stmt = insert(GuestMealSelection).values(values).returning(GuestMealSelection.id)
            return (await session.execute(stmt)).scalar_one()
        await session.execute(
            update(GuestMealSelection)
            .where(GuestMealSelection.id == existing)
            .values(meal_option_id=values["meal_option_id"], notes=values["notes"])
            .execution_options(synchronize_session=False)
        )
        return existing

    async def delete_selection(self, selection_id: Any, tenant_id: Any) -> bool:
        """Delete a selection whose guest, meal option and ceremony are all in the event."""
        selection_id = predicates.validate_entity_id(selection_id)
        owned = (
            select(GuestMealSelection.id)
            .join(Guest, Guest.id == GuestMealSelection.guest_id)
            .join(MealOption, MealOption.id == GuestMealSelection.meal_option_id)
            .join(Ceremony, Ceremony.id == GuestMealSelection.ceremony_id)
            .where(
                GuestMealSelection.id == selection_id,
                predicates.tenant_predicate(Guest, tenant_id),
                predicates.tenant_predicate(MealOption, tenant_id),
                predicates.tenant_predicate(Ceremony, tenant_id),
            )
        )
        with self._store_errors(f"delete selection {selection_id} of", tenant_id):
            async with self._session() as session:
                if (await session.execute(owned)).first() is None:
                    return False
                result = await session.execute(
                    delete(GuestMealSelection)
                    .where(GuestMealSelection.id == selection_id)
                    .execution_options(synchronize_session=False)
                )
                return result.rowcount > 0
