"""Generic tenant-scoped repository.

Every read and write goes through :mod:`wedding_tenancy.tenancy.predicates`, so
a row can only be seen or changed from the wedding event that owns it.
Repositories return DTOs, never ORM models.
"""

import contextlib
import logging
from collections.abc import Iterator, Sequence
from functools import partial
from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import ColumnElement, Select, delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wedding_tenancy.config.database import async_session_manager
from wedding_tenancy.models.base import Base
from wedding_tenancy.tenancy import predicates
from wedding_tenancy.tenancy.dtos import RowDTO

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
DTOT = TypeVar("DTOT", bound=RowDTO)


class SqlRepository:
    """Session handling shared by every repository.

    Pass ``session_overwrite`` to run inside a caller-owned session (and
    transaction); otherwise each operation opens its own session and commits
    when it finishes.
    """

    async_session_manager = staticmethod(partial(async_session_manager))

    entity_name: ClassVar[str] = "entity"

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    def _session(self):
        return self.async_session_manager(session_overwrite=self.session_overwrite)

    async def _belongs_to_tenant(
        self,
        session: AsyncSession,
        model: type[Base],
        entity_id: Any,
        tenant_id: Any,
        *extra: ColumnElement[bool],
    ) -> bool:
        """Whether row `entity_id` of `model` exists and is owned by `tenant_id`."""
        condition = predicates.entity_and_tenant_predicate(
            model, "id", entity_id, predicates.TENANT_FIELD, tenant_id
        )
        result = await session.execute(select(model.id).where(condition, *extra))
        return result.first() is not None

    @contextlib.contextmanager
    def _store_errors(self, operation: str, tenant_id: Any) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError:
            logger.exception(f"Failed to {operation} {self.entity_name} for event {tenant_id}")
            raise


class TenantRepository(SqlRepository, Generic[ModelT, DTOT]):
    """CRUD over a table that carries a tenant column.

    Subclasses set ``model`` and ``dto``; ``id_field`` and ``tenant_field`` are
    resolved against the model when the subclass is defined, so a typo fails on
    import instead of turning into a filter that matches nothing.
    """

    model: ClassVar[type[Base]]
    dto: ClassVar[type[RowDTO]]
    id_field: ClassVar[str] = "id"
    tenant_field: ClassVar[str] = predicates.TENANT_FIELD
    # columns maintained by the repository itself, never by callers
    read_only_fields: ClassVar[tuple[str, ...]] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        model = getattr(cls, "model", None)
        if model is not None:
            predicates.resolve_column(model, cls.id_field)
            predicates.resolve_column(model, cls.tenant_field)
            cls.entity_name = model.__tablename__

    # Predicate shortcuts

    def _tenant(self, tenant_id: Any, *extra: ColumnElement[bool] | None) -> ColumnElement[bool]:
        return predicates.tenant_predicate(self.model, tenant_id, *extra, tenant_field=self.tenant_field)

    def _id_and_tenant(self, entity_id: Any, tenant_id: Any) -> ColumnElement[bool]:
        return predicates.entity_and_tenant_predicate(
            self.model, self.id_field, entity_id, self.tenant_field, tenant_id
        )

    def _check_writable(self, values: dict[str, Any]) -> None:
        predicates.check_columns(self.model, values)
        for field in self.read_only_fields:
            if field in values:
                raise ValueError(f"{self.entity_name}.{field} is maintained by the repository")

    def _default_ordering(self) -> list:
        return [predicates.order_by(self.model, self.id_field)]

    def _select(self, condition: ColumnElement[bool]) -> Select:
        return select(self.model).where(condition).execution_options(populate_existing=True)

    def _to_dto(self, row: ModelT) -> DTOT:
        return self.dto.from_row(row)

    async def _fetch_one(self, session: AsyncSession, condition: ColumnElement[bool]) -> ModelT | None:
        result = await session.execute(self._select(condition))
        return result.scalar_one_or_none()

    async def _before_insert(self, session: AsyncSession, rows: list[dict[str, Any]], tenant_id: Any) -> None:
        """Hook for checking the references of rows about to be inserted."""

    async def _before_update(
        self, session: AsyncSession, existing: ModelT, values: dict[str, Any], tenant_id: Any
    ) -> None:
        """Hook run once the row is found, in the same transaction as the update."""

    async def _before_delete(self, session: AsyncSession, condition: ColumnElement[bool]) -> None:
        """Hook for removing rows that depend on the ones matched by ``condition``."""

    # Reads

    async def get_by_id(self, entity_id: Any, tenant_id: Any) -> DTOT | None:
        """The row with ``entity_id`` if it belongs to ``tenant_id``, else None."""
        condition = self._id_and_tenant(entity_id, tenant_id)
        with self._store_errors(f"get id {entity_id} of", tenant_id):
            async with self._session() as session:
                row = await self._fetch_one(session, condition)
                return self._to_dto(row) if row is not None else None

    async def get_by_ids(self, entity_ids: Sequence[Any], tenant_id: Any) -> list[DTOT]:
        """The rows among ``entity_ids`` owned by ``tenant_id``; foreign ids are dropped."""
        condition = predicates.entity_list_and_tenant_predicate(
            self.model, self.id_field, entity_ids, self.tenant_field, tenant_id
        )
        with self._store_errors("get ids of", tenant_id):
            async with self._session() as session:
                result = await session.execute(self._select(condition).order_by(*self._default_ordering()))
                return [self._to_dto(row) for row in result.scalars().all()]

    async def get_all_by_tenant(self, tenant_id: Any, *extra_predicates: ColumnElement[bool]) -> list[DTOT]:
        condition = self._tenant(tenant_id, *extra_predicates)
        with self._store_errors("get all", tenant_id):
            async with self._session() as session:
                result = await session.execute(self._select(condition).order_by(*self._default_ordering()))
                return [self._to_dto(row) for row in result.scalars().all()]

    async def count_by_tenant(self, tenant_id: Any, *extra_predicates: ColumnElement[bool]) -> int:
        condition = self._tenant(tenant_id, *extra_predicates)
        with self._store_errors("count", tenant_id):
            async with self._session() as session:
                result = await session.execute(select(func.count()).select_from(self.model).where(condition))
                return result.scalar_one()

    # Writes

    async def create(self, data: predicates.Payload, tenant_id: Any) -> DTOT:
        """Insert ``data`` stamped with ``tenant_id`` and return the stored row."""
        values = predicates.attach_tenant(data, tenant_id, self.tenant_field)
        self._check_writable(values)
        with self._store_errors("create", tenant_id):
            async with self._session() as session:
                await self._before_insert(session, [values], tenant_id)
                stmt = insert(self.model).values(values).returning(self.model)
                result = await session.scalars(stmt)
                return self._to_dto(result.one())

    async def bulk_create(self, data_list: Sequence[predicates.Payload], tenant_id: Any) -> list[DTOT]:
        """One multi-row insert. An empty list returns [] without touching the store."""
        predicates.validate_tenant_context(tenant_id)
        if not data_list:
            return []
        values = predicates.attach_tenant_bulk(data_list, tenant_id, self.tenant_field)
        for row_values in values:
            self._check_writable(row_values)
        with self._store_errors("bulk create", tenant_id):
            async with self._session() as session:
                await self._before_insert(session, values, tenant_id)
                stmt = insert(self.model).returning(self.model, sort_by_parameter_order=True)
                result = await session.scalars(stmt, values)
                return [self._to_dto(row) for row in result.all()]

    async def update(self, entity_id: Any, data: predicates.Payload, tenant_id: Any) -> DTOT | None:
        """Partial update scoped by id and tenant. None when the row is not in the tenant."""
        condition = self._id_and_tenant(entity_id, tenant_id)
        values = predicates.payload_to_dict(data)
        # neither the key nor the owning event changes through an update
        values.pop(self.id_field, None)
        values.pop(self.tenant_field, None)
        self._check_writable(values)
        with self._store_errors(f"update id {entity_id} of", tenant_id):
            async with self._session() as session:
                existing = await self._fetch_one(session, condition)
                if existing is None:
                    return None
                if not values:
                    return self._to_dto(existing)
                await self._before_update(session, existing, values, tenant_id)
                stmt = (
                    update(self.model)
                    .where(condition)
                    .values(values)
                    .returning(self.model)
                    .execution_options(populate_existing=True)
                )
                result = await session.scalars(stmt)
                return self._to_dto(result.one())

    async def delete(self, entity_id: Any, tenant_id: Any) -> bool:
        condition = self._id_and_tenant(entity_id, tenant_id)
        with self._store_errors(f"delete id {entity_id} of", tenant_id):
            async with self._session() as session:
                existing = await self._fetch_one(session, condition)
                if existing is None:
                    return False
                await self._before_delete(session, condition)
                result = await session.execute(delete(self.model).where(condition))
                return result.rowcount > 0

    async def delete_all_by_tenant(self, tenant_id: Any) -> int:
        """Delete every row owned by ``tenant_id``; returns how many went."""
        condition = self._tenant(tenant_id)
        with self._store_errors("delete all", tenant_id):
            async with self._session() as session:
                await self._before_delete(session, condition)
                result = await session.execute(delete(self.model).where(condition))
                deleted = result.rowcount
        logger.info(f"Deleted {deleted} {self.entity_name} rows for event {tenant_id}")
        return deleted
