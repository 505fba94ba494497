import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, case, literal, or_, update

from wedding_tenancy.config import settings
from wedding_tenancy.messaging.dtos import MessageTemplateDTO
from wedding_tenancy.models import MessageTemplate
from wedding_tenancy.tenancy.repository import TenantRepository

logger = logging.getLogger(__name__)


class MessageTemplateRepository(TenantRepository[MessageTemplate, MessageTemplateDTO]):
    """Message templates of an event. ``last_used`` only moves forward."""

    model = MessageTemplate
    dto = MessageTemplateDTO
    read_only_fields = ("last_used",)

    async def get_by_category(self, category: str, tenant_id: Any) -> list[MessageTemplateDTO]:
        """Templates of one category, newest first."""
        condition = self._tenant(tenant_id, MessageTemplate.category == category)
        stmt = self._select(condition).order_by(MessageTemplate.created_at.desc(), MessageTemplate.id.desc())
        with self._store_errors(f"get category {category!r} of", tenant_id):
            async with self._session() as session:
                result = await session.execute(stmt)
                return [self._to_dto(template) for template in result.scalars().all()]

    async def search(self, term: str, tenant_id: Any) -> list[MessageTemplateDTO]:
        """Templates whose name contains ``term``, most recently used first."""
        escaped = term.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        condition = self._tenant(tenant_id, MessageTemplate.name.ilike(f"%{escaped}%", escape="\\"))
        stmt = self._select(condition).order_by(
            MessageTemplate.last_used.desc().nulls_last(), MessageTemplate.id.desc()
        )
        with self._store_errors(f"search {term!r} in", tenant_id):
            async with self._session() as session:
                result = await session.execute(stmt)
                return [self._to_dto(template) for template in result.scalars().all()]

    async def get_recently_used(self, tenant_id: Any, limit: int | None = None) -> list[MessageTemplateDTO]:
        """Up to ``limit`` templates by ``last_used``; never-used templates come last."""
        condition = self._tenant(tenant_id)
        stmt = (
            self._select(condition)
            .order_by(MessageTemplate.last_used.desc().nulls_last(), MessageTemplate.id.desc())
            .limit(limit or settings.recent_templates_limit)
        )
        with self._store_errors("get recently used", tenant_id):
            async with self._session() as session:
                result = await session.execute(stmt)
                return [self._to_dto(template) for template in result.scalars().all()]

    async def mark_used(self, template_id: Any, tenant_id: Any) -> bool:
        """Stamp ``last_used`` with the current time. False when the template is not in the event."""
        condition = self._id_and_tenant(template_id, tenant_id)
        now = literal(datetime.now(timezone.utc), DateTime(timezone=True))
        stmt = (
            update(MessageTemplate)
            .where(condition)
            .values(
                last_used=case(
                    (or_(MessageTemplate.last_used.is_(None), MessageTemplate.last_used < now), now),
                    else_=MessageTemplate.last_used,
                )
            )
            .execution_options(synchronize_session=False)
        )
        with self._store_errors(f"mark used id {template_id} of", tenant_id):
            async with self._session() as session:
                result = await session.execute(stmt)
        if result.rowcount:
            logger.debug(f"Marked template {template_id} of event {tenant_id} as used")
        return result.rowcount > 0
