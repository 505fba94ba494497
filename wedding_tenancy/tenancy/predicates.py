"""Tenant-scoped filter construction.

Every statement the repositories issue gets its WHERE clause from these
helpers, so the tenant condition is part of the query by construction rather
than something each call site has to remember.

Fields can be given either as mapped attributes (``Guest.event_id``), which
are checked by Python attribute access when the module is imported, or as
strings, which are resolved against the mapper and fail loudly with
:class:`UnknownColumnError` when the name is not a column.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Literal

from pydantic import BaseModel
from sqlalchemy import and_, asc, desc, inspect
from sqlalchemy.orm import InstrumentedAttribute
from sqlalchemy.sql.elements import ColumnElement, UnaryExpression

from wedding_tenancy.tenancy.errors import (
    InvalidEntityIdError,
    InvalidEntityListError,
    InvalidTenantContextError,
    UnknownColumnError,
)

TENANT_FIELD = "event_id"

Field = str | InstrumentedAttribute
Payload = BaseModel | Mapping[str, Any]


def _coerce_id(value: Any) -> int | None:
    """Return ``value`` as a positive int, or None when it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        number = int(value.strip())
        return number if number > 0 else None
    return None


def validate_tenant_context(tenant_id: Any) -> int:
    coerced = _coerce_id(tenant_id)
    if coerced is None:
        raise InvalidTenantContextError(tenant_id)
    return coerced


def validate_entity_id(entity_id: Any) -> int:
    coerced = _coerce_id(entity_id)
    if coerced is None:
        raise InvalidEntityIdError(entity_id)
    return coerced


def validate_entity_ids(entity_ids: Any) -> list[int]:
    if isinstance(entity_ids, (str, bytes)) or not isinstance(entity_ids, (Sequence, set, frozenset)):
        raise InvalidEntityListError(entity_ids)
    if len(entity_ids) == 0:
        raise InvalidEntityListError(entity_ids)
    coerced = [_coerce_id(entity_id) for entity_id in entity_ids]
    if any(entity_id is None for entity_id in coerced):
        raise InvalidEntityListError(entity_ids)
    return coerced


def resolve_column(model: type, field: Field) -> InstrumentedAttribute:
    """Map ``field`` to the model's column attribute."""
    table = getattr(model, "__tablename__", model.__name__)
    if isinstance(field, InstrumentedAttribute):
        if not issubclass(model, field.class_):
            raise UnknownColumnError(table, field.key)
        return field
    if field not in inspect(model).columns:
        raise UnknownColumnError(table, str(field))
    return getattr(model, field)


def check_columns(model: type, values: Mapping[str, Any]) -> None:
    """Reject payload keys that would silently be ignored or fail deep in the driver."""
    columns = inspect(model).columns
    table = getattr(model, "__tablename__", model.__name__)
    for key in values:
        if key not in columns:
            raise UnknownColumnError(table, key)


def tenant_predicate(
    model: type,
    tenant_id: Any,
    *extra: ColumnElement[bool] | None,
    tenant_field: Field = TENANT_FIELD,
) -> ColumnElement[bool]:
    """``tenant column == tenant_id`` AND every non-None condition in ``extra``."""
    tenant_id = validate_tenant_context(tenant_id)
    column = resolve_column(model, tenant_field)
    conditions = [condition for condition in extra if condition is not None]
    return and_(column == tenant_id, *conditions)


def entity_and_tenant_predicate(
    model: type,
    id_field: Field,
    entity_id: Any,
    tenant_field: Field,
    tenant_id: Any,
) -> ColumnElement[bool]:
    entity_id = validate_entity_id(entity_id)
    tenant_id = validate_tenant_context(tenant_id)
    id_column = resolve_column(model, id_field)
    tenant_column = resolve_column(model, tenant_field)
    return and_(id_column == entity_id, tenant_column == tenant_id)


def entity_list_and_tenant_predicate(
    model: type,
    id_field: Field,
    entity_ids: Sequence[Any],
    tenant_field: Field,
    tenant_id: Any,
) -> ColumnElement[bool]:
    entity_ids = validate_entity_ids(entity_ids)
    tenant_id = validate_tenant_context(tenant_id)
    id_column = resolve_column(model, id_field)
    tenant_column = resolve_column(model, tenant_field)
    return and_(id_column.in_(entity_ids), tenant_column == tenant_id)


def payload_to_dict(payload: Payload) -> dict[str, Any]:
    """Plain dict of the fields the caller actually set."""
    if isinstance(payload, BaseModel):
        return payload.model_dump(exclude_unset=True)
    if isinstance(payload, Mapping):
        return dict(payload)
    raise TypeError(f"Unsupported payload type: {type(payload).__name__}")


def attach_tenant(payload: Payload, tenant_id: Any, tenant_field: str = TENANT_FIELD) -> dict[str, Any]:
    """Copy of ``payload`` stamped with the tenant id; any caller value is overridden."""
    tenant_id = validate_tenant_context(tenant_id)
    values = payload_to_dict(payload)
    values[tenant_field] = tenant_id
    return values


def attach_tenant_bulk(
    payloads: Iterable[Payload], tenant_id: Any, tenant_field: str = TENANT_FIELD
) -> list[dict[str, Any]]:
    tenant_id = validate_tenant_context(tenant_id)
    if isinstance(payloads, (str, bytes, Mapping, BaseModel)) or not isinstance(payloads, Iterable):
        raise TypeError("Invalid data array")
    return [attach_tenant(payload, tenant_id, tenant_field) for payload in payloads]


def order_by(model: type, field: Field, direction: Literal["asc", "desc"] = "asc") -> UnaryExpression:
    column = resolve_column(model, field)
    if direction == "desc":
        return desc(column)
    return asc(column)
