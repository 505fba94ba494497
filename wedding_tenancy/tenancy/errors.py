from typing import Any


class TenancyError(Exception):
    """Base class for tenant-scoping failures raised by the data-access layer."""


class InvalidTenantContextError(TenancyError):
    """Raised when the tenant id is missing, zero, negative or not numeric."""

    def __init__(self, tenant_id: Any) -> None:
        self.tenant_id = tenant_id
        super().__init__(f"Missing or invalid event context: {tenant_id!r}")


class InvalidEntityIdError(TenancyError):
    """Raised when an entity id handed to a scoped lookup is malformed."""

    def __init__(self, entity_id: Any) -> None:
        self.entity_id = entity_id
        super().__init__(f"Invalid entity id: {entity_id!r}")


class InvalidEntityListError(TenancyError):
    """Raised when an id list is empty, not a list, or holds malformed ids."""

    def __init__(self, entity_ids: Any) -> None:
        self.entity_ids = entity_ids
        super().__init__(f"Invalid entity ids list: {entity_ids!r}")


class UnknownColumnError(TenancyError):
    """Raised when a field name is not a mapped column of the target table."""

    def __init__(self, table: str, column: str) -> None:
        self.table = table
        self.column = column
        super().__init__(f"Column '{column}' does not exist on table '{table}'")


class CrossTenantReferenceError(TenancyError):
    """Raised when a write references a parent row owned by another event."""

    def __init__(self, entity: str, entity_id: Any, tenant_id: int, detail: str = "") -> None:
        self.entity = entity
        self.entity_id = entity_id
        self.tenant_id = tenant_id
        message = f"{entity} {entity_id} does not belong to event {tenant_id}"
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)
