from .errors import (
    CrossTenantReferenceError,
    InvalidEntityIdError,
    InvalidEntityListError,
    InvalidTenantContextError,
    TenancyError,
    UnknownColumnError,
)
from .repository import SqlRepository, TenantRepository

__all__ = [
    "CrossTenantReferenceError",
    "InvalidEntityIdError",
    "InvalidEntityListError",
    "InvalidTenantContextError",
    "TenancyError",
    "UnknownColumnError",
    "SqlRepository",
    "TenantRepository",
]
