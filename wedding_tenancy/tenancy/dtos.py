from dataclasses import fields
from typing import Any, Self


class RowDTO:
    """Mixin for frozen dataclass DTOs that are built from ORM rows.

    Repositories hand DTOs to callers, never ORM instances, so nothing outside
    the data-access layer can lazy-load or mutate a row behind the session's back.
    """

    @classmethod
    def from_row(cls, row: Any, **extra: Any) -> Self:
        values = {field.name: getattr(row, field.name) for field in fields(cls) if field.name not in extra}
        return cls(**values, **extra)
