from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, declarative_base, declared_attr, mapped_column

from wedding_tenancy.config.table_names import TableNames

BaseModel = declarative_base()


class Base(BaseModel):
    __abstract__ = True

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)


class TenantScoped(BaseModel):
    """Mixin for rows owned directly by a wedding event (the tenant)."""

    __abstract__ = True

    @declared_attr
    def event_id(cls) -> Mapped[int]:
        return mapped_column(
            sa.ForeignKey(f"{TableNames.WEDDING_EVENTS.value}.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )


class CreatedAt(BaseModel):
    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        server_default=sa.func.current_timestamp(),
        nullable=False,
    )


class TimeStamp(CreatedAt):
    __abstract__ = True

    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        server_default=sa.func.current_timestamp(),
        onupdate=sa.func.current_timestamp(),
        nullable=False,
    )
