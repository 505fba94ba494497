from sqlalchemy import Boolean, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from wedding_tenancy.config.table_names import TableNames
from wedding_tenancy.models.base import Base, TenantScoped


class MealOption(Base, TenantScoped):
    __tablename__ = TableNames.MEAL_OPTIONS.value

    ceremony_id: Mapped[int] = mapped_column(
        ForeignKey(f"{TableNames.CEREMONIES.value}.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_vegetarian: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_vegan: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_gluten_free: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_nut_free: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<MealOption {self.name} for ceremony {self.ceremony_id}>"


class GuestMealSelection(Base):
    """One meal choice per guest per ceremony."""

    __tablename__ = TableNames.GUEST_MEAL_SELECTIONS.value
    __table_args__ = (
        UniqueConstraint("guest_id", "ceremony_id", name="uq_guest_meal_selections_guest_ceremony"),
    )

    guest_id: Mapped[int] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    meal_option_id: Mapped[int] = mapped_column(
        ForeignKey(f"{TableNames.MEAL_OPTIONS.value}.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    ceremony_id: Mapped[int] = mapped_column(
        ForeignKey(f"{TableNames.CEREMONIES.value}.id", ondelete="CASCADE"),
        nullable=False,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<GuestMealSelection guest {self.guest_id} ceremony {self.ceremony_id}>"
