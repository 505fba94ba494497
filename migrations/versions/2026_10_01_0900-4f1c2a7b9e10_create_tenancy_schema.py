"""create wedding tenancy schema

Revision ID: 4f1c2a7b9e10
Revises:
Create Date: 2026-10-01 09:00:00.000000

"""

import sqlalchemy as sa
import sqlalchemy_utils
from alembic import op

# revision identifiers, used by Alembic.
revision = "4f1c2a7b9e10"
down_revision = None
branch_labels = None
depends_on = None


def _tenant_column() -> sa.Column:
    return sa.Column(
        "event_id",
        sa.Integer(),
        sa.ForeignKey("wedding_events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


def upgrade() -> None:
    op.create_table(
        "wedding_events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("couple_names", sa.String(255), nullable=False),
        sa.Column("bride_name", sa.String(255), nullable=False),
        sa.Column("groom_name", sa.String(255), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("location", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("rsvp_deadline", sa.Date(), nullable=True),
        sa.Column("allow_plus_ones", sa.Boolean(), nullable=False),
        sa.Column("allow_children_details", sa.Boolean(), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=False, index=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.current_timestamp(), nullable=False
        ),
    )

    op.create_table(
        "guests",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _tenant_column(),
        sa.Column("first_name", sa.String(255), nullable=False, index=True),
        sa.Column("last_name", sa.String(255), nullable=False, index=True),
        sa.Column("email", sa.String(255), nullable=True, index=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("side", sa.Enum("bride", "groom", name="guest_side_enum"), nullable=False),
        sa.Column("relationship", sa.String(255), nullable=True),
        sa.Column(
            "rsvp_status",
            sa.Enum("pending", "confirmed", "declined", name="guest_status_enum"),
            nullable=False,
            index=True,
        ),
        sa.Column("plus_one_allowed", sa.Boolean(), nullable=False),
        sa.Column("plus_one_name", sa.String(255), nullable=True),
        sa.Column("plus_one_email", sa.String(255), nullable=True),
        sa.Column("plus_one_phone", sa.String(50), nullable=True),
        sa.Column("children_details", sqlalchemy_utils.JSONType(), nullable=True),
        sa.Column("children_notes", sa.Text(), nullable=True),
        sa.Column("dietary_restrictions", sa.Text(), nullable=True),
        sa.Column("allergies", sa.Text(), nullable=True),
        sa.Column("needs_accommodation", sa.Boolean(), nullable=False),
        sa.Column("accommodation_preference", sa.String(255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.current_timestamp(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.current_timestamp(), nullable=False
        ),
    )

    op.create_table(
        "ceremonies",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _tenant_column(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("date", sa.Date(), nullable=False, index=True),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.Column("location", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("attire_code", sa.String(255), nullable=True),
    )

    op.create_table(
        "accommodations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _tenant_column(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("room_type", sa.String(255), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("total_rooms", sa.Integer(), nullable=False),
        sa.Column("allocated_rooms", sa.Integer(), server_default="0", nullable=False),
        sa.Column("price_per_night", sa.String(50), nullable=True),
        sa.Column("special_features", sa.Text(), nullable=True),
        sa.CheckConstraint("allocated_rooms >= 0", name="ck_accommodations_allocated_rooms_non_negative"),
        sa.CheckConstraint("total_rooms >= 0", name="ck_accommodations_total_rooms_non_negative"),
    )

    op.create_table(
        "room_allocations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "accommodation_id",
            sa.Integer(),
            sa.ForeignKey("accommodations.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("guest_id", sa.Integer(), sa.ForeignKey("guests.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("room_number", sa.String(50), nullable=True),
        sa.Column("check_in_date", sa.Date(), nullable=True),
        sa.Column("check_in_status", sa.String(20), nullable=False),
        sa.Column("check_in_time", sa.String(5), nullable=True),
        sa.Column("check_out_date", sa.Date(), nullable=True),
        sa.Column("check_out_status", sa.String(20), nullable=False),
        sa.Column("check_out_time", sa.String(5), nullable=True),
        sa.Column("special_requests", sa.Text(), nullable=True),
        sa.Column("includes_plus_one", sa.Boolean(), nullable=False),
        sa.Column("includes_children", sa.Boolean(), nullable=False),
        sa.Column("children_count", sa.Integer(), nullable=False),
        sa.Column("additional_guests_info", sa.Text(), nullable=True),
    )

    op.create_table(
        "meal_options",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _tenant_column(),
        sa.Column(
            "ceremony_id", sa.Integer(), sa.ForeignKey("ceremonies.id", ondelete="CASCADE"), nullable=False, index=True
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_vegetarian", sa.Boolean(), nullable=False),
        sa.Column("is_vegan", sa.Boolean(), nullable=False),
        sa.Column("is_gluten_free", sa.Boolean(), nullable=False),
        sa.Column("is_nut_free", sa.Boolean(), nullable=False),
    )

    op.create_table(
        "guest_meal_selections",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("guest_id", sa.Integer(), sa.ForeignKey("guests.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column(
            "meal_option_id",
            sa.Integer(),
            sa.ForeignKey("meal_options.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("ceremony_id", sa.Integer(), sa.ForeignKey("ceremonies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.UniqueConstraint("guest_id", "ceremony_id", name="uq_guest_meal_selections_guest_ceremony"),
    )

    op.create_table(
        "message_templates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _tenant_column(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(50), nullable=False, index=True),
        sa.Column("template_id", sa.String(255), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("parameters", sqlalchemy_utils.JSONType(), nullable=True),
        sa.Column("language", sa.String(10), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.current_timestamp(), nullable=False
        ),
        sa.Column("last_used", sa.DateTime(timezone=True), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("message_templates")
    op.drop_table("guest_meal_selections")
    op.drop_table("meal_options")
    op.drop_table("room_allocations")
    op.drop_table("accommodations")
    op.drop_table("ceremonies")
    op.drop_table("guests")
    op.drop_table("wedding_events")
    sa.Enum(name="guest_status_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="guest_side_enum").drop(op.get_bind(), checkfirst=True)
