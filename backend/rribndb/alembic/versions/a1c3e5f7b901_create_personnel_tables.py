"""
Create accounts, RIDS workflow, promotion and notification tables.

Revision ID: a1c3e5f7b901
Revises:
Create Date: 2025-10-01
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "a1c3e5f7b901"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

RIDS_STATUSES = ("draft", "submitted", "approved", "rejected")


def _rids_status(name: str) -> sa.Enum:
    return sa.Enum(*RIDS_STATUSES, name=name, native_enum=False)


def _id_column() -> sa.Column:
    return sa.Column("id", sa.String(length=36), primary_key=True)


def _reservist_fk() -> sa.Column:
    return sa.Column(
        "reservist_id",
        sa.String(length=36),
        sa.ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
    )


def _actor_fk(name: str) -> sa.Column:
    return sa.Column(name, sa.String(length=36), sa.ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True)


def upgrade() -> None:
    # -- accounts ----------------------------------------------------------
    op.create_table(
        "accounts",
        _id_column(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=120), nullable=False),
        sa.Column("last_name", sa.String(length=120), nullable=False),
        sa.Column(
            "role",
            sa.Enum("SUPER_ADMIN", "ADMIN", "STAFF", "RESERVIST", name="account_role_enum", native_enum=False),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum("PENDING", "ACTIVE", "INACTIVE", "DEACTIVATED", name="account_status_enum", native_enum=False),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_accounts_id", "accounts", ["id"])
    op.create_index("ix_accounts_email", "accounts", ["email"], unique=True)
    op.create_index("ix_accounts_role", "accounts", ["role"])
    op.create_index("ix_accounts_status", "accounts", ["status"])
    op.create_index("ix_accounts_role_status", "accounts", ["role", "status"])

    op.create_table(
        "reservist_details",
        sa.Column(
            "account_id",
            sa.String(length=36),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("service_number", sa.String(length=32), nullable=True, unique=True),
        sa.Column("rank", sa.String(length=64), nullable=False),
        sa.Column("company", sa.String(length=32), nullable=True),
        sa.Column(
            "commission_type",
            sa.Enum("NCO", "CO", name="commission_type_enum", native_enum=False),
            nullable=False,
        ),
        sa.Column(
            "reservist_status",
            sa.Enum("READY", "STANDBY", "RETIRED", name="reservist_status_enum", native_enum=False),
            nullable=False,
        ),
        sa.Column("date_of_commission", sa.Date(), nullable=True),
    )
    op.create_index("ix_reservist_details_rank", "reservist_details", ["rank"])
    op.create_index("ix_reservist_details_company", "reservist_details", ["company"])
    op.create_index("ix_reservist_details_company_rank", "reservist_details", ["company", "rank"])

    # -- RIDS workflow -----------------------------------------------------
    op.create_table(
        "rids_forms",
        _id_column(),
        _reservist_fk(),
        sa.Column("status", _rids_status("rids_status_enum"), nullable=False, server_default="draft"),
        _actor_fk("created_by"),
        _actor_fk("submitted_by"),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        _actor_fk("approved_by"),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_rids_forms_id", "rids_forms", ["id"])
    # One RIDS per reservist.
    op.create_index("ix_rids_forms_reservist_id", "rids_forms", ["reservist_id"], unique=True)
    op.create_index("ix_rids_forms_status", "rids_forms", ["status"])
    op.create_index("ix_rids_forms_reservist_status", "rids_forms", ["reservist_id", "status"])

    op.create_table(
        "rids_status_history",
        _id_column(),
        sa.Column(
            "rids_form_id",
            sa.String(length=36),
            sa.ForeignKey("rids_forms.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("from_status", _rids_status("rids_history_from_status_enum"), nullable=False),
        sa.Column("to_status", _rids_status("rids_history_to_status_enum"), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        _actor_fk("changed_by"),
        sa.Column(
            "action_type",
            sa.Enum(
                "submit",
                "approve",
                "reject",
                "revert",
                "manual_change",
                name="rids_action_type_enum",
                native_enum=False,
            ),
            nullable=False,
        ),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_rids_status_history_id", "rids_status_history", ["id"])
    op.create_index("ix_rids_status_history_rids_form_id", "rids_status_history", ["rids_form_id"])
    op.create_index("ix_rids_status_history_changed_by", "rids_status_history", ["changed_by"])
    op.create_index("ix_rids_status_history_action_type", "rids_status_history", ["action_type"])
    op.create_index("ix_rids_status_history_created_at", "rids_status_history", ["created_at"])
    op.create_index("ix_rids_status_history_form_time", "rids_status_history", ["rids_form_id", "created_at"])
    op.create_index(
        "ix_rids_status_history_form_time_desc",
        "rids_status_history",
        ["rids_form_id", sa.text("created_at DESC")],
    )

    # -- promotion ---------------------------------------------------------
    op.create_table(
        "promotion_requirements",
        _id_column(),
        sa.Column("from_rank", sa.String(length=64), nullable=False),
        sa.Column("to_rank", sa.String(length=64), nullable=True),
        sa.Column("required_training_types", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("years_in_current_rank", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("seminars_required", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("camp_duty_days", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("min_education", sa.String(length=64), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_promotion_requirements_id", "promotion_requirements", ["id"])
    op.create_index("ix_promotion_requirements_from_rank", "promotion_requirements", ["from_rank"])
    op.create_index("ix_promotion_requirements_is_active", "promotion_requirements", ["is_active"])
    op.create_index(
        "ix_promotion_requirements_rank_active", "promotion_requirements", ["from_rank", "is_active"]
    )

    op.create_table(
        "training_hours",
        _id_column(),
        _reservist_fk(),
        sa.Column("training_name", sa.String(length=255), nullable=False),
        sa.Column("training_category", sa.String(length=64), nullable=True),
        sa.Column("hours_completed", sa.Float(), nullable=False, server_default="0"),
        sa.Column("completed_on", sa.Date(), nullable=True),
    )
    op.create_index("ix_training_hours_id", "training_hours", ["id"])
    op.create_index("ix_training_hours_reservist_id", "training_hours", ["reservist_id"])
    op.create_index("ix_training_hours_reservist_name", "training_hours", ["reservist_id", "training_name"])

    op.create_table(
        "camp_duty_records",
        _id_column(),
        _reservist_fk(),
        sa.Column("hours", sa.Float(), nullable=False, server_default="0"),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
    )
    op.create_index("ix_camp_duty_records_id", "camp_duty_records", ["id"])
    op.create_index("ix_camp_duty_records_reservist_id", "camp_duty_records", ["reservist_id"])

    op.create_table(
        "seminars_activities",
        _id_column(),
        _reservist_fk(),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("held_on", sa.Date(), nullable=True),
    )
    op.create_index("ix_seminars_activities_id", "seminars_activities", ["id"])
    op.create_index("ix_seminars_activities_reservist_id", "seminars_activities", ["reservist_id"])

    op.create_table(
        "educational_records",
        _id_column(),
        _reservist_fk(),
        sa.Column("degree_type", sa.String(length=64), nullable=False),
        sa.Column("school", sa.String(length=255), nullable=True),
        sa.Column("year_graduated", sa.Integer(), nullable=True),
    )
    op.create_index("ix_educational_records_id", "educational_records", ["id"])
    op.create_index("ix_educational_records_reservist_id", "educational_records", ["reservist_id"])

    # -- notifications -----------------------------------------------------
    op.create_table(
        "notifications",
        _id_column(),
        sa.Column(
            "account_id",
            sa.String(length=36),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "type",
            sa.Enum("rids", name="notification_type_enum", native_enum=False, length=32),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("reference_id", sa.String(length=36), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_notifications_id", "notifications", ["id"])
    op.create_index("ix_notifications_account_id", "notifications", ["account_id"])
    op.create_index("ix_notifications_type", "notifications", ["type"])
    op.create_index("ix_notifications_reference_id", "notifications", ["reference_id"])
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])
    op.create_index("ix_notifications_account_read", "notifications", ["account_id", "is_read"])
    op.create_index("ix_notifications_account_created", "notifications", ["account_id", "created_at"])


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("educational_records")
    op.drop_table("seminars_activities")
    op.drop_table("camp_duty_records")
    op.drop_table("training_hours")
    op.drop_table("promotion_requirements")
    op.drop_table("rids_status_history")
    op.drop_table("rids_forms")
    op.drop_table("reservist_details")
    op.drop_table("accounts")
