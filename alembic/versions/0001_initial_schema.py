"""Initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _tutor_fk() -> sa.Column:
    return sa.Column("tutor_id", sa.Integer(), sa.ForeignKey("tutors.id", ondelete="CASCADE"), nullable=False)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "auth_sessions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("token_hash", sa.String(length=64), nullable=False, unique=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_auth_sessions_user_id", "auth_sessions", ["user_id"])

    op.create_table(
        "tutors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
        ),
        sa.Column("first_name", sa.String(length=120), nullable=False),
        sa.Column("last_name", sa.String(length=120), nullable=False),
        sa.Column("gender", sa.String(length=40), nullable=False),
        sa.Column("grades_can_teach_json", sa.JSON(), nullable=False),
        sa.Column("hourly_fee", sa.Float(), nullable=True),
        sa.Column("tagline", sa.String(length=255), nullable=False),
        sa.Column("country", sa.String(length=120), nullable=False),
        sa.Column("state", sa.String(length=120), nullable=False),
        sa.Column("city", sa.String(length=120), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=False),
        sa.Column("zipcode", sa.String(length=20), nullable=False),
        sa.Column("languages_spoken_json", sa.JSON(), nullable=False),
        sa.Column("profile_image", sa.String(length=500), nullable=False),
        sa.Column("payout_method", sa.String(length=80), nullable=False),
        sa.Column("payout_account_ref", sa.String(length=255), nullable=False),
        sa.Column("payout_onboarded", sa.Boolean(), nullable=False),
        sa.Column("profile_completion_percentage", sa.Integer(), nullable=False),
        sa.Column("profile_completed", sa.Boolean(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "experiences",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tutor_fk(),
        sa.Column("job_title", sa.String(length=255), nullable=False),
        sa.Column("company", sa.String(length=255), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_current", sa.Boolean(), nullable=False),
        sa.Column("teaching_mode", sa.String(length=80), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_experiences_tutor_id", "experiences", ["tutor_id"])

    op.create_table(
        "educations",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tutor_fk(),
        sa.Column("degree_title", sa.String(length=255), nullable=False),
        sa.Column("university", sa.String(length=255), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_ongoing", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_educations_tutor_id", "educations", ["tutor_id"])

    op.create_table(
        "subjects",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False, unique=True),
        sa.Column("category", sa.String(length=120), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_subjects_category", "subjects", ["category"])

    op.create_table(
        "tutor_subjects",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tutor_fk(),
        sa.Column(
            "subject_id", sa.Integer(), sa.ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False
        ),
        *_timestamps(),
        sa.UniqueConstraint("tutor_id", "subject_id", name="uq_tutor_subject"),
    )
    op.create_index("ix_tutor_subjects_tutor_id", "tutor_subjects", ["tutor_id"])
    op.create_index("ix_tutor_subjects_subject_id", "tutor_subjects", ["subject_id"])

    op.create_table(
        "availabilities",
        sa.Column("id", sa.Integer(), primary_key=True),
        _tutor_fk(),
        sa.Column("block_title", sa.String(length=255), nullable=False),
        sa.Column("days_available_json", sa.JSON(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("break_time", sa.Integer(), nullable=False),
        sa.Column("session_duration", sa.Integer(), nullable=False),
        sa.Column("number_of_slots", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_availabilities_tutor_id", "availabilities", ["tutor_id"])

    op.create_table(
        "background_checks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "tutor_id", sa.Integer(), sa.ForeignKey("tutors.id", ondelete="CASCADE"), nullable=False, unique=True
        ),
        sa.Column("full_legal_first_name", sa.String(length=120), nullable=False),
        sa.Column("full_legal_last_name", sa.String(length=120), nullable=False),
        sa.Column("other_names_used", sa.String(length=255), nullable=False),
        sa.Column("address_line1", sa.String(length=255), nullable=False),
        sa.Column("address_line2", sa.String(length=255), nullable=False),
        sa.Column("city", sa.String(length=120), nullable=False),
        sa.Column("state_province_region", sa.String(length=120), nullable=False),
        sa.Column("postal_code", sa.String(length=20), nullable=False),
        sa.Column("country", sa.String(length=120), nullable=False),
        sa.Column("lived_more_than_3_years", sa.Boolean(), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("ssn_last4", sa.String(length=4), nullable=False),
        sa.Column("has_us_driver_license", sa.Boolean(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("consent_given", sa.Boolean(), nullable=False),
        sa.Column("comments", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("review_notes", sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_background_checks_status", "background_checks", ["status"])

    op.create_table(
        "admin_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("send_signup_confirmation", sa.Boolean(), nullable=False),
        sa.Column("send_profile_completion_email", sa.Boolean(), nullable=False),
        sa.Column("email_sender_name", sa.String(length=120), nullable=False),
        sa.Column("email_sender_email", sa.String(length=255), nullable=False),
        sa.Column("withdraw_methods_json", sa.JSON(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "student_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        _tutor_fk(),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_bookings_student_user_id", "bookings", ["student_user_id"])
    op.create_index("ix_bookings_tutor_id", "bookings", ["tutor_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])

    op.create_table(
        "class_sessions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "booking_id",
            sa.Integer(),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("tutor_approved", sa.Boolean(), nullable=False),
        sa.Column("admin_approved", sa.Boolean(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("admin_approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_class_sessions_status", "class_sessions", ["status"])

    op.create_table(
        "withdrawals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_type", sa.String(length=20), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("requested_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "approved_by_user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("payout_reference", sa.String(length=255), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_withdrawals_user_id", "withdrawals", ["user_id"])
    op.create_index("ix_withdrawals_status", "withdrawals", ["status"])


def downgrade() -> None:
    for table in (
        "withdrawals",
        "class_sessions",
        "bookings",
        "admin_settings",
        "background_checks",
        "availabilities",
        "tutor_subjects",
        "subjects",
        "educations",
        "experiences",
        "tutors",
        "auth_sessions",
        "users",
    ):
        op.drop_table(table)
