"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17

Creates profiles, auth_sessions, events, participants and uploads.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ROLE = sa.Enum("volunteer", "organizer", name="role")
PARTICIPANT_STATUS = sa.Enum("pending", "accepted", "declined", name="participantstatus")


def upgrade() -> None:
    # --- profiles ---
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False, server_default=""),
        sa.Column("role", ROLE, nullable=False, server_default="volunteer"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- auth_sessions ---
    op.create_table(
        "auth_sessions",
        sa.Column("token", sa.String(64), primary_key=True),
        sa.Column("profile_id", sa.String(36), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- events ---
    op.create_table(
        "events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("organizer_id", sa.String(36), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("location", sa.String(500), nullable=False),
        sa.Column("event_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_events_event_date", "events", ["event_date"])

    # --- participants ---
    op.create_table(
        "participants",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("volunteer_id", sa.String(36), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("status", PARTICIPANT_STATUS, nullable=False, server_default="accepted"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("event_id", "volunteer_id", name="uq_participant_event_volunteer"),
    )

    # --- uploads ---
    op.create_table(
        "uploads",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("image_url", sa.String(1000), nullable=False),
        sa.Column("storage_path", sa.String(500), nullable=True),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_uploads_event_id", "uploads", ["event_id"])


def downgrade() -> None:
    op.drop_index("ix_uploads_event_id", table_name="uploads")
    op.drop_table("uploads")
    op.drop_table("participants")
    op.drop_index("ix_events_event_date", table_name="events")
    op.drop_table("events")
    op.drop_table("auth_sessions")
    op.drop_table("profiles")
    PARTICIPANT_STATUS.drop(op.get_bind(), checkfirst=True)
    ROLE.drop(op.get_bind(), checkfirst=True)
