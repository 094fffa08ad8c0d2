"""Initial schema for targets, check history, outages and settings."""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create initial tables and indexes."""
    op.create_table(
        "monitoring_targets",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("target", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("is_enabled", sa.Boolean(), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("target"),
    )
    op.create_index(
        "ix_monitoring_targets_is_enabled_priority",
        "monitoring_targets",
        ["is_enabled", "priority"],
    )

    op.create_table(
        "connection_checks",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.Column("is_connected", sa.Boolean(), nullable=False),
        sa.Column("latency_ms", sa.Float(), nullable=True),
        sa.Column("target", sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_connection_checks_timestamp", "connection_checks", ["timestamp"])
    op.create_index(
        "ix_connection_checks_is_connected_timestamp",
        "connection_checks",
        ["is_connected", "timestamp"],
    )

    op.create_table(
        "outages",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=True),
        sa.Column("duration_sec", sa.Integer(), nullable=True),
        sa.Column("is_resolved", sa.Boolean(), nullable=False),
        sa.Column("checks_count", sa.Integer(), nullable=False),
        sa.Column("email_sent", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_outages_is_resolved_start_time", "outages", ["is_resolved", "start_time"])
    op.create_index("ix_outages_start_time", "outages", ["start_time"])
    op.create_index(
        "ux_outages_single_open",
        "outages",
        ["is_resolved"],
        unique=True,
        sqlite_where=sa.text("is_resolved = 0"),
        postgresql_where=sa.text("NOT is_resolved"),
    )

    op.create_table(
        "monitoring_settings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("check_interval_seconds", sa.Integer(), nullable=False),
        sa.Column("outage_check_interval_seconds", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "speed_tests",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.Column("download_mbps", sa.Float(), nullable=False),
        sa.Column("upload_mbps", sa.Float(), nullable=False),
        sa.Column("ping_ms", sa.Float(), nullable=False),
        sa.Column("jitter_ms", sa.Float(), nullable=True),
        sa.Column("server_name", sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_speed_tests_timestamp"), "speed_tests", ["timestamp"])


def downgrade() -> None:
    """Drop all tables and indexes."""
    op.drop_index(op.f("ix_speed_tests_timestamp"), table_name="speed_tests")
    op.drop_table("speed_tests")
    op.drop_table("monitoring_settings")
    op.drop_index("ux_outages_single_open", table_name="outages")
    op.drop_index("ix_outages_start_time", table_name="outages")
    op.drop_index("ix_outages_is_resolved_start_time", table_name="outages")
    op.drop_table("outages")
    op.drop_index("ix_connection_checks_is_connected_timestamp", table_name="connection_checks")
    op.drop_index("ix_connection_checks_timestamp", table_name="connection_checks")
    op.drop_table("connection_checks")
    op.drop_index("ix_monitoring_targets_is_enabled_priority", table_name="monitoring_targets")
    op.drop_table("monitoring_targets")
