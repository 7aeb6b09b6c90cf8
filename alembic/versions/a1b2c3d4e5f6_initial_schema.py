"""Initial schema: bikes, components, intervals, swaps, rides, context, preferences.

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        "bikes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("make", sa.String(255), nullable=True),
        sa.Column("model", sa.String(255), nullable=True),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        # Ride roll-ups
        sa.Column("total_distance_km", sa.Float(), nullable=False),
        sa.Column("total_time_seconds", sa.Integer(), nullable=False),
        sa.Column("avg_speed_kmh", sa.Float(), nullable=False),
        sa.Column("max_speed_kmh", sa.Float(), nullable=False),
        sa.Column("total_elev_gain_m", sa.Float(), nullable=False),
        sa.Column("total_elev_loss_m", sa.Float(), nullable=False),
        sa.Column("last_ride_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "chain_replacement_count",
            sa.Integer(),
            nullable=False,
            comment="Chains replaced since the cassette/freewheel/chainring was last replaced",
        ),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
        comment="Bikes with cumulative ride statistics",
    )

    op.create_table(
        "components",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "bike_id",
            sa.String(36),
            sa.ForeignKey("bikes.id"),
            nullable=True,
            index=True,
            comment="Bike the component is installed on (NULL = in garage)",
        ),
        sa.Column("type", sa.String(64), nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("make_model", sa.String(255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("position", sa.String(10), nullable=False, server_default="none"),
        # Wear
        sa.Column("lifespan_km", sa.Float(), nullable=False),
        sa.Column("distance_used_km", sa.Float(), nullable=False),
        sa.Column("total_time_seconds", sa.Integer(), nullable=False),
        sa.Column("avg_speed_kmh", sa.Float(), nullable=False),
        sa.Column("max_speed_kmh", sa.Float(), nullable=False),
        sa.Column("max_speed_bike_id", sa.String(36), nullable=True),
        sa.Column("installed_at", sa.DateTime(timezone=True), nullable=False),
        # Alerts
        sa.Column("alert_threshold_percent", sa.Integer(), nullable=False),
        sa.Column("alert_snooze_until_km", sa.Float(), nullable=True),
        sa.Column("alert_snooze_until_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("alerts_enabled", sa.Boolean(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
        comment="Bike components with usage roll-ups and alert config",
    )

    op.create_table(
        "service_intervals",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "component_id",
            sa.String(36),
            sa.ForeignKey("components.id"),
            nullable=False,
            index=True,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("interval_km", sa.Float(), nullable=False),
        sa.Column("tracked_km", sa.Float(), nullable=False),
        sa.Column("interval_time_seconds", sa.Integer(), nullable=True),
        sa.Column("tracked_time_seconds", sa.Integer(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        *_timestamps(),
        comment="Per-component maintenance schedules",
    )

    op.create_table(
        "component_swaps",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "component_id",
            sa.String(36),
            sa.ForeignKey("components.id"),
            nullable=False,
            index=True,
        ),
        sa.Column("bike_id", sa.String(36), sa.ForeignKey("bikes.id"), nullable=False, index=True),
        sa.Column("installed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("uninstalled_at", sa.DateTime(timezone=True), nullable=True),
        comment="Append-only component install history",
    )

    op.create_table(
        "rides",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "bike_id",
            sa.String(36),
            sa.ForeignKey("bikes.id"),
            nullable=True,
            index=True,
            comment="Bike ridden (NULL = not attributed, no wear applied)",
        ),
        sa.Column("distance_km", sa.Float(), nullable=False),
        sa.Column("duration_ms", sa.Integer(), nullable=False),
        sa.Column("avg_speed_kmh", sa.Float(), nullable=False),
        sa.Column("max_speed_kmh", sa.Float(), nullable=False),
        sa.Column("elev_gain_m", sa.Float(), nullable=False),
        sa.Column("elev_loss_m", sa.Float(), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("source", sa.String(20), nullable=False, server_default="app"),
        sa.Column("aggregated_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        comment="Completed ride summaries",
    )
    # Import dedupe looks rides up by (source, started_at)
    op.create_index("ix_rides_source_started_at", "rides", ["source", "started_at"])

    op.create_table(
        "component_context",
        sa.Column(
            "component_id",
            sa.String(36),
            sa.ForeignKey("components.id"),
            primary_key=True,
        ),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column("install_date", sa.Date(), nullable=True),
        sa.Column("purchase_link", sa.String(2048), nullable=True),
        sa.Column("serial_number", sa.String(255), nullable=True),
        sa.Column("last_service_notes", sa.Text(), nullable=True),
        sa.Column("purchase_price", sa.String(64), nullable=True),
        sa.Column("purchase_date", sa.Date(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "app_preferences",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("close_to_service_threshold", sa.Integer(), nullable=False),
        sa.Column("default_alert_threshold_percent", sa.Integer(), nullable=False),
        *_timestamps(),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("app_preferences")
    op.drop_table("component_context")
    op.drop_index("ix_rides_source_started_at", table_name="rides")
    op.drop_table("rides")
    op.drop_table("component_swaps")
    op.drop_table("service_intervals")
    op.drop_table("components")
    op.drop_table("bikes")
