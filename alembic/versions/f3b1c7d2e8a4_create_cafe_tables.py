"""create_cafe_tables

Revision ID: f3b1c7d2e8a4
Revises:
Create Date: 2026-10-19 18:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "f3b1c7d2e8a4"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Apply migration - create menu, pricing, table, campaign and job tables."""
    # Accent-insensitive product search
    op.execute("CREATE EXTENSION IF NOT EXISTS unaccent")

    op.create_table(
        "categories",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("slug", sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )

    op.create_table(
        "products",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("category_id", sa.Uuid(), nullable=False),
        # Prices (RSD)
        sa.Column("base_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("min_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("max_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("current_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("previous_price", sa.Numeric(10, 2), nullable=False),
        # Sales window
        sa.Column("sales_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("sales_count_at_last_update", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("manual_sales_adjustment", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("trend", sa.String(length=4), nullable=False, server_default="down"),
        sa.Column("status", sa.String(length=10), nullable=False, server_default="active"),
        # Pricing rules
        sa.Column("pricing_mode", sa.String(length=4), nullable=False, server_default="full"),
        sa.Column(
            "price_increase_percent", sa.Numeric(5, 2), nullable=False, server_default="2.00"
        ),
        sa.Column(
            "price_increase_random_percent",
            sa.Numeric(5, 2),
            nullable=False,
            server_default="1.00",
        ),
        sa.Column(
            "price_decrease_percent", sa.Numeric(5, 2), nullable=False, server_default="1.00"
        ),
        sa.Column(
            "price_decrease_random_percent",
            sa.Numeric(5, 2),
            nullable=False,
            server_default="0.00",
        ),
        sa.Column(
            "last_price_update",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"], ondelete="CASCADE"),
        sa.CheckConstraint("status IN ('active', 'draft')", name="ck_products_valid_status"),
        sa.CheckConstraint("trend IN ('up', 'down')", name="ck_products_valid_trend"),
        sa.CheckConstraint(
            "pricing_mode IN ('off', 'up', 'down', 'full')",
            name="ck_products_valid_pricing_mode",
        ),
        sa.CheckConstraint("min_price < max_price", name="ck_products_price_bounds"),
    )
    op.create_index(op.f("ix_products_category_id"), "products", ["category_id"], unique=False)
    op.create_index(op.f("ix_products_status"), "products", ["status"], unique=False)

    op.create_table(
        "price_history",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("product_id", sa.Uuid(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "ix_price_history_product_timestamp",
        "price_history",
        ["product_id", "timestamp"],
        unique=False,
    )

    op.create_table(
        "settings",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("key", sa.String(length=100), nullable=False),
        sa.Column("value", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("key"),
    )

    op.create_table(
        "tables",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=10), nullable=False, server_default="active"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("number"),
        sa.CheckConstraint("status IN ('active', 'inactive')", name="ck_tables_valid_status"),
    )

    op.create_table(
        "table_orders",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("table_id", sa.Uuid(), nullable=False),
        sa.Column("product_id", sa.Uuid(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("ordered_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("payment_status", sa.String(length=10), nullable=False, server_default="unpaid"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["table_id"], ["tables.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "payment_status IN ('paid', 'unpaid')",
            name="ck_table_orders_valid_payment_status",
        ),
    )
    op.create_index(
        op.f("ix_table_orders_product_id"), "table_orders", ["product_id"], unique=False
    )
    op.create_index(
        "ix_table_orders_table_created", "table_orders", ["table_id", "created_at"], unique=False
    )

    op.create_table(
        "videos",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("prompt", sa.Text(), nullable=False, server_default=""),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column("thumbnail_url", sa.Text(), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("aspect_ratio", sa.String(length=10), nullable=False, server_default="landscape"),
        sa.Column("status", sa.String(length=12), nullable=False, server_default="pending"),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=200), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('pending', 'generating', 'ready', 'failed')",
            name="ck_videos_valid_status",
        ),
        sa.CheckConstraint(
            "aspect_ratio IN ('landscape', 'portrait')",
            name="ck_videos_valid_aspect_ratio",
        ),
        sa.CheckConstraint("duration > 0", name="ck_videos_positive_duration"),
    )

    op.create_table(
        "video_campaigns",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("video_id", sa.Uuid(), nullable=False),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("countdown_seconds", sa.Integer(), nullable=False, server_default="60"),
        sa.Column("status", sa.String(length=12), nullable=False, server_default="scheduled"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        # Product highlight after the video
        sa.Column("product_id", sa.Uuid(), nullable=True),
        sa.Column("promotional_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("highlight_duration_seconds", sa.Integer(), nullable=True, server_default="5"),
        sa.Column("created_by", sa.String(length=200), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["video_id"], ["videos.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="SET NULL"),
        sa.CheckConstraint(
            "status IN ('scheduled', 'countdown', 'playing', 'completed', 'cancelled')",
            name="ck_video_campaigns_valid_status",
        ),
        sa.CheckConstraint("countdown_seconds >= 0", name="ck_video_campaigns_countdown"),
    )
    op.create_index(
        op.f("ix_video_campaigns_status"), "video_campaigns", ["status"], unique=False
    )
    op.create_index(
        "ix_video_campaigns_status_scheduled",
        "video_campaigns",
        ["status", "scheduled_at"],
        unique=False,
    )

    op.create_table(
        "quick_ads",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("product_id", sa.Uuid(), nullable=True),
        sa.Column("promotional_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("update_price", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("display_text", sa.Text(), nullable=True),
        sa.Column("display_price", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("image_mode", sa.String(length=10), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("last_played_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.String(length=200), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="SET NULL"),
        sa.CheckConstraint(
            "image_mode IS NULL OR image_mode IN ('fullscreen', 'background')",
            name="ck_quick_ads_valid_image_mode",
        ),
        sa.CheckConstraint(
            "duration_seconds BETWEEN 3 AND 30",
            name="ck_quick_ads_duration_range",
        ),
    )

    op.create_table(
        "jobs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("job_id", sa.String(length=32), nullable=False),
        sa.Column("job_type", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("params", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("result", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("error_message", sa.String(length=2000), nullable=True),
        sa.Column("error_type", sa.String(length=100), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('pending', 'running', 'completed', 'failed', 'cancelled')",
            name="ck_jobs_valid_status",
        ),
        sa.CheckConstraint(
            "job_type IN ('update_prices', 'process_campaigns')",
            name="ck_jobs_valid_type",
        ),
    )
    op.create_index(op.f("ix_jobs_job_id"), "jobs", ["job_id"], unique=True)
    op.create_index(op.f("ix_jobs_job_type"), "jobs", ["job_type"], unique=False)
    op.create_index(op.f("ix_jobs_status"), "jobs", ["status"], unique=False)
    op.create_index("ix_jobs_type_status", "jobs", ["job_type", "status"], unique=False)


def downgrade() -> None:
    """Revert migration - drop all tables."""
    for table in (
        "jobs",
        "quick_ads",
        "video_campaigns",
        "videos",
        "table_orders",
        "tables",
        "settings",
        "price_history",
        "products",
        "categories",
    ):
        op.drop_table(table)
