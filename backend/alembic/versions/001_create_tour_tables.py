"""Create tour tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the tour document tables (tours, tour_steps, annotations),
       the share descriptors (tour_shares) and the media registry
       (media_assets).
How:   PostgreSQL UUID keys generated by gen_random_uuid(); every child table
       references its parent with ON DELETE CASCADE.

Rollback: downgrade() drops all five tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _timestamp(name: str, comment: str = None) -> sa.Column:
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
        comment=comment,
    )


def upgrade() -> None:
    op.create_table(
        "tours",
        _uuid_pk(),
        sa.Column(
            "owner_id",
            sa.Text(),
            nullable=False,
            comment="Identity-provider subject of the tour owner",
        ),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'draft'"),
            comment="Lifecycle status: draft, published, private",
        ),
        _timestamp("created_at"),
        _timestamp("updated_at", "Refreshed by every mutation of the tour or its steps"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('draft', 'published', 'private')",
            name="ck_tours_status",
        ),
    )
    # "My tours, newest first"
    op.create_index("idx_tours_owner_created", "tours", ["owner_id", "created_at"])

    op.create_table(
        "tour_steps",
        _uuid_pk(),
        sa.Column("tour_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("step_order", sa.Integer(), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("video_url", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at", "Refreshed when the step's media is swapped"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tour_id"], ["tours.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_tour_steps_tour_id", "tour_steps", ["tour_id"])

    op.create_table(
        "annotations",
        _uuid_pk(),
        sa.Column("step_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("x", sa.Float(), nullable=False, comment="Percent from left (0-100)"),
        sa.Column("y", sa.Float(), nullable=False, comment="Percent from top (0-100)"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["step_id"], ["tour_steps.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_annotations_step_id", "annotations", ["step_id"])

    op.create_table(
        "tour_shares",
        _uuid_pk(),
        sa.Column("tour_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("share_id", sa.String(64), nullable=False),
        sa.Column(
            "is_public",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column("password_hash", sa.Text(), nullable=True),
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tour_id"], ["tours.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("tour_id", name="uq_tour_shares_tour_id"),
        sa.UniqueConstraint("share_id", name="uq_tour_shares_share_id"),
    )

    op.create_table(
        "media_assets",
        _uuid_pk(),
        sa.Column("owner_id", sa.Text(), nullable=False),
        sa.Column("public_id", sa.Text(), nullable=False, comment="Provider asset id"),
        sa.Column("media_url", sa.Text(), nullable=False),
        sa.Column("resource_type", sa.String(20), nullable=False),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_media_assets_owner_created",
        "media_assets",
        ["owner_id", "created_at"],
    )


def downgrade() -> None:
    """Drop every table, children first. All tour data is lost."""
    op.drop_index("idx_media_assets_owner_created", table_name="media_assets")
    op.drop_table("media_assets")
    op.drop_table("tour_shares")
    op.drop_index("ix_annotations_step_id", table_name="annotations")
    op.drop_table("annotations")
    op.drop_index("ix_tour_steps_tour_id", table_name="tour_steps")
    op.drop_table("tour_steps")
    op.drop_index("idx_tours_owner_created", table_name="tours")
    op.drop_table("tours")
