"""Create links, tags and links_tags tables.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the link tables."""
    op.create_table(
        "links",
        sa.Column("id", sa.String(32), nullable=False, comment="UUIDv7 in simple hex form"),
        sa.Column(
            "original_url",
            sa.Text(),
            nullable=False,
            comment="The original URL to redirect to",
        ),
        sa.Column(
            "shortened_path",
            sa.String(30),
            nullable=False,
            comment="Path segment that redirects to the original URL",
        ),
        sa.Column(
            "is_active",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("true"),
            comment="Only active links are resolvable and uniqueness-checked",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "expires_at",
            sa.DateTime(timezone=True),
            nullable=False,
            comment="Links are removed by the cleanup job once this passes",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_links")),
    )
    op.create_index(
        "uq_links_active_shortened_path",
        "links",
        ["shortened_path"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )
    op.create_index(op.f("ix_links_created_at"), "links", ["created_at"])
    op.create_index(op.f("ix_links_expires_at"), "links", ["expires_at"])

    op.create_table(
        "tags",
        sa.Column("id", sa.String(32), nullable=False),
        sa.Column("name", sa.Text(), nullable=False, comment="Lower-cased tag name"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_tags")),
        sa.UniqueConstraint("name", name=op.f("uq_tags_name")),
    )

    op.create_table(
        "links_tags",
        sa.Column("link_id", sa.String(32), nullable=False),
        sa.Column("tag_id", sa.String(32), nullable=False),
        sa.PrimaryKeyConstraint("link_id", "tag_id", name=op.f("pk_links_tags")),
        sa.ForeignKeyConstraint(
            ["link_id"],
            ["links.id"],
            name=op.f("fk_links_tags_link_id_links"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["tag_id"],
            ["tags.id"],
            name=op.f("fk_links_tags_tag_id_tags"),
            ondelete="CASCADE",
        ),
    )
    op.create_index(op.f("ix_links_tags_tag_id"), "links_tags", ["tag_id"])


def downgrade() -> None:
    """Drop the link tables."""
    op.drop_index(op.f("ix_links_tags_tag_id"), table_name="links_tags")
    op.drop_table("links_tags")
    op.drop_table("tags")
    op.drop_index(op.f("ix_links_expires_at"), table_name="links")
    op.drop_index(op.f("ix_links_created_at"), table_name="links")
    op.drop_index("uq_links_active_shortened_path", table_name="links")
    op.drop_table("links")
