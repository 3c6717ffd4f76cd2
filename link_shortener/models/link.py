"""Link and tag SQLAlchemy models."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Table,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from link_shortener.core.database import Base

ID_LENGTH = 32

links_tags = Table(
    "links_tags",
    Base.metadata,
    Column(
        "link_id",
        String(ID_LENGTH),
        ForeignKey("links.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        String(ID_LENGTH),
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)


class TagModel(Base):
    """Tag shared by every link that uses the same name."""

    __tablename__ = "tags"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True)
    name: Mapped[str] = mapped_column(
        Text,
        unique=True,
        nullable=False,
        comment="Lower-cased tag name",
    )

    def __repr__(self) -> str:
        return f"<Tag {self.name}>"


class LinkModel(Base):
    """Link model for shortened URLs."""

    __tablename__ = "links"

    id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        primary_key=True,
        comment="UUIDv7 in simple hex form",
    )
    original_url: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="The original URL to redirect to",
    )
    shortened_path: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        comment="Path segment that redirects to the original URL",
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        comment="Only active links are resolvable and uniqueness-checked",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        comment="Links are removed by the cleanup job once this passes",
    )

    # Writes go through links_tags directly, the relationship is read-only
    tags: Mapped[list[TagModel]] = relationship(
        secondary=links_tags,
        lazy="selectin",
        viewonly=True,
    )

    __table_args__ = (
        # Path uniqueness applies to active links only
        Index(
            "uq_links_active_shortened_path",
            "shortened_path",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active"),
        ),
    )

    def __repr__(self) -> str:
        return f"<Link {self.shortened_path} -> {self.original_url[:50]}>"
