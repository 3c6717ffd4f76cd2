"""SQLAlchemy models.

All models should be imported here for Alembic to detect them.
"""

from link_shortener.core.database import Base
from link_shortener.models.link import LinkModel, TagModel, links_tags

__all__ = ["Base", "LinkModel", "TagModel", "links_tags"]
