"""Link repositories."""

from link_shortener.repositories.base import LinkRepository
from link_shortener.repositories.sqlalchemy import SqlAlchemyLinkRepository

__all__ = ["LinkRepository", "SqlAlchemyLinkRepository"]
