"""Relational link repository backed by SQLAlchemy 2.0 async sessions."""

from collections.abc import Sequence
from datetime import datetime, timezone

import structlog
from sqlalchemy import delete, distinct, func, insert, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from link_shortener.core.exceptions import (
    DataAccessError,
    LinkNotFoundError,
    LinkShortenerError,
    NonUniqueShortenedPathError,
)
from link_shortener.models.link import LinkModel, TagModel, links_tags
from link_shortener.schemas.link import Link
from link_shortener.schemas.pagination import (
    PageRequest,
    PageResponse,
    calculate_total_pages,
)
from link_shortener.services.generators import generate_id

logger = structlog.get_logger()

# Dialects that support INSERT ... ON CONFLICT DO NOTHING
_INSERT_BY_DIALECT = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}

UNIQUE_VIOLATION_SQLSTATE = "23505"


def _is_unique_violation(error: IntegrityError) -> bool:
    """Check whether an integrity error came from a uniqueness constraint."""
    if getattr(error.orig, "sqlstate", None) == UNIQUE_VIOLATION_SQLSTATE:
        return True
    return "unique" in str(error.orig).lower()


def _to_domain_error(error: Exception, operation: str) -> LinkShortenerError:
    """Log a storage failure and translate it to a domain error."""
    logger.error(
        "Data access error",
        operation=operation,
        error_type=type(error).__name__,
        error=str(error),
    )
    if isinstance(error, IntegrityError) and _is_unique_violation(error):
        return NonUniqueShortenedPathError()
    return DataAccessError()


def _to_domain(row: LinkModel) -> Link:
    return Link(
        id=row.id,
        original_url=row.original_url,
        shortened_path=row.shortened_path,
        is_active=row.is_active,
        tags={tag.name for tag in row.tags},
        created_at=row.created_at,
        expires_at=row.expires_at,
    )


def _newest_first(query):
    # id is time-ordered and breaks ties between equal timestamps
    return query.order_by(LinkModel.created_at.desc(), LinkModel.id.desc())


class SqlAlchemyLinkRepository:
    """LinkRepository implementation for PostgreSQL (and SQLite in tests).

    Holds only the shared session factory, so one instance can serve every
    concurrent request. Each call opens its own session; writes that touch
    several tables run in a single transaction.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def save(self, link: Link) -> Link:
        try:
            async with self._session_factory.begin() as session:
                await session.execute(
                    insert(LinkModel).values(
                        id=link.id,
                        original_url=str(link.original_url),
                        shortened_path=link.shortened_path,
                        is_active=link.is_active,
                        created_at=link.created_at,
                        expires_at=link.expires_at,
                    )
                )
                await self._save_link_tags(session, link)
        except (SQLAlchemyError, OSError) as e:
            raise _to_domain_error(e, "save") from e

        logger.debug("Link saved", link_id=link.id, shortened_path=link.shortened_path)
        return link

    async def find_all(self, page_request: PageRequest) -> PageResponse[Link]:
        try:
            async with self._session_factory() as session:
                total_rows = await session.scalar(select(func.count(LinkModel.id)))
                result = await session.scalars(
                    _newest_first(select(LinkModel).options(selectinload(LinkModel.tags)))
                    .limit(page_request.limit)
                    .offset(page_request.offset)
                )
                content = [_to_domain(row) for row in result]
        except (SQLAlchemyError, OSError) as e:
            raise _to_domain_error(e, "find_all") from e

        return PageResponse[Link](
            content=content,
            total_pages=calculate_total_pages(page_request.size, total_rows or 0),
        )

    async def find_by_id(self, link_id: str) -> Link | None:
        try:
            async with self._session_factory() as session:
                row = await session.scalar(
                    select(LinkModel)
                    .options(selectinload(LinkModel.tags))
                    .where(LinkModel.id == link_id)
                )
                return _to_domain(row) if row else None
        except (SQLAlchemyError, OSError) as e:
            raise _to_domain_error(e, "find_by_id") from e

    async def find_by_shortened_path(self, shortened_path: str) -> Link | None:
        try:
            async with self._session_factory() as session:
                row = await session.scalar(
                    select(LinkModel)
                    .options(selectinload(LinkModel.tags))
                    .where(
                        LinkModel.shortened_path == shortened_path,
                        LinkModel.is_active == True,  # noqa: E712
                        LinkModel.expires_at > datetime.now(timezone.utc),
                    )
                )
                return _to_domain(row) if row else None
        except (SQLAlchemyError, OSError) as e:
            raise _to_domain_error(e, "find_by_shortened_path") from e

    async def find_by_tags(
        self, tags: Sequence[str], page_request: PageRequest
    ) -> PageResponse[Link]:
        names = sorted(set(tags))
        try:
            async with self._session_factory() as session:
                # Links associated with every requested tag
                link_ids = list(
                    await session.scalars(
                        select(links_tags.c.link_id)
                        .join(TagModel, TagModel.id == links_tags.c.tag_id)
                        .where(TagModel.name.in_(names))
                        .group_by(links_tags.c.link_id)
                        .having(func.count(distinct(TagModel.name)) == len(names))
                    )
                )
                if not link_ids:
                    return PageResponse[Link].empty()

                total_rows = await session.scalar(
                    select(func.count(LinkModel.id)).where(LinkModel.id.in_(link_ids))
                )
                result = await session.scalars(
                    _newest_first(
                        select(LinkModel)
                        .options(selectinload(LinkModel.tags))
                        .where(LinkModel.id.in_(link_ids))
                    )
                    .limit(page_request.limit)
                    .offset(page_request.offset)
                )
                content = [_to_domain(row) for row in result]
        except (SQLAlchemyError, OSError) as e:
            raise _to_domain_error(e, "find_by_tags") from e

        return PageResponse[Link](
            content=content,
            total_pages=calculate_total_pages(page_request.size, total_rows or 0),
        )

    async def update(self, link: Link) -> Link:
        try:
            async with self._session_factory.begin() as session:
                result = await session.execute(
                    update(LinkModel)
                    .where(LinkModel.id == link.id)
                    .values(
                        original_url=str(link.original_url),
                        is_active=link.is_active,
                        expires_at=link.expires_at,
                    )
                )
                if result.rowcount == 0:
                    raise LinkNotFoundError()
                # Full replace of the association set
                await session.execute(
                    delete(links_tags).where(links_tags.c.link_id == link.id)
                )
                await self._save_link_tags(session, link)
        except (SQLAlchemyError, OSError) as e:
            raise _to_domain_error(e, "update") from e

        logger.debug("Link updated", link_id=link.id, tags=sorted(link.tags))
        return link

    async def delete_by_id(self, link_id: str) -> None:
        try:
            async with self._session_factory.begin() as session:
                await session.execute(
                    delete(links_tags).where(links_tags.c.link_id == link_id)
                )
                await session.execute(delete(LinkModel).where(LinkModel.id == link_id))
        except (SQLAlchemyError, OSError) as e:
            raise _to_domain_error(e, "delete_by_id") from e

    async def delete_expired(self) -> None:
        now = datetime.now(timezone.utc)
        expired_ids = select(LinkModel.id).where(LinkModel.expires_at <= now)
        try:
            async with self._session_factory.begin() as session:
                await session.execute(
                    delete(links_tags).where(links_tags.c.link_id.in_(expired_ids))
                )
                result = await session.execute(
                    delete(LinkModel).where(LinkModel.expires_at <= now)
                )
        except (SQLAlchemyError, OSError) as e:
            raise _to_domain_error(e, "delete_expired") from e

        logger.info("Expired links deleted", count=result.rowcount)

    async def delete_orphaned_tags(self) -> None:
        in_use = select(links_tags.c.tag_id).distinct()
        try:
            async with self._session_factory.begin() as session:
                result = await session.execute(
                    delete(TagModel).where(TagModel.id.not_in(in_use))
                )
        except (SQLAlchemyError, OSError) as e:
            raise _to_domain_error(e, "delete_orphaned_tags") from e

        logger.info("Orphaned tags deleted", count=result.rowcount)

    async def _save_link_tags(self, session: AsyncSession, link: Link) -> None:
        """Attach every tag of the link, creating missing tags on the way."""
        dialect_insert = self._dialect_insert(session)
        for name in sorted(link.tags):
            tag_id = await self._find_tag_id(session, name)
            if tag_id is None:
                # A concurrent writer may create the same tag first
                await session.execute(
                    dialect_insert(TagModel.__table__)
                    .values(id=generate_id(), name=name)
                    .on_conflict_do_nothing()
                )
                tag_id = await self._find_tag_id(session, name)
            await session.execute(
                dialect_insert(links_tags)
                .values(link_id=link.id, tag_id=tag_id)
                .on_conflict_do_nothing()
            )

    @staticmethod
    async def _find_tag_id(session: AsyncSession, name: str) -> str | None:
        return await session.scalar(select(TagModel.id).where(TagModel.name == name))

    @staticmethod
    def _dialect_insert(session: AsyncSession):
        dialect = session.get_bind().dialect.name
        try:
            return _INSERT_BY_DIALECT[dialect]
        except KeyError:
            logger.error("Unsupported database dialect", dialect=dialect)
            raise DataAccessError() from None
