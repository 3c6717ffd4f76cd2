"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Sequence
from datetime import datetime, timedelta, timezone

import pytest

from link_shortener.core.config import Settings
from link_shortener.core.database import (
    close_db,
    create_db_engine,
    create_session_factory,
    init_db,
)
from link_shortener.core.exceptions import LinkNotFoundError, NonUniqueShortenedPathError
from link_shortener.repositories import SqlAlchemyLinkRepository
from link_shortener.schemas import (
    Link,
    PageRequest,
    PageResponse,
    calculate_total_pages,
)


class InMemoryLinkRepository:
    """In-memory link repository for testing the service layer."""

    def __init__(self) -> None:
        self._links: dict[str, Link] = {}
        self.calls: list[str] = []

    def _page(self, links: list[Link], page_request: PageRequest) -> PageResponse[Link]:
        ordered = sorted(links, key=lambda link: (link.created_at, link.id), reverse=True)
        start = page_request.offset
        return PageResponse[Link](
            content=[link.model_copy(deep=True) for link in ordered[start:start + page_request.size]],
            total_pages=calculate_total_pages(page_request.size, len(ordered)),
        )

    def _check_unique(self, link: Link) -> None:
        if not link.is_active:
            return
        for other in self._links.values():
            if (
                other.id != link.id
                and other.is_active
                and other.shortened_path == link.shortened_path
            ):
                raise NonUniqueShortenedPathError()

    async def save(self, link: Link) -> Link:
        self.calls.append("save")
        self._check_unique(link)
        self._links[link.id] = link.model_copy(deep=True)
        return link

    async def find_all(self, page_request: PageRequest) -> PageResponse[Link]:
        self.calls.append("find_all")
        return self._page(list(self._links.values()), page_request)

    async def find_by_id(self, link_id: str) -> Link | None:
        self.calls.append("find_by_id")
        link = self._links.get(link_id)
        return link.model_copy(deep=True) if link else None

    async def find_by_shortened_path(self, shortened_path: str) -> Link | None:
        self.calls.append("find_by_shortened_path")
        for link in self._links.values():
            if (
                link.is_active
                and not link.is_expired
                and link.shortened_path == shortened_path
            ):
                return link.model_copy(deep=True)
        return None

    async def find_by_tags(
        self, tags: Sequence[str], page_request: PageRequest
    ) -> PageResponse[Link]:
        self.calls.append("find_by_tags")
        wanted = set(tags)
        matches = [link for link in self._links.values() if wanted <= link.tags]
        if not matches:
            return PageResponse[Link].empty()
        return self._page(matches, page_request)

    async def update(self, link: Link) -> Link:
        self.calls.append("update")
        if link.id not in self._links:
            raise LinkNotFoundError()
        self._check_unique(link)
        self._links[link.id] = link.model_copy(deep=True)
        return link

    async def delete_by_id(self, link_id: str) -> None:
        self.calls.append("delete_by_id")
        self._links.pop(link_id, None)

    async def delete_expired(self) -> None:
        self.calls.append("delete_expired")
        now = datetime.now(timezone.utc)
        for link_id in [k for k, v in self._links.items() if v.expires_at <= now]:
            del self._links[link_id]

    async def delete_orphaned_tags(self) -> None:
        # Tags only exist through links here
        self.calls.append("delete_orphaned_tags")


@pytest.fixture
def memory_repository() -> InMemoryLinkRepository:
    """Create an empty in-memory repository."""
    return InMemoryLinkRepository()


@pytest.fixture
async def session_factory(tmp_path) -> AsyncGenerator:
    """Create a fresh SQLite database file for each test."""
    settings = Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'links.db'}")
    engine = create_db_engine(settings)
    await init_db(engine)

    yield create_session_factory(engine)

    await close_db(engine)


@pytest.fixture
def repository(session_factory) -> SqlAlchemyLinkRepository:
    """Create a relational repository backed by the test database."""
    return SqlAlchemyLinkRepository(session_factory)


@pytest.fixture
def in_one_hour() -> datetime:
    return datetime.now(timezone.utc) + timedelta(hours=1)


@pytest.fixture
def one_hour_ago() -> datetime:
    return datetime.now(timezone.utc) - timedelta(hours=1)


@pytest.fixture
def sample_urls() -> list[str]:
    """Sample URLs for testing."""
    return [
        "https://example.com/test1",
        "https://google.com/search?q=test",
        "https://github.com/user/repo",
    ]
