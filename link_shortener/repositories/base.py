"""Storage contract the link service depends on."""

from collections.abc import Sequence
from typing import Protocol

from link_shortener.schemas.link import Link
from link_shortener.schemas.pagination import PageRequest, PageResponse


class LinkRepository(Protocol):
    """Persistence port for links and their tags.

    `save` and `update` are atomic: the link row and its complete set of tag
    associations are committed together or not at all. Implementations must
    be safe to call concurrently from many tasks.
    """

    async def save(self, link: Link) -> Link: ...

    async def find_all(self, page_request: PageRequest) -> PageResponse[Link]: ...

    async def find_by_id(self, link_id: str) -> Link | None: ...

    async def find_by_shortened_path(self, shortened_path: str) -> Link | None:
        """Return the active, unexpired link using `shortened_path`, if any."""
        ...

    async def find_by_tags(
        self, tags: Sequence[str], page_request: PageRequest
    ) -> PageResponse[Link]:
        """Return links carrying every one of `tags`, newest first."""
        ...

    async def update(self, link: Link) -> Link: ...

    async def delete_by_id(self, link_id: str) -> None: ...

    async def delete_expired(self) -> None: ...

    async def delete_orphaned_tags(self) -> None: ...
