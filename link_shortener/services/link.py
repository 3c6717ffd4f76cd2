"""Link service: creation, lookup, patching and cleanup of shortened links.

Every function takes the repository as its last argument. The service never
checks path availability before inserting; the storage uniqueness constraint
decides between concurrent creators.
"""

from collections.abc import Sequence
from datetime import datetime

import structlog
from pydantic import AnyUrl

from link_shortener.core.exceptions import (
    GeneratingQrCodeFailedError,
    InvalidCharSetError,
    InvalidShortenedPathLengthError,
    LinkNotFoundError,
    TooManyTagsError,
)
from link_shortener.core.observability import record_link_operation
from link_shortener.repositories.base import LinkRepository
from link_shortener.schemas.link import (
    MAX_SHORTENED_PATH_LENGTH,
    CharSet,
    Link,
    LinkPatch,
)
from link_shortener.schemas.pagination import PageRequest, PageResponse
from link_shortener.services import generators

logger = structlog.get_logger()

MAX_TAG_COUNT = 16
QR_CODE_SIZE = 600


def _normalize_tags(tags: Sequence[str]) -> set[str]:
    return {tag.lower() for tag in tags}


async def create_link(
    original_url: AnyUrl | str,
    shortened_path: str,
    is_active: bool,
    expires_at: datetime,
    repository: LinkRepository,
) -> Link:
    """Create a link with an explicit shortened path.

    Raises NonUniqueShortenedPathError when an active link already uses the
    path, and DataAccessError for any other storage failure.
    """
    if not 0 < len(shortened_path) <= MAX_SHORTENED_PATH_LENGTH:
        raise InvalidShortenedPathLengthError()

    link = Link.new(original_url, shortened_path, is_active, expires_at)
    saved = await repository.save(link)

    logger.info("Link created", link_id=saved.id, shortened_path=saved.shortened_path)
    record_link_operation("create")
    return saved


async def create_link_with_generated_path(
    original_url: AnyUrl | str,
    char_set: CharSet,
    shortened_path_length: int,
    is_active: bool,
    expires_at: datetime,
    repository: LinkRepository,
) -> Link:
    """Create a link whose path is drawn at random from `char_set`."""
    if shortened_path_length > MAX_SHORTENED_PATH_LENGTH:
        raise InvalidShortenedPathLengthError()
    try:
        shortened_path = generators.generate_random_string(
            char_set.elements, shortened_path_length
        )
    except generators.InvalidLengthError as e:
        raise InvalidShortenedPathLengthError() from e
    except generators.InvalidCharSetError as e:
        raise InvalidCharSetError() from e

    return await create_link(original_url, shortened_path, is_active, expires_at, repository)


async def find_link_by_shortened_path(
    shortened_path: str,
    repository: LinkRepository,
) -> Link | None:
    """Get the active, unexpired link for a shortened path."""
    return await repository.find_by_shortened_path(shortened_path)


async def resolve_redirect_target(
    shortened_path: str,
    repository: LinkRepository,
    fallback_base_url: str,
) -> str:
    """Get the URL a shortened path redirects to.

    Unknown, inactive or expired paths fall back to `{fallback_base_url}/{path}`.
    """
    link = await repository.find_by_shortened_path(shortened_path)
    if link is None:
        logger.info("Redirect fallback - link not found", shortened_path=shortened_path)
        return f"{fallback_base_url.rstrip('/')}/{shortened_path}"
    return str(link.original_url)


async def find_links(
    page_request: PageRequest,
    repository: LinkRepository,
) -> PageResponse[Link]:
    """Get a page of all links, newest first."""
    return await repository.find_all(page_request)


async def find_links_by_tags(
    tags: Sequence[str],
    page_request: PageRequest,
    repository: LinkRepository,
) -> PageResponse[Link]:
    """Get a page of links carrying every one of `tags`, newest first."""
    if not tags:
        return await repository.find_all(page_request)
    return await repository.find_by_tags(sorted(_normalize_tags(tags)), page_request)


async def update_link(
    link_id: str,
    patch: LinkPatch,
    repository: LinkRepository,
) -> Link:
    """Apply a patch to a link.

    Only the scalar fields set on the patch are overwritten. The tag set is
    always replaced by the patch's (lower-cased) tags.
    """
    if len(patch.tags) > MAX_TAG_COUNT:
        raise TooManyTagsError()

    link = await repository.find_by_id(link_id)
    if link is None:
        raise LinkNotFoundError()

    if patch.original_url is not None:
        link.original_url = patch.original_url
    if patch.is_active is not None:
        link.is_active = patch.is_active
    if patch.expires_at is not None:
        link.expires_at = patch.expires_at
    link.tags = _normalize_tags(patch.tags)

    updated = await repository.update(link)

    logger.info("Link updated", link_id=link_id, tags=sorted(updated.tags))
    record_link_operation("update")
    return updated


async def delete_link(link_id: str, repository: LinkRepository) -> None:
    """Delete a link and its tag associations. Unknown ids are not an error."""
    await repository.delete_by_id(link_id)

    logger.info("Link deleted", link_id=link_id)
    record_link_operation("delete")


async def delete_expired_links(repository: LinkRepository) -> None:
    """Delete every link whose expiry is at or before now."""
    await repository.delete_expired()


async def delete_orphaned_tags(repository: LinkRepository) -> None:
    """Delete every tag no longer attached to a link.

    Run after the link deletions of the same cleanup cycle.
    """
    await repository.delete_orphaned_tags()


async def generate_link_qr_code(
    shortened_path: str,
    repository: LinkRepository,
    width: int = QR_CODE_SIZE,
    height: int = QR_CODE_SIZE,
) -> bytes:
    """Render a PNG QR code of the original URL behind an active path."""
    link = await repository.find_by_shortened_path(shortened_path)
    if link is None:
        raise LinkNotFoundError()
    try:
        return generators.generate_qr_code(str(link.original_url), width, height)
    except generators.GeneratorError as e:
        logger.warning(
            "QR code generation failed",
            shortened_path=shortened_path,
            error=str(e),
        )
        raise GeneratingQrCodeFailedError() from e
