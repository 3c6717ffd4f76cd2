"""Pydantic schemas."""

from link_shortener.schemas.link import CharSet, Link, LinkPatch
from link_shortener.schemas.pagination import (
    PageRequest,
    PageResponse,
    calculate_total_pages,
)

__all__ = [
    "CharSet",
    "Link",
    "LinkPatch",
    "PageRequest",
    "PageResponse",
    "calculate_total_pages",
]
