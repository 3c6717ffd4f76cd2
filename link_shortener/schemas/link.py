"""Link domain schemas."""

import string
from datetime import datetime, timezone
from enum import Enum

from pydantic import AnyUrl, BaseModel, ConfigDict, Field, field_validator

from link_shortener.core.exceptions import InvalidCharSetError
from link_shortener.services.generators import generate_id

MAX_SHORTENED_PATH_LENGTH = 30


def ensure_utc(value: datetime | None) -> datetime | None:
    """Convert timestamps to UTC, treating naive ones as already UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CharSet(str, Enum):
    """Character sets available for generated shortened paths."""

    LETTERS = "Letters"
    DIGITS = "Digits"
    LETTERS_AND_DIGITS = "LettersAndDigits"

    @property
    def elements(self) -> str:
        if self is CharSet.LETTERS:
            return string.ascii_uppercase
        if self is CharSet.DIGITS:
            return string.digits
        return string.ascii_uppercase + string.digits

    @classmethod
    def from_name(cls, name: str) -> "CharSet":
        """Parse a character set name such as "LettersAndDigits"."""
        try:
            return cls(name)
        except ValueError:
            raise InvalidCharSetError(f"Unknown character set '{name}'") from None


class Link(BaseModel):
    """A shortened path pointing at an original URL."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(default_factory=generate_id)
    original_url: AnyUrl = Field(description="The URL to redirect to")
    shortened_path: str = Field(min_length=1, max_length=MAX_SHORTENED_PATH_LENGTH)
    is_active: bool = True
    tags: set[str] = Field(default_factory=set)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    expires_at: datetime

    @field_validator("created_at", "expires_at")
    @classmethod
    def normalize_timestamps(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @classmethod
    def new(
        cls,
        original_url: AnyUrl | str,
        shortened_path: str,
        is_active: bool,
        expires_at: datetime,
    ) -> "Link":
        """Build a fresh link with a new id, creation time now and no tags."""
        return cls(
            original_url=original_url,
            shortened_path=shortened_path,
            is_active=is_active,
            expires_at=expires_at,
        )

    def __repr__(self) -> str:
        return f"<Link {self.shortened_path} -> {str(self.original_url)[:50]}>"

    @property
    def is_expired(self) -> bool:
        """Check if the link has expired."""
        return self.expires_at <= datetime.now(timezone.utc)


class LinkPatch(BaseModel):
    """Partial update for a link.

    `original_url`, `is_active` and `expires_at` are only applied when set.
    `tags` always replaces the link's tag set, so an empty list clears it.
    """

    original_url: AnyUrl | None = None
    is_active: bool | None = None
    tags: list[str] = Field(default_factory=list)
    expires_at: datetime | None = None

    @field_validator("expires_at")
    @classmethod
    def normalize_timestamps(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v)
