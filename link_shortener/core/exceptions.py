"""Domain errors surfaced by the link service and its repositories."""


class LinkShortenerError(Exception):
    """Base class for all link shortener errors."""

    message = "link shortener error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class InvalidShortenedPathLengthError(LinkShortenerError):
    message = "shortened path length must be between 1 and 30"


class NonUniqueShortenedPathError(LinkShortenerError):
    message = "link with provided shortened path already exists"


class InvalidCharSetError(LinkShortenerError):
    message = "invalid character set"


class GeneratingQrCodeFailedError(LinkShortenerError):
    message = "generating qr code failed"


class LinkNotFoundError(LinkShortenerError):
    message = "link not found"


class TooManyTagsError(LinkShortenerError):
    message = "too many tags"


class DataAccessError(LinkShortenerError):
    """Opaque storage failure. The cause is logged where it is translated."""

    message = "data access error"
