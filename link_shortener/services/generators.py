"""Identifier, short path, hash and QR code generation."""

import hashlib
import os
import secrets
import time
import uuid
from collections.abc import Sequence
from io import BytesIO

import qrcode
from qrcode.constants import ERROR_CORRECT_M
from qrcode.exceptions import DataOverflowError

QR_CODE_BORDER = 4


class GeneratorError(Exception):
    """Base class for generator failures."""


class InvalidLengthError(GeneratorError):
    def __init__(self) -> None:
        super().__init__("length must be greater than zero")


class InvalidCharSetError(GeneratorError):
    def __init__(self) -> None:
        super().__init__("character set cannot be empty")


class InvalidDataError(GeneratorError):
    def __init__(self) -> None:
        super().__init__("invalid QR code data")


class RenderingFailedError(GeneratorError):
    def __init__(self) -> None:
        super().__init__("rendering QR code failed")


def generate_id() -> str:
    """Generate a time-ordered UUIDv7 rendered as 32 lowercase hex digits.

    The leading 48 bits hold the Unix time in milliseconds, so ids sort
    lexicographically by creation time. The remaining bits are random apart
    from the version and variant fields.
    """
    timestamp_ms = time.time_ns() // 1_000_000
    random_bits = int.from_bytes(os.urandom(10), "big")
    value = (timestamp_ms & 0xFFFF_FFFF_FFFF) << 80 | random_bits
    value &= ~(0xF << 76)
    value |= 0x7 << 76
    value &= ~(0x3 << 62)
    value |= 0x2 << 62
    return uuid.UUID(int=value).hex


def generate_random_string(char_set: Sequence[str], length: int) -> str:
    """Draw `length` characters uniformly, with replacement, from `char_set`."""
    if length <= 0:
        raise InvalidLengthError()
    if not char_set:
        raise InvalidCharSetError()
    return "".join(secrets.choice(char_set) for _ in range(length))


def generate_sha3_512(text: str) -> str:
    """Hex digest of the SHA3-512 hash of `text`."""
    return hashlib.sha3_512(text.encode()).hexdigest()


def generate_qr_code(data: str, width: int, height: int) -> bytes:
    """Render `data` as a PNG QR code fitted to `width` x `height`.

    Modules are scaled to the largest whole pixel size that fits the bounds.
    The smallest possible module is one pixel, so a symbol with more modules
    (border included) than `min(width, height)` comes out larger than the
    bounds, at one pixel per module.

    Raises InvalidDataError when the data does not fit in any QR symbol and
    RenderingFailedError when the image cannot be produced.
    """
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECT_M,
        border=QR_CODE_BORDER,
    )
    qr.add_data(data)
    try:
        qr.make(fit=True)
    except (DataOverflowError, ValueError) as e:
        raise InvalidDataError() from e

    # Largest whole-pixel module size that keeps the symbol inside the bounds
    modules = qr.modules_count + 2 * QR_CODE_BORDER
    qr.box_size = max(1, min(width, height) // modules)

    try:
        img = qr.make_image(fill_color="black", back_color="white")
        buf = BytesIO()
        img.save(buf, format="PNG")
    except (OSError, ValueError) as e:
        raise RenderingFailedError() from e
    return buf.getvalue()
