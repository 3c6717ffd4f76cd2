"""Tests for id, random string, hash and QR code generation."""

from io import BytesIO

import pytest
import qrcode
from PIL import Image
from qrcode.constants import ERROR_CORRECT_M

from link_shortener.services.generators import (
    QR_CODE_BORDER,
    InvalidCharSetError,
    InvalidDataError,
    InvalidLengthError,
    generate_id,
    generate_qr_code,
    generate_random_string,
    generate_sha3_512,
)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class TestGenerateId:
    """Test time-ordered id generation."""

    def test_id_is_32_hex_characters(self):
        link_id = generate_id()
        assert len(link_id) == 32
        int(link_id, 16)

    def test_id_carries_version_7(self):
        assert generate_id()[12] == "7"

    def test_ids_are_unique(self):
        ids = {generate_id() for _ in range(1000)}
        assert len(ids) == 1000

    def test_ids_sort_by_creation_time(self, monkeypatch):
        import link_shortener.services.generators as generators

        monkeypatch.setattr(generators.time, "time_ns", lambda: 1_700_000_000_000 * 1_000_000)
        earlier = generate_id()
        monkeypatch.setattr(generators.time, "time_ns", lambda: 1_700_000_000_001 * 1_000_000)
        later = generate_id()

        assert earlier < later


class TestGenerateRandomString:
    """Test random shortened path generation."""

    @pytest.mark.parametrize("length", [1, 6, 30])
    def test_length_and_alphabet(self, length):
        char_set = "ABC123"
        result = generate_random_string(char_set, length)

        assert len(result) == length
        assert set(result) <= set(char_set)

    def test_single_character_set(self):
        assert generate_random_string("x", 5) == "xxxxx"

    def test_zero_length_rejected(self):
        with pytest.raises(InvalidLengthError):
            generate_random_string("ABC", 0)

    def test_empty_char_set_rejected(self):
        with pytest.raises(InvalidCharSetError):
            generate_random_string("", 6)

    def test_accepts_character_list(self):
        result = generate_random_string(["a", "b"], 8)
        assert set(result) <= {"a", "b"}


class TestGenerateSha3:
    """Test SHA3-512 hex digests."""

    def test_known_digest(self):
        assert generate_sha3_512("").startswith("a69f73cca23a9ac5c8b567dc185a756e")

    def test_digest_length(self):
        assert len(generate_sha3_512("https://example.com")) == 128


class TestGenerateQrCode:
    """Test PNG QR code rendering."""

    def test_renders_png(self):
        data = generate_qr_code("https://example.com/test1", 600, 600)
        assert data.startswith(PNG_SIGNATURE)

    def test_respects_bounds(self):
        data = generate_qr_code("https://example.com/test1", 200, 150)
        width, height = Image.open(BytesIO(data)).size

        assert width <= 200
        assert height <= 150

    def test_oversized_data_rejected(self):
        with pytest.raises(InvalidDataError):
            generate_qr_code("x" * 8000, 600, 600)

    def test_dense_data_renders_one_pixel_per_module(self):
        data = "x" * 2000
        qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, border=QR_CODE_BORDER)
        qr.add_data(data)
        qr.make(fit=True)
        expected = qr.modules_count + 2 * QR_CODE_BORDER

        size = Image.open(BytesIO(generate_qr_code(data, 50, 50))).size

        assert size == (expected, expected)
        assert expected > 50
