"""Unit tests for upload Content-Type sniffing."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from heypanel.api.content_type import resolve_content_type

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 16
GIF = b"GIF89a" + b"\x00" * 16
WEBP = b"RIFF\x24\x00\x00\x00WEBPVP8 "


class TestSignatureDetection:
    """Test that magic bytes win over the declared type."""

    @pytest.mark.parametrize(
        "data,expected",
        [
            (PNG, "image/png"),
            (JPEG, "image/jpeg"),
            (GIF, "image/gif"),
            (WEBP, "image/webp"),
        ],
    )
    def test_known_signatures(self, data: bytes, expected: str) -> None:
        assert resolve_content_type(data, "") == expected

    @pytest.mark.parametrize("declared", ["image/jpeg", "application/octet-stream", "", None])
    def test_png_overrides_any_declared_type(self, declared: str | None) -> None:
        """Test that a PNG payload is sent as image/png regardless of declared type."""
        assert resolve_content_type(PNG, declared) == "image/png"

    def test_jpeg_declared_as_png_is_corrected(self) -> None:
        assert resolve_content_type(JPEG, "image/png") == "image/jpeg"


class TestFallbacks:
    """Test behaviour when no signature matches."""

    def test_declared_type_used_when_no_signature_matches(self) -> None:
        assert resolve_content_type(b"BM\x00\x00\x00\x00", "image/bmp") == "image/bmp"

    def test_jpeg_default_without_match_or_declared(self) -> None:
        assert resolve_content_type(b"\x00\x01\x02\x03", "") == "image/jpeg"

    def test_jpeg_default_for_none_declared(self) -> None:
        assert resolve_content_type(b"\x00\x01\x02\x03", None) == "image/jpeg"

    def test_short_payload(self) -> None:
        """Test payloads shorter than a signature fall back cleanly."""
        assert resolve_content_type(b"\x89P", "image/heic") == "image/heic"

    def test_empty_payload(self) -> None:
        assert resolve_content_type(b"", "") == "image/jpeg"

    def test_bytearray_payload(self) -> None:
        assert resolve_content_type(bytearray(PNG), "") == "image/png"
