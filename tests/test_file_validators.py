"""Tests for APK file validation utilities.

Tests cover:
- ZIP signature validation (an APK is a ZIP archive)
- MIME type and filename acceptance
- ZIP file safety checks against zip bombs
"""

import io
import zipfile

import pytest

from app.utils.file_validators import (
    format_size_mb,
    is_accepted_apk_mime,
    is_apk_filename,
    validate_apk_signature,
    validate_zip_safety,
)


@pytest.fixture
def sample_apk_bytes() -> bytes:
    """Return a minimal ZIP shaped like an APK."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("AndroidManifest.xml", "<manifest package='com.example.app'/>")
        zf.writestr("classes.dex", b"dex\n035\x00" + bytes(range(256)))
    return buffer.getvalue()


@pytest.fixture
def zip_bomb_bytes() -> bytes:
    """Return a tiny archive that inflates to a huge payload."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("payload.bin", b"\x00" * (5 * 1024 * 1024))
    return buffer.getvalue()


class TestValidateApkSignature:
    def test_valid_apk_passes(self, sample_apk_bytes: bytes) -> None:
        assert validate_apk_signature(sample_apk_bytes) is True

    def test_renamed_file_fails(self) -> None:
        assert validate_apk_signature(b"%PDF-1.4 not an apk") is False

    def test_empty_payload_fails(self) -> None:
        assert validate_apk_signature(b"") is False


class TestApkNameAndMime:
    @pytest.mark.parametrize("filename", ["app.apk", "App-Release.APK", " scanstock.apk "])
    def test_apk_filenames_are_accepted(self, filename: str) -> None:
        assert is_apk_filename(filename) is True

    @pytest.mark.parametrize("filename", [None, "", "app.zip", "apk", "app.apk.exe"])
    def test_other_filenames_are_rejected(self, filename) -> None:
        assert is_apk_filename(filename) is False

    @pytest.mark.parametrize(
        "mime",
        [
            None,
            "",
            "application/vnd.android.package-archive",
            "application/zip",
            "application/octet-stream",
            "Application/Zip; charset=binary",
        ],
    )
    def test_accepted_mime_types(self, mime) -> None:
        assert is_accepted_apk_mime(mime) is True

    def test_text_mime_is_rejected(self) -> None:
        assert is_accepted_apk_mime("text/plain") is False


class TestValidateZipSafety:
    def test_normal_archive_passes(self, sample_apk_bytes: bytes) -> None:
        validate_zip_safety(sample_apk_bytes)

    def test_zip_bomb_is_rejected(self, zip_bomb_bytes: bytes) -> None:
        with pytest.raises(ValueError, match="compression ratio"):
            validate_zip_safety(zip_bomb_bytes)

    def test_oversized_archive_is_rejected(self, sample_apk_bytes: bytes) -> None:
        with pytest.raises(ValueError, match="exceeds limit"):
            validate_zip_safety(sample_apk_bytes, max_ratio=1_000_000, max_uncompressed_mb=0)

    def test_corrupted_zip_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="Invalid ZIP"):
            validate_zip_safety(b"PK\x03\x04" + b"\x00" * 100)

    def test_empty_archive_is_rejected(self) -> None:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w"):
            pass

        with pytest.raises(ValueError, match="empty"):
            validate_zip_safety(buffer.getvalue())


def test_format_size_mb() -> None:
    assert format_size_mb(0) == "0.0 MB"
    assert format_size_mb(1024 * 1024) == "1.0 MB"
    assert format_size_mb(int(12.34 * 1024 * 1024)) == "12.3 MB"
