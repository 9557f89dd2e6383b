"""File validation utilities for APK uploads.

Validates the ZIP signature (an APK is a ZIP archive) to catch files that
are merely renamed, and checks the archive against zip bombs.
"""

from __future__ import annotations

import logging
import zipfile
from io import BytesIO
from typing import Final

logger = logging.getLogger(__name__)

APK_CONTENT_TYPE: Final = "application/vnd.android.package-archive"
ZIP_SIGNATURE: Final = b"PK\x03\x04"

# Browsers and OSes report APKs under a few different MIME types
ACCEPTED_APK_MIME_TYPES: Final = frozenset(
    {
        APK_CONTENT_TYPE,
        "application/zip",
        "application/octet-stream",
        "application/x-zip-compressed",
    }
)


def is_apk_filename(filename: str | None) -> bool:
    return bool(filename) and filename.strip().lower().endswith(".apk")


def is_accepted_apk_mime(mime_type: str | None) -> bool:
    """Missing MIME types are accepted; the signature check is authoritative."""
    if not mime_type:
        return True
    return mime_type.split(";")[0].strip().lower() in ACCEPTED_APK_MIME_TYPES


def validate_apk_signature(data: bytes) -> bool:
    """Check that the payload starts with the ZIP local file header.

    Args:
        data: File content as bytes.

    Returns:
        True if the signature matches, False otherwise.
    """
    if data.startswith(ZIP_SIGNATURE):
        return True

    logger.warning(
        "file_signature.invalid",
        extra={
            "expected_type": "apk",
            "actual_prefix": data[:10] if data else "EMPTY",
        },
    )
    return False


def validate_zip_safety(
    data: bytes,
    max_ratio: float = 100.0,
    max_uncompressed_mb: int = 1024,
) -> None:
    """Validate ZIP-based files against zip bomb attacks.

    Checks that the compression ratio (uncompressed/compressed) isn't
    suspiciously high and that the total uncompressed size is bounded.

    Args:
        data: File content as bytes.
        max_ratio: Maximum allowed compression ratio (default: 100x).
        max_uncompressed_mb: Max uncompressed size in MB.

    Raises:
        ValueError: If the archive is malformed or looks like a zip bomb.
    """
    try:
        with zipfile.ZipFile(BytesIO(data)) as zf:
            entries = zf.infolist()
            compressed_size = sum(info.compress_size for info in entries)
            uncompressed_size = sum(info.file_size for info in entries)
    except zipfile.BadZipFile as exc:
        logger.warning("zip_safety.bad_zip", extra={"error": str(exc)})
        raise ValueError("Invalid ZIP file structure") from exc

    if not entries:
        raise ValueError("Invalid ZIP file: archive is empty")

    # Stored (uncompressed) entries of zero bytes are legal; treat them as ratio 1
    ratio = uncompressed_size / compressed_size if compressed_size else 1.0
    max_bytes = max_uncompressed_mb * 1024 * 1024

    if ratio > max_ratio:
        logger.warning(
            "zip_safety.suspicious_ratio",
            extra={
                "ratio": ratio,
                "max_ratio": max_ratio,
                "compressed_mb": compressed_size / (1024 * 1024),
                "uncompressed_mb": uncompressed_size / (1024 * 1024),
            },
        )
        raise ValueError(f"Suspicious compression ratio: {ratio:.1f}x. Maximum allowed: {max_ratio}x")

    if uncompressed_size > max_bytes:
        logger.warning(
            "zip_safety.excessive_size",
            extra={
                "uncompressed_mb": uncompressed_size / (1024 * 1024),
                "max_mb": max_uncompressed_mb,
            },
        )
        raise ValueError(
            f"Uncompressed size ({uncompressed_size / (1024 * 1024):.1f}MB) "
            f"exceeds limit ({max_uncompressed_mb}MB)"
        )

    logger.info(
        "zip_safety.validated",
        extra={"ratio": round(ratio, 2), "entries": len(entries)},
    )


def format_size_mb(size_bytes: int) -> str:
    """Render a byte count as the human string stored with the APK, e.g. ``"12.3 MB"``."""
    return f"{size_bytes / (1024 * 1024):.1f} MB"
