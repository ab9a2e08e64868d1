"""Magic bytes detection for uploaded images and videos.

The declared Content-Type of an upload is never trusted on its own: the
first bytes of the file must match a known signature of the same media
class.
"""

from typing import NamedTuple


MIN_BYTES_FOR_DETECTION = 4
RIFF_HEADER_LENGTH = 12


class MagicSignature(NamedTuple):
    """Magic bytes signature for a file type."""

    bytes_pattern: bytes
    mime_type: str
    offset: int = 0


# Reference: https://en.wikipedia.org/wiki/List_of_file_signatures
MAGIC_SIGNATURES: list[MagicSignature] = [
    MagicSignature(b"\xff\xd8\xff", "image/jpeg"),
    MagicSignature(b"\x89PNG\r\n\x1a\n", "image/png"),
    MagicSignature(b"GIF87a", "image/gif"),
    MagicSignature(b"GIF89a", "image/gif"),
    MagicSignature(b"ftypavif", "image/avif", offset=4),
    MagicSignature(b"ftypheic", "image/heic", offset=4),
    # ISO base media: ....ftypqt (QuickTime) before the generic ftyp match
    MagicSignature(b"ftypqt", "video/quicktime", offset=4),
    MagicSignature(b"ftyp", "video/mp4", offset=4),
    # Matroska / WebM EBML header
    MagicSignature(b"\x1a\x45\xdf\xa3", "video/webm"),
]

IMAGE_MIME_TYPES = frozenset(
    {"image/jpeg", "image/png", "image/gif", "image/webp", "image/avif", "image/heic"}
)

VIDEO_MIME_TYPES = frozenset(
    {"video/mp4", "video/webm", "video/quicktime", "video/x-msvideo"}
)


def detect_content_type(data: bytes) -> str | None:
    """Detect content type from file magic bytes.

    Args:
        data: First 64+ bytes of file content.

    Returns:
        Detected MIME type or None if unknown.
    """
    if len(data) < MIN_BYTES_FOR_DETECTION:
        return None

    # RIFF containers: WEBP image or AVI video, told apart at offset 8
    if data[:4] == b"RIFF" and len(data) >= RIFF_HEADER_LENGTH:
        if data[8:12] == b"WEBP":
            return "image/webp"
        if data[8:12] == b"AVI ":
            return "video/x-msvideo"

    for sig in MAGIC_SIGNATURES:
        if sig.offset > 0:
            end_offset = sig.offset + len(sig.bytes_pattern)
            if (
                len(data) >= end_offset
                and data[sig.offset : end_offset] == sig.bytes_pattern
            ):
                return sig.mime_type
        elif data.startswith(sig.bytes_pattern):
            return sig.mime_type

    return None


def validate_content_type(
    data: bytes,
    declared_type: str | None,
    allowed_types: frozenset[str],
) -> tuple[bool, str | None, str | None]:
    """Validate file content against the declared Content-Type.

    Compatible types within the same media class are accepted (a JPEG
    declared as image/png is fine; an executable declared as video/mp4 is not).

    Returns:
        Tuple of (is_valid, detected_type, error_message).
    """
    detected_type = detect_content_type(data)

    if detected_type is None:
        return (False, None, "Unable to detect file type from content")

    if detected_type not in allowed_types:
        return (
            False,
            detected_type,
            f"File type '{detected_type}' is not allowed. "
            f"Allowed: {', '.join(sorted(allowed_types))}",
        )

    if not declared_type:
        return (True, detected_type, None)

    declared_class = declared_type.split(";")[0].strip().lower().split("/")[0]
    detected_class = detected_type.split("/")[0]
    if detected_class != declared_class:
        return (
            False,
            detected_type,
            f"Media class mismatch: declared '{declared_class}', "
            f"detected '{detected_class}'",
        )

    return (True, detected_type, None)
