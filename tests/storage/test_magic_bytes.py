"""Tests for magic bytes detection."""

import pytest

from inkpress.storage.magic_bytes import (
    IMAGE_MIME_TYPES,
    VIDEO_MIME_TYPES,
    detect_content_type,
    validate_content_type,
)


JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 60
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 56
MP4 = b"\x00\x00\x00\x18ftypisom" + b"\x00" * 52
MOV = b"\x00\x00\x00\x14ftypqt  " + b"\x00" * 52
WEBM = b"\x1a\x45\xdf\xa3" + b"\x00" * 60
WEBP = b"RIFF\x00\x00\x00\x00WEBPVP8 " + b"\x00" * 48
AVI = b"RIFF\x00\x00\x00\x00AVI LIST" + b"\x00" * 48
AVIF = b"\x00\x00\x00\x1cftypavif" + b"\x00" * 52
EXE = b"MZ\x90\x00" + b"\x00" * 60


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        (JPEG, "image/jpeg"),
        (PNG, "image/png"),
        (b"GIF89a" + b"\x00" * 10, "image/gif"),
        (WEBP, "image/webp"),
        (AVIF, "image/avif"),
        (MP4, "video/mp4"),
        (MOV, "video/quicktime"),
        (WEBM, "video/webm"),
        (AVI, "video/x-msvideo"),
        (EXE, None),
        (b"\xff\xd8", None),
    ],
)
def test_detect_content_type(data: bytes, expected: str | None) -> None:
    assert detect_content_type(data) == expected


def test_same_class_mismatch_is_accepted() -> None:
    ok, detected, error = validate_content_type(JPEG, "image/png", IMAGE_MIME_TYPES)

    assert ok is True
    assert detected == "image/jpeg"
    assert error is None


def test_declared_class_must_match() -> None:
    ok, detected, error = validate_content_type(MP4, "image/jpeg", VIDEO_MIME_TYPES)

    assert ok is False
    assert detected == "video/mp4"
    assert "mismatch" in error


def test_disallowed_type() -> None:
    ok, _, error = validate_content_type(MP4, "video/mp4", IMAGE_MIME_TYPES)

    assert ok is False
    assert "not allowed" in error


def test_unknown_content() -> None:
    ok, detected, error = validate_content_type(EXE, "video/mp4", VIDEO_MIME_TYPES)

    assert (ok, detected) == (False, None)
    assert "Unable to detect" in error


def test_missing_declared_type() -> None:
    ok, detected, _ = validate_content_type(
        PNG, "image/png; charset=binary", IMAGE_MIME_TYPES
    )
    assert (ok, detected) == (True, "image/png")
    assert validate_content_type(PNG, None, IMAGE_MIME_TYPES)[0] is True
