# src/attachments/preprocessor.py — v1
"""Attachment preprocessing: split uploads into images and other files.

Images are base64-encoded into ImageData; everything else is reduced to
name/size/type. A file whose bytes cannot be read is demoted to the
"other files" list instead of failing the batch.
"""

from __future__ import annotations

import base64
import logging
from typing import Iterable

from lexassist.attachments.models import ProcessedAttachments, UploadedFile
from lexassist.llm.models import ImageData

logger = logging.getLogger(__name__)

SUPPORTED_IMAGE_FORMATS: frozenset[str] = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/bmp",
    "image/webp",
})


class AttachmentEncodingError(Exception):
    """Raised when an uploaded file cannot be read and encoded."""


def is_image_file(file: UploadedFile) -> bool:
    return file.mime_type.lower().startswith("image/")


def is_valid_image_format(mime_type: str) -> bool:
    """Check the MIME type against the vision allow-list (case-insensitive)."""
    return mime_type.lower() in SUPPORTED_IMAGE_FORMATS


def file_to_base64(file: UploadedFile) -> str:
    """Read an uploaded file and return its base64 text.

    Raises:
        AttachmentEncodingError: If the file content cannot be read.
    """
    try:
        raw = file.read_bytes()
    except (OSError, ValueError) as e:
        raise AttachmentEncodingError(f"Failed to read {file.name!r}: {e}") from e
    return base64.b64encode(raw).decode("ascii")


def filter_supported_images(images: Iterable[ImageData]) -> list[ImageData]:
    """Drop images whose MIME type is outside the allow-list (logged, not raised)."""
    supported: list[ImageData] = []
    for image in images:
        if is_valid_image_format(image.mime_type):
            supported.append(image)
        else:
            logger.warning(
                "Dropping image %s: unsupported format %s", image.file_name, image.mime_type,
            )
    return supported


def process_attachments(files: Iterable[UploadedFile]) -> ProcessedAttachments:
    """Classify and encode uploaded files.

    Args:
        files: Uploaded files in submission order.

    Returns:
        ProcessedAttachments with encoded images (allow-listed formats only)
        and metadata for every other file.
    """
    result = ProcessedAttachments()

    for file in files:
        if not is_image_file(file):
            result.other_files.append(file.info())
            continue

        try:
            encoded = file_to_base64(file)
        except AttachmentEncodingError as e:
            logger.error("Failed to process image %s: %s", file.name, e)
            result.other_files.append(file.info())
            continue

        result.images.append(
            ImageData(
                data=encoded,
                mime_type=file.mime_type,
                file_name=file.name,
                size=file.size,
            )
        )

    result.images = filter_supported_images(result.images)

    logger.debug(
        "Processed %d image(s) and %d other file(s)",
        len(result.images), len(result.other_files),
    )
    return result
