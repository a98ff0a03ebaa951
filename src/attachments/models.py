# src/attachments/models.py — v1
"""Upload-side types: UploadedFile, AttachmentInfo, ProcessedAttachments."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from lexassist.llm.models import ImageData

# Extension -> MIME type for uploads read from disk
_MIME_MAP: dict[str, str] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".tiff": "image/tiff",
    ".tif": "image/tiff",
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

_DEFAULT_MIME = "application/octet-stream"


class AttachmentInfo(BaseModel):
    """Non-image attachment: metadata only, never the bytes."""

    name: str
    size: int
    type: str


class UploadedFile(BaseModel):
    """Raw uploaded file, held in memory or referenced on disk."""

    name: str
    mime_type: str
    content: bytes | None = None
    path: Path | None = None
    size: int = 0

    @model_validator(mode="after")
    def fill_size(self) -> UploadedFile:
        if not self.size and self.content is not None:
            self.size = len(self.content)
        return self

    @classmethod
    def from_path(cls, path: Path | str, mime_type: str | None = None) -> UploadedFile:
        """Reference a file on disk, guessing its MIME type from the extension."""
        p = Path(path)
        size = p.stat().st_size if p.exists() else 0
        return cls(
            name=p.name,
            mime_type=mime_type or _MIME_MAP.get(p.suffix.lower(), _DEFAULT_MIME),
            path=p,
            size=size,
        )

    def read_bytes(self) -> bytes:
        if self.content is not None:
            return self.content
        if self.path is None:
            raise ValueError(f"Uploaded file {self.name!r} has neither content nor path")
        return self.path.read_bytes()

    def info(self) -> AttachmentInfo:
        return AttachmentInfo(name=self.name, size=self.size, type=self.mime_type)


class ProcessedAttachments(BaseModel):
    """Uploads split into vision-ready images and metadata-only files."""

    images: list[ImageData] = Field(default_factory=list)
    other_files: list[AttachmentInfo] = Field(default_factory=list)
