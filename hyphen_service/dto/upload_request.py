from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class UploadRequest(BaseModel):
    """Holds the caller's upload for the duration of a single request.

    Built by the API layer from the multipart form and owned by the
    processor until the response is produced.
    """

    model_config = ConfigDict(frozen=True)

    file_name: str | None = None
    """Client-side file name, None when no file part was sent."""

    file_bytes: bytes | None = None
    """Raw document bytes, None when no file part was sent or it was left unread."""

    reported_size: int | None = None
    """Size from the multipart parser, set when the bytes were left unread for exceeding the ceiling."""

    declared_language: str | None = None
    """Language code from the `language` form field, unchecked."""

    @property
    def has_file(self) -> bool:
        return self.file_name is not None and (self.file_bytes is not None or self.reported_size is not None)

    @property
    def file_size(self) -> int:
        if self.file_bytes is not None:
            return len(self.file_bytes)
        return self.reported_size or 0
