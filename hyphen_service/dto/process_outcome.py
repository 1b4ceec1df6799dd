from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict, Field

from hyphen_service.dto.error_kind import ErrorKind


class Success(BaseModel):
    """Hyphenated document ready to be sent back to the caller."""

    model_config = ConfigDict(frozen=True)

    output_bytes: bytes = Field(..., description="Raw bytes produced by the hyphenation tool.")
    suggested_file_name: str = Field(..., description="Attachment name, e.g. book-hyphenated.epub.")


class Failure(BaseModel):
    """Terminal failure of a request, or the error result of a single pipeline stage."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str

    @property
    def status_code(self) -> int:
        return self.kind.status_code


ProcessingOutcome = Union[Success, Failure]
