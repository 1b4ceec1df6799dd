from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict

from hyphen_service.dto.error_kind import ErrorKind


class Valid(BaseModel):
    """Upload passed every check. Only built by the validator."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    language_code: str


class Invalid(BaseModel):
    """Upload rejected, carrying the first failed check and its user-facing message."""

    model_config = ConfigDict(frozen=True)

    reason: ErrorKind
    message: str


ValidationResult = Union[Valid, Invalid]
