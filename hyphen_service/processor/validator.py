from __future__ import annotations

from hyphen_service.dto.error_kind import ErrorKind
from hyphen_service.dto.pipeline_config import PipelineConfig
from hyphen_service.dto.validation_result import Invalid, Valid, ValidationResult

MISSING_FILE_MESSAGE = "No file provided"
INVALID_FILE_TYPE_MESSAGE = "Invalid file type. Only EPUB files are allowed"


def file_too_large_message(max_file_size: int) -> str:
    return f"File size must be less than {max_file_size / (1024 * 1024):g}MB"


def unsupported_language_message(supported_languages: tuple[str, ...]) -> str:
    quoted = [f'"{code}"' for code in supported_languages]
    if len(quoted) == 1:
        choices = quoted[0]
    else:
        choices = ", ".join(quoted[:-1]) + " or " + quoted[-1]
    return f"Invalid language. Must be {choices}"


def validate(file_name: str | None, file_size: int, declared_language: str | None,
             config: PipelineConfig) -> ValidationResult:
    """Check an upload before anything touches the filesystem.

    Checks run in a fixed order (presence, type, size, language) and stop at
    the first failure, which is the only reason reported.

    Args:
        file_name: Client file name, None if no file part was supplied.
        file_size: Upload size in bytes.
        declared_language: Raw `language` form value.
        config: Pipeline configuration holding the ceiling and language set.

    Returns:
        ValidationResult: `Valid` with the accepted language code, or `Invalid`.
    """
    if file_name is None:
        return Invalid(reason=ErrorKind.MISSING_FILE, message=MISSING_FILE_MESSAGE)

    if not file_name.lower().endswith(config.accepted_extension):
        return Invalid(reason=ErrorKind.INVALID_FILE_TYPE, message=INVALID_FILE_TYPE_MESSAGE)

    if file_size > config.max_file_size:
        return Invalid(reason=ErrorKind.FILE_TOO_LARGE, message=file_too_large_message(config.max_file_size))

    if declared_language not in config.supported_languages:
        return Invalid(reason=ErrorKind.UNSUPPORTED_LANGUAGE,
                       message=unsupported_language_message(config.supported_languages))

    return Valid(file_name=file_name, language_code=declared_language)
