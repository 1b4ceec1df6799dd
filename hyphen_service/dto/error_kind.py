from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure kinds a request can finish with."""

    MISSING_FILE = "missing_file"
    INVALID_FILE_TYPE = "invalid_file_type"
    FILE_TOO_LARGE = "file_too_large"
    UNSUPPORTED_LANGUAGE = "unsupported_language"
    STAGE_WRITE_ERROR = "stage_write_error"
    INVOCATION_ERROR = "invocation_error"
    RETRIEVE_READ_ERROR = "retrieve_read_error"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    UNEXPECTED_FAULT = "unexpected_fault"

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_CODES[self]


# 400 - caller can fix it and resubmit, 500 - server side
ERROR_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.MISSING_FILE: 400,
    ErrorKind.INVALID_FILE_TYPE: 400,
    ErrorKind.FILE_TOO_LARGE: 400,
    ErrorKind.UNSUPPORTED_LANGUAGE: 400,
    ErrorKind.STAGE_WRITE_ERROR: 500,
    ErrorKind.INVOCATION_ERROR: 400,
    ErrorKind.RETRIEVE_READ_ERROR: 500,
    ErrorKind.TIMEOUT: 500,
    ErrorKind.CANCELLED: 500,
    ErrorKind.UNEXPECTED_FAULT: 500,
}
