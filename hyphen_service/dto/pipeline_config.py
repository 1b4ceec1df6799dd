from __future__ import annotations

import shlex

from pydantic import BaseModel, ConfigDict, Field

from hyphen_service.settings import Settings


class PipelineConfig(BaseModel):
    """Configuration handed explicitly to the processor and its components."""

    model_config = ConfigDict(frozen=True)

    scratch_dir: str = Field(..., min_length=1, description="Directory for request-scoped temp files.")
    max_file_size: int = Field(50 * 1024 * 1024, gt=0, description="Upload size ceiling in bytes.")
    supported_languages: tuple[str, ...] = Field(("en", "ru"), min_length=1)
    tool_command: tuple[str, ...] = Field(("epub-hyphenator",), min_length=1,
                                          description="Hyphenation executable and any leading args.")
    tool_timeout: float = Field(120, gt=0, description="Seconds before the tool process is killed.")
    tool_poll_interval: float = Field(0.5, gt=0, description="Seconds between timeout/cancel checks.")
    log_level: int = Field(20, ge=0, le=50, description="Level for the processor logger.")
    accepted_extension: str = ".epub"
    artifact_extension: str = ".epub"

    @classmethod
    def from_settings(cls, settings: Settings) -> PipelineConfig:
        return cls(
            scratch_dir=settings.TMP_FILE_DIR,
            max_file_size=settings.MAX_FILE_SIZE,
            supported_languages=settings.SUPPORTED_LANGUAGES,
            tool_command=tuple(shlex.split(settings.TOOL_COMMAND)),
            tool_timeout=settings.TOOL_TIMEOUT,
            tool_poll_interval=settings.TOOL_POLL_INTERVAL,
            log_level=settings.LOG_LEVEL,
        )
