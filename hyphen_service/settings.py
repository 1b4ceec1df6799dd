import os
from pathlib import Path

from pydantic import AliasChoices, Field, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, extra="ignore", validate_assignment=True)

    HYPHEN_SERVICE_VERSION: str = Field(
        "dev",
        min_length=1,
        validation_alias=AliasChoices("HYPHEN_SERVICE_VERSION", "HYPHEN_SERVICE_IMAGE_RELEASE_VERSION"),
    )
    HYPHEN_SERVICE_LOG_LEVEL: int = Field(20, ge=0, le=50)
    HYPHEN_SERVICE_DEBUG_MODE: bool = Field(False)
    HYPHEN_TMP_DIR: str | None = None

    HYPHEN_SERVICE_PORT: int = Field(8090, ge=1, le=65535)
    HYPHEN_WEB_SERVICE_WORKERS: int = Field(1, ge=1)

    # 50 MiB, uploads exactly at the ceiling are accepted
    HYPHEN_SERVICE_MAX_FILE_SIZE: int = Field(50 * 1024 * 1024, gt=0)

    # comma separated, e.g. "en,ru"
    HYPHEN_SERVICE_SUPPORTED_LANGUAGES: str = Field("en,ru", min_length=1)

    # executable (optionally with leading args), split with shlex, never run through a shell
    HYPHEN_SERVICE_TOOL_COMMAND: str = Field("epub-hyphenator", min_length=1)
    HYPHEN_SERVICE_TOOL_TIMEOUT: int = Field(120, gt=0)
    HYPHEN_SERVICE_TOOL_POLL_INTERVAL: float = Field(0.5, gt=0)

    # seconds, artifacts older than this are removed at worker startup, kept above the tool timeout
    HYPHEN_SERVICE_STALE_ARTIFACT_AGE: int = Field(3600, gt=0)

    @field_validator("HYPHEN_SERVICE_SUPPORTED_LANGUAGES")
    @classmethod
    def validate_supported_languages(cls, value: str) -> str:
        codes = [code.strip() for code in value.split(",") if code.strip()]
        if not codes:
            raise ValueError("HYPHEN_SERVICE_SUPPORTED_LANGUAGES must list at least one language code")
        for code in codes:
            # codes end up in the tool's argv, keep them to plain tags
            if not code.replace("-", "").replace("_", "").isalnum():
                raise ValueError(f"Invalid language code in HYPHEN_SERVICE_SUPPORTED_LANGUAGES: {code!r}")
        return ",".join(codes)

    @model_validator(mode="after")
    def validate_stale_artifact_age(self) -> "Settings":
        if self.HYPHEN_SERVICE_STALE_ARTIFACT_AGE <= self.HYPHEN_SERVICE_TOOL_TIMEOUT:
            raise ValueError("HYPHEN_SERVICE_STALE_ARTIFACT_AGE must be greater than HYPHEN_SERVICE_TOOL_TIMEOUT, "
                             "otherwise in-flight artifacts of other workers would be swept")
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def LOG_LEVEL(self) -> int:
        # 50 - CRITICAL, 40 - ERROR, 30 - WARNING, 20 - INFO, 10 - DEBUG, 0 - NOTSET
        return self.HYPHEN_SERVICE_LOG_LEVEL

    @computed_field  # type: ignore[prop-decorator]
    @property
    def DEBUG_MODE(self) -> bool:
        return self.HYPHEN_SERVICE_DEBUG_MODE

    @computed_field  # type: ignore[prop-decorator]
    @property
    def ROOT_DIR(self) -> str:
        return str(Path(__file__).resolve().parents[1])

    @computed_field  # type: ignore[prop-decorator]
    @property
    def TMP_FILE_DIR(self) -> str:
        return self.HYPHEN_TMP_DIR or os.path.join(self.ROOT_DIR, "tmp")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def MAX_FILE_SIZE(self) -> int:
        return self.HYPHEN_SERVICE_MAX_FILE_SIZE

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SUPPORTED_LANGUAGES(self) -> tuple[str, ...]:
        return tuple(self.HYPHEN_SERVICE_SUPPORTED_LANGUAGES.split(","))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def TOOL_COMMAND(self) -> str:
        return self.HYPHEN_SERVICE_TOOL_COMMAND

    @computed_field  # type: ignore[prop-decorator]
    @property
    def TOOL_TIMEOUT(self) -> int:
        return self.HYPHEN_SERVICE_TOOL_TIMEOUT

    @computed_field  # type: ignore[prop-decorator]
    @property
    def TOOL_POLL_INTERVAL(self) -> float:
        return self.HYPHEN_SERVICE_TOOL_POLL_INTERVAL

    @computed_field  # type: ignore[prop-decorator]
    @property
    def STALE_ARTIFACT_AGE(self) -> int:
        return self.HYPHEN_SERVICE_STALE_ARTIFACT_AGE


settings = Settings() # type: ignore[call-arg]
