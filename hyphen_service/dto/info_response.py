from pydantic import BaseModel, Field


class InfoResponse(BaseModel):
    """Response payload for the /api/info endpoint."""

    service_app_name: str = Field(..., description="Service name.")
    service_version: str = Field(..., description="Service version string.")
    tool_command: str = Field(..., description="Hyphenation tool command line prefix.")
    supported_languages: list[str] = Field(..., description="Accepted language codes.")
    max_file_size: int = Field(..., description="Upload size ceiling in bytes.")
