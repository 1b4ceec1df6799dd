from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """JSON body returned by /api/process-epub when a request fails."""

    error: str = Field(..., description="Human readable failure message.")
    success: bool = Field(False, description="Always false for error payloads.")
