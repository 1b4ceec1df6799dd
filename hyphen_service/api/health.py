import os
import shutil

from fastapi import APIRouter, Request
from fastapi.responses import ORJSONResponse

from hyphen_service.dto.info_response import InfoResponse
from hyphen_service.settings import settings
from hyphen_service.utils.utils import get_app_info

health_api = APIRouter(prefix="/api")


@health_api.get("/health", response_class=ORJSONResponse)
def health() -> ORJSONResponse:
    return ORJSONResponse(content={"status": "healthy"})


@health_api.get("/info", response_model=InfoResponse, response_class=ORJSONResponse)
def info() -> ORJSONResponse:
    return ORJSONResponse(content=get_app_info(settings))


@health_api.get("/ready", response_class=ORJSONResponse)
def ready(request: Request) -> ORJSONResponse:
    processor = getattr(request.app.state, "processor", None)
    if processor is None:
        return ORJSONResponse(status_code=503, content={"status": "not_ready", "issues": ["processor_not_initialized"]})

    issues: list[str] = []
    config = processor.config

    if not os.path.isdir(config.scratch_dir) or not os.access(config.scratch_dir, os.W_OK):
        issues.append("scratch_dir_not_writable:" + config.scratch_dir)

    tool = config.tool_command[0]
    if shutil.which(tool) is None:
        issues.append("tool_not_found:" + tool)

    if issues:
        return ORJSONResponse(status_code=503, content={"status": "not_ready", "issues": issues})

    return ORJSONResponse(content={"status": "ready", "tool": tool})
