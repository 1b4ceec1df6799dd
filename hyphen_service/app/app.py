import logging
import os

from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

from hyphen_service.api import api
from hyphen_service.dto.pipeline_config import PipelineConfig
from hyphen_service.processor.processor import Processor
from hyphen_service.settings import settings
from hyphen_service.utils.utils import cleanup_stale_artifacts


def prepare_scratch_dir(scratch_dir: str) -> None:
    """
        :description: Creates the scratch directory and removes artifacts left behind by killed workers
        :param scratch_dir: Directory used for request-scoped temp files
    """
    os.makedirs(scratch_dir, exist_ok=True)
    removed = cleanup_stale_artifacts(scratch_dir, max_age=settings.STALE_ARTIFACT_AGE)
    if removed:
        logging.info("removed %d stale artifact(s) from %s", len(removed), scratch_dir)


def create_app(processor: Processor | None = None, cancel_on_disconnect: bool = True) -> FastAPI:
    """
        :description: Creates FastAPI application with API router and the request processor
        :param processor: Pre-built processor, built from settings when omitted
        :param cancel_on_disconnect: Kill the hyphenation tool when the client goes away
        :return: FastAPI application instance
    """

    if processor is None:
        processor = Processor(PipelineConfig.from_settings(settings))

    prepare_scratch_dir(processor.config.scratch_dir)

    app = FastAPI(title="Hyphen Service",
                  description="EPUB Hyphenation Service API",
                  version=settings.HYPHEN_SERVICE_VERSION,
                  default_response_class=ORJSONResponse,
                  debug=settings.DEBUG_MODE)
    app.include_router(api)
    app.state.processor = processor
    app.state.cancel_on_disconnect = cancel_on_disconnect

    return app
