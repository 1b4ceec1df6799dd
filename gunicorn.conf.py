import logging

from hyphen_service.app.app import prepare_scratch_dir
from hyphen_service.settings import settings

bind = f"0.0.0.0:{settings.HYPHEN_SERVICE_PORT}"
workers = settings.HYPHEN_WEB_SERVICE_WORKERS

# leave room for the tool timeout so the worker is not killed mid request
timeout = settings.TOOL_TIMEOUT + 30
graceful_timeout = 30


def on_starting(server):
    # sweep once in the master, before any worker serves a request
    try:
        prepare_scratch_dir(settings.TMP_FILE_DIR)
    except OSError:
        logging.exception("could not prepare scratch dir %s", settings.TMP_FILE_DIR)
        raise
