"""Utility helpers for the hyphenation service.

This module centralizes shared behaviors across the API and processor layers,
including response shaping, attachment naming, process management, scratch
directory housekeeping, and logging setup.
"""

import contextlib
import logging
import os
import re
import sys
import time
import unicodedata
from urllib.parse import quote

import psutil
from fastapi.responses import ORJSONResponse
from starlette.responses import Response

from hyphen_service.dto.process_outcome import ProcessingOutcome, Success
from hyphen_service.dto.process_response import ErrorResponse
from hyphen_service.settings import Settings

EPUB_MEDIA_TYPE = "application/epub+zip"
HYPHENATED_SUFFIX = "-hyphenated"

# <time_ns>_<uuid4 hex>_<role><ext>, see TempArtifactManager.allocate_path
ARTIFACT_NAME_PATTERN = re.compile(r"^\d+_[0-9a-f]{32}_(input|output)\.[A-Za-z0-9]+$")


def get_app_info(settings: Settings) -> dict:
    """Return general information about the application.

    Used by the `/api/info` endpoint.

    Args:
        settings: Active service settings.

    Returns:
        dict: Application information (name, version, tool, languages, size ceiling).
    """
    return {"service_app_name": "hyphen-service",
            "service_version": settings.HYPHEN_SERVICE_VERSION,
            "tool_command": settings.TOOL_COMMAND,
            "supported_languages": list(settings.SUPPORTED_LANGUAGES),
            "max_file_size": settings.MAX_FILE_SIZE}


def suggested_file_name(file_name: str, extension: str = ".epub") -> str:
    """Return the attachment name for a processed upload, `<base>-hyphenated.epub`.

    Only the last extension is stripped, so `a.b.epub` becomes `a.b-hyphenated.epub`.
    """
    name = os.path.basename(file_name)
    if name.lower().endswith(extension):
        base = name[:-len(extension)]
    else:
        base = os.path.splitext(name)[0]
    return (base or "document") + HYPHENATED_SUFFIX + extension


def ascii_file_name(file_name: str) -> str:
    """Fold a file name to printable ASCII, accents dropped and other characters replaced with `_`."""
    decomposed = unicodedata.normalize("NFKD", file_name)
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return "".join(char if char.isascii() and char.isprintable() else "_" for char in stripped)


def content_disposition(file_name: str) -> str:
    """Build an attachment Content-Disposition header value.

    Header values are latin-1 on the wire, non-ASCII names are sent in the
    RFC 5987 `filename*` form next to an ASCII `filename` fallback (RFC 6266).
    """
    file_name = file_name.replace('"', "").replace("\\", "")
    if file_name.isascii() and file_name.isprintable():
        return f'attachment; filename="{file_name}"'
    return f"attachment; filename=\"{ascii_file_name(file_name)}\"; filename*=utf-8''{quote(file_name)}"


def build_response(outcome: ProcessingOutcome) -> Response:
    """Render a processing outcome as an HTTP response.

    A success is the raw document as an attachment, a failure is always the
    JSON error payload. The two shapes are never mixed, callers branch on the
    content type.

    Args:
        outcome: Result of `Processor.process`.

    Returns:
        Response: Binary attachment or `ORJSONResponse` error payload.
    """
    if isinstance(outcome, Success):
        return Response(
            content=outcome.output_bytes,
            status_code=200,
            media_type=EPUB_MEDIA_TYPE,
            headers={"Content-Disposition": content_disposition(outcome.suggested_file_name)},
        )

    payload = ErrorResponse(error=outcome.message, success=False)
    return ORJSONResponse(content=payload.model_dump(), status_code=outcome.status_code)


def terminate_hanging_process(process_id: int) -> None:
    """Terminate a process tree by PID.

    Args:
        process_id: Process ID to terminate (no-op if falsy).
    """

    if not process_id:
        logging.warning("No process ID given or process ID is empty")
        return

    try:
        parent = psutil.Process(process_id)
    except psutil.NoSuchProcess:
        logging.warning(f"Process {process_id} does not exist")
        return

    children = parent.children(recursive=True)

    # First try terminate
    for p in children + [parent]:
        with contextlib.suppress(psutil.Error):
            p.terminate()

    gone, alive = psutil.wait_procs(children + [parent], timeout=3)

    # Force kill anything still alive
    for p in alive:
        with contextlib.suppress(psutil.Error):
            p.kill()

    logging.warning(
        "Killed process tree rooted at pid=%s (children=%s)",
        process_id,
        [c.pid for c in children],
    )


def cleanup_stale_artifacts(tmp_dir: str, max_age: float) -> list[str]:
    """Remove artifact files left in the scratch directory by killed workers.

    Only files following the artifact naming scheme and older than `max_age`
    seconds are touched, anything else in the directory is left alone.

    Args:
        tmp_dir: Scratch directory to sweep.
        max_age: Minimum age in seconds (by mtime) for a file to be removed.

    Returns:
        list[str]: Paths that were removed.
    """
    removed: list[str] = []
    if not os.path.isdir(tmp_dir):
        return removed

    now = time.time()

    for entry in os.scandir(tmp_dir):
        try:
            if not entry.is_file() or not ARTIFACT_NAME_PATTERN.match(entry.name):
                continue
            if now - entry.stat().st_mtime < max_age:
                continue
            os.remove(entry.path)
            removed.append(entry.path)
            logging.info("Removed stale artifact: %s", entry.path)
        except FileNotFoundError:
            continue
        except OSError as exc:
            logging.warning("Failed to remove stale artifact %s: %s", entry.path, exc)

    return removed


def setup_logging(component_name: str = "config_logger", log_level: int = 20) -> logging.Logger:
    """Configure a logger that writes to stdout with a consistent format.

    Args:
        component_name: Logger name to configure.
        log_level: Logging level to set on the logger and handler.

    Returns:
        logging.Logger: Configured logger instance.
    """
    root_logger = logging.getLogger(component_name)
    log_format = '[%(asctime)s] [%(levelname)s] %(name)s: %(message)s'
    log_handler = logging.StreamHandler(sys.stdout)
    log_handler.setFormatter(logging.Formatter(fmt=log_format))
    log_handler.setLevel(level=log_level)
    root_logger.setLevel(level=log_level)
    root_logger.propagate = False

    # only add the handler if a previous one does not exists
    handler_exists = False
    for h in root_logger.handlers:
        if isinstance(h, logging.StreamHandler) and h.level is log_handler.level:
            handler_exists = True
            break

    if not handler_exists:
        root_logger.addHandler(log_handler)

    return root_logger
