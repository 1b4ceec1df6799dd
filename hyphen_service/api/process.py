import asyncio
import logging
import traceback
from threading import Event

from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.responses import Response

from hyphen_service.dto.error_kind import ErrorKind
from hyphen_service.dto.process_outcome import Failure
from hyphen_service.dto.process_response import ErrorResponse
from hyphen_service.dto.upload_request import UploadRequest
from hyphen_service.processor.processor import UNEXPECTED_FAULT_MESSAGE, Processor
from hyphen_service.utils.utils import EPUB_MEDIA_TYPE, build_response

process_api = APIRouter(prefix="/api")

# seconds between client disconnect checks while the tool runs
DISCONNECT_POLL_INTERVAL = 0.5


async def read_upload_request(request: Request, max_file_size: int | None = None) -> UploadRequest:
    """Build an UploadRequest from the multipart form.

    A body that is not a parseable form, a `file` field that is not a file
    part, and a file part with an empty name all end up as an upload
    without a file. A file part larger than `max_file_size` is not read into
    memory, only its size is carried on for validation.
    """
    try:
        form = await request.form()
    except Exception:
        logging.warning("could not parse multipart form: " + str(traceback.format_exc()))
        return UploadRequest()

    file_field = form.get("file")
    language = form.get("language")
    declared_language = language if isinstance(language, str) else None

    if not isinstance(file_field, UploadFile) or not file_field.filename:
        return UploadRequest(declared_language=declared_language)

    if max_file_size is not None and file_field.size is not None and file_field.size > max_file_size:
        await file_field.close()
        return UploadRequest(file_name=file_field.filename, reported_size=file_field.size,
                             declared_language=declared_language)

    file_bytes = await file_field.read()
    await file_field.close()

    return UploadRequest(file_name=file_field.filename, file_bytes=file_bytes, declared_language=declared_language)


async def watch_disconnect(request: Request, cancel_event: Event) -> None:
    while not cancel_event.is_set():
        if await request.is_disconnected():
            logging.warning("client disconnected, cancelling hyphenation")
            cancel_event.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_INTERVAL)


@process_api.post(
    "/process-epub",
    response_class=Response,
    responses={
        200: {"content": {EPUB_MEDIA_TYPE: {}}, "description": "Hyphenated EPUB attachment."},
        400: {"model": ErrorResponse, "description": "Invalid upload or the tool rejected the document."},
        500: {"model": ErrorResponse, "description": "Server side failure."},
    },
)
async def process_epub(request: Request) -> Response:
    """Hyphenate an uploaded EPUB.

    Multipart fields: `file` (the .epub) and `language` (one of the supported codes).
    """
    processor: Processor = request.app.state.processor

    try:
        upload_request = await read_upload_request(request, processor.config.max_file_size)
    except Exception as exception:
        logging.error("failed to read upload: " + str(traceback.format_exc()))
        return build_response(Failure(kind=ErrorKind.UNEXPECTED_FAULT,
                                      message=str(exception) or UNEXPECTED_FAULT_MESSAGE))

    cancel_event = Event()
    watcher = None
    if getattr(request.app.state, "cancel_on_disconnect", True):
        watcher = asyncio.create_task(watch_disconnect(request, cancel_event))

    try:
        outcome = await run_in_threadpool(processor.process, upload_request, cancel_event)
    except asyncio.CancelledError:
        # the worker thread keeps running, make it kill the tool and clean up
        cancel_event.set()
        raise
    finally:
        if watcher is not None:
            watcher.cancel()

    return build_response(outcome)
