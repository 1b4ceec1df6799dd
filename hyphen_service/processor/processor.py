from __future__ import annotations

import time
import traceback
from threading import Event

from hyphen_service.dto.error_kind import ErrorKind
from hyphen_service.dto.pipeline_config import PipelineConfig
from hyphen_service.dto.process_outcome import Failure, ProcessingOutcome, Success
from hyphen_service.dto.upload_request import UploadRequest
from hyphen_service.dto.validation_result import Invalid
from hyphen_service.processor.artifacts import ArtifactRole, TempArtifactManager
from hyphen_service.processor.invoker import TransformationInvoker
from hyphen_service.processor.validator import validate
from hyphen_service.utils.utils import setup_logging, suggested_file_name

UNEXPECTED_FAULT_MESSAGE = "An unexpected error occurred"


class Processor:
    """Runs one upload through validate -> stage -> invoke -> retrieve.

    Every request ends in exactly one `Success` or `Failure`; temp files
    allocated once staging starts are released on every exit path.
    """

    def __init__(self, config: PipelineConfig,
                 artifacts: TempArtifactManager | None = None,
                 invoker: TransformationInvoker | None = None) -> None:
        self.log = setup_logging(component_name="processor", log_level=config.log_level)
        self.log.debug("log level set to : " + str(config.log_level))
        self.config = config
        self.artifacts = artifacts or TempArtifactManager(
            scratch_dir=config.scratch_dir,
            extension=config.artifact_extension,
            log=self.log,
        )
        self.invoker = invoker or TransformationInvoker(
            tool_command=config.tool_command,
            timeout=config.tool_timeout,
            poll_interval=config.tool_poll_interval,
            cwd=config.scratch_dir,
            log=self.log,
        )

    def process(self, request: UploadRequest, cancel_event: Event | None = None) -> ProcessingOutcome:
        try:
            return self._process(request, cancel_event)
        except Exception as exception:
            self.log.error("unexpected fault while processing " + str(request.file_name) + ": "
                           + str(traceback.format_exc()))
            return Failure(kind=ErrorKind.UNEXPECTED_FAULT, message=str(exception) or UNEXPECTED_FAULT_MESSAGE)

    def _process(self, request: UploadRequest, cancel_event: Event | None) -> ProcessingOutcome:
        validation = validate(
            file_name=request.file_name if request.has_file else None,
            file_size=request.file_size,
            declared_language=request.declared_language,
            config=self.config,
        )

        if isinstance(validation, Invalid):
            self.log.info("rejected upload " + str(request.file_name) + ": " + validation.message)
            return Failure(kind=validation.reason, message=validation.message)

        self.log.info("Processing EPUB file: name=%s size=%s bytes language=%s",
                      validation.file_name, request.file_size, validation.language_code)

        with self.artifacts.scope() as artifact_set:
            input_path = artifact_set.track(self.artifacts.allocate_path(ArtifactRole.INPUT))
            output_path = artifact_set.track(self.artifacts.allocate_path(ArtifactRole.OUTPUT))

            failure = self.artifacts.stage(request.file_bytes or b"", input_path)
            if failure is not None:
                return failure

            hyphenation_time_start = time.time()

            failure = self.invoker.invoke(input_path, output_path, validation.language_code,
                                          cancel_event=cancel_event)
            if failure is not None:
                return failure

            output_bytes, failure = self.artifacts.retrieve(output_path)
            if failure is not None:
                return failure

            hyphenation_time_end = time.time()
            self.log.info("EPUB hyphenation finished | Elapsed : " +
                          str(hyphenation_time_end - hyphenation_time_start) + " seconds")

        return Success(output_bytes=output_bytes, suggested_file_name=suggested_file_name(validation.file_name))
