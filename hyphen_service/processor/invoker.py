from __future__ import annotations

import logging
import time
import traceback
from collections.abc import Sequence
from subprocess import PIPE, Popen, TimeoutExpired
from threading import Event

from hyphen_service.dto.error_kind import ErrorKind
from hyphen_service.dto.process_outcome import Failure
from hyphen_service.utils.utils import terminate_hanging_process

INVOCATION_ERROR_PREFIX = "EPUB hyphenation failed: "
CANCELLED_MESSAGE = "EPUB hyphenation cancelled"


def invocation_failure(detail: str) -> Failure:
    return Failure(kind=ErrorKind.INVOCATION_ERROR, message=INVOCATION_ERROR_PREFIX + detail)


def timeout_failure(timeout: float) -> Failure:
    return Failure(kind=ErrorKind.TIMEOUT, message=f"EPUB hyphenation timed out after {timeout:g} seconds")


class TransformationInvoker:
    """Runs the external hyphenation tool on a staged input file.

    The tool is called as `<tool> -l <language> <input> -o <output>` with a
    plain argument vector, never through a shell. The language code is taken
    as-is, callers only pass codes the validator accepted.
    """

    def __init__(self, tool_command: Sequence[str], timeout: float, poll_interval: float = 0.5,
                 cwd: str | None = None, log: logging.Logger | None = None) -> None:
        self.tool_command = list(tool_command)
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.cwd = cwd
        self.log = log or logging.getLogger("invoker")

    def build_args(self, input_path: str, output_path: str, language_code: str) -> list[str]:
        return [*self.tool_command, "-l", language_code, input_path, "-o", output_path]

    def invoke(self, input_path: str, output_path: str, language_code: str,
               cancel_event: Event | None = None) -> Failure | None:
        """Run the tool and wait for it to exit.

        The wait is bounded by `timeout`; on expiry, or once `cancel_event` is
        set, the tool's process tree is killed.

        Returns:
            Failure | None: None on a zero exit code, otherwise an
            `InvocationError`, `Timeout` or `Cancelled` failure.
        """
        _args = self.build_args(input_path, output_path, language_code)
        self.log.debug("starting hyphenation subprocess with args: " + str(_args))

        try:
            tool_process = Popen(
                args=_args,
                cwd=self.cwd,
                close_fds=True,
                shell=False,
                stdout=PIPE,
                stderr=PIPE,
            )
        except OSError:
            self.log.error("could not start hyphenation tool: " + str(traceback.format_exc()))
            return invocation_failure("could not start the hyphenation tool")

        deadline = time.monotonic() + self.timeout

        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                self.log.error("hyphenation tool exceeded %ss timeout, pid=%s", self.timeout, tool_process.pid)
                self._kill(tool_process)
                return timeout_failure(self.timeout)

            if cancel_event is not None and cancel_event.is_set():
                self.log.warning("hyphenation cancelled by caller, pid=%s", tool_process.pid)
                self._kill(tool_process)
                return Failure(kind=ErrorKind.CANCELLED, message=CANCELLED_MESSAGE)

            try:
                stdout, stderr = tool_process.communicate(timeout=min(self.poll_interval, remaining))
                break
            except TimeoutExpired:
                continue

        rc = tool_process.returncode
        if rc != 0:
            stderr_text = stderr.decode("utf-8", "ignore").strip()
            stdout_text = stdout.decode("utf-8", "ignore").strip()
            self.log.error(
                "hyphenation tool failed rc=%s for %s -> %s\nstdout=%s\nstderr=%s",
                rc, input_path, output_path, stdout_text, stderr_text,
            )
            return invocation_failure(stderr_text or stdout_text or f"tool exited with code {rc}")

        return None

    def _kill(self, tool_process: Popen) -> None:
        terminate_hanging_process(tool_process.pid)
        try:
            # reap the child and close its pipes
            tool_process.communicate(timeout=5)
        except TimeoutExpired:
            tool_process.kill()
            tool_process.communicate()
