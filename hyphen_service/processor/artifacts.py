from __future__ import annotations

import logging
import os
import time
import uuid
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from enum import Enum

from hyphen_service.dto.error_kind import ErrorKind
from hyphen_service.dto.process_outcome import Failure

STAGE_WRITE_ERROR_MESSAGE = "Failed to stage uploaded file"
RETRIEVE_READ_ERROR_MESSAGE = "EPUB hyphenation failed: no output file was produced"


class ArtifactRole(str, Enum):
    INPUT = "input"
    OUTPUT = "output"


class TempArtifactSet:
    """Ordered temp paths allocated for one request."""

    def __init__(self) -> None:
        self.paths: list[str] = []

    def track(self, path: str) -> str:
        self.paths.append(path)
        return path

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)


class TempArtifactManager:
    """Owns every file the pipeline puts in the scratch directory.

    Paths are unique by construction (nanosecond timestamp plus a random
    uuid4), so concurrent requests share the directory without locking.
    """

    def __init__(self, scratch_dir: str, extension: str = ".epub", log: logging.Logger | None = None) -> None:
        self.scratch_dir = scratch_dir
        self.extension = extension
        self.log = log or logging.getLogger("artifacts")
        os.makedirs(self.scratch_dir, exist_ok=True)

    def allocate_path(self, role: ArtifactRole) -> str:
        uid = uuid.uuid4().hex
        file_name = f"{time.time_ns()}_{uid}_{role.value}{self.extension}"
        return os.path.join(self.scratch_dir, file_name)

    def stage(self, data: bytes, path: str) -> Failure | None:
        """Write the uploaded bytes to `path`.

        Returns:
            Failure | None: `StageWriteError` on any OS level write failure.
        """
        try:
            with open(file=path, mode="wb") as tmp_file:
                tmp_file.write(data)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())
        except OSError as exc:
            self.log.error("failed to stage upload to %s: %s", path, exc)
            return Failure(kind=ErrorKind.STAGE_WRITE_ERROR, message=STAGE_WRITE_ERROR_MESSAGE)
        return None

    def retrieve(self, path: str) -> tuple[bytes, Failure | None]:
        """Read back the tool output at `path`.

        Returns:
            tuple[bytes, Failure | None]: file content, or empty bytes and a
            `RetrieveReadError` when the file is missing or unreadable.
        """
        try:
            with open(file=path, mode="rb") as tmp_file:
                return tmp_file.read(), None
        except OSError as exc:
            self.log.error("hyphenation tool did not produce a readable output at %s: %s", path, exc)
            return b"", Failure(kind=ErrorKind.RETRIEVE_READ_ERROR, message=RETRIEVE_READ_ERROR_MESSAGE)

    def release(self, paths: Iterable[str]) -> list[str]:
        """Remove every path, never raising.

        A path that is already gone is not an error. Any other removal
        failure is logged and the remaining paths are still processed.

        Returns:
            list[str]: Paths that could not be removed.
        """
        failed: list[str] = []
        for path in paths:
            try:
                os.remove(path)
            except FileNotFoundError:
                continue
            except Exception as exc:
                self.log.warning("failed to remove temp file %s: %s", path, exc)
                failed.append(path)
        return failed

    @contextmanager
    def scope(self) -> Iterator[TempArtifactSet]:
        """Yield an empty artifact set and release whatever it holds on exit."""
        artifact_set = TempArtifactSet()
        try:
            yield artifact_set
        finally:
            failed = self.release(artifact_set)
            if failed:
                self.log.warning("%d temp file(s) left behind: %s", len(failed), failed)
