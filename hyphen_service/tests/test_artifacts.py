import os
import tempfile
import unittest
from unittest.mock import patch

from hyphen_service.dto.error_kind import ErrorKind
from hyphen_service.processor.artifacts import ArtifactRole, TempArtifactManager
from hyphen_service.utils.utils import ARTIFACT_NAME_PATTERN


class TestTempArtifactManager(unittest.TestCase):

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.scratch_dir = os.path.join(self._tmp.name, "scratch")
        self.manager = TempArtifactManager(self.scratch_dir)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_creates_scratch_dir(self):
        self.assertTrue(os.path.isdir(self.scratch_dir))

    def test_allocated_paths_are_unique_and_tagged(self):
        paths = {self.manager.allocate_path(ArtifactRole.INPUT) for _ in range(500)}
        self.assertEqual(len(paths), 500)

        output_path = self.manager.allocate_path(ArtifactRole.OUTPUT)
        self.assertEqual(os.path.dirname(output_path), self.scratch_dir)
        self.assertTrue(output_path.endswith("_output.epub"))
        self.assertRegex(os.path.basename(output_path), ARTIFACT_NAME_PATTERN)

        for path in paths:
            self.assertTrue(path.endswith("_input.epub"))

    def test_allocate_does_not_touch_the_filesystem(self):
        self.manager.allocate_path(ArtifactRole.INPUT)
        self.assertEqual(os.listdir(self.scratch_dir), [])

    def test_stage_then_retrieve(self):
        path = self.manager.allocate_path(ArtifactRole.INPUT)
        self.assertIsNone(self.manager.stage(b"PK\x03\x04epub", path))

        data, failure = self.manager.retrieve(path)
        self.assertIsNone(failure)
        self.assertEqual(data, b"PK\x03\x04epub")

    def test_stage_write_error(self):
        path = os.path.join(self.scratch_dir, "missing_dir", "file.epub")
        failure = self.manager.stage(b"data", path)
        self.assertIsNotNone(failure)
        self.assertEqual(failure.kind, ErrorKind.STAGE_WRITE_ERROR)
        self.assertEqual(failure.status_code, 500)

    def test_retrieve_missing_file(self):
        data, failure = self.manager.retrieve(self.manager.allocate_path(ArtifactRole.OUTPUT))
        self.assertEqual(data, b"")
        self.assertEqual(failure.kind, ErrorKind.RETRIEVE_READ_ERROR)
        self.assertEqual(failure.status_code, 500)

    def test_release_is_idempotent(self):
        path = self.manager.allocate_path(ArtifactRole.INPUT)
        never_created = self.manager.allocate_path(ArtifactRole.OUTPUT)
        self.manager.stage(b"data", path)

        self.assertEqual(self.manager.release([path, never_created]), [])
        self.assertFalse(os.path.exists(path))
        self.assertEqual(self.manager.release([path, never_created]), [])
        self.assertEqual(self.manager.release([path, path]), [])

    def test_release_logs_and_continues_on_other_errors(self):
        first = self.manager.allocate_path(ArtifactRole.INPUT)
        second = self.manager.allocate_path(ArtifactRole.OUTPUT)
        self.manager.stage(b"1", first)
        self.manager.stage(b"2", second)

        real_remove = os.remove

        def flaky_remove(path):
            if path == first:
                raise PermissionError("denied")
            real_remove(path)

        with patch("hyphen_service.processor.artifacts.os.remove", side_effect=flaky_remove):
            with self.assertLogs(self.manager.log, level="WARNING"):
                failed = self.manager.release([first, second])

        self.assertEqual(failed, [first])
        self.assertFalse(os.path.exists(second))

    def test_scope_releases_on_exception(self):
        with self.assertRaises(RuntimeError):
            with self.manager.scope() as artifact_set:
                path = artifact_set.track(self.manager.allocate_path(ArtifactRole.INPUT))
                self.manager.stage(b"data", path)
                raise RuntimeError("boom")

        self.assertEqual(len(artifact_set), 1)
        self.assertEqual(os.listdir(self.scratch_dir), [])

    def test_scope_releases_tracked_paths_in_order(self):
        with patch.object(self.manager, "release", return_value=[]) as release:
            with self.manager.scope() as artifact_set:
                input_path = artifact_set.track(self.manager.allocate_path(ArtifactRole.INPUT))
                output_path = artifact_set.track(self.manager.allocate_path(ArtifactRole.OUTPUT))

        release.assert_called_once()
        self.assertEqual(list(release.call_args.args[0]), [input_path, output_path])


if __name__ == "__main__":
    unittest.main()
