import json
import os
import tempfile
import time
import unittest

from hyphen_service.dto.error_kind import ErrorKind
from hyphen_service.dto.process_outcome import Failure, Success
from hyphen_service.utils.utils import (
    ascii_file_name,
    build_response,
    cleanup_stale_artifacts,
    content_disposition,
    suggested_file_name,
)


class TestResponseBuilder(unittest.TestCase):

    def test_success_is_a_binary_attachment(self):
        response = build_response(Success(output_bytes=b"PK\x03\x04data", suggested_file_name="a-hyphenated.epub"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.body, b"PK\x03\x04data")
        self.assertEqual(response.headers["content-type"], "application/epub+zip")
        self.assertEqual(response.headers["content-length"], "8")
        self.assertEqual(response.headers["content-disposition"], 'attachment; filename="a-hyphenated.epub"')

    def test_failure_is_a_json_payload(self):
        cases = [
            (ErrorKind.INVALID_FILE_TYPE, 400),
            (ErrorKind.INVOCATION_ERROR, 400),
            (ErrorKind.STAGE_WRITE_ERROR, 500),
            (ErrorKind.RETRIEVE_READ_ERROR, 500),
            (ErrorKind.UNEXPECTED_FAULT, 500),
        ]
        for kind, status_code in cases:
            with self.subTest(kind=kind):
                response = build_response(Failure(kind=kind, message="went wrong"))
                self.assertEqual(response.status_code, status_code)
                self.assertEqual(response.headers["content-type"], "application/json")
                self.assertNotIn("content-disposition", response.headers)
                self.assertEqual(json.loads(response.body), {"error": "went wrong", "success": False})


class TestAttachmentNames(unittest.TestCase):

    def test_suggested_file_name(self):
        self.assertEqual(suggested_file_name("book.epub"), "book-hyphenated.epub")
        self.assertEqual(suggested_file_name("My.Book.EPUB"), "My.Book-hyphenated.epub")
        self.assertEqual(suggested_file_name("dir/book.epub"), "book-hyphenated.epub")
        self.assertEqual(suggested_file_name(".epub"), "document-hyphenated.epub")

    def test_content_disposition(self):
        self.assertEqual(content_disposition("my book-hyphenated.epub"),
                         'attachment; filename="my book-hyphenated.epub"')
        self.assertEqual(content_disposition('a"b.epub'), 'attachment; filename="ab.epub"')
        self.assertEqual(content_disposition("é.epub"),
                         "attachment; filename=\"e.epub\"; filename*=utf-8''%C3%A9.epub")

    def test_non_ascii_names_get_an_ascii_fallback(self):
        self.assertEqual(ascii_file_name("Crème Brûlée.epub"), "Creme Brulee.epub")
        self.assertEqual(ascii_file_name("мир.epub"), "___.epub")
        self.assertEqual(ascii_file_name("a\tb.epub"), "a_b.epub")


class TestCleanupStaleArtifacts(unittest.TestCase):

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_dir = self._tmp.name

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _touch(self, name: str, age: float) -> str:
        path = os.path.join(self.tmp_dir, name)
        with open(path, "wb") as f:
            f.write(b"x")
        mtime = time.time() - age
        os.utime(path, (mtime, mtime))
        return path

    def test_only_old_artifacts_are_removed(self):
        old_artifact = self._touch(f"1700000000000000000_{'a' * 32}_input.epub", age=7200)
        fresh_artifact = self._touch(f"1700000000000000001_{'b' * 32}_output.epub", age=10)
        unrelated = self._touch("keep-me.epub", age=7200)

        removed = cleanup_stale_artifacts(self.tmp_dir, max_age=3600)

        self.assertEqual(removed, [old_artifact])
        self.assertFalse(os.path.exists(old_artifact))
        self.assertTrue(os.path.exists(fresh_artifact))
        self.assertTrue(os.path.exists(unrelated))

    def test_missing_directory(self):
        self.assertEqual(cleanup_stale_artifacts(os.path.join(self.tmp_dir, "nope"), max_age=0), [])
