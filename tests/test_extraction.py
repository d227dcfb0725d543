"""Tests for document extraction: suffix dispatch, per-kind decoding, and the fail-fast batch."""

import unittest

from stubs import make_pdf

from studybuddy.errors import FormatError, ParseError
from studybuddy.extraction import extract_document, extract_documents, infer_kind
from studybuddy.state import FileKind, UploadedFile


class InferKindTests(unittest.TestCase):
    def test_suffix_dispatch_is_case_insensitive(self) -> None:
        self.assertEqual(infer_kind("notes.txt"), FileKind.TEXT)
        self.assertEqual(infer_kind("Chapter1.PDF"), FileKind.PDF)
        self.assertEqual(infer_kind("grades.Csv"), FileKind.CSV)

    def test_unknown_or_missing_suffix_is_unsupported(self) -> None:
        self.assertEqual(infer_kind("notes.xyz"), FileKind.UNSUPPORTED)
        self.assertEqual(infer_kind("README"), FileKind.UNSUPPORTED)
        self.assertEqual(infer_kind(""), FileKind.UNSUPPORTED)


class ExtractDocumentTests(unittest.TestCase):
    def test_plain_text_is_returned_unmodified(self) -> None:
        raw = "  Mitochondria:\r\n\tthe powerhouse of the cell. éè \U0001F331\n\n"
        document = extract_document(UploadedFile(filename="bio.txt", data=raw.encode("utf-8")))
        self.assertEqual(document.text, raw)
        self.assertEqual(document.filename, "bio.txt")

    def test_kind_is_recorded_on_the_upload(self) -> None:
        upload = UploadedFile(filename="bio.TXT", data=b"cells")
        extract_document(upload)
        self.assertEqual(upload.kind, FileKind.TEXT)

    def test_invalid_utf8_text_raises_parse_error(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            extract_document(UploadedFile(filename="bad.txt", data=b"ok \xff\xfe broken"))
        self.assertEqual(ctx.exception.details["filename"], "bad.txt")

    def test_csv_rows_are_joined_with_newlines_in_order(self) -> None:
        data = b"term,definition\nosmosis,\"water moving, across a membrane\"\n\nmitosis,cell division\n"
        document = extract_document(UploadedFile(filename="terms.csv", data=data))
        self.assertEqual(
            document.text,
            "term, definition\nosmosis, water moving, across a membrane\n\nmitosis, cell division",
        )

    def test_csv_byte_order_mark_is_dropped(self) -> None:
        document = extract_document(UploadedFile(filename="terms.csv", data=b"\xef\xbb\xbfa,b\n"))
        self.assertEqual(document.text, "a, b")

    def test_pdf_pages_are_joined_in_page_order(self) -> None:
        data = make_pdf(["Page one text", "Page two text"])
        document = extract_document(UploadedFile(filename="lecture.pdf", data=data))
        self.assertIn("Page one text", document.text)
        self.assertIn("Page two text", document.text)
        self.assertLess(document.text.index("Page one text"), document.text.index("Page two text"))
        self.assertIn("\n", document.text)

    def test_corrupt_pdf_raises_parse_error(self) -> None:
        with self.assertRaises(ParseError):
            extract_document(UploadedFile(filename="broken.pdf", data=b"this is not a pdf at all"))

    def test_unsupported_suffix_always_raises_format_error(self) -> None:
        for _ in range(3):
            with self.assertRaises(FormatError) as ctx:
                extract_document(UploadedFile(filename="notes.xyz", data=b"anything"))
            self.assertEqual(ctx.exception.error_code, "unsupported_format")

    def test_oversized_upload_raises_format_error(self) -> None:
        with self.assertRaises(FormatError):
            extract_document(UploadedFile(filename="big.txt", data=b"x" * 11), max_bytes=10)


class ExtractDocumentsTests(unittest.IsolatedAsyncioTestCase):
    async def test_no_uploads_yields_no_documents(self) -> None:
        self.assertEqual(await extract_documents([]), [])

    async def test_upload_order_is_preserved(self) -> None:
        uploads = [
            UploadedFile(filename=f"part{index}.txt", data=f"section {index}".encode("utf-8"))
            for index in range(5)
        ]
        documents = await extract_documents(uploads)
        self.assertEqual([document.filename for document in documents], [f"part{i}.txt" for i in range(5)])
        self.assertEqual([document.text for document in documents], [f"section {i}" for i in range(5)])

    async def test_one_bad_file_fails_the_whole_batch(self) -> None:
        uploads = [
            UploadedFile(filename="good.txt", data=b"fine"),
            UploadedFile(filename="slides.pptx", data=b"nope"),
            UploadedFile(filename="also_good.txt", data=b"fine too"),
        ]
        with self.assertRaises(FormatError):
            await extract_documents(uploads, session_id="s1")


if __name__ == "__main__":
    unittest.main()
