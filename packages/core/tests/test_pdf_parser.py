"""Tests for PDF text extraction."""

import pytest
from reportlab.lib.pdfencrypt import StandardEncryption

from taxflow_core.exceptions import (
    InvalidFileTypeError,
    PasswordProtectedError,
    UnreadableDocumentError,
)
from taxflow_core.pdf_parser import (
    DocumentUpload,
    ExtractedDocument,
    ExtractedText,
    PDFTextExtractor,
    _clean_text,
    validate_upload,
)

from conftest import SAMPLE_1040_LINES, build_pdf


class TestDocumentUpload:
    """Test suite for DocumentUpload."""

    @pytest.mark.parametrize(
        "filename,media_type,expected",
        [
            ("return.pdf", "application/pdf", True),
            ("return.PDF", None, True),
            ("upload", "application/pdf", True),
            ("return.png", "image/png", False),
            ("return.txt", None, False),
        ],
    )
    def test_is_pdf(self, filename, media_type, expected):
        upload = DocumentUpload(filename=filename, content=b"", media_type=media_type)
        assert upload.is_pdf is expected

    def test_from_path(self, tmp_path, sample_pdf):
        path = tmp_path / "return-2023.pdf"
        path.write_bytes(sample_pdf)
        upload = DocumentUpload.from_path(path)

        assert upload.filename == "return-2023.pdf"
        assert upload.content == sample_pdf

    def test_from_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            DocumentUpload.from_path(tmp_path / "nope.pdf")


class TestValidateUpload:
    """Test suite for validate_upload."""

    def test_rejects_non_pdf(self):
        upload = DocumentUpload(filename="scan.jpg", content=b"\xff\xd8", media_type="image/jpeg")
        with pytest.raises(InvalidFileTypeError) as exc_info:
            validate_upload(upload)

        assert exc_info.value.user_message == "Invalid file type. Please upload a PDF file."
        assert exc_info.value.details["media_type"] == "image/jpeg"


class TestExtractedDocument:
    """Test suite for ExtractedDocument."""

    def test_full_text_joins_pages(self):
        document = ExtractedDocument(
            filename="x.pdf",
            page_count=2,
            pages=[ExtractedText(text="one", page=1), ExtractedText(text="two", page=2)],
        )
        assert document.full_text == "one\ntwo"


class TestPDFTextExtractor:
    """Test suite for PDFTextExtractor."""

    def test_extracts_form_text(self, sample_upload):
        document = PDFTextExtractor().extract(sample_upload)

        assert document.page_count == 2
        assert [p.page for p in document.pages] == [1, 2]
        assert "Form 1040" in document.full_text
        assert "total tax" in document.full_text
        assert "11,205" in document.full_text

    def test_reads_only_leading_pages(self):
        filler = "of a long return with enough text on each page to read as real content"
        pages = [[f"Page {n} {filler}"] for n in range(1, 6)]
        upload = DocumentUpload(filename="long.pdf", content=build_pdf(pages))
        document = PDFTextExtractor(max_pages=2).extract(upload)

        assert document.page_count == 5
        assert len(document.pages) == 2
        assert "Page 3" not in document.full_text

    def test_text_helpers(self, sample_upload):
        extractor = PDFTextExtractor()
        page_texts = extractor.extract_page_text(sample_upload)

        assert len(page_texts) == 2
        assert extractor.extract_text(sample_upload) == "\n".join(page_texts)

    def test_max_pages_validated(self):
        with pytest.raises(ValueError):
            PDFTextExtractor(max_pages=0)

    def test_rejects_non_pdf_before_reading(self):
        upload = DocumentUpload(filename="notes.txt", content=b"not a pdf")
        with pytest.raises(InvalidFileTypeError):
            PDFTextExtractor().extract(upload)

    def test_corrupt_pdf(self):
        upload = DocumentUpload(filename="broken.pdf", content=b"this is not really a pdf")
        with pytest.raises(UnreadableDocumentError) as exc_info:
            PDFTextExtractor().extract(upload)

        assert not exc_info.value.password_protected
        assert "corrupted" in exc_info.value.user_message

    def test_password_protected_pdf(self):
        """A PDF that needs a user password is reported as such."""
        content = build_pdf([SAMPLE_1040_LINES], encrypt="secret")
        upload = DocumentUpload(filename="locked.pdf", content=content)

        with pytest.raises(PasswordProtectedError) as exc_info:
            PDFTextExtractor().extract(upload)

        assert exc_info.value.password_protected
        assert "password-protected" in exc_info.value.user_message

    def test_owner_password_only_pdf_opens(self):
        """Permission-only encryption does not block reading."""
        encryption = StandardEncryption("", ownerPassword="owner")
        content = build_pdf([SAMPLE_1040_LINES], encrypt=encryption)
        upload = DocumentUpload(filename="restricted.pdf", content=content)

        assert "Form 1040" in PDFTextExtractor().extract_text(upload)

    def test_blank_pdf(self):
        """A PDF without text extracts as empty, not as an error."""
        upload = DocumentUpload(filename="blank.pdf", content=build_pdf([[]]))
        document = PDFTextExtractor().extract(upload)

        assert document.page_count == 1
        assert document.full_text.strip() == ""

    def test_cid_glyphs_removed(self):
        """Undecodable glyph markers are stripped from page text."""
        assert _clean_text("Total (cid:12)tax(cid:3)") == "Total tax"
