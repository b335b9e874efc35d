"""PDF text extraction for uploaded tax returns.

Text is read from the leading pages of the upload with PyPDF2. Some
generators produce PDFs that PyPDF2 reads as (almost) no text; those are
retried with pdfplumber, which uses a different layout engine.

Only text is produced here. Deciding what the text means is left to
``form_classifier`` and ``field_extractor``.
"""

import re
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

import pdfplumber
import structlog
from PyPDF2 import PdfReader

from .exceptions import (
    InvalidFileTypeError,
    PasswordProtectedError,
    UnreadableDocumentError,
)

logger = structlog.get_logger()

PDF_MEDIA_TYPE = "application/pdf"
PDF_SUFFIX = ".pdf"

# Fewer characters than this from PyPDF2 triggers the pdfplumber retry.
MIN_TEXT_CHARS = 100

DEFAULT_MAX_PAGES = 3


@dataclass
class DocumentUpload:
    """An uploaded file: its name, bytes and declared media type."""
    filename: str
    content: bytes
    media_type: Optional[str] = None

    @classmethod
    def from_path(cls, path: Union[str, Path], media_type: Optional[str] = None) -> "DocumentUpload":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        return cls(filename=path.name, content=path.read_bytes(), media_type=media_type)

    @property
    def is_pdf(self) -> bool:
        """Declared media type or filename says PDF."""
        return (
            self.media_type == PDF_MEDIA_TYPE
            or self.filename.lower().endswith(PDF_SUFFIX)
        )


@dataclass
class ExtractedText:
    """Raw extracted text from one page."""
    text: str
    page: int


@dataclass
class ExtractedDocument:
    """Text extracted from the leading pages of a PDF."""
    filename: str
    page_count: int
    pages: list[ExtractedText] = field(default_factory=list)
    method: str = "pypdf2"

    @property
    def full_text(self) -> str:
        """All extracted pages as a single string, one page per line block."""
        return "\n".join(page.text for page in self.pages)


def validate_upload(upload: DocumentUpload) -> None:
    """Reject anything that is not declared as a PDF.

    Raises:
        InvalidFileTypeError: If neither media type nor filename say PDF
    """
    if not upload.is_pdf:
        raise InvalidFileTypeError(source=upload.filename, media_type=upload.media_type)


def _clean_text(text: str) -> str:
    # Undecodable glyphs from broken font maps come through as "(cid:123)".
    return re.sub(r'\(cid:\d+\)', '', text)


class PDFTextExtractor:
    """
    Extracts text from the first pages of an uploaded PDF.

    The first pages of a Form 1040 hold everything needed (form header,
    tax year and the total tax line), so the rest of the document is never
    read.
    """

    def __init__(self, max_pages: int = DEFAULT_MAX_PAGES):
        """
        Initialize the extractor.

        Args:
            max_pages: Number of leading pages to read
        """
        if max_pages < 1:
            raise ValueError("max_pages must be at least 1")
        self.max_pages = max_pages

    def extract(self, upload: DocumentUpload) -> ExtractedDocument:
        """
        Extract text from an uploaded PDF.

        Args:
            upload: The uploaded document

        Returns:
            ExtractedDocument with one entry per page read

        Raises:
            InvalidFileTypeError: The upload is not a PDF
            PasswordProtectedError: The PDF is encrypted
            UnreadableDocumentError: The PDF is corrupt or its text cannot be read
        """
        validate_upload(upload)

        logger.info("extracting_pdf_text", filename=upload.filename, bytes=len(upload.content))

        reader = self._open(upload)

        pages: list[ExtractedText] = []
        try:
            page_count = len(reader.pages)
            for page_num in range(min(page_count, self.max_pages)):
                text = reader.pages[page_num].extract_text() or ""
                pages.append(ExtractedText(text=_clean_text(text), page=page_num + 1))
        except Exception as e:
            logger.warning("page_extraction_failed", filename=upload.filename, error=str(e))
            raise UnreadableDocumentError(
                "Failed to extract text from PDF. The file may be corrupted "
                "or in an unsupported format.",
                source=upload.filename,
            ) from e

        document = ExtractedDocument(
            filename=upload.filename,
            page_count=page_count,
            pages=pages,
        )

        extracted_chars = len(document.full_text.strip())
        if extracted_chars < MIN_TEXT_CHARS:
            logger.info(
                "pypdf2_fallback_pdfplumber",
                filename=upload.filename,
                pypdf2_chars=extracted_chars,
            )
            fallback = self._extract_with_pdfplumber(upload, page_count)
            if fallback is not None and len(fallback.full_text.strip()) > extracted_chars:
                document = fallback

        logger.info(
            "pdf_text_extracted",
            filename=upload.filename,
            method=document.method,
            pages=len(document.pages),
            page_count=page_count,
            chars=len(document.full_text),
        )
        return document

    def extract_page_text(self, upload: DocumentUpload) -> list[str]:
        """Text of each page read, in page order."""
        return [page.text for page in self.extract(upload).pages]

    def extract_text(self, upload: DocumentUpload) -> str:
        """Text of the pages read, as a single string."""
        return self.extract(upload).full_text

    def _open(self, upload: DocumentUpload) -> PdfReader:
        try:
            reader = PdfReader(BytesIO(upload.content))
        except Exception as e:
            logger.warning("pdf_open_failed", filename=upload.filename, error=str(e))
            raise UnreadableDocumentError(source=upload.filename) from e

        if reader.is_encrypted:
            # Owner-password-only PDFs open with an empty user password.
            try:
                unlocked = reader.decrypt("")
            except Exception as e:
                raise PasswordProtectedError(source=upload.filename) from e
            if not unlocked:
                raise PasswordProtectedError(source=upload.filename)

        return reader

    def _extract_with_pdfplumber(
        self,
        upload: DocumentUpload,
        page_count: int,
    ) -> Optional[ExtractedDocument]:
        try:
            with pdfplumber.open(BytesIO(upload.content)) as pdf:
                pages = [
                    ExtractedText(text=_clean_text(page.extract_text() or ""), page=i)
                    for i, page in enumerate(pdf.pages[:self.max_pages], start=1)
                ]
        except Exception as e:
            logger.warning("pdfplumber_fallback_failed", filename=upload.filename, error=str(e))
            return None

        return ExtractedDocument(
            filename=upload.filename,
            page_count=page_count,
            pages=pages,
            method="pdfplumber",
        )


__all__ = [
    "PDF_MEDIA_TYPE",
    "DEFAULT_MAX_PAGES",
    "DocumentUpload",
    "ExtractedText",
    "ExtractedDocument",
    "PDFTextExtractor",
    "validate_upload",
]
