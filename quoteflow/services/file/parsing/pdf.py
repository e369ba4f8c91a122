"""PDF text extraction using pdfplumber."""

import io
import logging

import pdfplumber

from quoteflow.exceptions import ParseFailure
from quoteflow.services.file.parsing.models import NormalizedDocument

logger = logging.getLogger(__name__)


class PDFParser:
    """Extract the text layer of a PDF as a single free-text document.

    Scanned pages without a text layer yield no text (no OCR).
    """

    def parse(self, content: bytes, file_name: str | None = None) -> NormalizedDocument:
        """
        Concatenate all page text in reading order.

        Text fragments with non-empty trimmed content are joined by single
        spaces within a page; pages are joined by newlines.

        Args:
            content: Raw PDF bytes
            file_name: Optional file name for metadata

        Returns:
            NormalizedDocument with a single pseudo-row holding the text

        Raises:
            ParseFailure: If the bytes are not a readable PDF
        """
        try:
            with pdfplumber.open(io.BytesIO(content)) as pdf:
                pages = [self._page_text(page) for page in pdf.pages]
        except Exception as e:
            logger.error(f"PDF extraction failed for {file_name or 'upload'}: {e}")
            raise ParseFailure(f"Could not read PDF: {e}") from e

        logger.debug(f"Extracted text from {len(pages)} PDF pages")
        return NormalizedDocument.free_text(
            "\n".join(pages),
            file_name=file_name,
            page_count=len(pages),
        )

    @staticmethod
    def _page_text(page) -> str:
        words = page.extract_words(keep_blank_chars=True, use_text_flow=True)
        return " ".join(word["text"] for word in words if word["text"].strip())
