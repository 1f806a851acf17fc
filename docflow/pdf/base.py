from abc import ABC, abstractmethod

from docflow.normalization.values import normalize_text
from docflow.pdf.exceptions import PdfExtractionError


class BasePdfExtractor(ABC):
    """Contract for all PDF text extraction adapters."""

    engine: str = ""

    def extract(self, pdf_bytes: bytes) -> str:
        """Extract the document text as a single whitespace-normalized string.

        Raises:
            PdfExtractionError: if the engine cannot read the PDF.
        """
        try:
            pages = self._extract_pages(pdf_bytes)
        except PdfExtractionError:
            raise
        except Exception as exc:
            raise PdfExtractionError(f"{self.engine} extraction failed: {exc}") from exc
        return normalize_text(" ".join(pages))

    @abstractmethod
    def _extract_pages(self, pdf_bytes: bytes) -> list[str]:
        """Return the raw text of each page, in order."""
