import logging
from typing import List, Optional, Protocol

import fitz  # PyMuPDF
from PIL import Image
from pdf2image import convert_from_bytes

from .config import PDFRenderConfig
from .errors import InvalidInputError
from .types import TextFragment

logger = logging.getLogger(__name__)


class DocumentRenderer(Protocol):
    """Page rendering / text-layer extraction engine consumed by the extractors."""

    def open(self, data: bytes) -> int:
        ...

    def get_page_fragments(self, page_index: int) -> List[TextFragment]:
        ...

    def render_page(self, page_index: int, scale: float) -> Image.Image:
        ...

    def close(self) -> None:
        ...


class PdfRenderer:
    """
    Renderer backed by PyMuPDF for the text layer and pdf2image (poppler)
    for rasters.
    """

    def __init__(self) -> None:
        self._doc: Optional[fitz.Document] = None
        self._data: Optional[bytes] = None

    def open(self, data: bytes) -> int:
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise InvalidInputError(f"Payload is not a readable PDF document: {e}") from e

        if not doc.is_pdf or doc.page_count == 0:
            doc.close()
            raise InvalidInputError("Payload is not a PDF document with at least one page")

        self.close()
        self._doc = doc
        self._data = bytes(data)
        logger.debug(f"Opened PDF with {doc.page_count} pages ({len(data):,} bytes)")
        return doc.page_count

    def get_page_fragments(self, page_index: int) -> List[TextFragment]:
        page = self._document()[page_index]
        fragments: List[TextFragment] = []

        for block in page.get_text("dict").get("blocks", []):
            # Image blocks carry no "lines"
            for line in block.get("lines", []):
                spans = [span for span in line.get("spans", []) if span.get("text")]
                for n, span in enumerate(spans):
                    x0, y0, x1, y1 = span["bbox"]
                    fragments.append(
                        TextFragment(
                            text=span["text"],
                            x=x0,
                            baseline=span["origin"][1],
                            width=x1 - x0,
                            height=y1 - y0,
                            has_eol=(n == len(spans) - 1),
                        )
                    )

        logger.debug(f"Page {page_index + 1}: {len(fragments)} text fragments")
        return fragments

    def render_page(self, page_index: int, scale: float) -> Image.Image:
        self._document()
        dpi = PDFRenderConfig.get_dpi_for_scale(scale)
        page_number = page_index + 1

        images = convert_from_bytes(
            self._data,
            dpi=dpi,
            fmt=PDFRenderConfig.FORMAT,
            use_pdftocairo=PDFRenderConfig.USE_PDFTOCAIRO,
            first_page=page_number,
            last_page=page_number,
        )
        if not images:
            raise RuntimeError(f"Renderer produced no image for page {page_number}")

        image = images[0]
        width, height = image.size
        logger.debug(f"📸 Page {page_number}: {width}x{height}px, DPI={dpi} (scale={scale})")
        return image

    def close(self) -> None:
        if self._doc is not None:
            self._doc.close()
        self._doc = None
        self._data = None

    def _document(self) -> fitz.Document:
        if self._doc is None:
            raise RuntimeError("No document is open")
        return self._doc
