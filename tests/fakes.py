"""
Fakes for the rendering engine and OCR workers.
"""

from typing import Any, Dict, List, Optional

from mdextract.types import TextFragment


class FakeImage:
    def __init__(self, page_index: int) -> None:
        self.page_index = page_index
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeRenderer:
    """In-memory document: one list of fragments (or one OCR string) per page."""

    def __init__(
        self,
        pages: List[List[TextFragment]],
        open_error: Optional[Exception] = None,
        page_error_at: Optional[int] = None,
        render_error_at: Optional[int] = None,
    ) -> None:
        self.pages = pages
        self.open_error = open_error
        self.page_error_at = page_error_at
        self.render_error_at = render_error_at
        self.opened_with: Optional[bytes] = None
        self.closed = False
        self.images: List[FakeImage] = []
        self.render_scales: List[float] = []

    def open(self, data: bytes) -> int:
        if self.open_error is not None:
            raise self.open_error
        self.opened_with = data
        return len(self.pages)

    def get_page_fragments(self, page_index: int) -> List[TextFragment]:
        if page_index == self.page_error_at:
            raise RuntimeError(f"broken page {page_index}")
        return self.pages[page_index]

    def render_page(self, page_index: int, scale: float) -> FakeImage:
        if page_index == self.render_error_at:
            raise RuntimeError(f"cannot render page {page_index}")
        self.render_scales.append(scale)
        image = FakeImage(page_index)
        self.images.append(image)
        return image

    def close(self) -> None:
        self.closed = True


class FakeWorker:
    def __init__(self, texts: List[str], fail_at: Optional[int] = None) -> None:
        self.texts = texts
        self.fail_at = fail_at
        self.terminated = False
        self.recognized: List[int] = []

    async def recognize(self, image: FakeImage) -> str:
        if image.page_index == self.fail_at:
            raise RuntimeError("tesseract crashed")
        self.recognized.append(image.page_index)
        return self.texts[image.page_index]

    async def terminate(self) -> None:
        self.terminated = True


class FakeOCRFactory:
    def __init__(self, worker: Optional[FakeWorker] = None, init_error: Optional[Exception] = None) -> None:
        self.worker = worker
        self.init_error = init_error
        self.calls: List[Dict[str, Any]] = []

    async def create_worker(self, language: str, options: Dict[str, Any]) -> FakeWorker:
        self.calls.append({"language": language, "options": options})
        if self.init_error is not None:
            raise self.init_error
        return self.worker


def line(*words: str, y: float = 10.0) -> List[TextFragment]:
    """Fragments for one visual line: adjacent words separated by a small gap."""
    fragments = []
    x = 0.0
    for i, word in enumerate(words):
        width = len(word) * 5.0
        fragments.append(
            TextFragment(text=word, x=x, baseline=y, width=width, height=10.0, has_eol=i == len(words) - 1)
        )
        x += width + 3.0
    return fragments


