import logging
from typing import Callable, Optional

from .types import ProgressReport

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressReport], None]


class ProgressReporter:
    """
    Synchronous observer channel for pipeline progress.

    Reports are built, logged and handed to the callback immediately; nothing
    is buffered, so callers observe them in emission order and before the
    awaited stage result is returned.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None) -> None:
        self._callback = callback
        # Page count of the most recent document seen on this channel
        self.total_pages: Optional[int] = None

    def emit(
        self,
        stage: str,
        message: str,
        current_page: Optional[int] = None,
        total_pages: Optional[int] = None,
        progress: Optional[float] = None,
        error: Optional[BaseException] = None,
    ) -> ProgressReport:
        if total_pages is not None:
            self.total_pages = total_pages
        if progress is not None:
            progress = min(max(float(progress), 0.0), 1.0)

        report = ProgressReport(
            stage=stage,
            message=message,
            current_page=current_page,
            total_pages=total_pages,
            progress=progress,
            error=error,
        )

        if error is not None:
            logger.error(f"❌ [{stage}] {message}")
        else:
            logger.debug(f"[{stage}] {message}")

        if self._callback is not None:
            self._callback(report)
        return report

    def fail(self, stage: str, message: str, error: BaseException) -> ProgressReport:
        """Report a failure once, with the causing exception attached."""
        return self.emit(stage, message, error=error)
