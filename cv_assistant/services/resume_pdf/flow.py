"""
Vertical flow cursor.

Tracks the write position on the current page and opens a new page when the
next drawable unit would cross the bottom margin. Callers ask for space once
per unit (a text line, a bullet line, a card) so a unit is never split.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from cv_assistant.services.resume_pdf.canvas import PdfCanvas
from cv_assistant.services.resume_pdf.emitter import DocumentEmitter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Margins:
    left: float
    right: float
    top: float
    bottom: float


# Called with the fresh canvas; returns the height taken by a running header.
NewPageHook = Callable[[PdfCanvas], float]


class PageFlow:
    def __init__(
        self,
        emitter: DocumentEmitter,
        margins: Margins,
        on_new_page: Optional[NewPageHook] = None,
    ):
        self.emitter = emitter
        self.margins = margins
        self.on_new_page = on_new_page
        self.canvas = emitter.new_page()
        self.page_index = 0
        self.y = self.top

    @property
    def top(self) -> float:
        return self.emitter.page_height - self.margins.top

    @property
    def bottom(self) -> float:
        return self.margins.bottom

    @property
    def left(self) -> float:
        return self.margins.left

    @property
    def right(self) -> float:
        return self.emitter.page_width - self.margins.right

    @property
    def content_width(self) -> float:
        return self.right - self.left

    def fits(self, height: float) -> bool:
        return self.y - height >= self.bottom

    def new_page(self) -> None:
        self.canvas = self.emitter.new_page()
        self.page_index += 1
        header_h = self.on_new_page(self.canvas) if self.on_new_page else 0.0
        self.y = self.top - header_h
        logger.debug(f"Page break -> page {self.page_index + 1}, y={self.y:.1f}")

    def ensure_space(self, height: float) -> bool:
        """Break the page if ``height`` does not fit. Returns True on a break."""
        if self.fits(height):
            return False
        self.new_page()
        return True

    def advance(self, dy: float) -> None:
        self.y -= dy
