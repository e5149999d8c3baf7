"""
Drawing helpers over a PyMuPDF page using PDF user-space coordinates.

The layout code thinks in PDF points with the origin at the bottom-left and
``y`` growing upwards. PyMuPDF pages use a top-left origin, so every call
flips ``y`` against the page height here and nowhere else.
"""

from typing import Optional, Tuple

import fitz  # PyMuPDF

from cv_assistant.services.resume_pdf.linebreak import Line
from cv_assistant.services.resume_pdf.metrics import TextStyle, latin1

RGB = Tuple[float, float, float]

BLACK: RGB = (0.0, 0.0, 0.0)
WHITE: RGB = (1.0, 1.0, 1.0)


class PdfCanvas:
    def __init__(self, page: fitz.Page):
        self.page = page
        self.width = page.rect.width
        self.height = page.rect.height

    def _pt(self, x: float, y: float) -> fitz.Point:
        return fitz.Point(x, self.height - y)

    def _rect(self, x: float, y: float, w: float, h: float) -> fitz.Rect:
        return fitz.Rect(x, self.height - (y + h), x + w, self.height - y)

    def text(self, x: float, y: float, text: str, fontname: str, size: float,
             color: RGB = BLACK) -> None:
        if not text:
            return
        self.page.insert_text(self._pt(x, y), latin1(text), fontsize=size, fontname=fontname, color=color)

    def line(self, x1: float, y1: float, x2: float, y2: float,
             color: RGB = BLACK, width: float = 1.0) -> None:
        self.page.draw_line(self._pt(x1, y1), self._pt(x2, y2), color=color, width=width)

    def rect(
        self,
        x: float, y: float, w: float, h: float,
        fill: Optional[RGB] = None,
        stroke: Optional[RGB] = None,
        width: float = 0.0,
        opacity: Optional[float] = None,
        radius: Optional[float] = None,
    ) -> None:
        """Rectangle whose bottom-left corner is (x, y)."""
        kwargs = {}
        if opacity is not None:
            kwargs["fill_opacity"] = opacity
        if radius is not None:
            kwargs["radius"] = radius
        self.page.draw_rect(
            self._rect(x, y, w, h),
            color=stroke,
            fill=fill,
            width=width if stroke is not None else 0,
            **kwargs,
        )

    def draw_line_tokens(self, line: Line, x: float, y: float, style: TextStyle,
                         color: RGB = BLACK, bold_color: Optional[RGB] = None) -> None:
        """Draw a laid-out line word by word at its computed offsets."""
        for placement in line.placements:
            tok = placement.token
            if tok.is_space:
                continue
            fill = bold_color if (bold_color is not None and tok.is_bold) else color
            self.text(x + placement.x, y, tok.text, style.fontname(tok), style.size, fill)

    def bullet_dot(self, x: float, y: float, size: float, color: RGB = BLACK) -> None:
        """Filled round bullet sitting on the baseline ``y`` of text at ``size``."""
        r = max(size * 0.17, 1.2)
        self.page.draw_circle(self._pt(x + r, y + size * 0.3), r, color=None, fill=color, width=0)
