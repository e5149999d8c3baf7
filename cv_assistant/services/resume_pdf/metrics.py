"""
Text measurement backed by PyMuPDF's Base-14 font metrics.

Only a regular and a bold face are embedded per family, so italic requests
are measured and drawn with the regular face. Font objects are built once per
process and only ever read afterwards.
"""

from dataclasses import dataclass
from functools import lru_cache

import fitz  # PyMuPDF

from cv_assistant.services.resume_pdf.markdown import Token


@dataclass(frozen=True)
class FontFamily:
    regular: str
    bold: str

    def face(self, bold: bool) -> str:
        return self.bold if bold else self.regular


HELVETICA = FontFamily(regular="helv", bold="hebo")
TIMES = FontFamily(regular="tiro", bold="tibo")


# Base-14 text is written with single-byte codes; anything past Latin-1
# would come out as a middle dot.
_LATIN1 = str.maketrans({
    "–": "-", "—": "-", "‐": "-", "−": "-",
    "•": "·", "▪": "·",
    "‘": "'", "’": "'", "“": '"', "”": '"',
    "…": "...", " ": " ",
})


def latin1(text: str) -> str:
    return text.translate(_LATIN1)


@lru_cache(maxsize=None)
def _font(fontname: str) -> fitz.Font:
    return fitz.Font(fontname)


def text_width(text: str, fontname: str, size: float) -> float:
    """Rendered width of ``text`` in points."""
    if not text:
        return 0.0
    return _font(fontname).text_length(latin1(text), fontsize=size)


@dataclass(frozen=True)
class TextStyle:
    """A family at a given size; bold tokens use the bold face when allowed."""
    family: FontFamily
    size: float
    allow_bold: bool = True

    def fontname(self, token: Token) -> str:
        return self.family.face(self.allow_bold and token.is_bold)

    def measure(self, token: Token) -> float:
        return text_width(token.text, self.fontname(token), self.size)

    def width(self, text: str, bold: bool = False) -> float:
        return text_width(text, self.family.face(bold), self.size)

    def resized(self, size: float) -> "TextStyle":
        return TextStyle(self.family, size, self.allow_bold)
