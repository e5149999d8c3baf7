"""
Greedy line breaking with optional full justification.

Lines break only at whitespace tokens. Adjacent non-space tokens (for example
a bold word followed by a regular comma) form one unbreakable cluster. When a
line is justified the leftover width is spread evenly over its whitespace
tokens; the last line of a paragraph is always left-aligned.
"""

from dataclasses import dataclass, field
from typing import Callable, List

from cv_assistant.services.resume_pdf.markdown import Token, plain_tokens

Measure = Callable[[Token], float]


@dataclass
class Placement:
    token: Token
    x: float       # offset from the line's left edge
    width: float   # natural glyph width (extra justification space excluded)


@dataclass
class Line:
    placements: List[Placement] = field(default_factory=list)
    natural_width: float = 0.0
    width: float = 0.0
    justified: bool = False
    is_last: bool = False

    @property
    def text(self) -> str:
        return "".join(p.token.text for p in self.placements)

    @property
    def word_count(self) -> int:
        return len(_clusters(p.token for p in self.placements))


def _clusters(tokens) -> List[List[Token]]:
    """Split a token sequence into alternating word clusters and space runs."""
    units: List[List[Token]] = []
    for tok in tokens:
        if units and units[-1][0].is_space == tok.is_space:
            units[-1].append(tok)
        else:
            units.append([tok])
    return [u for u in units if not u[0].is_space]


def _units(tokens: List[Token]) -> List[List[Token]]:
    units: List[List[Token]] = []
    for tok in tokens:
        if not tok.text:
            continue
        if units and units[-1][0].is_space == tok.is_space:
            units[-1].append(tok)
        else:
            units.append([tok])
    return units


def _place(line_tokens: List[Token], measure: Measure, max_width: float,
           justify: bool, is_last: bool) -> Line:
    widths = [measure(t) for t in line_tokens]
    natural = sum(widths)
    words = len(_clusters(line_tokens))
    spaces = sum(1 for t in line_tokens if t.is_space)

    extra = 0.0
    if justify and not is_last and words > 1 and spaces and natural < max_width:
        extra = (max_width - natural) / spaces

    placements: List[Placement] = []
    x = 0.0
    for tok, w in zip(line_tokens, widths):
        placements.append(Placement(tok, x, w))
        x += w
        if tok.is_space:
            x += extra

    return Line(
        placements=placements,
        natural_width=natural,
        width=x,
        justified=extra > 0,
        is_last=is_last,
    )


def break_lines(
    tokens: List[Token],
    max_width: float,
    measure: Measure,
    justify: bool = False,
) -> List[Line]:
    """Wrap a paragraph's tokens into lines no wider than ``max_width``.

    A single cluster wider than ``max_width`` gets a line of its own and is
    allowed to overflow.
    """
    raw_lines: List[List[Token]] = []
    current: List[Token] = []
    current_w = 0.0
    pending: List[Token] = []

    for unit in _units(tokens):
        if unit[0].is_space:
            if current:
                pending = unit
            continue
        unit_w = sum(measure(t) for t in unit)
        pending_w = sum(measure(t) for t in pending)
        if current and current_w + pending_w + unit_w > max_width:
            raw_lines.append(current)
            current = list(unit)
            current_w = unit_w
        else:
            current.extend(pending)
            current.extend(unit)
            current_w += pending_w + unit_w
        pending = []

    if current:
        raw_lines.append(current)

    last = len(raw_lines) - 1
    return [
        _place(line_tokens, measure, max_width, justify, i == last)
        for i, line_tokens in enumerate(raw_lines)
    ]


def wrap_plain(text: str, max_width: float, measure: Measure) -> List[str]:
    """Word-wrap plain text into line strings."""
    return [line.text for line in break_lines(plain_tokens(text), max_width, measure)]


def wrap_chars(text: str, max_width: float, width_of: Callable[[str], float]) -> List[str]:
    """Wrap at character boundaries, for long strings without spaces (URLs)."""
    lines: List[str] = []
    current = ""
    for ch in text:
        candidate = current + ch
        if current and width_of(candidate) > max_width:
            lines.append(current)
            current = ch
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines
