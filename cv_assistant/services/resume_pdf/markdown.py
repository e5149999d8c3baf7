"""
Markdown-subset tokenizer.

Splits a paragraph into a flat stream of word and whitespace tokens.
``**bold**`` runs produce bold word tokens, ``*italic*`` runs produce regular
tokens (no italic face is embedded), and everything else is plain. Markers
that never close are kept as literal text.

Concatenating ``token.text`` for every token reproduces the input with the
emphasis delimiters removed.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple


class Emphasis(Enum):
    NONE = "none"
    BOLD = "bold"


@dataclass(frozen=True)
class Token:
    text: str
    emphasis: Emphasis = Emphasis.NONE

    @property
    def is_space(self) -> bool:
        return not self.text.strip()

    @property
    def is_bold(self) -> bool:
        return self.emphasis is Emphasis.BOLD


_WS_SPLIT = re.compile(r"(\s+)")
_LIST_MARKER = re.compile(r"^\s*[\*\-–—•▪]\s+", re.MULTILINE)


def _scan_runs(text: str) -> List[Tuple[str, Emphasis]]:
    """Find emphasis runs left to right. Unclosed markers stay literal."""
    runs: List[Tuple[str, Emphasis]] = []
    plain: List[str] = []
    i = 0
    n = len(text)

    while i < n:
        if text.startswith("**", i):
            close = text.find("**", i + 2)
            if close > i + 2:
                if plain:
                    runs.append(("".join(plain), Emphasis.NONE))
                    plain = []
                runs.append((text[i + 2:close], Emphasis.BOLD))
                i = close + 2
                continue
            # "**" with nothing to close it (or "****"): literal
            plain.append(text[i:i + 2])
            i += 2
            continue
        if text[i] == "*":
            close = text.find("*", i + 1)
            # a single-star run must not swallow the start of a bold marker
            if close > i + 1 and not text.startswith("**", close):
                if plain:
                    runs.append(("".join(plain), Emphasis.NONE))
                    plain = []
                runs.append((text[i + 1:close], Emphasis.NONE))
                i = close + 1
                continue
            plain.append("*")
            i += 1
            continue
        plain.append(text[i])
        i += 1

    if plain:
        runs.append(("".join(plain), Emphasis.NONE))
    return runs


def tokenize(text: str) -> List[Token]:
    """Tokenize ``text`` into alternating word / whitespace tokens."""
    tokens: List[Token] = []
    for run_text, emphasis in _scan_runs(text or ""):
        for piece in _WS_SPLIT.split(run_text):
            if not piece:
                continue
            if piece.strip():
                tokens.append(Token(piece, emphasis))
            else:
                tokens.append(Token(piece))
    return tokens


def plain_tokens(text: str) -> List[Token]:
    """Whitespace-split tokens with no markdown interpretation."""
    return [Token(piece) for piece in _WS_SPLIT.split(text or "") if piece]


def has_markdown(text: str) -> bool:
    return "*" in (text or "")


def strip_markdown(text: str) -> str:
    """Drop list markers at line starts and emphasis delimiters, keep newlines."""
    text = _LIST_MARKER.sub("", text or "")
    return "\n".join(
        "".join(tok.text for tok in tokenize(line)) for line in text.split("\n")
    )


def tokens_text(tokens: List[Token]) -> str:
    return "".join(tok.text for tok in tokens)
