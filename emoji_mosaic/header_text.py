# emoji_mosaic/header_text.py
from __future__ import annotations

"""
Parser for the container's structured-text header.

The header is a Python-literal dict restricted to:
  - quoted keys and string values ('x' or "x", no escapes needed in practice)
  - True / False / None
  - non-negative integers
  - tuples of the above, including () and (n,)

Example:
  {'descr': '|u1', 'fortran_order': False, 'shape': (1203, 16, 16, 4), }

tokenize() yields (kind, text, pos) tokens; parse_header_dict() builds a plain
dict; parse_array_metadata() checks the required keys and returns ArrayMetadata.
"""

from typing import Any, Dict, Iterator, List, NamedTuple, Tuple

from .core_types import ArrayMetadata
from .errors import FormatError

REQUIRED_KEYS = ("descr", "fortran_order", "shape")

_PUNCT = {"{": "LBRACE", "}": "RBRACE", "(": "LPAREN", ")": "RPAREN", ":": "COLON", ",": "COMMA"}
_NAMES = {"True": True, "False": False, "None": None}


class Token(NamedTuple):
    kind: str  # LBRACE RBRACE LPAREN RPAREN COLON COMMA STRING INT NAME END
    text: str
    pos: int


def tokenize(text: str) -> Iterator[Token]:
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch.isspace():
            i += 1
            continue
        if ch in _PUNCT:
            yield Token(_PUNCT[ch], ch, i)
            i += 1
            continue
        if ch in ("'", '"'):
            end = text.find(ch, i + 1)
            if end < 0:
                raise FormatError(f"unterminated string at offset {i}")
            yield Token("STRING", text[i + 1 : end], i)
            i = end + 1
            continue
        if ch.isdigit():
            j = i
            while j < n and text[j].isdigit():
                j += 1
            yield Token("INT", text[i:j], i)
            # Python 2 era files carry 'L' suffixes on shape entries
            i = j + 1 if j < n and text[j] == "L" else j
            continue
        if ch.isalpha() or ch == "_":
            j = i
            while j < n and (text[j].isalnum() or text[j] == "_"):
                j += 1
            word = text[i:j]
            if word not in _NAMES:
                raise FormatError(f"unexpected name {word!r} at offset {i}")
            yield Token("NAME", word, i)
            i = j
            continue
        raise FormatError(f"unexpected character {ch!r} at offset {i}")
    yield Token("END", "", n)


class _Parser:
    def __init__(self, text: str) -> None:
        self.tokens: List[Token] = list(tokenize(text))
        self.idx = 0

    def peek(self) -> Token:
        return self.tokens[self.idx]

    def take(self, kind: str) -> Token:
        tok = self.tokens[self.idx]
        if tok.kind != kind:
            raise FormatError(
                f"expected {kind} but found {tok.kind} {tok.text!r} at offset {tok.pos}"
            )
        self.idx += 1
        return tok

    def parse_dict(self) -> Dict[str, Any]:
        self.take("LBRACE")
        out: Dict[str, Any] = {}
        while self.peek().kind != "RBRACE":
            key = self.take("STRING").text
            self.take("COLON")
            if key in out:
                raise FormatError(f"duplicate header key {key!r}")
            out[key] = self.parse_value()
            if self.peek().kind == "COMMA":
                self.take("COMMA")
            elif self.peek().kind != "RBRACE":
                tok = self.peek()
                raise FormatError(f"expected ',' or '}}' at offset {tok.pos}")
        self.take("RBRACE")
        return out

    def parse_tuple(self) -> Tuple[Any, ...]:
        self.take("LPAREN")
        items: List[Any] = []
        while self.peek().kind != "RPAREN":
            items.append(self.parse_value())
            if self.peek().kind == "COMMA":
                self.take("COMMA")
            elif self.peek().kind != "RPAREN":
                tok = self.peek()
                raise FormatError(f"expected ',' or ')' at offset {tok.pos}")
        self.take("RPAREN")
        return tuple(items)

    def parse_value(self) -> Any:
        tok = self.peek()
        if tok.kind == "STRING":
            self.idx += 1
            return tok.text
        if tok.kind == "INT":
            self.idx += 1
            return int(tok.text)
        if tok.kind == "NAME":
            self.idx += 1
            return _NAMES[tok.text]
        if tok.kind == "LPAREN":
            return self.parse_tuple()
        if tok.kind == "LBRACE":
            return self.parse_dict()
        raise FormatError(f"unexpected {tok.kind} {tok.text!r} at offset {tok.pos}")


def parse_header_dict(text: str) -> Dict[str, Any]:
    """Parse the whole header text into a dict. Trailing padding is allowed."""
    parser = _Parser(text)
    out = parser.parse_dict()
    parser.take("END")
    return out


def parse_array_metadata(text: str) -> ArrayMetadata:
    """
    Parse and type-check the header dict.

    Raises FormatError for missing keys, a non-string descr, a non-bool
    fortran_order, or a shape that is not a tuple of non-negative ints.
    """
    fields = parse_header_dict(text)
    missing = [k for k in REQUIRED_KEYS if k not in fields]
    if missing:
        raise FormatError(f"header missing {', '.join(missing)}")

    descr = fields["descr"]
    if not isinstance(descr, str):
        raise FormatError(f"descr must be a string, got {descr!r}")
    fortran_order = fields["fortran_order"]
    if not isinstance(fortran_order, bool):
        raise FormatError(f"fortran_order must be True or False, got {fortran_order!r}")
    shape = fields["shape"]
    if not isinstance(shape, tuple) or not all(
        isinstance(d, int) and not isinstance(d, bool) and d >= 0 for d in shape
    ):
        raise FormatError(f"shape must be a tuple of non-negative ints, got {shape!r}")

    return ArrayMetadata(descr=descr, fortran_order=fortran_order, shape=shape)


__all__ = ["REQUIRED_KEYS", "Token", "tokenize", "parse_header_dict", "parse_array_metadata"]
