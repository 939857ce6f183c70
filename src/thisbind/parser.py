from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from lark import Lark, Tree, UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

GRAMMAR_PATH = Path(__file__).resolve().parent / "grammar.lark"

class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(
            f"{message} at line {line}, col {column}" if line is not None else message
        )

@lru_cache(maxsize=1)
def make_parser() -> Lark:
    grammar = GRAMMAR_PATH.read_text(encoding="utf-8")

    return Lark(
        grammar,
        parser="lalr",
        start="start",
        propagate_positions=True,
        maybe_placeholders=False,
    )

def parse_source(src: str) -> Tree:
    parser = make_parser()

    try:
        return parser.parse(src)
    except UnexpectedInput as exc:
        raise ParseError(_describe(exc), getattr(exc, "line", None), getattr(exc, "column", None)) from exc

def _describe(exc: UnexpectedInput) -> str:
    match exc:
        case UnexpectedEOF():
            return "Unexpected end of input"
        case UnexpectedToken(token=tok):
            if tok.type == "$END":
                return "Unexpected end of input"
            return f"Unexpected token {tok.value!r}"
        case UnexpectedCharacters(char=ch):
            return f"Unexpected character {ch!r}"
        case _:
            return "Syntax error"
