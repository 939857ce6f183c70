"""Diagnostic output channel: an ordered list of rendered console lines."""

from __future__ import annotations

from typing import List

from .types import TbValue
from .utils import inspect

class Console:
    def __init__(self, echo: bool = False):
        self.lines: List[str] = []
        self.echo = echo

    def log(self, *values: TbValue) -> str:
        line = " ".join(inspect(v) for v in values)
        self.lines.append(line)

        if self.echo:
            print(line)

        return line

    def clear(self) -> None:
        self.lines.clear()
