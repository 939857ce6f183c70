"""Evaluator helper modules for the thisbind runtime."""

__all__ = [
    "calls",
    "common",
    "control",
    "expr",
    "fn",
    "objects",
]
