"""Errors raised while compiling a module."""

from __future__ import annotations


class CompileError(Exception):
    """A compilation failure, with the column at which it was detected."""

    def __init__(self, message: str, position: int = 0) -> None:
        super().__init__(message)
        self.message = message
        self.position = position

    def __str__(self) -> str:
        return self.message

    def caret_line(self) -> str:
        """Return a line with a caret under the offending column."""
        return " " * max(self.position - 1, 0) + "^"


class LexError(CompileError):
    """An invalid character, number or comment in the source text."""


class ParseError(CompileError):
    """The source does not follow the grammar: something else was expected."""

    def __init__(self, expected: str, position: int = 0) -> None:
        super().__init__(f"Ожидается: {expected}", position)
        self.expected = expected


class ContextError(CompileError):
    """A name or type is used in a way its declaration does not allow."""