"""Character-by-character reading of module source text."""

from __future__ import annotations

import os
from typing import TextIO

from .errors import CompileError

CH_SPACE = " "
CH_TAB = "\t"
CH_EOL = "\r"
CH_EOT = "\0"


class SourceText:
    """Source text read one character at a time.

    ``ch`` holds the current character; line breaks are reported as
    ``CH_EOL`` and the end of the text as ``CH_EOT``. ``position`` is the
    column of the current character, reset to zero at each line break.
    Every character read is written to ``echo`` when it is set.
    """

    def __init__(self, text: str, echo: TextIO | None = None) -> None:
        self._text = text
        self._index = 0
        self.ch = CH_EOT
        self.position = 0
        self.echo = echo

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> SourceText:
        """Read the whole file at ``path``."""
        try:
            with open(path, encoding="utf-8", errors="replace", newline="") as stream:
                text = stream.read()
        except OSError as exc:
            raise CompileError("Не удалось открыть файл") from exc
        return cls(text)

    def next_ch(self) -> str:
        """Advance to the next character and return it."""
        if self._index >= len(self._text):
            self.ch = CH_EOT
            return self.ch

        ch = self._text[self._index]
        self._index += 1
        self.position += 1
        if self.echo is not None:
            self.echo.write(ch)
        if ch in "\n\r":
            ch = CH_EOL
            self.position = 0
        self.ch = ch
        return ch

    def skip_line(self) -> None:
        """Read on up to the end of the current line or of the text."""
        while self.ch not in (CH_EOT, CH_EOL):
            self.next_ch()