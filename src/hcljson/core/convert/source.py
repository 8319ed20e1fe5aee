"""
Raw source access for the converter.
"""

from __future__ import annotations

from hcljson.core.ir.syntax import SourceRange


class SourceBuffer:
    """Answers "what text spans this range" for one document."""

    def __init__(self, source: bytes, repair_closing_paren: bool = True) -> None:
        self.source = source
        self.repair_closing_paren = repair_closing_paren

    def source_text(self, src_range: SourceRange) -> str:
        """Return the verbatim text of ``src_range``.

        When the byte right after the range is ``)`` it is included too:
        some reader ranges stop short of a closing parenthesis, and the
        reconstructed expression would not parse without it.
        """
        start = src_range.start.byte
        end = src_range.end.byte
        if self.repair_closing_paren and end < len(self.source) and self.source[end : end + 1] == b")":
            end += 1
        return self.source[start:end].decode("utf-8")
