"""Tests for SourceBuffer range slicing."""

from __future__ import annotations

from hcljson.core.convert import SourceBuffer
from hcljson.core.ir import SourcePos, SourceRange


def byte_range(start: int, end: int) -> SourceRange:
    return SourceRange(
        filename="test.tf",
        start=SourcePos(line=1, column=start + 1, byte=start),
        end=SourcePos(line=1, column=end + 1, byte=end),
    )


class TestSourceBuffer:
    """source_text returns verbatim bytes for a range."""

    def test_plain_slice(self) -> None:
        buffer = SourceBuffer(b"x = var.a\n")
        assert buffer.source_text(byte_range(4, 9)) == "var.a"

    def test_closing_paren_repaired(self) -> None:
        buffer = SourceBuffer(b"f(a)")
        assert buffer.source_text(byte_range(0, 3)) == "f(a)"

    def test_repair_disabled(self) -> None:
        buffer = SourceBuffer(b"f(a)", repair_closing_paren=False)
        assert buffer.source_text(byte_range(0, 3)) == "f(a"

    def test_range_at_end_of_buffer(self) -> None:
        buffer = SourceBuffer(b"abc")
        assert buffer.source_text(byte_range(0, 3)) == "abc"

    def test_multibyte_text(self) -> None:
        buffer = SourceBuffer("é = 1".encode())
        assert buffer.source_text(byte_range(0, 2)) == "é"
