"""Line buffer with indentation tracking for generated code."""

from contextlib import contextmanager
from typing import Iterator, List


class CodeEmitter:
    """
    Accumulates output lines, prefixing each with the current indentation.

    Usage:
        out = CodeEmitter()
        out.write("function f() {")
        with out.scope():
            out.write("return 1;")
        out.write("}")
        out.text  # 'function f() {\\n    return 1;\\n}'
    """

    def __init__(self, indent_unit: str = "    "):
        self.indent_unit = indent_unit
        self._lines: List[str] = []
        self._depth = 0

    @property
    def depth(self) -> int:
        return self._depth

    def indent(self):
        self._depth += 1

    def unindent(self):
        """Decrease indentation; never goes below zero."""
        if self._depth > 0:
            self._depth -= 1

    def write(self, line: str = ""):
        """Add a line at the current depth. Empty lines carry no indentation."""
        if line:
            self._lines.append(self.indent_unit * self._depth + line)
        else:
            self._lines.append("")

    @contextmanager
    def scope(self) -> Iterator["CodeEmitter"]:
        self.indent()
        try:
            yield self
        finally:
            self.unindent()

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    @property
    def text(self) -> str:
        return "\n".join(self._lines)
