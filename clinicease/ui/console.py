from __future__ import annotations
import sys
from typing import Optional, TextIO

LINE = "_" * 60


class Console:
    """Line-oriented terminal front end used by the command loop."""

    def __init__(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> None:
        self._in = stdin or sys.stdin
        self._out = stdout or sys.stdout

    def show(self, text: str = "") -> None:
        self._out.write(text + "\n")

    def show_line(self) -> None:
        self.show(LINE)

    def show_info(self, text: str) -> None:
        self.show_line()
        self.show(text)
        self.show_line()

    def show_error(self, message: str) -> None:
        self.show(f"Error: {message}")

    def show_welcome(self, version: str) -> None:
        self.show_info(f"Welcome to ClinicEase v{version}!\nType 'help' to list commands.")

    def show_goodbye(self) -> None:
        self.show_info("Goodbye! See you again.")

    def read_command(self) -> Optional[str]:
        """Next non-blank line, or None at end of input."""
        while True:
            line = self._in.readline()
            if not line:
                return None
            if line.strip():
                return line.strip()
