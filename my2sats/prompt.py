"""
Interactive prompts.

Commands receive a ``Prompt`` instead of reading the terminal directly so the
key and publishing flows run in tests without a TTY.
"""

from __future__ import annotations

import getpass
from typing import Protocol


class Prompt(Protocol):
    def ask(self, message: str) -> str | None:
        """Ask for a hidden value. None means the user cancelled."""
        ...

    def confirm(self, message: str) -> bool:
        """Ask a yes/no question. Defaults to no."""
        ...


class TerminalPrompt:
    """Prompt backed by the controlling terminal."""

    def ask(self, message: str) -> str | None:
        try:
            value = getpass.getpass(f"{message} ")
        except (KeyboardInterrupt, EOFError):
            print()
            return None
        return value or None

    def confirm(self, message: str) -> bool:
        try:
            answer = input(f"{message} [y/N] ")
        except (KeyboardInterrupt, EOFError):
            print()
            return False
        return answer.strip().lower() in ("y", "yes")
