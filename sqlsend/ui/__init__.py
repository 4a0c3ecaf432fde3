"""Terminal UI and user interaction."""

from .terminal import TerminalUI
from .prompts import SessionChooser

__all__ = ["TerminalUI", "SessionChooser"]
