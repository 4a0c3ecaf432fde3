"""
Commands for sqlsend.

This module provides the user-facing command implementations.
"""

from .send import SendCommands
from .connection import ConnectionCommands
from .tables import TableCommands

__all__ = [
    "SendCommands",
    "ConnectionCommands",
    "TableCommands",
]
