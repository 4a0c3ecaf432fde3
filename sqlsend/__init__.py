"""
sqlsend - send SQL from an edit buffer to a live database session.
"""

__version__ = "0.1.0"

from .boundary import UnitKind, UnitSpan, resolve, extract_unit_text
from .router import Candidate, SessionHandle, SessionRouter, SurfaceBindings
from .dispatch import DispatchOutcome, DispatchStatus, EditSurface, SQLDispatcher
from .tables import TableNavigator, find_table, unqualify

__all__ = [
    "__version__",
    "UnitKind",
    "UnitSpan",
    "resolve",
    "extract_unit_text",
    "Candidate",
    "SessionHandle",
    "SessionRouter",
    "SurfaceBindings",
    "DispatchOutcome",
    "DispatchStatus",
    "EditSurface",
    "SQLDispatcher",
    "TableNavigator",
    "find_table",
    "unqualify",
]
