"""
Session routing for sqlsend.

Handles:
- Sticky per-surface session bindings
- Discovery of live session-bearing surfaces
- Choosing a session by prompt or by recency
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .errors import NoActiveSession, NoCandidates

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class SessionHandle:
    """Reference to a database connection owned by the environment.

    Two handles are equal when they wrap the same connection object.
    """
    label: str
    connection: Any = field(repr=False)
    surface: Optional[str] = None

    def __eq__(self, other):
        if not isinstance(other, SessionHandle):
            return NotImplemented
        return self.connection is other.connection

    def __hash__(self):
        return id(self.connection)


@dataclass(frozen=True)
class Candidate:
    """A discovered session with the label shown to the user."""
    label: str
    handle: SessionHandle


EnumerateFn = Callable[[], Sequence[Tuple[str, SessionHandle]]]
ChooserFn = Callable[[Sequence[str]], int]


class SurfaceBindings:
    """Surface name to bound session. Entries are never removed."""

    def __init__(self):
        self._bindings: Dict[str, SessionHandle] = {}

    def get(self, surface: str) -> Optional[SessionHandle]:
        return self._bindings.get(surface)

    def bind(self, surface: str, handle: SessionHandle) -> None:
        previous = self._bindings.get(surface)
        self._bindings[surface] = handle
        if previous is None:
            logger.info(f"Bound {surface} to {handle.label}")
        elif previous != handle:
            logger.info(f"Rebound {surface} from {previous.label} to {handle.label}")

    def is_bound(self, surface: str) -> bool:
        return surface in self._bindings

    def surfaces(self) -> List[str]:
        return list(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)


def disambiguate_labels(labels: Sequence[str]) -> List[str]:
    """Suffix repeated labels with <2>, <3>, ... keeping the first as is."""
    seen: Counter = Counter()
    result = []
    for label in labels:
        seen[label] += 1
        result.append(label if seen[label] == 1 else f"{label}<{seen[label]}>")
    return result


class SessionRouter:
    """Resolves which live session a surface's SQL should go to."""

    def __init__(
        self,
        enumerate_session_surfaces: EnumerateFn,
        prompt_choice: Optional[ChooserFn] = None,
        bindings: Optional[SurfaceBindings] = None,
        persist_implicit: bool = False,
    ):
        """
        Initialize the router.

        Args:
            enumerate_session_surfaces: Environment discovery, most recent first
            prompt_choice: Synchronous chooser returning an index into labels
            bindings: Binding map to use (a fresh one if omitted)
            persist_implicit: Bind a surface to the session found implicitly
        """
        self.enumerate_session_surfaces = enumerate_session_surfaces
        self.prompt_choice = prompt_choice
        self.bindings = bindings if bindings is not None else SurfaceBindings()
        self.persist_implicit = persist_implicit

    def get_bound_session(self, surface: str) -> Optional[SessionHandle]:
        """Return the surface's explicit binding, or None when unbound."""
        return self.bindings.get(surface)

    def candidates(self, candidates_fn: Optional[EnumerateFn] = None) -> List[Candidate]:
        """Scan the environment for live sessions, in discovery order."""
        discover = candidates_fn or self.enumerate_session_surfaces
        found = list(discover())
        labels = disambiguate_labels([label for label, _ in found])
        candidates = [
            Candidate(label, handle) for label, (_, handle) in zip(labels, found)
        ]
        logger.debug(f"Discovered {len(candidates)} session(s): {labels}")
        return candidates

    def resolve(self, surface: str) -> SessionHandle:
        """
        Session for an implicit lookup, such as a send command.

        Raises:
            NoActiveSession: if the surface is unbound and nothing is live
        """
        bound = self.bindings.get(surface)
        if bound is not None:
            return bound

        candidates = self.candidates()
        if not candidates:
            raise NoActiveSession(f"No active SQL session for {surface}")

        handle = candidates[0].handle
        logger.debug(f"Using most recent session {candidates[0].label} for {surface}")
        if self.persist_implicit:
            self.bindings.bind(surface, handle)
        return handle

    def resolve_or_prompt(
        self,
        surface: str,
        candidates_fn: Optional[EnumerateFn] = None,
        chooser_fn: Optional[ChooserFn] = None,
    ) -> SessionHandle:
        """
        Session for a surface, asking the user when there is no binding.

        Raises:
            NoCandidates: if nothing is live
            OperationCancelled: if the user aborts the prompt
        """
        bound = self.bindings.get(surface)
        if bound is not None:
            return bound
        return self._choose_and_bind(surface, candidates_fn, chooser_fn)

    def set_session(
        self,
        surface: str,
        candidates_fn: Optional[EnumerateFn] = None,
        chooser_fn: Optional[ChooserFn] = None,
    ) -> SessionHandle:
        """Prompt for a session and (re)bind the surface to it."""
        return self._choose_and_bind(surface, candidates_fn, chooser_fn)

    def _choose_and_bind(
        self,
        surface: str,
        candidates_fn: Optional[EnumerateFn],
        chooser_fn: Optional[ChooserFn],
    ) -> SessionHandle:
        candidates = self.candidates(candidates_fn)
        if not candidates:
            raise NoCandidates()

        chooser = chooser_fn or self.prompt_choice
        if chooser is None:
            raise RuntimeError("SessionRouter has no chooser to prompt with")

        index = chooser([c.label for c in candidates])
        if not 0 <= index < len(candidates):
            raise ValueError(f"Choice {index} is out of range")

        handle = candidates[index].handle
        self.bindings.bind(surface, handle)
        return handle
