"""Scan session state machine.

Pure transitions over an immutable session snapshot:

    idle -> scanning -> looking_up -> resolved | failed -> idle

The generation counter increments on every transition out of
scanning or looking_up. Lookup results carry the generation they were
issued under; a mismatch means the session moved on and the result is
dropped.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from pawscan.domain.scan.models import Product, ScanError
from pawscan.domain.shared.errors import InvalidTransitionError


class SessionState(str, Enum):
    """Lifecycle state of a scan session."""

    IDLE = "idle"
    SCANNING = "scanning"  # Code reader subscribed
    LOOKING_UP = "looking_up"  # One catalog lookup in flight
    RESOLVED = "resolved"
    FAILED = "failed"


_COUNTED_EXITS = frozenset({SessionState.SCANNING, SessionState.LOOKING_UP})


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of a scan session.

    Attributes:
        state: Current lifecycle state.
        generation: Monotonic counter tagging lookups.
        barcode: Code being looked up (looking_up, resolved, failed).
        product: Resolved product (resolved only).
        error: Failure (failed only).

    Raises:
        ValueError: If payload does not match the state.
    """

    state: SessionState = SessionState.IDLE
    generation: int = 0
    barcode: Optional[str] = None
    product: Optional[Product] = None
    error: Optional[ScanError] = None

    def __post_init__(self) -> None:
        """Validate snapshot invariants."""
        if self.generation < 0:
            raise ValueError("generation cannot be negative")
        if (self.product is not None) != (self.state == SessionState.RESOLVED):
            raise ValueError("product is set exactly when resolved")
        if (self.error is not None) != (self.state == SessionState.FAILED):
            raise ValueError("error is set exactly when failed")

    def holds_reader(self) -> bool:
        """Whether the code reader subscription belongs to this state."""
        return self.state == SessionState.SCANNING

    def lookup_pending(self) -> bool:
        """Whether a catalog lookup is in flight."""
        return self.state == SessionState.LOOKING_UP

    def is_terminal(self) -> bool:
        """Whether the session awaits dismissal."""
        return self.state in (SessionState.RESOLVED, SessionState.FAILED)


@dataclass(frozen=True)
class SessionEvent:
    """Base class for session events."""


@dataclass(frozen=True)
class StartScan(SessionEvent):
    """User asked to start scanning."""


@dataclass(frozen=True)
class Dismiss(SessionEvent):
    """User dismissed the session (result, error, or a running scan)."""


@dataclass(frozen=True)
class CodeAdmitted(SessionEvent):
    """Debounce gate admitted a decoded code."""

    code: str


@dataclass(frozen=True)
class LookupSucceeded(SessionEvent):
    """Catalog lookup returned a product."""

    generation: int
    product: Product


@dataclass(frozen=True)
class LookupFailed(SessionEvent):
    """Catalog lookup raised."""

    generation: int
    error: ScanError


def _leave(snapshot: SessionSnapshot, state: SessionState, **changes: object) -> SessionSnapshot:
    """Move to state, bumping the generation when leaving a counted state."""
    generation = snapshot.generation
    if snapshot.state in _COUNTED_EXITS:
        generation += 1
    return SessionSnapshot(state=state, generation=generation, **changes)  # type: ignore[arg-type]


def transition(snapshot: SessionSnapshot, event: SessionEvent) -> SessionSnapshot:
    """Apply an event to a snapshot.

    User commands in the wrong state raise. Reader codes and lookup
    results that no longer apply return the snapshot unchanged.

    Args:
        snapshot: Current snapshot
        event: Event to apply

    Returns:
        Next snapshot (the same object when the event is ignored)

    Raises:
        InvalidTransitionError: StartScan outside idle

    Example:
        >>> s = transition(SessionSnapshot(), StartScan())
        >>> s = transition(s, CodeAdmitted(code="111"))
        >>> (s.state, s.generation)
        (<SessionState.LOOKING_UP: 'looking_up'>, 1)
    """
    if isinstance(event, StartScan):
        if snapshot.state != SessionState.IDLE:
            raise InvalidTransitionError(f"Cannot start scan from {snapshot.state.value}")
        return replace(snapshot, state=SessionState.SCANNING)

    if isinstance(event, Dismiss):
        if snapshot.state == SessionState.IDLE:
            return snapshot
        return _leave(snapshot, SessionState.IDLE)

    if isinstance(event, CodeAdmitted):
        if snapshot.state != SessionState.SCANNING:
            return snapshot
        return _leave(snapshot, SessionState.LOOKING_UP, barcode=event.code)

    if isinstance(event, LookupSucceeded):
        if not _is_current_lookup(snapshot, event.generation):
            return snapshot
        return _leave(
            snapshot,
            SessionState.RESOLVED,
            barcode=snapshot.barcode,
            product=event.product,
        )

    if isinstance(event, LookupFailed):
        if not _is_current_lookup(snapshot, event.generation):
            return snapshot
        return _leave(
            snapshot,
            SessionState.FAILED,
            barcode=snapshot.barcode,
            error=event.error,
        )

    raise TypeError(f"Unknown session event: {type(event).__name__}")


def _is_current_lookup(snapshot: SessionSnapshot, generation: int) -> bool:
    return snapshot.state == SessionState.LOOKING_UP and snapshot.generation == generation
