"""
Scan debounce gate.

Collapses bursts of reader events into a single admission.
"""

from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


class DebounceGate:
    """Time-based debounce for decoded codes.

    Debounces by time, not by code: any code arriving within the window
    after an admission is dropped, whether or not it matches.

    Example:
        >>> gate = DebounceGate(window_seconds=1.5)
        >>> assert gate.admit("111", now=0.0)
        >>> assert not gate.admit("222", now=0.3)
        >>> assert gate.admit("222", now=1.5)
    """

    DEFAULT_WINDOW_SECONDS = 1.5

    def __init__(self, window_seconds: float = DEFAULT_WINDOW_SECONDS) -> None:
        """Initialize gate.

        Args:
            window_seconds: Minimum interval between two admissions
        """
        if window_seconds < 0:
            raise ValueError("Debounce window cannot be negative")
        self.window_seconds = window_seconds
        self.last_code: Optional[str] = None
        self.last_time: Optional[float] = None

    def admit(self, code: str, now: float) -> bool:
        """Decide whether a code passes the gate.

        Args:
            code: Decoded code
            now: Current time in seconds (monotonic)

        Returns:
            True if admitted, False if dropped
        """
        if self.last_time is not None and now - self.last_time < self.window_seconds:
            logger.debug(
                "Scan code debounced",
                code=code,
                last_code=self.last_code,
                elapsed=round(now - self.last_time, 3),
            )
            return False

        self.last_code = code
        self.last_time = now
        return True

    def reset(self) -> None:
        """Forget previous admissions."""
        self.last_code = None
        self.last_time = None
