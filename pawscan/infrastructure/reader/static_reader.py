"""
In-memory code reader.

Implements the ICodeReader port from a fixed list of codes. Used by the
command line tool (a typed barcode stands in for the camera) and tests.
"""

import asyncio
from typing import AsyncIterator, Iterable

import structlog

logger = structlog.get_logger(__name__)


class StaticCodeReader:
    """Code reader replaying a fixed sequence of decoded codes.

    Example:
        >>> reader = StaticCodeReader(["1234567890123"])
        >>> async def first_code():
        ...     async for code in reader.start():
        ...         await reader.stop()
        ...         return code
    """

    def __init__(
        self,
        codes: Iterable[str],
        interval_seconds: float = 0.0,
        hold_open: bool = True,
    ) -> None:
        """Initialize reader.

        Args:
            codes: Codes emitted on every start(), in order
            interval_seconds: Delay before each code
            hold_open: Keep the stream open after the last code until stop()
        """
        self.codes = list(codes)
        self.interval_seconds = interval_seconds
        self.hold_open = hold_open
        self.active = False
        self.start_count = 0
        self.stop_count = 0
        self._stopped = asyncio.Event()

    def start(self) -> AsyncIterator[str]:
        """Start emitting codes."""
        self.active = True
        self.start_count += 1
        self._stopped = asyncio.Event()
        logger.debug("Static reader started", codes=len(self.codes))
        return self._emit()

    async def stop(self) -> None:
        """Stop emitting codes."""
        self.active = False
        self.stop_count += 1
        self._stopped.set()

    async def _emit(self) -> AsyncIterator[str]:
        for code in self.codes:
            if self._stopped.is_set():
                return
            if self.interval_seconds:
                await asyncio.sleep(self.interval_seconds)
            yield code

        if self.hold_open:
            await self._stopped.wait()
