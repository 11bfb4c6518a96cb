"""
Scan session service.

Drives the scan state machine on the asyncio event loop: owns the code
reader subscription while scanning, runs one catalog lookup per admitted
code, and publishes session views to the presentation layer.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional

import structlog

from pawscan.domain.scan.debounce import DebounceGate
from pawscan.domain.scan.models import Product, ScanError, ScanErrorKind
from pawscan.domain.scan.ports import ICatalogClient, ICodeReader
from pawscan.domain.scan.renderer import RenderedEvaluation, render
from pawscan.domain.scan.state_machine import (
    CodeAdmitted,
    Dismiss,
    LookupFailed,
    LookupSucceeded,
    SessionEvent,
    SessionSnapshot,
    SessionState,
    StartScan,
    transition,
)
from pawscan.domain.shared.errors import CatalogError, LookupTimeoutError

logger = structlog.get_logger(__name__)

# Same levels the catalog client uses for each failure
_FAILURE_LOG_LEVELS = {
    ScanErrorKind.NOT_FOUND: logging.INFO,
    ScanErrorKind.TRANSPORT: logging.WARNING,
    ScanErrorKind.DECODE: logging.ERROR,
    ScanErrorKind.CONFIGURATION: logging.ERROR,
}


@dataclass(frozen=True)
class SessionView:
    """What the presentation layer renders.

    Attributes:
        state: Current session state.
        barcode: Code being looked up or resolved.
        product: Resolved product (resolved only).
        rendered_evaluation: Evaluation rows (resolved only).
        error: Failure to display (failed only).
    """

    state: SessionState
    barcode: Optional[str] = None
    product: Optional[Product] = None
    rendered_evaluation: Optional[RenderedEvaluation] = None
    error: Optional[ScanError] = None


SessionListener = Callable[[SessionView], None]


class ScanSession:
    """Scan session for one screen instance.

    Flow:
    1. start_scan(): subscribe to the code reader
    2. First code admitted by the debounce gate: release the reader,
       look the code up (bounded by lookup timeout)
    3. Resolved or failed until dismiss()

    Lookups are tagged with the session generation; a result arriving
    after the session moved on is discarded.

    Example:
        >>> async def scan(reader, catalog):
        ...     session = ScanSession(reader=reader, catalog=catalog)
        ...     session.start_scan()
        ...     view = await session.wait_settled()
        ...     if view.rendered_evaluation:
        ...         print(view.rendered_evaluation.overall.label)
        ...     session.dismiss()
    """

    def __init__(
        self,
        reader: ICodeReader,
        catalog: ICatalogClient,
        lookup_timeout_seconds: float = 8.0,
        debounce_window_seconds: float = DebounceGate.DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize session.

        Args:
            reader: Code reader port
            catalog: Catalog client port
            lookup_timeout_seconds: Timeout applied to each lookup
            debounce_window_seconds: Debounce gate window
            clock: Monotonic time source, seconds
        """
        if lookup_timeout_seconds <= 0:
            raise ValueError("Lookup timeout must be positive")

        self.reader = reader
        self.catalog = catalog
        self.lookup_timeout_seconds = lookup_timeout_seconds
        self.gate = DebounceGate(window_seconds=debounce_window_seconds)
        self.clock = clock

        self._snapshot = SessionSnapshot()
        self._rendered: Optional[RenderedEvaluation] = None
        self._listeners: list[SessionListener] = []
        self._cycle_task: Optional[asyncio.Task[None]] = None
        self._release_task: Optional["asyncio.Future[None]"] = None
        self._reader_active = False
        self._reader_released = asyncio.Event()
        self._reader_released.set()

    # ───────────────────────────────────────────────────────
    # Presentation API
    # ───────────────────────────────────────────────────────

    @property
    def snapshot(self) -> SessionSnapshot:
        """Current state machine snapshot."""
        return self._snapshot

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self._snapshot.state

    @property
    def reader_active(self) -> bool:
        """Whether the code reader subscription is held."""
        return self._reader_active

    def view(self) -> SessionView:
        """Build the presentation view of the current snapshot."""
        snapshot = self._snapshot
        return SessionView(
            state=snapshot.state,
            barcode=snapshot.barcode,
            product=snapshot.product,
            rendered_evaluation=self._rendered,
            error=snapshot.error,
        )

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener called with every new view.

        Returns:
            Callable removing the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start_scan(self) -> "asyncio.Task[None]":
        """Start scanning.

        Must be called from a running event loop.

        Returns:
            Task driving this scan (reader, then lookup)

        Raises:
            InvalidTransitionError: If the session is not idle
        """
        self._dispatch(StartScan())
        self.gate.reset()

        generation = self._snapshot.generation
        self._cycle_task = asyncio.get_running_loop().create_task(
            self._run_cycle(generation),
            name=f"scan-session-{generation}",
        )
        return self._cycle_task

    def dismiss(self) -> None:
        """Dismiss the current result, error, or running scan.

        A running scan releases the reader. A pending lookup is not
        cancelled; its result will be discarded.
        """
        previous = self._snapshot
        self._dispatch(Dismiss())

        if previous.state == SessionState.SCANNING and self._cycle_task is not None:
            self._cycle_task.cancel()

    def scan_again(self) -> "asyncio.Task[None]":
        """Discard the current session and start a fresh scan."""
        self.dismiss()
        return self.start_scan()

    async def wait_settled(self) -> SessionView:
        """Wait for the running scan task to finish.

        Also waits for the reader to be released.

        Returns:
            View after the task finished (resolved, failed or idle)
        """
        if self._cycle_task is not None:
            await asyncio.gather(self._cycle_task, return_exceptions=True)
        if self._release_task is not None:
            await asyncio.gather(self._release_task, return_exceptions=True)
        return self.view()

    # ───────────────────────────────────────────────────────
    # Scan cycle
    # ───────────────────────────────────────────────────────

    async def _run_cycle(self, generation: int) -> None:
        """Wait for an admitted code, then look it up."""
        code = await self._await_admitted_code(generation)
        if code is None:
            return

        if self._snapshot.generation != generation or self._snapshot.state != SessionState.SCANNING:
            return

        self._dispatch(CodeAdmitted(code=code))
        await self._lookup(code, self._snapshot.generation)

    async def _await_admitted_code(self, generation: int) -> Optional[str]:
        """Hold the reader subscription until the gate admits a code.

        The subscription is released on every exit path.

        Returns:
            Admitted code, or None if the reader ended or failed
        """
        # A dismissed cycle may still be releasing the reader
        await self._reader_released.wait()
        if self._snapshot.generation != generation:
            return None

        self._reader_released.clear()
        stream: AsyncIterator[str] = self.reader.start()
        self._reader_active = True
        logger.info("Code reader started", generation=generation)

        admitted: Optional[str] = None
        try:
            async for code in stream:
                if not code or not code.strip():
                    logger.debug("Ignoring empty code", generation=generation)
                    continue

                if self.gate.admit(code, self.clock()):
                    admitted = code.strip()
                    break

        except asyncio.CancelledError:
            logger.info("Scan cancelled", generation=generation)
            raise

        except Exception as e:
            logger.error(
                "Code reader failed",
                generation=generation,
                error=str(e),
                exc_info=True,
            )

        finally:
            # Runs to completion even if dismiss() cancels this cycle meanwhile
            self._release_task = asyncio.ensure_future(self._release_reader(stream, generation))
            await asyncio.shield(self._release_task)

        if admitted is None and self._snapshot.generation == generation:
            # Stream ended without a code: nothing to look up
            self._dispatch(Dismiss())

        return admitted

    async def _release_reader(self, stream: AsyncIterator[str], generation: int) -> None:
        """Close the stream and stop the reader, then hand the reader back."""
        try:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()
            await self.reader.stop()
        finally:
            self._reader_active = False
            self._reader_released.set()
            logger.info("Code reader stopped", generation=generation)

    async def _lookup(self, code: str, generation: int) -> None:
        """Run exactly one lookup and report it under its generation."""
        start_time = time.monotonic()
        logger.info("Looking up barcode", barcode=code, generation=generation)

        event: SessionEvent
        try:
            product = await asyncio.wait_for(
                self.catalog.lookup(code),
                timeout=self.lookup_timeout_seconds,
            )
        except asyncio.TimeoutError:
            timeout = LookupTimeoutError(
                f"Catalog lookup timed out after {self.lookup_timeout_seconds}s"
            )
            event = LookupFailed(
                generation=generation,
                error=ScanError.from_exception(timeout, barcode=code),
            )
        except CatalogError as e:
            event = LookupFailed(
                generation=generation,
                error=ScanError.from_exception(e, barcode=code),
            )
        except Exception as e:
            logger.error(
                "Unexpected lookup failure",
                barcode=code,
                generation=generation,
                error=str(e),
                exc_info=True,
            )
            event = LookupFailed(
                generation=generation,
                error=ScanError.from_exception(e, barcode=code),
            )
        else:
            event = LookupSucceeded(generation=generation, product=product)

        time_ms = round((time.monotonic() - start_time) * 1000, 2)

        if not self._dispatch(event):
            logger.info(
                "Discarding stale lookup result",
                barcode=code,
                lookup_generation=generation,
                current_generation=self._snapshot.generation,
                time_ms=time_ms,
            )
            return

        if isinstance(event, LookupFailed):
            logger.log(
                _FAILURE_LOG_LEVELS[event.error.kind],
                "Scan failed",
                barcode=code,
                kind=event.error.kind.value,
                cause=event.error.cause,
                time_ms=time_ms,
            )
        else:
            logger.info("Scan resolved", barcode=code, time_ms=time_ms)

    # ───────────────────────────────────────────────────────
    # State handling
    # ───────────────────────────────────────────────────────

    def _dispatch(self, event: SessionEvent) -> bool:
        """Apply an event and notify listeners.

        Returns:
            True if the snapshot changed
        """
        previous = self._snapshot
        snapshot = transition(previous, event)
        if snapshot is previous:
            return False

        self._snapshot = snapshot
        self._rendered = render(snapshot.product) if snapshot.product is not None else None

        logger.debug(
            "Session transition",
            event_type=type(event).__name__,
            from_state=previous.state.value,
            to_state=snapshot.state.value,
            generation=snapshot.generation,
        )

        view = self.view()
        for listener in list(self._listeners):
            listener(view)
        return True
