"""Shutdown Signal Source — turns SIGINT/SIGTERM into a one-shot asyncio.Event."""

import asyncio
import signal
from typing import Iterable, Optional

import structlog

log = structlog.get_logger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownSignal:
    """
    Broadcast notification that the process should stop.

    Any number of waiters may await `event`; once set it stays set.
    """

    def __init__(self):
        self.event = asyncio.Event()
        self.received: Optional[signal.Signals] = None
        self._installed: list = []
        self._previous: dict = {}

    @property
    def requested(self) -> bool:
        return self.event.is_set()

    def request(self, sig: Optional[signal.Signals] = None) -> None:
        """Request shutdown, optionally recording the signal that caused it."""
        if sig is not None:
            log.info("signal_received", signal=signal.Signals(sig).name)
            if self.received is None:
                self.received = signal.Signals(sig)
        self.event.set()

    def install(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        signals: Iterable[signal.Signals] = DEFAULT_SIGNALS,
    ) -> None:
        """Register handlers on the running event loop."""
        loop = loop or asyncio.get_running_loop()
        for sig in signals:
            try:
                loop.add_signal_handler(sig, self.request, sig)
                self._installed.append((loop, sig))
            except (NotImplementedError, RuntimeError):
                try:
                    previous = signal.signal(
                        sig,
                        lambda *_args, _sig=sig: loop.call_soon_threadsafe(self.request, _sig),
                    )
                except (ValueError, AttributeError):
                    continue
                self._previous[sig] = previous

    def uninstall(self) -> None:
        """Remove loop handlers and restore any handler replaced by the fallback."""
        for loop, sig in self._installed:
            loop.remove_signal_handler(sig)
        self._installed.clear()
        for sig, previous in self._previous.items():
            signal.signal(sig, previous if previous is not None else signal.SIG_DFL)
        self._previous.clear()
