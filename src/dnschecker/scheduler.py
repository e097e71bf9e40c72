"""
Scheduler — repeats check cycles on a fixed interval until stopped.

Cycles never overlap: the wait starts only after a cycle has finished.
A stop request (SIGINT/SIGTERM) ends the wait at once, or lets the
running cycle complete first.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import time
from typing import Callable, Optional

from dnschecker.checker import Checker
from dnschecker.models import CycleResult

logger = logging.getLogger(__name__)


class Scheduler:
    """Runs a Checker forever with a fixed pause between cycles."""

    def __init__(
        self,
        checker: Checker,
        interval: float = 60.0,
        heartbeat_interval: float = 1800.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.checker = checker
        self.interval = interval
        self.heartbeat_interval = heartbeat_interval
        self._clock = clock
        self._stop = asyncio.Event()
        self.cycles: int = 0
        self.mismatches: int = 0
        self.failures: int = 0

    @property
    def stopping(self) -> bool:
        return self._stop.is_set()

    def stop(self) -> None:
        """Ask the loop to stop after the current cycle."""
        self._stop.set()

    def install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._on_signal, sig)
            except (NotImplementedError, RuntimeError):
                logger.debug("Cannot install handler for %s on this platform", sig.name)

    def _on_signal(self, sig: signal.Signals) -> None:
        logger.info("Received %s, shutting down", sig.name)
        self.stop()

    async def run(self, max_cycles: Optional[int] = None) -> None:
        logger.info(
            "Starting DNS checker for %s, checking every %ss",
            self.checker.hostname,
            self.interval,
        )
        last_heartbeat = self._clock()
        while not self._stop.is_set():
            await self.run_once()
            if max_cycles is not None and self.cycles >= max_cycles:
                break

            if self.heartbeat_interval > 0:
                now = self._clock()
                if now - last_heartbeat >= self.heartbeat_interval:
                    self._log_heartbeat()
                    last_heartbeat = now

            if await self._wait(self.interval):
                break
        logger.info("DNS checker stopped after %d cycle(s)", self.cycles)

    async def run_once(self) -> Optional[CycleResult]:
        """One cycle; unexpected errors are logged and counted, not raised."""
        self.cycles += 1
        try:
            result = await self.checker.run_cycle()
        except Exception:
            logger.exception("Unexpected error during check cycle %d", self.cycles)
            self.failures += 1
            return None

        if result.mismatch:
            self.mismatches += 1
        elif result.failed:
            self.failures += 1
        return result

    async def _wait(self, seconds: float) -> bool:
        """Sleep for ``seconds``; True if a stop was requested meanwhile."""
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    def _log_heartbeat(self) -> None:
        logger.info(
            "Still watching %s: %d cycle(s), %d mismatch(es), %d failure(s)",
            self.checker.hostname,
            self.cycles,
            self.mismatches,
            self.failures,
        )
