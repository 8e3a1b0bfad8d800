"""Elapsed-time indicator shown while waiting for the first delta."""

import asyncio
import time
from typing import TextIO

YELLOW = "\u001b[93m"
RESET = "\u001b[0m"


class ProgressIndicator:
    """Rewrites ``<label> S.mmm:`` on the current line until stopped.

    stop() cancels the ticking task and waits for it, so nothing it writes can
    interleave with output that follows.
    """

    def __init__(self, label: str, output: TextIO, interval: float = 0.1) -> None:
        self.label = label
        self.output = output
        self.interval = interval
        self._task: asyncio.Task[None] | None = None
        self._start = 0.0
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def elapsed(self) -> float:
        return time.monotonic() - self._start

    def _render(self, elapsed: float) -> None:
        millis = int(elapsed * 1000)
        self.output.write(f"\r{YELLOW}{self.label} {millis // 1000}.{millis % 1000:03d}{RESET}: ")
        self.output.flush()

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.ticks += 1
            self._render(self.elapsed())

    def start(self) -> None:
        """Begin rendering. Does nothing if already running."""
        if self._task is not None:
            return
        self._start = time.monotonic()
        self.output.write(f"\n{YELLOW}{self.label}{RESET}: 0.000")
        self.output.flush()
        self._task = asyncio.create_task(self._tick())

    async def stop(self) -> None:
        """Cancel rendering and wait for it to finish. Safe to call repeatedly."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        self.output.write("\n")
        self.output.flush()
