from __future__ import annotations

import logging


class ProgressReporter:
    """Log integer completion percentages as work advances.

    A percentage is emitted only when ``processed * 100 // total`` increases,
    so the emitted sequence is strictly increasing. ``finish()`` emits 100%
    if it was never reached, including when ``total`` is zero.
    """

    def __init__(self, total: int, logger: logging.Logger) -> None:
        self.total = total
        self.processed = 0
        self.reported: list[int] = []
        self._logger = logger
        self._last_percent = 0

    def advance(self, n: int = 1) -> None:
        self.processed += n
        if self.total <= 0:
            return

        percent = min(100, self.processed * 100 // self.total)
        if percent > self._last_percent:
            self._emit(percent)

    def finish(self) -> None:
        if self._last_percent != 100:
            self._emit(100)

    def _emit(self, percent: int) -> None:
        self._last_percent = percent
        self.reported.append(percent)
        self._logger.info("%d%%", percent)


__all__ = ["ProgressReporter"]
