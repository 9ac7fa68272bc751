"""Time budget shared by every packer of a run."""

from __future__ import annotations

import time
from typing import Callable


class Deadline:
    """Cooperative cancellation token.

    Created once when the search starts and handed to every packer, which
    polls :meth:`expired` before each placement attempt.

    Attributes:
        budget: Time budget in seconds.
    """

    def __init__(
        self,
        budget: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.budget = budget
        self._clock = clock
        self._start = clock()

    def elapsed(self) -> float:
        """Seconds since the deadline was started."""
        return self._clock() - self._start

    def expired(self) -> bool:
        """True once the budget is used up."""
        return self.elapsed() >= self.budget
