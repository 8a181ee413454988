"""Per-client throttle for public survey submissions."""

from __future__ import annotations

import asyncio
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable

from ..config import settings


@dataclass
class _ClientWindow:
    hits: deque[float] = field(default_factory=deque)
    blocked_until: float = 0.0


class SubmissionThrottle:
    """Sliding-window counter per client.

    A client that goes over ``max_submissions`` inside the window is refused
    for ``block_seconds``. Limits left as ``None`` are read from settings on
    every call so they follow runtime configuration.
    """

    def __init__(
        self,
        window_seconds: float | None = None,
        max_submissions: int | None = None,
        block_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._window = window_seconds
        self._max = max_submissions
        self._block = block_seconds
        self._clock = clock
        self._clients: dict[str, _ClientWindow] = {}
        self._lock = asyncio.Lock()

    def _limits(self) -> tuple[float, int, float]:
        return (
            self._window if self._window is not None else settings.form_rate_limit_window_seconds,
            self._max if self._max is not None else settings.form_rate_limit_max_submissions,
            self._block if self._block is not None else settings.form_rate_limit_block_seconds,
        )

    async def allow(self, client: str) -> tuple[bool, int]:
        """Record one attempt; return (allowed, retry_after_seconds)."""
        window, limit, block = self._limits()
        now = self._clock()

        async with self._lock:
            state = self._clients.setdefault(client, _ClientWindow())
            if now < state.blocked_until:
                return False, max(1, int(state.blocked_until - now))

            while state.hits and state.hits[0] <= now - window:
                state.hits.popleft()

            if len(state.hits) >= limit:
                state.blocked_until = now + block
                return False, max(1, int(block))

            state.hits.append(now)
            return True, 0

    def reset(self, client: str | None = None) -> None:
        if client is None:
            self._clients.clear()
        else:
            self._clients.pop(client, None)


survey_submission_rate_limiter = SubmissionThrottle()
