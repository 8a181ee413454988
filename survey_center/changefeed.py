"""In-process change feed for live collection snapshots.

Subscribers get the full query result immediately and again after every
committed write to the collection they watch. No diffing: each delivery
replaces the subscriber's view.
"""

from __future__ import annotations

import inspect
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)

TEMPLATES = "surveyTemplates"
ASSIGNMENTS = "surveyAssignments"
RESPONSES = "surveyResponses"

Snapshot = list[dict[str, Any]]
Loader = Callable[[AsyncSession], Awaitable[Snapshot]]
Callback = Callable[[Snapshot], Any]
Unsubscribe = Callable[[], None]


@dataclass
class _Subscription:
    collection: str
    loader: Loader
    callback: Callback


class ChangeFeed:
    """Fan-out of collection snapshots to registered callbacks."""

    def __init__(self, session_factory: async_sessionmaker | None = None) -> None:
        self._session_factory = session_factory
        self._subscriptions: dict[int, _Subscription] = {}
        self._ids = itertools.count(1)

    def bind(self, session_factory: async_sessionmaker | None) -> None:
        self._session_factory = session_factory

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def _factory(self) -> async_sessionmaker:
        if self._session_factory is None:
            from .database import async_session_factory

            self._session_factory = async_session_factory
        return self._session_factory

    async def subscribe(self, collection: str, loader: Loader, callback: Callback) -> Unsubscribe:
        sub_id = next(self._ids)
        sub = _Subscription(collection=collection, loader=loader, callback=callback)
        self._subscriptions[sub_id] = sub
        await self._deliver(sub)

        def unsubscribe() -> None:
            self._subscriptions.pop(sub_id, None)

        return unsubscribe

    async def notify(self, collection: str) -> None:
        for sub in list(self._subscriptions.values()):
            if sub.collection == collection:
                await self._deliver(sub)

    async def _deliver(self, sub: _Subscription) -> None:
        # Failures stay with the subscriber; the write that triggered the
        # delivery has already committed.
        try:
            async with self._factory()() as db:
                snapshot = await sub.loader(db)
            result = sub.callback(snapshot)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Change feed delivery failed for %s", sub.collection)


change_feed = ChangeFeed()
