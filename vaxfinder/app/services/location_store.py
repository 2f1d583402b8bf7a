"""Shared publish/subscribe slot for the Healthpoint directory result."""
from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Sequence, Union

from vaxfinder.app.models import HealthpointLocation
from vaxfinder.app.services.healthpoint_client import DirectoryFetcher

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Loading:
    """The directory has not been loaded yet."""

    status = "loading"

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "locations": []}


@dataclass(frozen=True)
class Succeeded:
    """The directory loaded; ``locations`` keeps the directory order."""

    locations: tuple[HealthpointLocation, ...]
    status = "ok"

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "locations": [location.to_dict() for location in self.locations],
        }


@dataclass(frozen=True)
class Failed:
    """The directory could not be loaded."""

    error: Exception
    status = "error"

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "locations": [], "message": str(self.error)}


FetchResult = Union[Loading, Succeeded, Failed]
Subscriber = Callable[[FetchResult], None]

LOADING = Loading()


class LocationStore:
    """Holds the latest :data:`FetchResult` and notifies subscribers of changes.

    One store is created per application. Readers call :meth:`read` or
    :meth:`subscribe`; the store itself drives the directory load through
    :meth:`mount`, so any number of consumers share a single fetch.

    Subscribers are notified synchronously in registration order. A publish
    made while subscribers are being notified is queued until every
    subscriber has seen the current transition.
    """

    def __init__(self, fetcher: DirectoryFetcher) -> None:
        self.fetcher = fetcher
        self._lock = threading.RLock()
        self._state: FetchResult = LOADING
        self._subscribers: list[Subscriber] = []
        self._pending: deque[FetchResult] = deque()
        self._dispatching = False
        self._dispatch_thread: int | None = None
        self._loader: threading.Thread | None = None
        self._generation = 0
        self._closed = False

    def read(self) -> FetchResult:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` for state changes and return an unsubscribe hook."""

        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, result: FetchResult) -> None:
        """Replace the current state and notify subscribers. No-op once closed."""

        with self._lock:
            if self._closed:
                LOGGER.debug("Ignoring %s result published to a closed store", result.status)
                return
            self._pending.append(result)
            if self._dispatching:
                return
            self._dispatching = True
            self._dispatch_thread = threading.get_ident()
            try:
                while self._pending and not self._closed:
                    self._state = self._pending.popleft()
                    for callback in list(self._subscribers):
                        self._notify(callback, self._state)
            finally:
                self._pending.clear()
                self._dispatching = False
                self._dispatch_thread = None

    def mount(self, *, block: bool = False) -> FetchResult:
        """Start loading the directory unless a load already ran or is running.

        Returns the state after the call; with ``block`` the call waits for
        the load started here (or already in flight) to finish. Called from
        a subscriber with ``block``, the load runs inline and its result is
        delivered once the current notifications finish; the returned value
        is that pending result.
        """

        in_dispatch = self._dispatch_thread == threading.get_ident()
        with self._lock:
            if self._closed:
                return self._state
            loader = self._loader
            if isinstance(self._latest(), Loading) and loader is None:
                if block and in_dispatch:
                    self._load(self._generation)
                    return self._latest()
                loader = self._loader = threading.Thread(
                    target=self._load,
                    args=(self._generation,),
                    name="healthpoint-directory-load",
                    daemon=True,
                )
                loader.start()

        if in_dispatch:
            # the loader needs the lock this thread holds until dispatch ends
            return self._latest()
        if block and loader is not None and loader is not threading.current_thread():
            loader.join()
        return self.read()

    def refresh(self, *, block: bool = False) -> FetchResult:
        """Drop the cached directory and load it again."""

        with self._lock:
            if self._closed:
                return self._state
            self._generation += 1
            self._loader = None
            self.fetcher.reset()
            self.publish(LOADING)
        return self.mount(block=block)

    def close(self) -> None:
        """Tear the store down; later results are discarded."""

        with self._lock:
            self._closed = True
            self._subscribers.clear()
            self._pending.clear()

    def _load(self, generation: int) -> None:
        try:
            locations = self.fetcher.fetch()
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("Healthpoint directory unavailable")
            result: FetchResult = Failed(exc)
        else:
            result = Succeeded(tuple(locations))

        with self._lock:
            if generation != self._generation:
                LOGGER.debug("Discarding directory result from a superseded load")
                return
            self.publish(result)

    def _latest(self) -> FetchResult:
        """Return the newest state, counting publishes still waiting for delivery."""

        with self._lock:
            if self._pending:
                return self._pending[-1]
            return self._state

    @staticmethod
    def _notify(callback: Subscriber, result: FetchResult) -> None:
        try:
            callback(result)
        except Exception:  # noqa: BLE001
            LOGGER.exception("Location store subscriber %r failed", callback)


def locations_or_empty(result: FetchResult) -> Sequence[HealthpointLocation]:
    """Return the loaded locations, or an empty sequence while loading or failed."""

    if isinstance(result, Succeeded):
        return result.locations
    return ()
