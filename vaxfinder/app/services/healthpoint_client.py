"""Client for the Healthpoint clinic directory."""
from __future__ import annotations

import json
import logging
import threading
from concurrent.futures import Future
from typing import Any
import urllib.error
import urllib.request

from vaxfinder.config import DEFAULT_HEALTHPOINT_URL
from vaxfinder.app.errors import DirectoryError, DirectoryNetworkError, DirectoryParseError
from vaxfinder.app.models import HealthpointLocation, RawLocationEntry, tag_location

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

Locations = tuple[HealthpointLocation, ...]


def request_directory(url: str, timeout: float = DEFAULT_TIMEOUT) -> Any:
    """GET the directory endpoint and return the decoded JSON body."""

    LOGGER.debug("Requesting Healthpoint directory from %s", url)
    request = urllib.request.Request(url, method="GET")

    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            status = getattr(response, "status", 200)
            body = response.read()
    except urllib.error.HTTPError as exc:
        raise DirectoryNetworkError(
            f"Healthpoint directory answered with HTTP {exc.code}."
        ) from exc
    except (urllib.error.URLError, OSError) as exc:
        raise DirectoryNetworkError("Unable to contact the Healthpoint directory.") from exc

    if not 200 <= status < 300:
        raise DirectoryNetworkError(f"Healthpoint directory answered with HTTP {status}.")

    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DirectoryParseError("Healthpoint directory response was not valid JSON.") from exc

    LOGGER.debug("Received %d bytes from the Healthpoint directory", len(body))
    return data


def parse_directory(data: Any) -> Locations:
    """Turn the decoded directory array into tagged locations, keeping order."""

    if not isinstance(data, list):
        raise DirectoryParseError("Healthpoint directory must be a JSON array.")
    return tuple(tag_location(RawLocationEntry.from_dict(item)) for item in data)


class DirectoryFetcher:
    """Loads the directory at most once and hands the same result to every caller.

    Only successful loads are kept by default, so a failed load is retried on
    the next call. With ``cache_failures`` set, the first failure is kept and
    re-raised to every later caller until :meth:`reset`.

    Callers on other threads that arrive while a load is in flight wait for
    that load instead of starting their own request.
    """

    def __init__(
        self,
        url: str = DEFAULT_HEALTHPOINT_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        cache_failures: bool = False,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.cache_failures = cache_failures
        self._lock = threading.Lock()
        self._outcome: Future[Locations] | None = None

    def fetch(self) -> Locations:
        """Return the tagged directory, loading it on the first call."""

        with self._lock:
            outcome = self._outcome
            owner = outcome is None
            if owner:
                outcome = self._outcome = Future()

        if not owner:
            return outcome.result()

        try:
            locations = parse_directory(request_directory(self.url, self.timeout))
        except BaseException as exc:
            LOGGER.warning("Healthpoint directory load failed: %s", exc)
            if not (self.cache_failures and isinstance(exc, DirectoryError)):
                with self._lock:
                    if self._outcome is outcome:
                        self._outcome = None
            outcome.set_exception(exc)
            raise

        LOGGER.info("Loaded %d Healthpoint locations", len(locations))
        outcome.set_result(locations)
        return locations

    def reset(self) -> None:
        """Forget the cached outcome so the next fetch reloads the directory."""

        with self._lock:
            self._outcome = None

    @property
    def is_cached(self) -> bool:
        with self._lock:
            outcome = self._outcome
        return outcome is not None and outcome.done()
