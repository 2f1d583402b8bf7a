"""Application middleware utilities such as request logging."""
from __future__ import annotations

import time

from flask import Flask, current_app, g, request

LOGGED_PREFIXES: tuple[str, ...] = ("/api/",)


def register_request_logging(app: Flask) -> None:
    """Attach middleware that logs method, path, status and duration of API calls."""

    @app.before_request
    def _start_timer() -> None:
        path = _normalize_path(request.path)
        if not path.startswith(LOGGED_PREFIXES):
            g.request_started = None
            return
        g.request_started = time.perf_counter()

    @app.after_request
    def _log_request(response):
        started: float | None = getattr(g, "request_started", None)
        if started is None:
            return response

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        log = current_app.logger.warning if response.status_code >= 500 else current_app.logger.info
        log(
            "%s %s -> %s (%d ms)",
            request.method.upper(),
            _normalize_path(request.path),
            response.status_code,
            elapsed_ms,
        )
        return response


def _normalize_path(path: str) -> str:
    if path != "/" and path.endswith("/"):
        return path[:-1]
    return path
