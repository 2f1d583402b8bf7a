"""Endpoints exposing the Healthpoint directory to the web client."""
from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify

from vaxfinder.app import get_location_store
from vaxfinder.app.services.eligibility import filter_result
from vaxfinder.app.services.location_store import FetchResult, Failed, Loading

locations_bp = Blueprint("locations", __name__)


def _status_for(result: FetchResult) -> HTTPStatus:
    if isinstance(result, Loading):
        return HTTPStatus.ACCEPTED
    if isinstance(result, Failed):
        return HTTPStatus.SERVICE_UNAVAILABLE
    return HTTPStatus.OK


def _mounted_result() -> FetchResult:
    store = get_location_store()
    return store.mount(block=bool(current_app.config.get("HEALTHPOINT_BLOCKING_LOAD")))


@locations_bp.get("/locations")
def list_locations() -> tuple[object, HTTPStatus]:
    """Return every directory location for the location picker."""

    result = _mounted_result()
    return jsonify(result.to_dict()), _status_for(result)


@locations_bp.get("/walk-in")
def list_walk_in_locations() -> tuple[object, HTTPStatus]:
    """Return the locations the public can walk or drive in to today."""

    result = filter_result(_mounted_result())
    return jsonify(result.to_dict()), _status_for(result)


@locations_bp.post("/refresh")
def refresh_locations() -> tuple[object, HTTPStatus]:
    """Discard the cached directory and load it again."""

    store = get_location_store()
    result = store.refresh(block=bool(current_app.config.get("HEALTHPOINT_BLOCKING_LOAD")))
    current_app.logger.info("Healthpoint directory refresh requested (%s)", result.status)
    return jsonify(result.to_dict()), _status_for(result)
