"""Same-day walk-in eligibility rules for Healthpoint locations."""
from __future__ import annotations

from typing import Iterable

from vaxfinder.app.models import HealthpointLocation, Instruction
from vaxfinder.app.services.location_store import FetchResult, Succeeded

WALK_IN_ACCESS = frozenset({Instruction.WALK_IN, Instruction.DRIVE_THROUGH})
RESTRICTED_ACCESS = frozenset({Instruction.ENROLLED_ONLY, Instruction.INVITATION_ONLY})


def is_walk_in_eligible(location: HealthpointLocation) -> bool:
    """Return whether the general public can walk or drive in today.

    Restrictions win over access: a walk-in clinic limited to enrolled
    patients is not eligible.
    """

    instructions = set(location.instructions)
    return (
        location.is_open_today
        and bool(instructions & WALK_IN_ACCESS)
        and not instructions & RESTRICTED_ACCESS
    )


def filter_walk_in_eligible(
    locations: Iterable[HealthpointLocation],
) -> list[HealthpointLocation]:
    """Return the walk-in eligible locations in their original order."""

    return [location for location in locations if is_walk_in_eligible(location)]


def filter_result(result: FetchResult) -> FetchResult:
    """Apply the walk-in filter to a loaded result; other states pass through."""

    if isinstance(result, Succeeded):
        return Succeeded(tuple(filter_walk_in_eligible(result.locations)))
    return result
