# capacity.py

"""Capacity threshold evaluation for gear profiles."""

import logging
from typing import Mapping, NamedTuple, Optional

from .exceptions import UnknownProfileError
from .models import ProfileSummary
from .utils import percent

logger = logging.getLogger(__name__)

class CapacityStatus(NamedTuple):
    """Measured active gear usage of a profile against a threshold."""
    profile: str
    usage_pct: float
    threshold: float
    triggered: bool

class CapacityAlert(NamedTuple):
    """Raised condition: a profile's usage reached the threshold."""
    profile: str
    usage_pct: float
    threshold: float

def usage_pct(summary: ProfileSummary) -> float:
    """
    Percentage of active gear capacity in use for a profile.

    A profile with neither active nor available gears has no demand and
    reports 0.0.
    """
    active = summary.total_active_gears
    return percent(active, summary.available_active_gears + active)

def evaluate_capacity(
    profiles: Mapping[str, ProfileSummary],
    profile: str,
    threshold: float
) -> CapacityStatus:
    """
    Compare a profile's usage with the threshold; equality triggers.

    Raises UnknownProfileError if no summary exists for the profile.
    """
    summary = profiles.get(profile)
    if summary is None:
        raise UnknownProfileError(
            f"No summary for profile '{profile}'; known profiles: {', '.join(sorted(profiles)) or 'none'}"
        )

    usage = usage_pct(summary)
    return CapacityStatus(
        profile=profile,
        usage_pct=usage,
        threshold=threshold,
        triggered=usage >= threshold,
    )

def check_capacity(
    profiles: Mapping[str, ProfileSummary],
    profile: str,
    threshold: float
) -> Optional[CapacityAlert]:
    """Return a CapacityAlert when the profile is at or above the threshold."""
    status = evaluate_capacity(profiles, profile, threshold)
    if not status.triggered:
        logger.info(f"Profile {profile} at {status.usage_pct:.2f}% (threshold {threshold}%)")
        return None

    logger.warning(
        f"Profile {profile} active gear usage {status.usage_pct:.2f}% "
        f"reached threshold {threshold}%"
    )
    return CapacityAlert(profile=profile, usage_pct=status.usage_pct, threshold=threshold)
