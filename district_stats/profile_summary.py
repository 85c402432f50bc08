# profile_summary.py

"""Roll district summaries up into per-profile summaries."""

import logging
from typing import Dict, Mapping, Optional

from .models import DistrictSummary, ProfileSummary, RecordCounts, get_or_create, new_profile_summary
from .utils import max_or_default, min_or_default, safe_divide

logger = logging.getLogger(__name__)

def add_district(summary: ProfileSummary, district: DistrictSummary) -> ProfileSummary:
    """Fold one district summary into its profile summary."""
    summary.districts.append(district)
    summary.district_count += 1
    summary.nodes_count += district.nodes_count
    summary.nodes_active += district.nodes_active
    summary.nodes_inactive += district.nodes_inactive
    summary.missing_nodes.extend(district.missing_nodes)
    summary.available_active_gears += district.available_active_gears
    summary.total_gears += district.total_gears
    summary.total_active_gears += district.total_active_gears
    summary.district_capacity += district.district_capacity
    summary.dist_avail_capacity += district.dist_avail_capacity
    summary.dist_avail_uids += district.dist_avail_uids
    # Node-weighted; divided by nodes_count in finalize_profile
    summary.weighted_usage_pct_sum += district.avg_active_usage_pct * district.nodes_count
    return summary

def finalize_profile(
    summary: ProfileSummary,
    counts: Optional[RecordCounts] = None
) -> ProfileSummary:
    """Compute the weighted average, extremes and effective capacity for a profile."""
    summary.avg_active_usage_pct = safe_divide(summary.weighted_usage_pct_sum, summary.nodes_count)
    summary.lowest_active_usage_pct = min_or_default(d.lowest_active_usage_pct for d in summary.districts)
    summary.highest_active_usage_pct = max_or_default(d.highest_active_usage_pct for d in summary.districts)
    summary.effective_available_gears = min(
        summary.available_active_gears, summary.dist_avail_capacity
    )
    summary.missing_nodes = sorted(summary.missing_nodes)

    if counts is not None:
        summary.total_db_gears = counts.gears
        summary.total_db_apps = counts.apps
        summary.cartridges = counts.cartridges.copy()
        summary.cartridges_short = counts.cartridges_short.copy()
    return summary

def summarize_profiles(
    districts: Mapping[str, DistrictSummary],
    counts_by_profile: Optional[Mapping[str, RecordCounts]] = None
) -> Dict[str, ProfileSummary]:
    """
    Group district summaries by profile.

    Args:
        districts: District summaries keyed by uuid, synthetic ones included
        counts_by_profile: Persisted record counts keyed by profile, if counted

    Returns:
        ProfileSummary keyed by profile
    """
    profiles: Dict[str, ProfileSummary] = {}
    for district in districts.values():
        add_district(get_or_create(profiles, district.profile, new_profile_summary), district)

    for profile, summary in profiles.items():
        counts = None
        if counts_by_profile is not None:
            counts = counts_by_profile.get(profile, RecordCounts())
        finalize_profile(summary, counts)
        logger.debug(
            f"Profile {profile}: {summary.district_count} districts, "
            f"{summary.nodes_count} nodes, {summary.avg_active_usage_pct:.1f}% active usage"
        )

    return profiles
