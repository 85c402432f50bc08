# district_summary.py

"""Roll node facts up into per-district summaries."""

import logging
from typing import Dict, Mapping

from .models import (
    DistrictEntry, DistrictSummary, NodeEntry,
    get_or_create, new_district_summary, new_none_district, none_district_id
)
from .utils import max_or_default, min_or_default, safe_divide

logger = logging.getLogger(__name__)

def add_node(summary: DistrictSummary, node: NodeEntry) -> DistrictSummary:
    """Fold one reporting node into a district summary."""
    summary.node_entries.append(node)
    if node.id in summary.missing_nodes:
        summary.missing_nodes.remove(node.id)

    summary.nodes_count += 1
    if node.district_active:
        summary.nodes_active += 1
    else:
        summary.nodes_inactive += 1
    summary.total_gears += node.total_gears
    summary.total_active_gears += node.active_gears
    summary.available_active_gears += node.available_active_gears
    summary.active_usage_pct_sum += node.gears_active_usage_pct
    return summary

def finalize_district(summary: DistrictSummary) -> DistrictSummary:
    """Compute averages, extremes and effective capacity once all nodes are in."""
    usages = [node.gears_active_usage_pct for node in summary.node_entries]
    summary.avg_active_usage_pct = safe_divide(summary.active_usage_pct_sum, summary.nodes_count)
    summary.lowest_active_usage_pct = min_or_default(usages)
    summary.highest_active_usage_pct = max_or_default(usages)
    summary.effective_available_gears = min(
        summary.available_active_gears, summary.dist_avail_capacity
    )
    summary.missing_nodes = sorted(summary.missing_nodes)
    return summary

def summarize_districts(
    districts: Mapping[str, DistrictEntry],
    nodes: Mapping[str, NodeEntry]
) -> Dict[str, DistrictSummary]:
    """
    Join node facts to district definitions.

    Nodes whose district is absent or unknown are placed in a synthetic
    "(NONE)" district per profile, stored under its own id alongside the
    real districts.

    Args:
        districts: District definitions keyed by uuid
        nodes: Reporting nodes keyed by host; non-responding nodes are absent

    Returns:
        DistrictSummary for every district plus any synthetic ones, keyed by uuid
    """
    summaries = {
        uuid: new_district_summary(entry) for uuid, entry in districts.items()
    }
    none_districts: Dict[str, DistrictSummary] = {}

    for node in nodes.values():
        summary = summaries.get(node.district_uuid) if node.district_uuid else None
        if summary is None:
            if node.district_uuid:
                logger.warning(
                    f"Node {node.id} reports unknown district {node.district_uuid}"
                )
            summary = get_or_create(none_districts, node.node_profile, new_none_district)
        add_node(summary, node)

    for profile, summary in none_districts.items():
        summaries[none_district_id(profile)] = summary

    for summary in summaries.values():
        finalize_district(summary)
        if summary.missing_nodes:
            logger.debug(
                f"District {summary.name} missing nodes: {', '.join(summary.missing_nodes)}"
            )

    return summaries
