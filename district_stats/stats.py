# stats.py

"""Collect node and district data and aggregate it into statistics."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .capacity import CapacityAlert, check_capacity
from .collectors import BrokerClient, NodeFactsCollector
from .config import DEFAULT_BROKER_TIMEOUT, DEFAULT_PROFILE, StatsConfig
from .district_summary import summarize_districts
from .models import DistrictEntry, DistrictSummary, GlobalCounts, NodeEntry, ProfileSummary, RecordCounts, UserCounts
from .profile_summary import summarize_profiles
from .record_counter import count_record_batches
from .utils import get_session, time_step

logger = logging.getLogger(__name__)

@dataclass
class StatsResult:
    """Everything one collection pass produced; the contract with renderers."""
    timings_msecs: Dict[str, float] = field(default_factory=dict)
    node_entries: Dict[str, NodeEntry] = field(default_factory=dict)
    district_entries: Dict[str, DistrictEntry] = field(default_factory=dict)
    district_summaries: Dict[str, DistrictSummary] = field(default_factory=dict)
    profile_summaries: Dict[str, ProfileSummary] = field(default_factory=dict)
    count_all: Optional[GlobalCounts] = None
    count_by_profile: Optional[Dict[str, RecordCounts]] = None
    count_by_user: Optional[Dict[str, UserCounts]] = None

    def to_dict(self) -> Dict[str, Any]:
        def each(mapping):
            if mapping is None:
                return None
            return {key: value.to_dict() for key, value in mapping.items()}

        return {
            'timings_msecs': dict(self.timings_msecs),
            'node_entries': each(self.node_entries),
            'district_entries': each(self.district_entries),
            'district_summaries': each(self.district_summaries),
            'profile_summaries': each(self.profile_summaries),
            'count_all': self.count_all.to_dict() if self.count_all is not None else None,
            'count_by_profile': each(self.count_by_profile),
            'count_by_user': each(self.count_by_user),
        }


class Stats:
    """Runs one point-in-time statistics pass over the fleet."""

    def __init__(
        self,
        config: StatsConfig,
        broker: Optional[BrokerClient] = None,
        collector: Optional[NodeFactsCollector] = None
    ):
        self.config = config
        self._session = get_session()
        self.broker = broker or BrokerClient(
            config.broker_url,
            session=self._session,
            timeout=DEFAULT_BROKER_TIMEOUT,
            batch_size=config.batch_size
        )
        self.collector = collector

    def _node_collector(self) -> NodeFactsCollector:
        if self.collector is None:
            self.collector = NodeFactsCollector(
                self.broker.list_nodes(),
                session=self._session,
                port=self.config.facts_port
            )
        return self.collector

    def get_node_entries(self) -> Dict[str, NodeEntry]:
        return self._node_collector().collect(timeout=self.config.wait)

    def get_district_entries(self) -> Dict[str, DistrictEntry]:
        return self.broker.list_districts()

    def count_records(self):
        return count_record_batches(self.broker.iter_user_batches())

    def gather_statistics(self) -> StatsResult:
        """
        Collect, aggregate and time every step of one pass.

        Non-responding nodes only show up as missing nodes. Failures to reach
        the broker or the node transport propagate to the caller.
        """
        result = StatsResult()
        timings = result.timings_msecs

        result.node_entries = time_step(timings, 'get_node_entries', self.get_node_entries)
        result.district_entries = time_step(timings, 'get_district_entries', self.get_district_entries)
        result.district_summaries = time_step(
            timings, 'summarize_districts',
            summarize_districts, result.district_entries, result.node_entries
        )

        if self.config.db_stats:
            result.count_all, result.count_by_profile, result.count_by_user = time_step(
                timings, 'count_records', self.count_records
            )

        result.profile_summaries = time_step(
            timings, 'summarize_profiles',
            summarize_profiles, result.district_summaries, result.count_by_profile
        )

        missing = sum(len(p.missing_nodes) for p in result.profile_summaries.values())
        if missing:
            logger.warning(f"{missing} district nodes did not report facts")
        logger.info(
            f"Summarized {len(result.node_entries)} nodes in "
            f"{len(result.district_summaries)} districts and {len(result.profile_summaries)} profiles"
        )
        return result

    def check_capacity(self, result: StatsResult) -> Optional[CapacityAlert]:
        """Evaluate the configured profile against the configured threshold."""
        profile = self.config.profile or DEFAULT_PROFILE
        return check_capacity(result.profile_summaries, profile, self.config.threshold)


def missing_nodes(result: StatsResult) -> List[str]:
    """Every declared district member that did not report, across all profiles."""
    return sorted(
        node for summary in result.profile_summaries.values() for node in summary.missing_nodes
    )
