# models.py

"""Data models for District Stats."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, MutableMapping, NamedTuple, Optional, TypeVar

from .config import NONE_DISTRICT_NAME, NONE_DISTRICT_PREFIX
from .utils import short_host

K = TypeVar("K")
V = TypeVar("V")

class NodeEntry(NamedTuple):
    """Capacity facts reported by a node."""
    id: str
    name: str
    node_profile: str
    district_uuid: Optional[str]
    district_active: bool
    total_gears: int
    active_gears: int
    inactive_gears: int
    max_gears: int
    max_active_gears: int
    gears_usage_pct: float
    gears_active_usage_pct: float

    @property
    def available_active_gears(self) -> int:
        return self.max_active_gears - self.active_gears

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._asdict())

class DistrictEntry(NamedTuple):
    """A district definition as stored by the broker."""
    uuid: str
    name: str
    profile: str
    nodes: Mapping[str, bool]
    district_capacity: int
    dist_avail_capacity: int
    dist_avail_uids: int

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self._asdict())
        data['nodes'] = dict(self.nodes)
        return data


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return bool(value)


def node_entry_from_facts(host: str, facts: Mapping[str, Any]) -> NodeEntry:
    """
    Build a NodeEntry from the raw facts a node reports.

    Active gears are derived from the active usage percentage; the
    remainder of the reported total is counted as inactive.
    """
    if not isinstance(facts, Mapping):
        raise ValueError(f"Facts from {host} are a {type(facts).__name__}, not an object")

    max_active = int(facts.get('max_active_gears', 0) or 0)
    active_pct = float(facts.get('gears_active_usage_pct', 0.0) or 0.0)
    total = int(facts.get('gears_total_count', 0) or 0)
    active = int(round(max_active * active_pct / 100))

    district_uuid = facts.get('district_uuid')
    if not district_uuid or district_uuid == 'NONE':
        district_uuid = None

    return NodeEntry(
        id=host,
        name=short_host(host),
        node_profile=facts.get('node_profile') or 'unknown',
        district_uuid=district_uuid,
        district_active=_to_bool(facts.get('district_active', False)),
        total_gears=total,
        active_gears=active,
        inactive_gears=total - active,
        max_gears=int(facts.get('max_gears', 0) or 0),
        max_active_gears=max_active,
        gears_usage_pct=float(facts.get('gears_usage_pct', 0.0) or 0.0),
        gears_active_usage_pct=active_pct,
    )


def district_entry_from_record(record: Mapping[str, Any]) -> DistrictEntry:
    """Build a DistrictEntry from a broker district record."""
    nodes = {}
    for server in record.get('servers', []):
        nodes[server['name']] = _to_bool(server.get('active', False))

    return DistrictEntry(
        uuid=record['uuid'],
        name=record.get('name', record['uuid']),
        profile=record.get('gear_size') or 'unknown',
        nodes=nodes,
        district_capacity=int(record.get('max_capacity', 0) or 0),
        dist_avail_capacity=int(record.get('available_capacity', 0) or 0),
        dist_avail_uids=len(record.get('available_uids', []))
        if 'available_uids' in record else int(record.get('available_uid_count', 0) or 0),
    )


@dataclass
class DistrictSummary:
    """Accumulated statistics for one district."""
    uuid: str
    name: str
    profile: str
    nodes: Dict[str, bool]
    district_capacity: int = 0
    dist_avail_capacity: int = 0
    dist_avail_uids: int = 0
    nodes_count: int = 0
    nodes_active: int = 0
    nodes_inactive: int = 0
    total_gears: int = 0
    total_active_gears: int = 0
    available_active_gears: int = 0
    effective_available_gears: int = 0
    active_usage_pct_sum: float = 0.0
    avg_active_usage_pct: float = 0.0
    lowest_active_usage_pct: float = 0.0
    highest_active_usage_pct: float = 0.0
    node_entries: List[NodeEntry] = field(default_factory=list)
    missing_nodes: List[str] = field(default_factory=list)

    @property
    def is_none_district(self) -> bool:
        return self.uuid.startswith(NONE_DISTRICT_PREFIX) and self.name == NONE_DISTRICT_NAME

    def to_dict(self) -> Dict[str, Any]:
        return {
            'uuid': self.uuid,
            'name': self.name,
            'profile': self.profile,
            'nodes': dict(self.nodes),
            'district_capacity': self.district_capacity,
            'dist_avail_capacity': self.dist_avail_capacity,
            'dist_avail_uids': self.dist_avail_uids,
            'nodes_count': self.nodes_count,
            'nodes_active': self.nodes_active,
            'nodes_inactive': self.nodes_inactive,
            'total_gears': self.total_gears,
            'total_active_gears': self.total_active_gears,
            'available_active_gears': self.available_active_gears,
            'effective_available_gears': self.effective_available_gears,
            'avg_active_usage_pct': self.avg_active_usage_pct,
            'lowest_active_usage_pct': self.lowest_active_usage_pct,
            'highest_active_usage_pct': self.highest_active_usage_pct,
            'node_entries': [node.to_dict() for node in self.node_entries],
            'missing_nodes': list(self.missing_nodes),
        }


@dataclass
class RecordCounts:
    """Application, gear and cartridge tallies from the persisted store."""
    apps: int = 0
    gears: int = 0
    cartridges: Counter = field(default_factory=Counter)
    cartridges_short: Counter = field(default_factory=Counter)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'apps': self.apps,
            'gears': self.gears,
            'cartridges': dict(self.cartridges),
            'cartridges_short': dict(self.cartridges_short),
        }


@dataclass
class GlobalCounts(RecordCounts):
    """Fleet-wide tallies, including per-user distributions."""
    users: int = 0
    users_with_num_apps: Counter = field(default_factory=Counter)
    users_with_num_gears: Counter = field(default_factory=Counter)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['users'] = self.users
        data['users_with_num_apps'] = dict(self.users_with_num_apps)
        data['users_with_num_gears'] = dict(self.users_with_num_gears)
        return data


@dataclass
class UserCounts:
    """Per-profile application and gear tallies for one user."""
    login: str
    apps_by_profile: Counter = field(default_factory=Counter)
    gears_by_profile: Counter = field(default_factory=Counter)
    total_apps: int = 0
    total_gears: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'login': self.login,
            'apps_by_profile': dict(self.apps_by_profile),
            'gears_by_profile': dict(self.gears_by_profile),
            'total_apps': self.total_apps,
            'total_gears': self.total_gears,
        }


@dataclass
class ProfileSummary:
    """Statistics for all districts sharing a gear profile."""
    profile: str
    district_count: int = 0
    nodes_count: int = 0
    nodes_active: int = 0
    nodes_inactive: int = 0
    total_gears: int = 0
    total_active_gears: int = 0
    available_active_gears: int = 0
    effective_available_gears: int = 0
    district_capacity: int = 0
    dist_avail_capacity: int = 0
    dist_avail_uids: int = 0
    weighted_usage_pct_sum: float = 0.0
    avg_active_usage_pct: float = 0.0
    lowest_active_usage_pct: float = 0.0
    highest_active_usage_pct: float = 0.0
    missing_nodes: List[str] = field(default_factory=list)
    districts: List[DistrictSummary] = field(default_factory=list)
    total_db_gears: Optional[int] = None
    total_db_apps: Optional[int] = None
    cartridges: Optional[Counter] = None
    cartridges_short: Optional[Counter] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'profile': self.profile,
            'district_count': self.district_count,
            'nodes_count': self.nodes_count,
            'nodes_active': self.nodes_active,
            'nodes_inactive': self.nodes_inactive,
            'total_gears': self.total_gears,
            'total_active_gears': self.total_active_gears,
            'available_active_gears': self.available_active_gears,
            'effective_available_gears': self.effective_available_gears,
            'district_capacity': self.district_capacity,
            'dist_avail_capacity': self.dist_avail_capacity,
            'dist_avail_uids': self.dist_avail_uids,
            'avg_active_usage_pct': self.avg_active_usage_pct,
            'lowest_active_usage_pct': self.lowest_active_usage_pct,
            'highest_active_usage_pct': self.highest_active_usage_pct,
            'missing_nodes': list(self.missing_nodes),
            'districts': [district.to_dict() for district in self.districts],
        }
        if self.total_db_gears is not None:
            data['total_db_gears'] = self.total_db_gears
            data['total_db_apps'] = self.total_db_apps
            data['cartridges'] = dict(self.cartridges or {})
            data['cartridges_short'] = dict(self.cartridges_short or {})
        return data


# Factories for buckets created on first lookup

def new_district_summary(entry: DistrictEntry) -> DistrictSummary:
    """Seed a summary from a district definition; every member starts missing."""
    return DistrictSummary(
        uuid=entry.uuid,
        name=entry.name,
        profile=entry.profile,
        nodes=dict(entry.nodes),
        district_capacity=entry.district_capacity,
        dist_avail_capacity=entry.dist_avail_capacity,
        dist_avail_uids=entry.dist_avail_uids,
        missing_nodes=sorted(entry.nodes),
    )


def none_district_id(profile: str) -> str:
    return f"{NONE_DISTRICT_PREFIX}{profile}"


def new_none_district(profile: str) -> DistrictSummary:
    """Synthetic district for the undistricted nodes of a profile."""
    return DistrictSummary(
        uuid=none_district_id(profile),
        name=NONE_DISTRICT_NAME,
        profile=profile,
        nodes={},
    )


def new_profile_summary(profile: str) -> ProfileSummary:
    return ProfileSummary(profile=profile)


def new_record_counts() -> RecordCounts:
    return RecordCounts()


def new_global_counts() -> GlobalCounts:
    return GlobalCounts()


def new_user_counts(login: str) -> UserCounts:
    return UserCounts(login=login)


def get_or_create(mapping: MutableMapping[K, V], key: K, factory: Callable[[K], V]) -> V:
    """Return mapping[key], storing factory(key) there first if it is absent."""
    if key not in mapping:
        mapping[key] = factory(key)
    return mapping[key]
