# record_counter.py

"""Count users, applications, gears and cartridges in the persisted store.

The store is walked as a hierarchy of documents:

    user -> applications -> group_instances -> gears -> cartridges

Cartridge descriptors are free-form strings such as
``.../cart-mysql-5.1/comp-mysql-server``; the text after ``cart-`` up to the
next ``/`` is the full cartridge name (``mysql-5.1``) and, with its version
suffix removed, the short name (``mysql``). Descriptors that do not match
are tallied verbatim.

Gear counts here come from the store and will generally exceed the counts
nodes report, because nodes do not report gears without a repository.
"""

import logging
import re
from collections import Counter
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .models import (
    GlobalCounts, RecordCounts, UserCounts,
    get_or_create, new_global_counts, new_record_counts, new_user_counts
)

logger = logging.getLogger(__name__)

CARTRIDGE_PATTERN = re.compile(r"cart-([^/]+)")
CARTRIDGE_SHORT_PATTERN = re.compile(r"cart-([^/]+?)-\d[\w.]*(?:/|$)")

CountsByProfile = Dict[str, RecordCounts]
CountsByUser = Dict[str, UserCounts]

def extract_cartridge_name(descriptor: str) -> Optional[str]:
    """Return the versioned cartridge name in a descriptor, or None."""
    match = CARTRIDGE_PATTERN.search(descriptor)
    return match.group(1) if match else None

def extract_cartridge_short_name(descriptor: str) -> Optional[str]:
    """Return the cartridge name without its version suffix, or None."""
    match = CARTRIDGE_SHORT_PATTERN.search(descriptor)
    return match.group(1) if match else None

def cartridge_names(descriptor: Any) -> Tuple[str, str]:
    """Full and short names for a descriptor, each defaulting to the descriptor itself."""
    descriptor = str(descriptor)
    full = extract_cartridge_name(descriptor)
    short = extract_cartridge_short_name(descriptor)
    return (full if full is not None else descriptor,
            short if short is not None else descriptor)


class RecordCounter:
    """
    Accumulates record counts across any number of users.

    Users may be fed one at a time or in batches; the tallies are sums and
    do not depend on the order users arrive in.
    """

    def __init__(self):
        self.count_all: GlobalCounts = new_global_counts()
        self.count_by_profile: CountsByProfile = {}
        self.count_by_user: CountsByUser = {}

    def _profile_counts(self, profile: str) -> RecordCounts:
        return get_or_create(self.count_by_profile, profile, lambda _: new_record_counts())

    def add_user(self, user: Mapping[str, Any]) -> UserCounts:
        """Count one user document and everything beneath it."""
        login = user.get('login') or ''
        user_counts = get_or_create(self.count_by_user, login, new_user_counts)

        for app in user.get('applications', []) or []:
            self._add_application(user_counts, app)
        return user_counts

    def _add_application(self, user_counts: UserCounts, app: Mapping[str, Any]) -> None:
        app_profile = app.get('default_gear_size') or 'unknown'
        self.count_all.apps += 1
        self._profile_counts(app_profile).apps += 1
        user_counts.apps_by_profile[app_profile] += 1
        user_counts.total_apps += 1

        for group in app.get('group_instances', []) or []:
            # Gears take the profile of their own group, not the application's
            gear_profile = group.get('gear_size') or app_profile
            for gear in group.get('gears', []) or []:
                self._add_gear(user_counts, gear_profile, gear)

    def _add_gear(self, user_counts: UserCounts, profile: str, gear: Mapping[str, Any]) -> None:
        profile_counts = self._profile_counts(profile)
        self.count_all.gears += 1
        profile_counts.gears += 1
        user_counts.gears_by_profile[profile] += 1
        user_counts.total_gears += 1

        for descriptor in gear.get('cartridges', []) or []:
            full, short = cartridge_names(descriptor)
            self.count_all.cartridges[full] += 1
            self.count_all.cartridges_short[short] += 1
            profile_counts.cartridges[full] += 1
            profile_counts.cartridges_short[short] += 1

    def add_users(self, users: Iterable[Mapping[str, Any]]) -> "RecordCounter":
        for user in users:
            self.add_user(user)
        return self

    def results(self) -> Tuple[GlobalCounts, CountsByProfile, CountsByUser]:
        """Final tallies; per-user distributions are taken over distinct logins."""
        users = self.count_by_user.values()
        self.count_all.users = len(self.count_by_user)
        self.count_all.users_with_num_apps = Counter(u.total_apps for u in users)
        self.count_all.users_with_num_gears = Counter(u.total_gears for u in users)
        return self.count_all, self.count_by_profile, self.count_by_user


def count_records(users: Iterable[Mapping[str, Any]]) -> Tuple[GlobalCounts, CountsByProfile, CountsByUser]:
    """
    Count a stream of user documents.

    Returns:
        Tuple of (global counts, counts keyed by profile, counts keyed by login)
    """
    return RecordCounter().add_users(users).results()

def count_record_batches(
    batches: Iterable[Iterable[Mapping[str, Any]]]
) -> Tuple[GlobalCounts, CountsByProfile, CountsByUser]:
    """Count user documents delivered as a lazy sequence of batches."""
    counter = RecordCounter()
    for number, batch in enumerate(batches, 1):
        counter.add_users(batch)
        logger.debug(f"Counted batch {number}: {len(counter.count_by_user)} users so far")
    return counter.results()
