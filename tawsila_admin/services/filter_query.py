# tawsila_admin/services/filter_query.py
"""
Translate UI filter state into the platform's ``filter[<key>]=<value>`` syntax.

Each entity type gets a FilterProfile with a static alias table and a static
set of UI-only keys that must never reach the backend. Entries that cannot be
validated are dropped, so a half-typed filter never blocks a list request.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Mapping, Optional
from urllib.parse import quote

DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
DATE_LENGTH = 10

# Characters encodeURIComponent leaves untouched besides letters, digits and "-_.~"
URI_COMPONENT_SAFE = "!*'()"

BOOLEAN_VALUES = {"1": "true", "0": "false"}


@dataclass(frozen=True)
class FilterProfile:
    """Static filter rules for one entity type"""
    name: str
    aliases: Mapping[str, str] = field(default_factory=dict)
    unsupported: FrozenSet[str] = frozenset()
    date_range_keys: FrozenSet[str] = frozenset({"created_between"})
    boolean_keys: FrozenSet[str] = frozenset()

    def backend_key(self, key: str) -> str:
        return self.aliases.get(key, key)


ORDERS = FilterProfile(
    name="orders",
    aliases={
        "tracking_number": "track_number",
        "customer_mobile": "customer.mobile",
        "created_at_between": "created_between",
        "agent_id": "assignments.assigned_to",
    },
    unsupported=frozenset({"customer_name", "governorate_id", "city_id"}),
    boolean_keys=frozenset({"is_in_phase1", "is_in_phase2"}),
)

SETTLEMENTS = FilterProfile(
    name="settlements",
    aliases={"created_at_between": "created_between"},
    unsupported=frozenset({"search"}),
)

USERS = FilterProfile(
    name="users",
    aliases={
        "created_at_between": "created_between",
        "createdAtBetween": "created_between",
    },
    unsupported=frozenset({"search"}),
)

WALLETS = FilterProfile(
    name="wallets",
    unsupported=frozenset({"owner_type", "search"}),
)

INVENTORIES = FilterProfile(
    name="inventories",
    unsupported=frozenset({"search"}),
)

PROFILES: Dict[str, FilterProfile] = {
    profile.name: profile
    for profile in (ORDERS, SETTLEMENTS, USERS, WALLETS, INVENTORIES)
}


def normalize_date_range(value: str) -> Optional[str]:
    """
    Return ``"<from>,<to>"`` when both halves are strict YYYY-MM-DD dates.

    A range with a missing or malformed side returns None so that neither
    half is sent.
    """
    parts = value.split(",")
    if len(parts) != 2:
        return None

    dates = [part.strip() for part in parts]
    for date in dates:
        if len(date) != DATE_LENGTH or not DATE_PATTERN.match(date):
            return None

    return f"{dates[0]},{dates[1]}"


def normalize_boolean(value: str) -> str:
    return BOOLEAN_VALUES.get(value, value)


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_filter_fragments(filters: Mapping[str, Any], profile: FilterProfile = ORDERS) -> List[str]:
    """Return the list of ``filter[...]=...`` fragments that survive the profile rules"""
    fragments = []

    for key, raw_value in filters.items():
        if raw_value is None or raw_value == "":
            continue
        if key in profile.unsupported:
            continue

        backend_key = profile.backend_key(key)
        value = _as_text(raw_value)

        if backend_key in profile.date_range_keys:
            value = normalize_date_range(value)
            if value is None:
                continue
        elif backend_key in profile.boolean_keys:
            value = normalize_boolean(value)

        fragments.append(f"filter[{backend_key}]={quote(value, safe=URI_COMPONENT_SAFE)}")

    return fragments


def build_filter_query(filters: Optional[Mapping[str, Any]], profile: FilterProfile = ORDERS) -> str:
    """
    Build the filter part of a list URL, e.g.
    ``&filter[status]=pending&filter[created_between]=2024-01-01%2C2024-12-31``.

    Returns an empty string when no filter survives.
    """
    fragments = build_filter_fragments(filters or {}, profile)
    return f"&{'&'.join(fragments)}" if fragments else ""
