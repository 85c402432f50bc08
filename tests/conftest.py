"""Shared fixtures for District Stats tests."""

import pytest

from district_stats.models import DistrictEntry, NodeEntry


def build_node(
    host: str,
    profile: str = "small",
    district_uuid=None,
    active_pct: float = 0.0,
    max_active_gears: int = 100,
    total_gears: int = 0,
    district_active: bool = True,
) -> NodeEntry:
    active = int(round(max_active_gears * active_pct / 100))
    return NodeEntry(
        id=host,
        name=host.split('.')[0],
        node_profile=profile,
        district_uuid=district_uuid,
        district_active=district_active,
        total_gears=total_gears,
        active_gears=active,
        inactive_gears=total_gears - active,
        max_gears=max_active_gears * 2,
        max_active_gears=max_active_gears,
        gears_usage_pct=0.0,
        gears_active_usage_pct=active_pct,
    )


def build_district(
    uuid: str,
    nodes,
    profile: str = "small",
    capacity: int = 6000,
    avail_capacity: int = 5000,
    avail_uids: int = 5000,
) -> DistrictEntry:
    if not isinstance(nodes, dict):
        nodes = {node: True for node in nodes}
    return DistrictEntry(
        uuid=uuid,
        name=f"district-{uuid}",
        profile=profile,
        nodes=nodes,
        district_capacity=capacity,
        dist_avail_capacity=avail_capacity,
        dist_avail_uids=avail_uids,
    )


@pytest.fixture
def make_node():
    return build_node


@pytest.fixture
def make_district():
    return build_district


@pytest.fixture
def sample_fleet():
    """Two small districts, one medium district and an undistricted node."""
    districts = {
        "d1": build_district("d1", ["n1.example.com", "n2.example.com", "n3.example.com"]),
        "d2": build_district("d2", ["n4.example.com"], avail_capacity=10),
        "d3": build_district("d3", ["m1.example.com"], profile="medium"),
    }
    nodes = {
        "n1.example.com": build_node("n1.example.com", district_uuid="d1", active_pct=10.0, total_gears=30),
        "n2.example.com": build_node("n2.example.com", district_uuid="d1", active_pct=30.0, total_gears=50,
                                     district_active=False),
        "n4.example.com": build_node("n4.example.com", district_uuid="d2", active_pct=50.0, total_gears=60),
        "m1.example.com": build_node("m1.example.com", profile="medium", district_uuid="d3",
                                     active_pct=20.0, total_gears=25),
        "x1.example.com": build_node("x1.example.com", active_pct=40.0, total_gears=40),
    }
    return districts, nodes


@pytest.fixture
def sample_users():
    return [
        {
            "login": "alice",
            "applications": [
                {
                    "name": "blog",
                    "default_gear_size": "small",
                    "group_instances": [
                        {
                            "gear_size": "small",
                            "gears": [
                                {"uuid": "g1", "cartridges": [
                                    "/usr/libexec/cart-php-5.3/comp-php",
                                    "/usr/libexec/cart-mysql-5.1/comp-mysql-server",
                                ]},
                            ],
                        },
                        {
                            "gear_size": "medium",
                            "gears": [
                                {"uuid": "g2", "cartridges": ["/usr/libexec/cart-mysql-5.1/comp-mysql-server"]},
                            ],
                        },
                    ],
                },
                {
                    "name": "shop",
                    "default_gear_size": "small",
                    "group_instances": [
                        {"gear_size": "small", "gears": [{"uuid": "g3", "cartridges": ["haproxy"]}]},
                    ],
                },
            ],
        },
        {
            "login": "bob",
            "applications": [
                {
                    "name": "api",
                    "default_gear_size": "medium",
                    "group_instances": [
                        {"gear_size": "medium", "gears": [
                            {"uuid": "g4", "cartridges": ["/usr/libexec/cart-php-5.4/comp-php"]},
                        ]},
                    ],
                },
            ],
        },
        {"login": "carol", "applications": []},
    ]
