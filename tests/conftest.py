"""Shared fixtures for the translation model test suite.

Provides two families of seed tag sets (one per simplified category),
bicycle ways classified through designations rather than highway=cycleway,
and resets the thread-local back-mapping trace around every test.
"""

import pytest

from bike_infrastructure import SimplifiedInfrastructure as S
from bike_infrastructure import signature_tags
from bm_trace import clear_trace

# Minimal tags per category.
SIGNATURE_SEEDS = {category: signature_tags(category) for category in S}

# Tags closer to what real ways carry.
CONTEXT_SEEDS = {
    S.CYCLE_HIGHWAY: {"highway": "cycleway", "cycle_highway": "yes"},
    S.BICYCLE_ROAD: {"highway": "residential", "bicycle_road": "yes"},
    S.BICYCLE_WAY: {"highway": "cycleway"},
    S.BICYCLE_LANE: {"highway": "secondary", "cycleway:right": "lane"},
    S.BUS_LANE: {"highway": "primary", "cycleway": "share_busway"},
    S.MIXED_WAY: {"highway": "footway", "bicycle": "yes", "segregated": "no"},
    S.NO: {},
}

SEED_FAMILIES = {"signature": SIGNATURE_SEEDS, "context": CONTEXT_SEEDS}


@pytest.fixture(autouse=True)
def _no_trace():
    """Make sure no trace leaks between tests."""
    clear_trace()
    yield
    clear_trace()


@pytest.fixture(params=sorted(SEED_FAMILIES))
def seeds(request):
    """Seed tag sets, parametrized over both families."""
    return SEED_FAMILIES[request.param]


# Bicycle ways that are not highway=cycleway: designated and segregated,
# signposted with sign 241, or designated on a sidewalk.
DESIGNATED_BICYCLE_WAYS = {
    "segregated": {"highway": "path", "bicycle": "designated", "foot": "designated", "segregated": "yes"},
    "sign-241": {"highway": "path", "bicycle": "designated", "foot": "designated", "traffic_sign": "DE:241-30"},
    "sidewalk": {"highway": "primary", "sidewalk:right:bicycle": "designated"},
}


@pytest.fixture(params=sorted(DESIGNATED_BICYCLE_WAYS))
def designated_bicycle_way(request):
    """Bicycle way tag sets classified through designations rather than highway=cycleway."""
    return DESIGNATED_BICYCLE_WAYS[request.param]
