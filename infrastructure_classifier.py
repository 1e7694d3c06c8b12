"""
OSM tags -> detailed bike infrastructure category.

The classification is an ordered decision table: the first entry whose
predicate holds decides the category.  Order encodes priority, so a way
carrying both a bicycle way and a bicycle lane on the right is a bicycle way.

Table shape:

  1. Gates: (predicate, category) pairs checked first (access bans,
     service roads, cycle highways, bicycle roads).
  2. Side blocks: (primary predicate, tie-breaks, fallback).  When the
     primary holds, the first tie-break that holds picks the two-sided
     category; otherwise the fallback ("... no infrastructure on the other
     side") applies.
  3. Pedestrian blocks, which depend on ``access=customers`` and are
     evaluated explicitly.
  4. Path-not-forbidden, then ``No``.

The classifier is total: every tag map yields exactly one category.
"""

import logging
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple

import osm_predicates as p
from bike_infrastructure import DetailedInfrastructure as D
from bike_infrastructure import SimplifiedInfrastructure, simplify
from osm_tags import normalize_tags

logger = logging.getLogger(__name__)

Predicate = Callable[[Mapping[str, str]], bool]


# =============================================================================
# Decision table
# =============================================================================

GATES: Sequence[Tuple[Predicate, D]] = (
    (p.is_access_denied, D.NO),
    (p.is_service, D.SERVICE_MISC),
    (p.is_cycle_highway, D.CYCLE_HIGHWAY),
    (p.is_bicycle_road, D.BICYCLE_ROAD),
)

# (primary, ((tie-break, category), ...), fallback)
SIDE_BLOCKS: Sequence[Tuple[Predicate, Sequence[Tuple[Predicate, D]], D]] = (
    (p.is_bicycle_way_right, (
        (p.is_bicycle_way_left, D.BICYCLE_WAY_BOTH),
        (p.is_bicycle_lane_left, D.BICYCLE_WAY_RIGHT_LANE_LEFT),
        (p.is_bus_lane_left, D.BICYCLE_WAY_RIGHT_BUS_LEFT),
        (p.is_mixed_way_left, D.BICYCLE_WAY_RIGHT_MIXED_LEFT),
        (p.is_mit_road_left, D.BICYCLE_WAY_RIGHT_MIT_LEFT),
        (p.is_pedestrian_left, D.BICYCLE_WAY_RIGHT_PEDESTRIAN_LEFT),
    ), D.BICYCLE_WAY_RIGHT_NO_LEFT),
    (p.is_bicycle_way_left, (
        (p.is_bicycle_lane_right, D.BICYCLE_WAY_LEFT_LANE_RIGHT),
        (p.is_bus_lane_right, D.BICYCLE_WAY_LEFT_BUS_RIGHT),
        (p.is_mixed_way_right, D.BICYCLE_WAY_LEFT_MIXED_RIGHT),
        (p.is_mit_road_right, D.BICYCLE_WAY_LEFT_MIT_RIGHT),
        (p.is_pedestrian_right, D.BICYCLE_WAY_LEFT_PEDESTRIAN_RIGHT),
    ), D.BICYCLE_WAY_LEFT_NO_RIGHT),
    (p.is_bicycle_lane_right, (
        (p.is_bicycle_lane_left, D.BICYCLE_LANE_BOTH),
        (p.is_bus_lane_left, D.BICYCLE_LANE_RIGHT_BUS_LEFT),
        (p.is_mixed_way_left, D.BICYCLE_LANE_RIGHT_MIXED_LEFT),
        (p.is_mit_road_left, D.BICYCLE_LANE_RIGHT_MIT_LEFT),
        (p.is_pedestrian_left, D.BICYCLE_LANE_RIGHT_PEDESTRIAN_LEFT),
    ), D.BICYCLE_LANE_RIGHT_NO_LEFT),
    (p.is_bicycle_lane_left, (
        (p.is_bus_lane_right, D.BICYCLE_LANE_LEFT_BUS_RIGHT),
        (p.is_mixed_way_right, D.BICYCLE_LANE_LEFT_MIXED_RIGHT),
        (p.is_mit_road_right, D.BICYCLE_LANE_LEFT_MIT_RIGHT),
        (p.is_pedestrian_right, D.BICYCLE_LANE_LEFT_PEDESTRIAN_RIGHT),
    ), D.BICYCLE_LANE_LEFT_NO_RIGHT),
    (p.is_bus_lane_right, (
        (p.is_bus_lane_left, D.BUS_LANE_BOTH),
        (p.is_mixed_way_left, D.BUS_LANE_RIGHT_MIXED_LEFT),
        (p.is_mit_road_left, D.BUS_LANE_RIGHT_MIT_LEFT),
        (p.is_pedestrian_left, D.BUS_LANE_RIGHT_PEDESTRIAN_LEFT),
    ), D.BUS_LANE_RIGHT_NO_LEFT),
    (p.is_bus_lane_left, (
        (p.is_mixed_way_right, D.BUS_LANE_LEFT_MIXED_RIGHT),
        (p.is_mit_road_right, D.BUS_LANE_LEFT_MIT_RIGHT),
        (p.is_pedestrian_right, D.BUS_LANE_LEFT_PEDESTRIAN_RIGHT),
    ), D.BUS_LANE_LEFT_NO_RIGHT),
    (p.is_mixed_way_right, (
        (p.is_mixed_way_left, D.MIXED_WAY_BOTH),
        (p.is_mit_road_left, D.MIXED_WAY_RIGHT_MIT_LEFT),
        (p.is_pedestrian_left, D.MIXED_WAY_RIGHT_PEDESTRIAN_LEFT),
    ), D.MIXED_WAY_RIGHT_NO_LEFT),
    (p.is_mixed_way_left, (
        (p.is_mit_road_right, D.MIXED_WAY_LEFT_MIT_RIGHT),
        (p.is_pedestrian_right, D.MIXED_WAY_LEFT_PEDESTRIAN_RIGHT),
    ), D.MIXED_WAY_LEFT_NO_RIGHT),
    (p.is_mit_road_right, (
        (p.is_mit_road_left, D.MIT_ROAD_BOTH),
        (p.is_pedestrian_left, D.MIT_ROAD_RIGHT_PEDESTRIAN_LEFT),
    ), D.MIT_ROAD_RIGHT_NO_LEFT),
    (p.is_mit_road_left, (
        (p.is_pedestrian_right, D.MIT_ROAD_LEFT_PEDESTRIAN_RIGHT),
    ), D.MIT_ROAD_LEFT_NO_RIGHT),
)


def _pedestrian(tags: Mapping[str, str]) -> Optional[D]:
    # Customer-only walkways (malls, shops) are not treated as public.
    if p.is_pedestrian_right(tags):
        if p.is_pedestrian_left(tags):
            return D.NO if p.is_customers_only(tags) else D.PEDESTRIAN_BOTH
        return D.PEDESTRIAN_RIGHT_NO_LEFT
    if p.is_pedestrian_left(tags):
        return D.NO if p.is_customers_only(tags) else D.PEDESTRIAN_LEFT_NO_RIGHT
    return None


# =============================================================================
# Public API
# =============================================================================

def classify_normalized(tags: Mapping[str, str]) -> D:
    """Classify an already-normalised tag map."""
    for predicate, category in GATES:
        if predicate(tags):
            return category

    for primary, tie_breaks, fallback in SIDE_BLOCKS:
        if not primary(tags):
            continue
        for predicate, category in tie_breaks:
            if predicate(tags):
                return category
        return fallback

    pedestrian = _pedestrian(tags)
    if pedestrian is not None:
        return pedestrian

    if p.is_path_not_forbidden(tags):
        return D.PATH_NOT_FORBIDDEN
    return D.NO


def classify(tags: Optional[Mapping[str, Any]]) -> D:
    """Classify an OSM tag map into its detailed infrastructure category.

    Accepts any mapping; values are normalised first (see
    ``osm_tags.normalize_tags``).  The caller's mapping is not modified.
    """
    return classify_normalized(normalize_tags(tags))


def classify_simplified(tags: Optional[Mapping[str, Any]]) -> SimplifiedInfrastructure:
    """Shortcut for ``simplify(classify(tags))``."""
    return simplify(classify(tags))
