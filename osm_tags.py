"""
OSM tag vocabulary and tag-set helpers for the RadSim translation model.

A road segment arrives as a flat key/value map of OpenStreetMap tags
(``highway=residential``, ``cycleway:right=lane``, ...).  This module owns:

  - The keys and values the infrastructure classifier interprets.
  - Normalisation of an upstream tag map into a plain ``Dict[str, str]``.
  - Tag deltas: the minimal set of upserts/removals that moves a segment
    from one infrastructure category to another.

Tag deltas use an empty-string value as a tombstone meaning "remove this
key".  An empty value is never written to a segment.
"""

import logging
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)


# =============================================================================
# KEYS
# =============================================================================

ACCESS = "access"
BICYCLE = "bicycle"
BICYCLE_ROAD = "bicycle_road"
CYCLESTREET = "cyclestreet"
CYCLEWAY = "cycleway"
CYCLEWAY_BICYCLE = "cycleway:bicycle"
CYCLEWAY_BOTH = "cycleway:both"
CYCLEWAY_LEFT = "cycleway:left"
CYCLEWAY_LEFT_BICYCLE = "cycleway:left:bicycle"
CYCLEWAY_LEFT_LANE = "cycleway:left:lane"
CYCLEWAY_RIGHT = "cycleway:right"
CYCLEWAY_RIGHT_BICYCLE = "cycleway:right:bicycle"
CYCLEWAY_RIGHT_LANE = "cycleway:right:lane"
CYCLE_HIGHWAY = "cycle_highway"
FOOT = "foot"
HIGHWAY = "highway"
INDOOR = "indoor"
LEFT_BICYCLE = "left:bicycle"
LEFT_FOOT = "left:foot"
LEFT_LANE = "left:lane"
LEFT_TRAFFIC_SIGN = "left:traffic_sign"
MOTOR_VEHICLE = "motor_vehicle"
RIGHT_BICYCLE = "right:bicycle"
RIGHT_FOOT = "right:foot"
RIGHT_LANE = "right:lane"
RIGHT_TRAFFIC_SIGN = "right:traffic_sign"
SEGREGATED = "segregated"
SIDEWALK = "sidewalk"
SIDEWALK_BOTH = "sidewalk:both"
SIDEWALK_FOOT = "sidewalk:foot"
SIDEWALK_LEFT = "sidewalk:left"
SIDEWALK_LEFT_FOOT = "sidewalk:left:foot"
SIDEWALK_RIGHT = "sidewalk:right"
SIDEWALK_RIGHT_FOOT = "sidewalk:right:foot"
TRACK_TYPE = "tracktype"
TRAFFIC_SIGN = "traffic_sign"
TRAFFIC_SIGN_FORWARD = "traffic_sign:forward"
TRAM = "tram"

# Every key the infrastructure classifier reads.  Upstream extraction must
# keep these on each way so forward and back mapping see the same input.
INFRASTRUCTURE_OSM_KEYS = (
    ACCESS, BICYCLE, BICYCLE_ROAD, CYCLESTREET, CYCLEWAY, CYCLEWAY_BICYCLE,
    CYCLEWAY_BOTH, CYCLEWAY_LEFT, CYCLEWAY_LEFT_BICYCLE, CYCLEWAY_LEFT_LANE,
    CYCLEWAY_RIGHT, CYCLEWAY_RIGHT_BICYCLE, CYCLEWAY_RIGHT_LANE, CYCLE_HIGHWAY,
    FOOT, HIGHWAY, INDOOR, LEFT_BICYCLE, LEFT_FOOT, LEFT_LANE,
    LEFT_TRAFFIC_SIGN, MOTOR_VEHICLE, RIGHT_BICYCLE, RIGHT_FOOT, RIGHT_LANE,
    RIGHT_TRAFFIC_SIGN, SEGREGATED, SIDEWALK, SIDEWALK_BOTH, SIDEWALK_FOOT,
    SIDEWALK_LEFT, SIDEWALK_LEFT_FOOT, SIDEWALK_RIGHT, SIDEWALK_RIGHT_FOOT,
    TRACK_TYPE, TRAFFIC_SIGN, TRAFFIC_SIGN_FORWARD, TRAM,
)

# cycleway=* and its side variants, in the order rules inspect them.
CYCLEWAY_SIDE_KEYS = (CYCLEWAY, CYCLEWAY_RIGHT, CYCLEWAY_LEFT, CYCLEWAY_BOTH)


# =============================================================================
# VALUES
# =============================================================================

YES = "yes"
NO = "no"
DESIGNATED = "designated"
CUSTOMERS = "customers"

# highway=* values where motorized traffic is allowed.
CAR_HIGHWAYS = (
    "motorway", "trunk", "primary", "secondary", "tertiary",
    "unclassified", "road", "residential", "living_street",
    "primary_link", "secondary_link", "tertiary_link",
    "motorway_link", "trunk_link",
)

MOTORWAYS = ("motorway", "motorway_link")

# highway=* values where cycling is never allowed.
NO_BIKE_HIGHWAYS = ("corridor", "motorway", "motorway_link", "trunk", "trunk_link")

# bicycle=* values that forbid riding.
NO_BIKE_VALUES = (NO, "dismount", "use_sidepath")

# bicycle=* / foot=* values that allow use.
ALLOWED_VALUES = (YES, DESIGNATED)

FOOTPATH_HIGHWAYS = ("footway", "pedestrian")
NOT_FORBIDDEN_HIGHWAYS = ("cycleway", "track", "path")

# cycleway=* values per infrastructure type.
TRACK_VALUES = ("track", "sidepath", "crossing")
LANE_VALUES = ("lane", "shared_lane")
BUS_LANE_VALUES = ("share_busway",)

# sidewalk=* values that mean pedestrians can walk on the given side.
SIDEWALK_ANY_SIDE = (YES, "separated", "both", "right", "left")
SIDEWALK_RIGHT_SIDE = (YES, "separated", "both", "right")
SIDEWALK_LEFT_SIDE = (YES, "separated", "both", "left")
SIDEWALK_BOTH_SIDES = (YES, "separated", "both")

AGRICULTURAL_VALUES = ("agricultural", "forestry")
SMOOTH_TRACK_TYPES = ("grade1", "grade2")

# German traffic sign codes (StVO).
SIGN_SEGREGATED_PATH = "241"  # obligatory segregated foot/cycle path
SIGN_CYCLE_PATH = "237"       # obligatory cycle path

# Tombstone value in a tag delta: remove the key.
TOMBSTONE = ""


# =============================================================================
# TAG SETS
# =============================================================================

def normalize_tags(raw: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """Return a plain ``Dict[str, str]`` copy of an upstream tag map.

    Upstream extraction sometimes delivers non-string scalars (numbers,
    booleans); those are coerced with ``str()``.  ``None`` and empty values
    are treated as absent and dropped.  The input is never mutated.
    """
    if not raw:
        return {}
    tags = {}
    for key, value in raw.items():
        if value is None:
            continue
        text = value if isinstance(value, str) else str(value)
        if text == TOMBSTONE:
            continue
        tags[str(key)] = text
    return tags


def freeze_tags(tags: Mapping[str, str]) -> frozenset:
    """Hashable snapshot of a tag set, used for visited-state bookkeeping."""
    return frozenset(tags.items())


# =============================================================================
# TAG DELTAS
# =============================================================================

def apply_delta(tags: Mapping[str, str], delta: Mapping[str, str]) -> Dict[str, str]:
    """Apply *delta* to a copy of *tags*.

    Tombstoned keys are removed (missing keys are ignored), all other
    entries are upserted.
    """
    updated = dict(tags)
    for key, value in delta.items():
        if value == TOMBSTONE:
            updated.pop(key, None)
        else:
            updated[key] = value
    return updated


def merge_deltas(first: Mapping[str, str], second: Mapping[str, str]) -> Dict[str, str]:
    """Compose two deltas that are applied one after the other.

    The later delta wins for keys present in both, so applying the merged
    delta once gives the same tags as applying *first* then *second*.
    """
    merged = dict(first)
    merged.update(second)
    return merged


def tombstones(tags: Mapping[str, str], *keys: str) -> Dict[str, str]:
    """Removal entries for each of *keys* present in *tags*."""
    return {key: TOMBSTONE for key in keys if key in tags}


def tombstones_for_values(tags: Mapping[str, str], keys, values) -> Dict[str, str]:
    """Removal entries for each of *keys* whose current value is in *values*."""
    return {key: TOMBSTONE for key in keys if tags.get(key) in values}


def upserts(delta: Mapping[str, str]) -> Dict[str, str]:
    """The assignments of a delta, without its removals."""
    return {key: value for key, value in delta.items() if value != TOMBSTONE}


def removals(delta: Mapping[str, str]) -> list:
    """The keys a delta removes, sorted."""
    return sorted(key for key, value in delta.items() if value == TOMBSTONE)
