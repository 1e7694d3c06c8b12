"""
Bike infrastructure categories in the RadSim detailed and simplified formats.

Detailed categories describe both sides of a way ("bicycle way on the right,
bicycle lane on the left").  Simplified categories are what the simulation
UI lets a planner choose.  Every detailed category simplifies to exactly one
simplified category; a two-sided category simplifies to its first-named,
higher-priority side.

The enum values are the strings stored in the simulation tags ``roadStyle``
(detailed) and ``roadStyleSimplified`` (simplified).
"""

from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from osm_tags import (
    BICYCLE, BICYCLE_ROAD, CYCLE_HIGHWAY, CYCLEWAY, HIGHWAY, SEGREGATED, YES,
)
from translation_errors import UnknownCategory

# Simulation tag keys.
RADSIM_TAG = "roadStyle"
RADSIM_SIMPLIFIED_TAG = "roadStyleSimplified"


# =============================================================================
# Categories
# =============================================================================

class SimplifiedInfrastructure(str, Enum):
    CYCLE_HIGHWAY = "CycleHighway"
    BICYCLE_ROAD = "BicycleRoad"
    BICYCLE_WAY = "BicycleWay"
    BICYCLE_LANE = "BicycleLane"
    BUS_LANE = "BusLane"
    MIXED_WAY = "MixedWay"
    NO = "No"

    @classmethod
    def from_value(cls, value: str) -> "SimplifiedInfrastructure":
        for member in cls:
            if member.value == value:
                return member
        raise UnknownCategory(
            f"Unknown simplified infrastructure value: {value!r}",
            {"value": value, "tag": RADSIM_SIMPLIFIED_TAG},
        )


class DetailedInfrastructure(str, Enum):
    CYCLE_HIGHWAY = "CycleHighway"
    BICYCLE_ROAD = "BicycleRoad"

    BICYCLE_WAY_BOTH = "BicycleWayBoth"
    BICYCLE_WAY_RIGHT_LANE_LEFT = "BicycleWayRightLaneLeft"
    BICYCLE_WAY_RIGHT_BUS_LEFT = "BicycleWayRightBusLeft"
    BICYCLE_WAY_RIGHT_MIXED_LEFT = "BicycleWayRightMixedLeft"
    BICYCLE_WAY_RIGHT_MIT_LEFT = "BicycleWayRightMitLeft"
    BICYCLE_WAY_RIGHT_PEDESTRIAN_LEFT = "BicycleWayRightPedestrianLeft"
    BICYCLE_WAY_RIGHT_NO_LEFT = "BicycleWayRightNoLeft"
    BICYCLE_WAY_LEFT_LANE_RIGHT = "BicycleWayLeftLaneRight"
    BICYCLE_WAY_LEFT_BUS_RIGHT = "BicycleWayLeftBusRight"
    BICYCLE_WAY_LEFT_MIXED_RIGHT = "BicycleWayLeftMixedRight"
    BICYCLE_WAY_LEFT_MIT_RIGHT = "BicycleWayLeftMitRight"
    BICYCLE_WAY_LEFT_PEDESTRIAN_RIGHT = "BicycleWayLeftPedestrianRight"
    BICYCLE_WAY_LEFT_NO_RIGHT = "BicycleWayLeftNoRight"

    BICYCLE_LANE_BOTH = "BicycleLaneBoth"
    BICYCLE_LANE_RIGHT_BUS_LEFT = "BicycleLaneRightBusLeft"
    BICYCLE_LANE_RIGHT_MIXED_LEFT = "BicycleLaneRightMixedLeft"
    BICYCLE_LANE_RIGHT_MIT_LEFT = "BicycleLaneRightMitLeft"
    BICYCLE_LANE_RIGHT_PEDESTRIAN_LEFT = "BicycleLaneRightPedestrianLeft"
    BICYCLE_LANE_RIGHT_NO_LEFT = "BicycleLaneRightNoLeft"
    BICYCLE_LANE_LEFT_BUS_RIGHT = "BicycleLaneLeftBusRight"
    BICYCLE_LANE_LEFT_MIXED_RIGHT = "BicycleLaneLeftMixedRight"
    BICYCLE_LANE_LEFT_MIT_RIGHT = "BicycleLaneLeftMitRight"
    BICYCLE_LANE_LEFT_PEDESTRIAN_RIGHT = "BicycleLaneLeftPedestrianRight"
    BICYCLE_LANE_LEFT_NO_RIGHT = "BicycleLaneLeftNoRight"

    BUS_LANE_BOTH = "BusLaneBoth"
    BUS_LANE_RIGHT_MIXED_LEFT = "BusLaneRightMixedLeft"
    BUS_LANE_RIGHT_MIT_LEFT = "BusLaneRightMitLeft"
    BUS_LANE_RIGHT_PEDESTRIAN_LEFT = "BusLaneRightPedestrianLeft"
    BUS_LANE_RIGHT_NO_LEFT = "BusLaneRightNoLeft"
    BUS_LANE_LEFT_MIXED_RIGHT = "BusLaneLeftMixedRight"
    BUS_LANE_LEFT_MIT_RIGHT = "BusLaneLeftMitRight"
    BUS_LANE_LEFT_PEDESTRIAN_RIGHT = "BusLaneLeftPedestrianRight"
    BUS_LANE_LEFT_NO_RIGHT = "BusLaneLeftNoRight"

    MIXED_WAY_BOTH = "MixedWayBoth"
    MIXED_WAY_RIGHT_MIT_LEFT = "MixedWayRightMitLeft"
    MIXED_WAY_RIGHT_PEDESTRIAN_LEFT = "MixedWayRightPedestrianLeft"
    MIXED_WAY_RIGHT_NO_LEFT = "MixedWayRightNoLeft"
    MIXED_WAY_LEFT_MIT_RIGHT = "MixedWayLeftMitRight"
    MIXED_WAY_LEFT_PEDESTRIAN_RIGHT = "MixedWayLeftPedestrianRight"
    MIXED_WAY_LEFT_NO_RIGHT = "MixedWayLeftNoRight"

    # Everything below carries no bicycle infrastructure.
    SERVICE_MISC = "ServiceMisc"

    MIT_ROAD_BOTH = "MitRoadBoth"
    MIT_ROAD_RIGHT_PEDESTRIAN_LEFT = "MitRoadRightPedestrianLeft"
    MIT_ROAD_RIGHT_NO_LEFT = "MitRoadRightNoLeft"
    MIT_ROAD_LEFT_PEDESTRIAN_RIGHT = "MitRoadLeftPedestrianRight"
    MIT_ROAD_LEFT_NO_RIGHT = "MitRoadLeftNoRight"

    PEDESTRIAN_BOTH = "PedestrianBoth"
    PEDESTRIAN_RIGHT_NO_LEFT = "PedestrianRightNoLeft"
    PEDESTRIAN_LEFT_NO_RIGHT = "PedestrianLeftNoRight"

    PATH_NOT_FORBIDDEN = "PathNotForbidden"

    NO = "No"

    @classmethod
    def from_value(cls, value: str) -> "DetailedInfrastructure":
        for member in cls:
            if member.value == value:
                return member
        raise UnknownCategory(
            f"Unknown detailed infrastructure value: {value!r}",
            {"value": value, "tag": RADSIM_TAG},
        )

    @property
    def simplified(self) -> SimplifiedInfrastructure:
        return simplify(self)


class NoInfrastructureKind(str, Enum):
    """Why a segment simplifies to ``No``; drives the rules that leave ``No``."""
    SERVICE_MISC = "service_misc"
    MIT_ROAD = "mit_road"
    PEDESTRIAN = "pedestrian"
    PATH_NOT_FORBIDDEN = "path_not_forbidden"
    NONE = "none"


# =============================================================================
# Simplification
# =============================================================================

# Name prefix of the two-sided detailed variants -> simplified category.
_SIDED_PREFIXES = (
    ("BICYCLE_WAY_", SimplifiedInfrastructure.BICYCLE_WAY),
    ("BICYCLE_LANE_", SimplifiedInfrastructure.BICYCLE_LANE),
    ("BUS_LANE_", SimplifiedInfrastructure.BUS_LANE),
    ("MIXED_WAY_", SimplifiedInfrastructure.MIXED_WAY),
)


def _simplified_for(detailed: DetailedInfrastructure) -> SimplifiedInfrastructure:
    if detailed is DetailedInfrastructure.CYCLE_HIGHWAY:
        return SimplifiedInfrastructure.CYCLE_HIGHWAY
    if detailed is DetailedInfrastructure.BICYCLE_ROAD:
        return SimplifiedInfrastructure.BICYCLE_ROAD
    for prefix, simplified in _SIDED_PREFIXES:
        if detailed.name.startswith(prefix):
            return simplified
    return SimplifiedInfrastructure.NO


SIMPLIFICATION: Mapping[DetailedInfrastructure, SimplifiedInfrastructure] = MappingProxyType(
    {detailed: _simplified_for(detailed) for detailed in DetailedInfrastructure}
)


def simplify(detailed: DetailedInfrastructure) -> SimplifiedInfrastructure:
    """Collapse a detailed category to its simplified category."""
    return SIMPLIFICATION[detailed]


def no_infrastructure_kind(detailed: DetailedInfrastructure) -> Optional[NoInfrastructureKind]:
    """Sub-kind of a detailed category that simplifies to ``No``.

    Returns None for categories that carry bicycle infrastructure.
    """
    if simplify(detailed) is not SimplifiedInfrastructure.NO:
        return None
    if detailed is DetailedInfrastructure.SERVICE_MISC:
        return NoInfrastructureKind.SERVICE_MISC
    if detailed.name.startswith("MIT_ROAD_"):
        return NoInfrastructureKind.MIT_ROAD
    if detailed.name.startswith("PEDESTRIAN_"):
        return NoInfrastructureKind.PEDESTRIAN
    if detailed is DetailedInfrastructure.PATH_NOT_FORBIDDEN:
        return NoInfrastructureKind.PATH_NOT_FORBIDDEN
    return NoInfrastructureKind.NONE


# =============================================================================
# Signature tags
# =============================================================================

# Minimal OSM tags that classify into each simplified category.  Used as seed
# tag sets by the rule-matrix verification script and the tests.
SIGNATURE_TAGS: Mapping[SimplifiedInfrastructure, Mapping[str, str]] = MappingProxyType({
    SimplifiedInfrastructure.CYCLE_HIGHWAY: MappingProxyType({CYCLE_HIGHWAY: YES}),
    SimplifiedInfrastructure.BICYCLE_ROAD: MappingProxyType({BICYCLE_ROAD: YES}),
    SimplifiedInfrastructure.BICYCLE_WAY: MappingProxyType({HIGHWAY: CYCLEWAY, SEGREGATED: YES}),
    SimplifiedInfrastructure.BICYCLE_LANE: MappingProxyType({CYCLEWAY: "lane"}),
    SimplifiedInfrastructure.BUS_LANE: MappingProxyType({CYCLEWAY: "share_busway"}),
    SimplifiedInfrastructure.MIXED_WAY: MappingProxyType({HIGHWAY: "footway", BICYCLE: YES}),
    SimplifiedInfrastructure.NO: MappingProxyType({HIGHWAY: "service"}),
})


def signature_tags(category: SimplifiedInfrastructure) -> Dict[str, str]:
    """A fresh, mutable copy of the signature tags for *category*."""
    return dict(SIGNATURE_TAGS[category])
