"""
Rule matrix for back-mapping simplified infrastructure categories to OSM tags.

A rule answers: "given these current OSM tags in category FROM, which tags
must change so the segment becomes category TO?"  Rules are pure functions
of the current tags and return a tag delta (empty value = remove the key).

The matrix defines a rule for every ordered pair of distinct simplified
categories (7 x 6 = 42).  ``RuleMatrix`` checks this when it is built, so
an incomplete table fails at import time rather than on first use.

A rule only needs to move the segment *towards* the target.  Some rules
first dismantle the current category (e.g. a cycle highway with
``highway=cycleway`` first becomes a bicycle way); the back-mapper
reclassifies after every step and keeps going.

Rule matrix version: 2025-08-21.
"""

import logging
from types import MappingProxyType
from typing import Callable, Dict, Iterable, Mapping, Tuple

from bike_infrastructure import NoInfrastructureKind, no_infrastructure_kind
from bike_infrastructure import SimplifiedInfrastructure as S
from infrastructure_classifier import classify_normalized
from osm_predicates import is_service
from osm_tags import (
    ACCESS, BICYCLE, BICYCLE_ROAD, BUS_LANE_VALUES, CYCLE_HIGHWAY, CYCLESTREET,
    CYCLEWAY, CYCLEWAY_BICYCLE, CYCLEWAY_SIDE_KEYS, DESIGNATED, FOOT, HIGHWAY,
    LANE_VALUES, LEFT_BICYCLE, LEFT_LANE, LEFT_TRAFFIC_SIGN, NO, RIGHT_BICYCLE,
    RIGHT_LANE, RIGHT_TRAFFIC_SIGN, SEGREGATED, SIGN_CYCLE_PATH,
    SIGN_SEGREGATED_PATH, TOMBSTONE, TRACK_VALUES, TRAFFIC_SIGN,
    TRAFFIC_SIGN_FORWARD, YES, apply_delta, normalize_tags, tombstones,
    tombstones_for_values,
)
from translation_errors import NoRuleForTransition, UnknownCategory

logger = logging.getLogger(__name__)

RULE_MATRIX_VERSION = "2025-08-21"

Tags = Mapping[str, str]
Rule = Callable[[Tags], Dict[str, str]]
Transition = Tuple[S, S]


# =============================================================================
# Target tags
# =============================================================================

TO_BICYCLE_ROAD = {HIGHWAY: "residential", BICYCLE_ROAD: YES}
TO_CYCLE_HIGHWAY = {CYCLE_HIGHWAY: YES}
TO_BICYCLE_WAY = {HIGHWAY: CYCLEWAY, SEGREGATED: YES}
TO_BICYCLE_LANE = {HIGHWAY: "secondary", CYCLEWAY: "lane"}
TO_BUS_LANE = {HIGHWAY: "secondary", CYCLEWAY: "share_busway"}
TO_MIXED_WAY = {HIGHWAY: CYCLEWAY, FOOT: YES, SEGREGATED: NO}


def _merge(*deltas: Mapping[str, str]) -> Dict[str, str]:
    merged = {}
    for delta in deltas:
        merged.update(delta)
    return merged


def _keys_containing(tags: Tags, fragments: Iterable[str], value: str) -> Dict[str, str]:
    fragments = tuple(fragments)
    return {
        key: TOMBSTONE
        for key, current in tags.items()
        if current == value and any(fragment in key for fragment in fragments)
    }


def _constant(*deltas: Mapping[str, str]) -> Rule:
    delta = _merge(*deltas)

    def rule(tags: Tags) -> Dict[str, str]:
        return dict(delta)

    return rule


# =============================================================================
# Dismantling helpers
# =============================================================================

def _strip_bicycle_road(tags: Tags) -> Dict[str, str]:
    delta = {BICYCLE_ROAD: TOMBSTONE}
    delta.update(tombstones(tags, CYCLESTREET))
    return delta


def _strip_cycle_highway(tags: Tags) -> Dict[str, str]:
    return {CYCLE_HIGHWAY: TOMBSTONE}


def _strip_bicycle_lane(tags: Tags) -> Dict[str, str]:
    delta = {CYCLEWAY: TOMBSTONE}
    delta.update(tombstones_for_values(tags, CYCLEWAY_SIDE_KEYS, LANE_VALUES))
    delta.update(_keys_containing(tags, (RIGHT_LANE, LEFT_LANE), "exclusive"))
    return delta


def _strip_bus_lane(tags: Tags) -> Dict[str, str]:
    delta = {CYCLEWAY: TOMBSTONE}
    delta.update(tombstones_for_values(tags, CYCLEWAY_SIDE_KEYS, BUS_LANE_VALUES))
    return delta


def _strip_track_markers(tags: Tags) -> Dict[str, str]:
    """Remove cycle-track markers (``cycleway*=track|sidepath|crossing``)."""
    return tombstones_for_values(tags, CYCLEWAY_SIDE_KEYS, TRACK_VALUES)


def _strip_segregation_sign(tags: Tags) -> Dict[str, str]:
    return {
        key: TOMBSTONE
        for key in (TRAFFIC_SIGN, TRAFFIC_SIGN_FORWARD)
        if SIGN_SEGREGATED_PATH in tags.get(key, "")
    }


def _strip_bicycle_way_markers(tags: Tags) -> Dict[str, str]:
    """Remove side-specific track, designation and cycle-path sign markers, and sign 241."""
    delta = _strip_track_markers(tags)
    delta.update(tombstones_for_values(tags, (CYCLEWAY_BICYCLE,), (DESIGNATED,)))
    delta.update(_keys_containing(tags, (RIGHT_BICYCLE, LEFT_BICYCLE), DESIGNATED))
    delta.update(_keys_containing(tags, (RIGHT_TRAFFIC_SIGN, LEFT_TRAFFIC_SIGN), SIGN_CYCLE_PATH))
    delta.update(_strip_segregation_sign(tags))
    return delta


def _strip_segregation(tags: Tags) -> Dict[str, str]:
    return _keys_containing(tags, (SEGREGATED,), YES)


def _dismantle_bicycle_way(tags: Tags) -> Dict[str, str]:
    """Turn a bicycle way or mixed way into a way without bicycle infrastructure.

    ``highway=cycleway`` becomes ``path`` (a plain path without bicycle
    permission classifies as a service way), bicycle permission is removed,
    and so are the bicycle way markers.
    """
    delta = {}
    if tags.get(HIGHWAY) == CYCLEWAY:
        delta[HIGHWAY] = "path"
    delta.update(tombstones(tags, BICYCLE))
    delta.update(_strip_bicycle_way_markers(tags))
    return delta


# =============================================================================
# Leaving "No"
# =============================================================================

def _from_no(target: Mapping[str, str]) -> Rule:
    """Rule leaving ``No``: lift an access ban, then write the target tags.

    A service-like way that stays service-like under the target tags (e.g.
    ``highway=service`` gaining ``cycle_highway``) is designated for
    bicycles, otherwise the service gate would still classify it as ``No``.
    """

    def rule(tags: Tags) -> Dict[str, str]:
        delta = {}
        if tags.get(ACCESS) == NO:
            delta[ACCESS] = TOMBSTONE
        kind = no_infrastructure_kind(classify_normalized(apply_delta(tags, delta)))
        delta.update(target)
        if kind is NoInfrastructureKind.SERVICE_MISC and is_service(apply_delta(tags, delta)):
            delta[BICYCLE] = DESIGNATED
        return delta

    return rule


# =============================================================================
# Leaving a bicycle road
# =============================================================================

def _bicycle_road_to_lane(value: str) -> Rule:
    def rule(tags: Tags) -> Dict[str, str]:
        delta = _strip_bicycle_road(tags)
        if tags.get(HIGHWAY) == CYCLEWAY:
            delta[HIGHWAY] = "secondary"
        delta[CYCLEWAY] = value
        return delta

    return rule


def _bicycle_road_to_mixed_way(tags: Tags) -> Dict[str, str]:
    # Keeps the current highway; a road without the marker falls back to
    # ``No`` and continues from there.
    return _merge(
        _strip_bicycle_road(tags),
        {HIGHWAY: tags.get(HIGHWAY, CYCLEWAY), FOOT: YES, SEGREGATED: NO},
    )


# =============================================================================
# Leaving a cycle highway
# =============================================================================

def _cycle_highway_to(target: Mapping[str, str]) -> Rule:
    def rule(tags: Tags) -> Dict[str, str]:
        return _merge(_strip_cycle_highway(tags), target)

    return rule


# =============================================================================
# Leaving a bicycle way
# =============================================================================

def _bicycle_way_to_lane(target: Mapping[str, str]) -> Rule:
    """Lane rules also drop segregation and the bicycle way markers.

    Any of them keeps a road with a lane classified as a bicycle way.
    """

    def rule(tags: Tags) -> Dict[str, str]:
        return _merge(_strip_bicycle_way_markers(tags), _strip_segregation(tags), target)

    return rule


def _bicycle_way_to_mixed_way(tags: Tags) -> Dict[str, str]:
    highway = tags.get(HIGHWAY)
    if highway == CYCLEWAY:
        delta = {FOOT: YES, SEGREGATED: NO}
    elif highway in ("track", "path"):
        delta = {BICYCLE: DESIGNATED, FOOT: YES, SEGREGATED: NO}
    elif highway == "footway":
        delta = {BICYCLE: YES, SEGREGATED: NO}
    else:
        delta = {CYCLEWAY: "track", FOOT: YES, SEGREGATED: NO}
    delta.update(_strip_segregation_sign(tags))
    return delta


# =============================================================================
# Leaving a bicycle lane / bus lane
# =============================================================================

LANE_TO_MIXED_WAY = {HIGHWAY: CYCLEWAY, BICYCLE: YES, FOOT: YES, SEGREGATED: NO}
BUS_LANE_TO_MIXED_WAY = {HIGHWAY: "footway", BICYCLE: YES, SEGREGATED: NO}


def _lane_to(strip: Callable[[Tags], Dict[str, str]], target: Mapping[str, str]) -> Rule:
    def rule(tags: Tags) -> Dict[str, str]:
        return _merge(strip(tags), target)

    return rule


# =============================================================================
# Leaving a mixed way
# =============================================================================

def _mixed_way_to_bicycle_way(tags: Tags) -> Dict[str, str]:
    highway = tags.get(HIGHWAY)
    if highway == CYCLEWAY:
        return {FOOT: NO}
    if highway in ("track", "path", "footway"):
        return {BICYCLE: DESIGNATED, SEGREGATED: YES}
    return {CYCLEWAY: "track", SEGREGATED: YES}


# =============================================================================
# Matrix
# =============================================================================

RULES: Mapping[Transition, Rule] = MappingProxyType({
    (S.NO, S.BICYCLE_ROAD): _from_no(TO_BICYCLE_ROAD),
    (S.NO, S.CYCLE_HIGHWAY): _from_no(TO_CYCLE_HIGHWAY),
    (S.NO, S.BICYCLE_WAY): _from_no(TO_BICYCLE_WAY),
    (S.NO, S.BICYCLE_LANE): _from_no(TO_BICYCLE_LANE),
    (S.NO, S.BUS_LANE): _from_no(TO_BUS_LANE),
    (S.NO, S.MIXED_WAY): _from_no(TO_MIXED_WAY),

    (S.BICYCLE_ROAD, S.CYCLE_HIGHWAY): _constant(TO_CYCLE_HIGHWAY),
    (S.BICYCLE_ROAD, S.BICYCLE_WAY): _strip_bicycle_road,
    (S.BICYCLE_ROAD, S.BICYCLE_LANE): _bicycle_road_to_lane("lane"),
    (S.BICYCLE_ROAD, S.BUS_LANE): _bicycle_road_to_lane("share_busway"),
    (S.BICYCLE_ROAD, S.MIXED_WAY): _bicycle_road_to_mixed_way,
    (S.BICYCLE_ROAD, S.NO): _strip_bicycle_road,

    (S.CYCLE_HIGHWAY, S.BICYCLE_ROAD): _cycle_highway_to(TO_BICYCLE_ROAD),
    (S.CYCLE_HIGHWAY, S.BICYCLE_WAY): _cycle_highway_to(TO_BICYCLE_WAY),
    (S.CYCLE_HIGHWAY, S.BICYCLE_LANE): _cycle_highway_to(TO_BICYCLE_LANE),
    (S.CYCLE_HIGHWAY, S.BUS_LANE): _cycle_highway_to(TO_BUS_LANE),
    (S.CYCLE_HIGHWAY, S.MIXED_WAY): _cycle_highway_to(TO_MIXED_WAY),
    (S.CYCLE_HIGHWAY, S.NO): _strip_cycle_highway,

    (S.BICYCLE_WAY, S.BICYCLE_ROAD): _constant(TO_BICYCLE_ROAD),
    (S.BICYCLE_WAY, S.CYCLE_HIGHWAY): _constant(TO_CYCLE_HIGHWAY),
    (S.BICYCLE_WAY, S.BICYCLE_LANE): _bicycle_way_to_lane(TO_BICYCLE_LANE),
    (S.BICYCLE_WAY, S.BUS_LANE): _bicycle_way_to_lane(TO_BUS_LANE),
    (S.BICYCLE_WAY, S.MIXED_WAY): _bicycle_way_to_mixed_way,
    (S.BICYCLE_WAY, S.NO): _dismantle_bicycle_way,

    (S.BICYCLE_LANE, S.BICYCLE_ROAD): _constant(TO_BICYCLE_ROAD),
    (S.BICYCLE_LANE, S.CYCLE_HIGHWAY): _constant(TO_CYCLE_HIGHWAY),
    (S.BICYCLE_LANE, S.BICYCLE_WAY): _constant(TO_BICYCLE_WAY),
    (S.BICYCLE_LANE, S.BUS_LANE): _lane_to(_strip_bicycle_lane, {CYCLEWAY: "share_busway"}),
    (S.BICYCLE_LANE, S.MIXED_WAY): _lane_to(_strip_bicycle_lane, LANE_TO_MIXED_WAY),
    (S.BICYCLE_LANE, S.NO): _strip_bicycle_lane,

    (S.BUS_LANE, S.BICYCLE_ROAD): _constant(TO_BICYCLE_ROAD),
    (S.BUS_LANE, S.CYCLE_HIGHWAY): _constant(TO_CYCLE_HIGHWAY),
    (S.BUS_LANE, S.BICYCLE_WAY): _constant(TO_BICYCLE_WAY),
    (S.BUS_LANE, S.BICYCLE_LANE): _constant({CYCLEWAY: "lane"}),
    (S.BUS_LANE, S.MIXED_WAY): _lane_to(_strip_bus_lane, BUS_LANE_TO_MIXED_WAY),
    (S.BUS_LANE, S.NO): _strip_bus_lane,

    (S.MIXED_WAY, S.BICYCLE_ROAD): _constant(TO_BICYCLE_ROAD),
    (S.MIXED_WAY, S.CYCLE_HIGHWAY): _constant(TO_CYCLE_HIGHWAY),
    (S.MIXED_WAY, S.BICYCLE_WAY): _mixed_way_to_bicycle_way,
    (S.MIXED_WAY, S.BICYCLE_LANE): _constant(TO_BICYCLE_LANE),
    (S.MIXED_WAY, S.BUS_LANE): _constant(TO_BUS_LANE),
    (S.MIXED_WAY, S.NO): _dismantle_bicycle_way,
})


def required_transitions() -> Tuple[Transition, ...]:
    """All ordered pairs of distinct simplified categories."""
    return tuple((a, b) for a in S for b in S if a is not b)


class RuleMatrix:
    """Immutable (from, to) -> rule table, checked for completeness on construction."""

    def __init__(self, rules: Mapping[Transition, Rule], version: str = RULE_MATRIX_VERSION):
        missing = [pair for pair in required_transitions() if pair not in rules]
        if missing:
            names = ", ".join(f"{a.value}->{b.value}" for a, b in missing)
            raise NoRuleForTransition(
                f"Rule matrix {version} is incomplete, missing: {names}",
                {"missing": [(a.value, b.value) for a, b in missing], "version": version},
            )
        self._rules = MappingProxyType(dict(rules))
        self.version = version

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, transition) -> bool:
        return transition in self._rules

    def transitions(self) -> Tuple[Transition, ...]:
        return tuple(self._rules)

    def delta(self, from_category: S, to_category: S, current: Tags) -> Dict[str, str]:
        """Tag delta for one step from *from_category* towards *to_category*."""
        for category in (from_category, to_category):
            if not isinstance(category, S):
                raise UnknownCategory(
                    f"Not a simplified infrastructure category: {category!r}",
                    {"value": str(category)},
                )
        if from_category is to_category:
            raise NoRuleForTransition(
                f"No rule for identity transition {from_category.value}",
                {"from": from_category.value, "to": to_category.value},
            )
        rule = self._rules.get((from_category, to_category))
        if rule is None:
            raise NoRuleForTransition(
                f"No rule for {from_category.value} -> {to_category.value}",
                {"from": from_category.value, "to": to_category.value},
            )
        return rule(normalize_tags(current))


RULE_MATRIX = RuleMatrix(RULES)
