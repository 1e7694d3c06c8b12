"""
Tag predicates used by the bike infrastructure classifier.

Every sub-condition of the classification is a named public function over a
normalised tag map (``Mapping[str, str]``), so each one can be tested on its
own.  Predicates are pure; they never mutate the tags.

Side-specific predicates come in right/left pairs.  "Right" and "left" are
relative to the way's drawing direction, following OSM convention.

Several checks match any key *containing* a fragment (e.g. ``right:foot``
matches ``sidewalk:right:foot``).  Real-world tagging is inconsistent about
the prefix, so the classifier accepts any of them.
"""

from typing import Iterable, Mapping

from osm_tags import (
    ACCESS, AGRICULTURAL_VALUES, ALLOWED_VALUES, BICYCLE, BICYCLE_ROAD,
    BUS_LANE_VALUES, CAR_HIGHWAYS, CUSTOMERS, CYCLE_HIGHWAY, CYCLESTREET,
    CYCLEWAY, CYCLEWAY_BICYCLE, CYCLEWAY_BOTH, CYCLEWAY_LEFT,
    CYCLEWAY_LEFT_BICYCLE, CYCLEWAY_LEFT_LANE, CYCLEWAY_RIGHT,
    CYCLEWAY_RIGHT_BICYCLE, CYCLEWAY_RIGHT_LANE, DESIGNATED, FOOT,
    FOOTPATH_HIGHWAYS, HIGHWAY, INDOOR, LANE_VALUES, LEFT_BICYCLE, LEFT_FOOT,
    LEFT_LANE, LEFT_TRAFFIC_SIGN, MOTOR_VEHICLE, MOTORWAYS, NO,
    NO_BIKE_HIGHWAYS, NO_BIKE_VALUES, NOT_FORBIDDEN_HIGHWAYS, RIGHT_BICYCLE,
    RIGHT_FOOT, RIGHT_LANE, RIGHT_TRAFFIC_SIGN, SEGREGATED, SIDEWALK,
    SIDEWALK_ANY_SIDE, SIDEWALK_BOTH, SIDEWALK_BOTH_SIDES, SIDEWALK_FOOT,
    SIDEWALK_LEFT, SIDEWALK_LEFT_FOOT, SIDEWALK_LEFT_SIDE, SIDEWALK_RIGHT,
    SIDEWALK_RIGHT_FOOT, SIDEWALK_RIGHT_SIDE, SIGN_CYCLE_PATH,
    SIGN_SEGREGATED_PATH, SMOOTH_TRACK_TYPES, TRACK_TYPE, TRACK_VALUES,
    TRAFFIC_SIGN, TRAFFIC_SIGN_FORWARD, TRAM, YES,
)

Tags = Mapping[str, str]


# =============================================================================
# Helpers
# =============================================================================

def _any_key_contains(tags: Tags, fragment: str, values: Iterable[str]) -> bool:
    """True if some key containing *fragment* has a value in *values*."""
    values = tuple(values)
    return any(fragment in key and value in values for key, value in tags.items())


def _any_value_in(tags: Tags, keys: Iterable[str], values: Iterable[str]) -> bool:
    values = tuple(values)
    return any(tags.get(key) in values for key in keys)


# =============================================================================
# Way shape
# =============================================================================

def is_segregated(tags: Tags) -> bool:
    """Foot and bicycle traffic are separated (any ``*segregated*=yes``)."""
    return _any_key_contains(tags, SEGREGATED, (YES,))


def is_footpath(tags: Tags) -> bool:
    return tags.get(HIGHWAY) in FOOTPATH_HIGHWAYS


def is_path(tags: Tags) -> bool:
    return tags.get(HIGHWAY) == "path"


def is_track(tags: Tags) -> bool:
    return tags.get(HIGHWAY) == "track"


def is_indoor(tags: Tags) -> bool:
    return tags.get(INDOOR) == YES


def is_cycle_highway(tags: Tags) -> bool:
    return tags.get(CYCLE_HIGHWAY) == YES


def is_bicycle_road(tags: Tags) -> bool:
    """Bicycle road (Fahrradstraße), tagged either way."""
    return tags.get(BICYCLE_ROAD) == YES or tags.get(CYCLESTREET) == YES


def is_access_denied(tags: Tags) -> bool:
    """General access ban or a tram track; such ways never carry bike infrastructure."""
    return (ACCESS in tags and tags[ACCESS] == NO) or tags.get(TRAM) == YES


def is_customers_only(tags: Tags) -> bool:
    return tags.get(ACCESS) == CUSTOMERS


# =============================================================================
# Walking
# =============================================================================

def can_walk_right(tags: Tags) -> bool:
    return (
        tags.get(FOOT) in ALLOWED_VALUES
        or _any_key_contains(tags, RIGHT_FOOT, ALLOWED_VALUES)
        or tags.get(SIDEWALK) in SIDEWALK_ANY_SIDE
        or tags.get(SIDEWALK_RIGHT) in SIDEWALK_RIGHT_SIDE
        or tags.get(SIDEWALK_BOTH) in SIDEWALK_BOTH_SIDES
    )


def can_walk_left(tags: Tags) -> bool:
    return (
        tags.get(FOOT) in ALLOWED_VALUES
        or _any_key_contains(tags, LEFT_FOOT, ALLOWED_VALUES)
        or tags.get(SIDEWALK) in SIDEWALK_ANY_SIDE
        or tags.get(SIDEWALK_LEFT) in SIDEWALK_LEFT_SIDE
        or tags.get(SIDEWALK_BOTH) in SIDEWALK_BOTH_SIDES
    )


def is_pedestrian_designated_right(tags: Tags) -> bool:
    return (
        tags.get(FOOT) == DESIGNATED
        or tags.get(SIDEWALK_RIGHT_FOOT) == DESIGNATED
        or tags.get(SIDEWALK_FOOT) == DESIGNATED
    )


def is_pedestrian_designated_left(tags: Tags) -> bool:
    return (
        tags.get(FOOT) == DESIGNATED
        or tags.get(SIDEWALK_LEFT_FOOT) == DESIGNATED
        or tags.get(SIDEWALK_FOOT) == DESIGNATED
    )


# =============================================================================
# Cycling permission
# =============================================================================

def can_bike(tags: Tags) -> bool:
    """Cycling explicitly allowed, and the way is not a motorway."""
    return tags.get(BICYCLE) in ALLOWED_VALUES and tags.get(HIGHWAY) not in MOTORWAYS


def cannot_bike(tags: Tags) -> bool:
    return (
        tags.get(BICYCLE) in NO_BIKE_VALUES
        or tags.get(HIGHWAY) in NO_BIKE_HIGHWAYS
        or tags.get(ACCESS) == CUSTOMERS
    )


def is_designated(tags: Tags) -> bool:
    return tags.get(BICYCLE) == DESIGNATED


def is_bicycle_designated_right(tags: Tags) -> bool:
    return (
        is_designated(tags)
        or tags.get(CYCLEWAY_RIGHT_BICYCLE) == DESIGNATED
        or tags.get(CYCLEWAY_BICYCLE) == DESIGNATED
    )


def is_bicycle_designated_left(tags: Tags) -> bool:
    return (
        is_designated(tags)
        or tags.get(CYCLEWAY_LEFT_BICYCLE) == DESIGNATED
        or tags.get(CYCLEWAY_BICYCLE) == DESIGNATED
    )


def is_obligated_segregated(tags: Tags) -> bool:
    """Traffic sign 241 (segregated foot and cycle path) is posted."""
    return (
        SIGN_SEGREGATED_PATH in tags.get(TRAFFIC_SIGN, "")
        or SIGN_SEGREGATED_PATH in tags.get(TRAFFIC_SIGN_FORWARD, "")
    )


# =============================================================================
# Road classes
# =============================================================================

def can_car_drive(tags: Tags) -> bool:
    return tags.get(HIGHWAY) in CAR_HIGHWAYS


def is_path_not_forbidden(tags: Tags) -> bool:
    """A cycleway/track/path where cycling is not explicitly forbidden."""
    return tags.get(HIGHWAY) in NOT_FORBIDDEN_HIGHWAYS and not cannot_bike(tags)


def _is_accessible(tags: Tags) -> bool:
    return ACCESS not in tags or tags[ACCESS] != NO


def _is_smooth(tags: Tags) -> bool:
    return TRACK_TYPE not in tags or tags[TRACK_TYPE] in SMOOTH_TRACK_TYPES


def _is_vehicle_allowed(tags: Tags) -> bool:
    return MOTOR_VEHICLE not in tags or tags[MOTOR_VEHICLE] != NO


def is_service(tags: Tags) -> bool:
    """Service road or agricultural / unpaved way without bicycle designation."""
    accessible = _is_accessible(tags)
    service_like = (
        tags.get(HIGHWAY) == "service"
        or (tags.get(MOTOR_VEHICLE) in AGRICULTURAL_VALUES and accessible)
        or (is_path(tags) and accessible)
        or (is_track(tags) and accessible and _is_smooth(tags) and _is_vehicle_allowed(tags))
    )
    return service_like and not is_designated(tags)


# =============================================================================
# Bicycle paths
# =============================================================================

def is_bike_path_right(tags: Tags) -> bool:
    return (
        tags.get(HIGHWAY) == CYCLEWAY
        or (
            _any_key_contains(tags, RIGHT_BICYCLE, (DESIGNATED,))
            and CYCLEWAY_RIGHT_LANE not in tags
        )
        or _any_value_in(tags, (CYCLEWAY, CYCLEWAY_RIGHT, CYCLEWAY_BOTH), TRACK_VALUES)
        or _any_key_contains(tags, RIGHT_TRAFFIC_SIGN, (SIGN_CYCLE_PATH,))
    )


def is_bike_path_left(tags: Tags) -> bool:
    return (
        tags.get(HIGHWAY) == CYCLEWAY
        or (
            _any_key_contains(tags, LEFT_BICYCLE, (DESIGNATED,))
            and CYCLEWAY_LEFT_LANE not in tags
        )
        or _any_value_in(tags, (CYCLEWAY, CYCLEWAY_LEFT, CYCLEWAY_BOTH), TRACK_VALUES)
        or _any_key_contains(tags, LEFT_TRAFFIC_SIGN, (SIGN_CYCLE_PATH,))
    )


def is_bicycle_way_right(tags: Tags) -> bool:
    """Dedicated bicycle way on the right side (separate or segregated)."""
    bike_path = is_bike_path_right(tags)
    segregated = is_segregated(tags)
    bike = can_bike(tags)
    return (
        (bike_path and not can_walk_right(tags))
        or (bike_path and segregated)
        or (bike and (is_path(tags) or is_track(tags)) and not can_walk_right(tags))
        or (bike and (is_track(tags) or is_footpath(tags) or is_path(tags)) and segregated)
        or (bike and is_obligated_segregated(tags))
        or (
            is_bicycle_designated_right(tags)
            and is_pedestrian_designated_right(tags)
            and segregated
        )
    )


def is_bicycle_way_left(tags: Tags) -> bool:
    bike_path = is_bike_path_left(tags)
    segregated = is_segregated(tags)
    bike = can_bike(tags)
    return (
        (bike_path and not can_walk_left(tags))
        or (bike_path and segregated)
        or (bike and (is_path(tags) or is_track(tags)) and not can_walk_left(tags))
        or (bike and (is_track(tags) or is_footpath(tags) or is_path(tags)) and segregated)
        or (bike and is_obligated_segregated(tags))
        or (
            is_bicycle_designated_left(tags)
            and is_pedestrian_designated_left(tags)
            and segregated
        )
    )


# =============================================================================
# Lanes
# =============================================================================

def is_bicycle_lane_right(tags: Tags) -> bool:
    return (
        _any_value_in(tags, (CYCLEWAY, CYCLEWAY_RIGHT, CYCLEWAY_BOTH), LANE_VALUES)
        or _any_key_contains(tags, RIGHT_LANE, ("exclusive",))
    )


def is_bicycle_lane_left(tags: Tags) -> bool:
    return (
        _any_value_in(tags, (CYCLEWAY, CYCLEWAY_LEFT, CYCLEWAY_BOTH), LANE_VALUES)
        or _any_key_contains(tags, LEFT_LANE, ("exclusive",))
    )


def is_bus_lane_right(tags: Tags) -> bool:
    return _any_value_in(tags, (CYCLEWAY, CYCLEWAY_RIGHT, CYCLEWAY_BOTH), BUS_LANE_VALUES)


def is_bus_lane_left(tags: Tags) -> bool:
    return _any_value_in(tags, (CYCLEWAY, CYCLEWAY_LEFT, CYCLEWAY_BOTH), BUS_LANE_VALUES)


# =============================================================================
# Shared ways
# =============================================================================

def is_mixed_way_right(tags: Tags) -> bool:
    """Shared foot/cycle way on the right side without segregation."""
    segregated = is_segregated(tags)
    bike = can_bike(tags)
    return (
        (is_bike_path_right(tags) and can_walk_right(tags) and not segregated)
        or (is_footpath(tags) and bike and not segregated)
        or ((is_path(tags) or is_track(tags)) and bike and can_walk_right(tags) and not segregated)
    )


def is_mixed_way_left(tags: Tags) -> bool:
    segregated = is_segregated(tags)
    bike = can_bike(tags)
    return (
        (is_bike_path_left(tags) and can_walk_left(tags) and not segregated)
        or (is_footpath(tags) and bike and not segregated)
        or ((is_path(tags) or is_track(tags)) and bike and can_walk_left(tags) and not segregated)
    )


def is_mit_road_right(tags: Tags) -> bool:
    """Road for motorized traffic with no bicycle facility on the right."""
    return (
        can_car_drive(tags)
        and not is_bike_path_right(tags)
        and not is_bicycle_road(tags)
        and not is_footpath(tags)
        and not is_bicycle_lane_right(tags)
        and not is_bus_lane_right(tags)
        and not is_path(tags)
        and not is_track(tags)
        and not cannot_bike(tags)
    )


def is_mit_road_left(tags: Tags) -> bool:
    return (
        can_car_drive(tags)
        and not is_bike_path_left(tags)
        and not is_bicycle_road(tags)
        and not is_footpath(tags)
        and not is_bicycle_lane_left(tags)
        and not is_bus_lane_left(tags)
        and not is_path(tags)
        and not is_track(tags)
        and not cannot_bike(tags)
    )


def is_pedestrian_right(tags: Tags) -> bool:
    """Pedestrian-only way on the right side (cycling not allowed)."""
    if is_indoor(tags):
        return False
    bike = can_bike(tags)
    return (
        (is_footpath(tags) and not bike)
        or (is_path(tags) and can_walk_right(tags) and not bike)
    )


def is_pedestrian_left(tags: Tags) -> bool:
    if is_indoor(tags):
        return False
    bike = can_bike(tags)
    return (
        (is_footpath(tags) and not bike)
        or (is_path(tags) and can_walk_left(tags) and not bike)
    )
