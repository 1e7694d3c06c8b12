"""
Tag-provenance guard.

Classification and back-mapping expect raw OSM tags.  A segment's simulation
attributes (``roadStyle`` / ``roadStyleSimplified``) are a different tag set;
passing them by mistake silently classifies every segment as ``No``.  These
helpers detect which format a tag map is in and reject simulation tags.
"""

import logging
from typing import Any, Mapping

from bike_infrastructure import RADSIM_SIMPLIFIED_TAG, RADSIM_TAG
from translation_errors import PreconditionViolated

logger = logging.getLogger(__name__)

OSM_FORMAT = "OSM"
SIMULATION_SIMPLIFIED_FORMAT = "RadSim Simplified"
SIMULATION_FULL_FORMAT = "RadSim Full"


def is_simulation_simplified_format(tags: Mapping[str, Any]) -> bool:
    return RADSIM_SIMPLIFIED_TAG in tags


def is_simulation_full_format(tags: Mapping[str, Any]) -> bool:
    return RADSIM_TAG in tags


def is_osm_format(tags: Mapping[str, Any]) -> bool:
    """True if no simulation key is present."""
    return not is_simulation_simplified_format(tags) and not is_simulation_full_format(tags)


def get_tag_format(tags: Mapping[str, Any]) -> str:
    """Name of the detected format, for log and error messages."""
    if is_simulation_simplified_format(tags):
        return SIMULATION_SIMPLIFIED_FORMAT
    if is_simulation_full_format(tags):
        return SIMULATION_FULL_FORMAT
    return OSM_FORMAT


def require_osm_format(tags: Mapping[str, Any], caller: str):
    """Raise PreconditionViolated if *tags* are simulation tags."""
    if is_osm_format(tags):
        return
    tag_format = get_tag_format(tags)
    key = RADSIM_SIMPLIFIED_TAG if is_simulation_simplified_format(tags) else RADSIM_TAG
    logger.error(
        "%s expects OSM tags but received %s tags (found key %r in %s)",
        caller, tag_format, key, sorted(tags),
    )
    raise PreconditionViolated(
        f"{caller} expects OSM tags but received {tag_format} tags! "
        f"Found key '{key}' in: {sorted(tags)}",
        {"caller": caller, "format": tag_format, "keys": sorted(tags)},
    )
