"""
Entry points between OSM tags and the simulation's tag format.

Forward:  ``to_radsim_tags(osm_tags)`` -> ``{"roadStyle": ..., "roadStyleSimplified": ...}``
Backward: ``compute_delta(osm_tags, key, value)`` -> OSM tag delta that makes the
          segment carry *value* for simulation tag *key*.

Only the infrastructure tags are translated here; speed and surface are not.

The default model and back-mapper ignore the RADSIM_* environment; see
``translation_config``.

The ``try_*`` wrappers return a DeltaResult instead of raising, so batch
callers can decide per segment whether to skip or abort:

    result = try_compute_delta(tags, "roadStyleSimplified", "BicycleLane")
    if result.failure is FailureKind.STALL_DETECTED:
        ...
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from back_mapper import BACK_MAPPER, BackMapper
from bike_infrastructure import SimplifiedInfrastructure
from infrastructure_classifier import classify_normalized
from osm_tags import normalize_tags
from tag_format import require_osm_format
from translation_config import TRANSLATION_MODEL, TranslationModel
from translation_errors import FailureKind, TranslationError, UnknownCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeltaResult:
    """Outcome of a back-mapping call: a delta, or a failure kind and message."""
    delta: Dict[str, str] = field(default_factory=dict)
    failure: Optional[FailureKind] = None
    message: str = ""
    context: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def from_error(cls, error: TranslationError) -> "DeltaResult":
        return cls(failure=error.kind, message=error.message, context=dict(error.context))


# =============================================================================
# Forward mapping
# =============================================================================

def to_radsim_tags(
    osm_tags: Mapping[str, Any],
    model: TranslationModel = TRANSLATION_MODEL,
) -> Dict[str, str]:
    """Detailed and simplified infrastructure category as simulation tags."""
    if model.enforce_osm_format:
        require_osm_format(osm_tags, "to_radsim_tags")
    detailed = classify_normalized(normalize_tags(osm_tags))
    return {
        model.simulation_tags.detailed: detailed.value,
        model.simulation_tags.simplified: detailed.simplified.value,
    }


# =============================================================================
# Back mapping
# =============================================================================

def compute_delta(
    current: Mapping[str, Any],
    key: str,
    value: str,
    model: TranslationModel = TRANSLATION_MODEL,
    back_mapper: BackMapper = BACK_MAPPER,
) -> Dict[str, str]:
    """OSM tag delta that sets simulation tag *key* to *value*.

    The source category is derived from *current* by classification.
    Raises a TranslationError subclass on failure.
    """
    if model.enforce_osm_format:
        require_osm_format(current, "compute_delta")
    if key != model.simulation_tags.simplified:
        raise UnknownCategory(
            f"Unknown simulation key: {key}",
            {"key": key, "value": value},
        )
    tags = normalize_tags(current)
    from_category = classify_normalized(tags).simplified
    to_category = SimplifiedInfrastructure.from_value(value)
    return back_mapper.back_map(from_category, to_category, tags)


def try_back_map(
    from_category: SimplifiedInfrastructure,
    to_category: SimplifiedInfrastructure,
    current: Mapping[str, Any],
    model: TranslationModel = TRANSLATION_MODEL,
    back_mapper: BackMapper = BACK_MAPPER,
) -> DeltaResult:
    """``back_map`` returning a DeltaResult instead of raising."""
    try:
        if model.enforce_osm_format:
            require_osm_format(current, "try_back_map")
        delta = back_mapper.back_map(from_category, to_category, current)
    except TranslationError as e:
        logger.warning("Back-mapping %s -> %s failed: %s (%s)",
                       getattr(from_category, "value", from_category),
                       getattr(to_category, "value", to_category),
                       e.kind.value, e.message)
        return DeltaResult.from_error(e)
    return DeltaResult(delta=delta)


def try_compute_delta(
    current: Mapping[str, Any],
    key: str,
    value: str,
    model: TranslationModel = TRANSLATION_MODEL,
    back_mapper: BackMapper = BACK_MAPPER,
) -> DeltaResult:
    """``compute_delta`` returning a DeltaResult instead of raising."""
    try:
        delta = compute_delta(current, key, value, model=model, back_mapper=back_mapper)
    except TranslationError as e:
        logger.warning("Delta for %s=%s failed: %s (%s)", key, value, e.kind.value, e.message)
        return DeltaResult.from_error(e)
    return DeltaResult(delta=delta)
