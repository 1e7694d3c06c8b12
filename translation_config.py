"""
Translation model configuration.

Owns the simulation tag keys, the back-mapping limits and the rule matrix
version.  Frozen dataclasses provide type checking and IDE support without
the indirection of YAML/JSON config files.

Environment overrides (read by ``load_translation_model``):
  RADSIM_MAX_BACK_MAP_HOPS     hop budget for one back-mapping call
  RADSIM_ENFORCE_OSM_FORMAT    "false" disables the tag-provenance guard

The overrides only take effect where ``load_translation_model`` is called,
which is the command-line scripts.  Library callers get ``TRANSLATION_MODEL``
and ``back_mapper.BACK_MAPPER``, built from the defaults at import time; pass
``model=load_translation_model()`` and a matching ``BackMapper`` to honor them.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Mapping, Optional

from back_mapping_rules import RULE_MATRIX_VERSION
from bike_infrastructure import RADSIM_SIMPLIFIED_TAG, RADSIM_TAG

logger = logging.getLogger(__name__)


# =============================================================================
# Dataclasses
# =============================================================================

@dataclass(frozen=True)
class SimulationTagKeys:
    """Keys the forward mapping writes into a segment's simulation attributes."""
    detailed: str = RADSIM_TAG
    simplified: str = RADSIM_SIMPLIFIED_TAG


@dataclass(frozen=True)
class BackMappingLimits:
    """Bounds on one back-mapping call."""
    # One hop per other simplified category; a longer walk cannot be useful.
    max_hops: int = 6


@dataclass(frozen=True)
class TranslationModel:
    """Top-level container for the translation configuration."""
    version: str = "1.0.0"
    rule_matrix_version: str = RULE_MATRIX_VERSION
    simulation_tags: SimulationTagKeys = field(default_factory=SimulationTagKeys)
    limits: BackMappingLimits = field(default_factory=BackMappingLimits)
    enforce_osm_format: bool = True


# =============================================================================
# Instances
# =============================================================================

TRANSLATION_MODEL = TranslationModel()


def load_translation_model(environ: Optional[Mapping[str, str]] = None) -> TranslationModel:
    """Return TRANSLATION_MODEL with environment overrides applied.

    Invalid values are logged and ignored.
    """
    env = os.environ if environ is None else environ
    model = TRANSLATION_MODEL

    raw_hops = env.get("RADSIM_MAX_BACK_MAP_HOPS")
    if raw_hops:
        try:
            hops = int(raw_hops)
        except ValueError:
            hops = 0
        if hops > 0:
            model = replace(model, limits=replace(model.limits, max_hops=hops))
        else:
            logger.warning(
                "Ignoring RADSIM_MAX_BACK_MAP_HOPS=%r (expected a positive integer)",
                raw_hops,
            )

    raw_enforce = env.get("RADSIM_ENFORCE_OSM_FORMAT")
    if raw_enforce:
        model = replace(model, enforce_osm_format=raw_enforce.lower() != "false")

    return model
