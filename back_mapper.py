"""
Recursive back-mapping: simplified category change -> OSM tag delta.

When a planner switches a segment from one simplified category to another,
the back-mapper asks the rule matrix for a delta, applies it to a copy of
the tags, reclassifies, and repeats until the target category is reached.

Failure modes (all raised, never defaulted):
  - PreconditionViolated: ``No`` declared but the tags carry ``highway=cycleway``
  - StallDetected: a rule left the segment in its source category
  - CycleDetected: a (category, tags) state repeated, or the hop budget ran out
  - NoRuleForTransition / UnknownCategory: from the rule matrix

Every hop is logged at DEBUG and recorded on the active bm_trace; every
failure is logged at ERROR with the tags before/after the offending delta.
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Set, Tuple

from back_mapping_rules import RULE_MATRIX, RuleMatrix
from bike_infrastructure import DetailedInfrastructure, SimplifiedInfrastructure, simplify
from bm_trace import get_trace
from infrastructure_classifier import classify_normalized
from osm_tags import CYCLEWAY, HIGHWAY, apply_delta, freeze_tags, merge_deltas, normalize_tags
from translation_config import TRANSLATION_MODEL
from translation_errors import (
    CycleDetected,
    PreconditionViolated,
    StallDetected,
    TranslationError,
    UnknownCategory,
)

logger = logging.getLogger(__name__)

State = Tuple[SimplifiedInfrastructure, frozenset]


class BackMapper:
    """Composes a rule matrix, a classifier and a simplifier into back-mapping."""

    def __init__(
        self,
        rule_matrix: RuleMatrix = RULE_MATRIX,
        classify: Callable[[Mapping[str, str]], DetailedInfrastructure] = classify_normalized,
        simplify: Callable[[DetailedInfrastructure], SimplifiedInfrastructure] = simplify,
        max_hops: int = TRANSLATION_MODEL.limits.max_hops,
    ):
        if max_hops < 1:
            raise ValueError(f"max_hops must be positive, got {max_hops}")
        self.rule_matrix = rule_matrix
        self.classify = classify
        self.simplify = simplify
        self.max_hops = max_hops

    def back_map(
        self,
        from_category: SimplifiedInfrastructure,
        to_category: SimplifiedInfrastructure,
        current: Optional[Mapping[str, Any]],
    ) -> Dict[str, str]:
        """Return the tag delta that moves *current* from one category to another.

        The delta is the composition of every hop's delta, so applying it
        once to *current* yields the final tags.  *current* is not modified.
        Returns an empty dict when both categories are the same.
        """
        for category in (from_category, to_category):
            if not isinstance(category, SimplifiedInfrastructure):
                raise UnknownCategory(
                    f"Not a simplified infrastructure category: {category!r}",
                    {"value": str(category)},
                )
        if from_category is to_category:
            return {}

        tags = normalize_tags(current)
        return self._step(from_category, to_category, tags, set(), 0)

    # ------------------------------------------------------------------
    # Recursion
    # ------------------------------------------------------------------

    def _step(
        self,
        from_category: SimplifiedInfrastructure,
        to_category: SimplifiedInfrastructure,
        tags: Dict[str, str],
        visited: Set[State],
        depth: int,
    ) -> Dict[str, str]:
        context = {
            "from": from_category.value,
            "to": to_category.value,
            "depth": depth,
            "tags": dict(tags),
        }

        if from_category is SimplifiedInfrastructure.NO and tags.get(HIGHWAY) == CYCLEWAY:
            self._fail(PreconditionViolated(
                f"{from_category.value} segment must not carry highway=cycleway",
                context,
            ))

        state = (from_category, freeze_tags(tags))
        if state in visited:
            self._fail(CycleDetected(
                f"Back-mapping {from_category.value} -> {to_category.value} revisited a state",
                context,
            ))
        if depth >= self.max_hops:
            self._fail(CycleDetected(
                f"Back-mapping {from_category.value} -> {to_category.value} "
                f"exceeded {self.max_hops} hops",
                dict(context, max_hops=self.max_hops),
            ))
        visited.add(state)

        try:
            delta = self.rule_matrix.delta(from_category, to_category, tags)
        except TranslationError as e:
            self._record(e)
            raise
        updated = apply_delta(tags, delta)
        reached = self.simplify(self.classify(updated))

        logger.debug(
            "[backmap] depth=%d %s -> %s delta=%s reached=%s",
            depth, from_category.value, to_category.value, delta, reached.value,
        )
        trace = get_trace()
        if trace:
            trace.record_hop(from_category.value, to_category.value, reached.value, delta, depth)

        if reached is from_category:
            self._fail(StallDetected(
                f"Rule {from_category.value} -> {to_category.value} did not change the category",
                dict(context, delta=dict(delta), updated=updated),
            ))
        if reached is to_category:
            return delta
        return merge_deltas(delta, self._step(reached, to_category, updated, visited, depth + 1))

    # ------------------------------------------------------------------
    # Failures
    # ------------------------------------------------------------------

    @staticmethod
    def _record(error: TranslationError):
        trace = get_trace()
        if trace:
            trace.record_failure(error.kind.value, error.message, error.context)

    def _fail(self, error: TranslationError):
        context = error.context
        logger.error(
            "[backmap] %s: %s before=%s delta=%s after=%s",
            error.kind.value,
            error.message,
            context.get("tags"),
            context.get("delta"),
            context.get("updated"),
        )
        self._record(error)
        raise error


# =============================================================================
# Default instance
# =============================================================================

BACK_MAPPER = BackMapper()


def back_map(
    from_category: SimplifiedInfrastructure,
    to_category: SimplifiedInfrastructure,
    current: Optional[Mapping[str, Any]],
) -> Dict[str, str]:
    """``BACK_MAPPER.back_map`` shortcut."""
    return BACK_MAPPER.back_map(from_category, to_category, current)
