#!/usr/bin/env python3
"""Verify every rule-matrix transition converges from the category signature tags."""

import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from back_mapper import BACK_MAPPER
from back_mapping_rules import RULE_MATRIX, required_transitions
from bike_infrastructure import signature_tags
from infrastructure_classifier import classify_simplified
from osm_tags import apply_delta
from translation_errors import TranslationError


def check(back_mapper=BACK_MAPPER):
    print(f"Rule matrix {RULE_MATRIX.version}: {len(RULE_MATRIX)} rules")
    failures = 0
    for from_category, to_category in required_transitions():
        tags = signature_tags(from_category)
        label = f"{from_category.value} -> {to_category.value}"
        try:
            delta = back_mapper.back_map(from_category, to_category, tags)
        except TranslationError as e:
            print(f"FAIL: {label} - {e.kind.value}: {e.message}")
            failures += 1
            continue
        reached = classify_simplified(apply_delta(tags, delta))
        if reached is not to_category:
            print(f"FAIL: {label} - reached {reached.value}")
            failures += 1
            continue
        print(f"OK: {label} {delta}")

    if failures:
        print(f"\nFAIL: {failures} of {len(required_transitions())} transitions")
        return False
    print(f"\nOK: all {len(required_transitions())} transitions converge")
    return True


if __name__ == "__main__":
    success = check()
    sys.exit(0 if success else 1)
