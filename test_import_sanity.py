"""Import sanity tests.

These lightweight tests verify that the core modules and the command-line
entrypoints can be imported without errors.
"""

import pytest


def test_core_modules_import():
    """Every library module must import without errors."""
    import back_mapper  # noqa: F401
    import back_mapping_rules  # noqa: F401
    import bike_infrastructure  # noqa: F401
    import bm_trace  # noqa: F401
    import infrastructure_classifier  # noqa: F401
    import osm_predicates  # noqa: F401
    import osm_tags  # noqa: F401
    import radsim_mapper  # noqa: F401
    import tag_format  # noqa: F401
    import translation_config  # noqa: F401
    import translation_errors  # noqa: F401


def test_public_entrypoints():
    """Symbols used by the scripts must be importable."""
    from radsim_mapper import compute_delta, to_radsim_tags, try_compute_delta
    from back_mapper import BACK_MAPPER
    assert compute_delta is not None
    assert to_radsim_tags is not None
    assert try_compute_delta is not None
    assert BACK_MAPPER.rule_matrix is not None


def test_scripts_import():
    """CLI modules must import without running main()."""
    from scripts import translate_tags, verify_rule_matrix
    assert callable(translate_tags.main)
    assert callable(verify_rule_matrix.check)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
