"""Unit tests for translation_config.py — model defaults and environment overrides."""

import dataclasses

import pytest

from back_mapper import BACK_MAPPER
from back_mapping_rules import RULE_MATRIX_VERSION
from radsim_mapper import to_radsim_tags
from translation_config import TRANSLATION_MODEL, load_translation_model
from translation_errors import PreconditionViolated


class TestDefaults:
    def test_model(self):
        assert TRANSLATION_MODEL.version == "1.0.0"
        assert TRANSLATION_MODEL.rule_matrix_version == RULE_MATRIX_VERSION
        assert TRANSLATION_MODEL.simulation_tags.detailed == "roadStyle"
        assert TRANSLATION_MODEL.simulation_tags.simplified == "roadStyleSimplified"
        assert TRANSLATION_MODEL.limits.max_hops == 6
        assert TRANSLATION_MODEL.enforce_osm_format is True

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            TRANSLATION_MODEL.limits.max_hops = 10


class TestLoadTranslationModel:
    def test_no_overrides(self):
        assert load_translation_model({}) == TRANSLATION_MODEL

    def test_max_hops(self):
        model = load_translation_model({"RADSIM_MAX_BACK_MAP_HOPS": "3"})
        assert model.limits.max_hops == 3
        # The module-level instance is untouched.
        assert TRANSLATION_MODEL.limits.max_hops == 6

    @pytest.mark.parametrize("raw", ["0", "-2", "many"])
    def test_invalid_max_hops_ignored(self, raw, caplog):
        with caplog.at_level("WARNING", logger="translation_config"):
            model = load_translation_model({"RADSIM_MAX_BACK_MAP_HOPS": raw})
        assert model.limits.max_hops == 6
        assert "RADSIM_MAX_BACK_MAP_HOPS" in caplog.text

    @pytest.mark.parametrize("raw,expected", [
        ("false", False),
        ("FALSE", False),
        ("true", True),
        ("0", True),
    ])
    def test_enforce_osm_format(self, raw, expected):
        model = load_translation_model({"RADSIM_ENFORCE_OSM_FORMAT": raw})
        assert model.enforce_osm_format is expected

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("RADSIM_MAX_BACK_MAP_HOPS", "4")
        assert load_translation_model().limits.max_hops == 4

    def test_library_defaults_ignore_environment(self, monkeypatch):
        monkeypatch.setenv("RADSIM_MAX_BACK_MAP_HOPS", "1")
        monkeypatch.setenv("RADSIM_ENFORCE_OSM_FORMAT", "false")
        assert TRANSLATION_MODEL.limits.max_hops == 6
        assert TRANSLATION_MODEL.enforce_osm_format is True
        assert BACK_MAPPER.max_hops == 6
        assert to_radsim_tags({"highway": "cycleway"})["roadStyleSimplified"] == "BicycleWay"
        with pytest.raises(PreconditionViolated):
            to_radsim_tags({"roadStyle": "No"})
