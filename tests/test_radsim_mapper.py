"""Unit tests for radsim_mapper.py — forward mapping and the delta engine."""

from dataclasses import replace
from unittest.mock import patch

import pytest

from bike_infrastructure import SimplifiedInfrastructure as S
from infrastructure_classifier import classify_simplified
from osm_tags import apply_delta
from radsim_mapper import (
    DeltaResult,
    compute_delta,
    to_radsim_tags,
    try_back_map,
    try_compute_delta,
)
from translation_config import TRANSLATION_MODEL
from translation_errors import (
    FailureKind,
    PreconditionViolated,
    StallDetected,
    UnknownCategory,
)


# =========================================================================
# Forward mapping
# =========================================================================

class TestToRadsimTags:
    def test_segregated_cycleway(self):
        assert to_radsim_tags({"highway": "cycleway", "segregated": "yes"}) == {
            "roadStyle": "BicycleWayBoth",
            "roadStyleSimplified": "BicycleWay",
        }

    def test_empty(self):
        assert to_radsim_tags({}) == {"roadStyle": "No", "roadStyleSimplified": "No"}

    def test_one_sided_lane(self):
        tags = {"highway": "secondary", "cycleway:right": "lane"}
        assert to_radsim_tags(tags) == {
            "roadStyle": "BicycleLaneRightMitLeft",
            "roadStyleSimplified": "BicycleLane",
        }

    def test_rejects_simulation_tags(self):
        with pytest.raises(PreconditionViolated):
            to_radsim_tags({"roadStyle": "BicycleWayBoth"})

    def test_guard_can_be_disabled(self):
        model = replace(TRANSLATION_MODEL, enforce_osm_format=False)
        assert to_radsim_tags({"roadStyle": "BicycleWayBoth"}, model=model)["roadStyle"] == "No"


# =========================================================================
# compute_delta
# =========================================================================

class TestComputeDelta:
    def test_lane_on_residential_road(self):
        tags = {"highway": "residential"}
        delta = compute_delta(tags, "roadStyleSimplified", "BicycleLane")
        assert delta == {"highway": "secondary", "cycleway": "lane"}

    def test_same_category_is_empty(self):
        tags = {"highway": "cycleway", "segregated": "yes"}
        assert compute_delta(tags, "roadStyleSimplified", "BicycleWay") == {}

    def test_result_classifies_as_target(self):
        tags = {"highway": "footway"}
        delta = compute_delta(tags, "roadStyleSimplified", "MixedWay")
        assert classify_simplified(apply_delta(tags, delta)) is S.MIXED_WAY

    def test_unknown_value(self):
        with pytest.raises(UnknownCategory):
            compute_delta({}, "roadStyleSimplified", "Autobahn")

    @pytest.mark.parametrize("key", ["roadStyle", "maxSpeed", "surface"])
    def test_unsupported_key(self, key):
        with pytest.raises(UnknownCategory) as exc_info:
            compute_delta({}, key, "BicycleLane")
        assert exc_info.value.context["key"] == key

    def test_rejects_simulation_tags(self):
        with pytest.raises(PreconditionViolated):
            compute_delta({"roadStyleSimplified": "No"}, "roadStyleSimplified", "BicycleLane")

    def test_uses_given_back_mapper(self):
        with patch("back_mapper.BackMapper.back_map", return_value={"x": "y"}) as mock_back_map:
            assert compute_delta({}, "roadStyleSimplified", "BusLane") == {"x": "y"}
        mock_back_map.assert_called_once_with(S.NO, S.BUS_LANE, {})


# =========================================================================
# Result-returning wrappers
# =========================================================================

class TestTryWrappers:
    def test_success(self):
        result = try_compute_delta({}, "roadStyleSimplified", "CycleHighway")
        assert result.ok
        assert result.failure is None
        assert result.delta == {"cycle_highway": "yes"}

    def test_stall(self):
        result = try_compute_delta({"tram": "yes"}, "roadStyleSimplified", "BicycleLane")
        assert not result.ok
        assert result.failure is FailureKind.STALL_DETECTED
        assert result.delta == {}
        assert result.context["from"] == "No"

    def test_unknown_value(self):
        result = try_compute_delta({}, "roadStyleSimplified", "Nope")
        assert result.failure is FailureKind.UNKNOWN_CATEGORY

    def test_try_back_map_precondition(self):
        result = try_back_map(S.NO, S.BICYCLE_WAY, {"highway": "cycleway", "access": "no"})
        assert result.failure is FailureKind.PRECONDITION_VIOLATED
        assert result.delta == {}

    def test_try_back_map_rejects_simulation_tags(self):
        result = try_back_map(S.NO, S.BICYCLE_WAY, {"roadStyle": "No"})
        assert result.failure is FailureKind.PRECONDITION_VIOLATED

    def test_try_back_map_success(self):
        result = try_back_map(S.BICYCLE_WAY, S.NO, {"highway": "cycleway"})
        assert result == DeltaResult(delta={"highway": "path"})

    def test_failure_logged_as_warning(self, caplog):
        with caplog.at_level("WARNING", logger="radsim_mapper"):
            try_compute_delta({"tram": "yes"}, "roadStyleSimplified", "BusLane")
        assert "stall_detected" in caplog.text

    def test_result_from_error(self):
        err = StallDetected("no progress", {"from": "No"})
        result = DeltaResult.from_error(err)
        assert result.failure is FailureKind.STALL_DETECTED
        assert result.message == "no progress"
        assert result.context == {"from": "No"}
