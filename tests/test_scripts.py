"""Unit tests for the command-line scripts in scripts/."""

import json

import pytest

from scripts import translate_tags
from scripts.verify_rule_matrix import check
from translation_errors import FailureKind


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("RADSIM_MAX_BACK_MAP_HOPS", raising=False)
    monkeypatch.delenv("RADSIM_ENFORCE_OSM_FORMAT", raising=False)
    monkeypatch.setattr(translate_tags, "load_dotenv", lambda: None)


def _run(capsys, argv):
    code = translate_tags.main(argv)
    return code, json.loads(capsys.readouterr().out)


# =========================================================================
# translate_tags
# =========================================================================

class TestParseTagArgs:
    def test_pairs(self):
        assert translate_tags.parse_tag_args(["highway=path", "note=a=b"]) == {
            "highway": "path",
            "note": "a=b",
        }

    @pytest.mark.parametrize("pair", ["highway", "=path"])
    def test_malformed(self, pair):
        with pytest.raises(ValueError):
            translate_tags.parse_tag_args([pair])


class TestClassifyCommand:
    def test_prints_categories(self, capsys):
        code, out = _run(capsys, ["classify", "highway=cycleway", "segregated=yes"])
        assert code == 0
        assert out == {"roadStyle": "BicycleWayBoth", "roadStyleSimplified": "BicycleWay"}

    def test_json_file_merged_with_args(self, capsys, tmp_path):
        path = tmp_path / "way.json"
        path.write_text(json.dumps({"highway": "footway", "bicycle": "no"}))
        code, out = _run(capsys, ["classify", "--json", str(path), "bicycle=yes"])
        assert code == 0
        assert out["roadStyleSimplified"] == "MixedWay"

    def test_simulation_tags_rejected(self, capsys):
        code, out = _run(capsys, ["classify", "roadStyle=No"])
        assert code == 1
        assert out["kind"] == FailureKind.PRECONDITION_VIOLATED.value

    def test_bad_tag_argument(self, capsys):
        assert translate_tags.main(["classify", "highway"]) == 1


class TestBackmapCommand:
    def test_prints_delta(self, capsys):
        code, out = _run(capsys, ["backmap", "--to", "BicycleLane", "highway=residential"])
        assert code == 0
        assert out == {
            "delta": {"highway": "secondary", "cycleway": "lane"},
            "set": {"highway": "secondary", "cycleway": "lane"},
            "remove": [],
        }

    def test_removed_keys_listed(self, capsys):
        code, out = _run(capsys, ["backmap", "--to", "No", "highway=cycleway", "cycle_highway=yes"])
        assert code == 0
        assert out["set"] == {"highway": "path"}
        assert out["remove"] == ["cycle_highway"]

    def test_trace_included(self, capsys):
        code, out = _run(capsys, [
            "backmap", "--to", "No", "--trace", "highway=cycleway", "cycle_highway=yes",
        ])
        assert code == 0
        assert out["delta"] == {"cycle_highway": "", "highway": "path"}
        assert out["trace"]["total_hops"] == 2
        assert out["trace"]["final_outcome"] == "success"

    def test_failure_reported(self, capsys):
        code, out = _run(capsys, ["backmap", "--to", "BusLane", "tram=yes"])
        assert code == 1
        assert out["failure"] == "stall_detected"
        assert out["context"]["from"] == "No"

    def test_unknown_target_rejected_by_parser(self):
        with pytest.raises(SystemExit):
            translate_tags.main(["backmap", "--to", "Autobahn"])

    def test_hop_budget_from_environment(self, capsys, monkeypatch):
        monkeypatch.setenv("RADSIM_MAX_BACK_MAP_HOPS", "1")
        code, out = _run(capsys, ["backmap", "--to", "No", "highway=cycleway", "cycle_highway=yes"])
        assert code == 1
        assert out["failure"] == "cycle_detected"


# =========================================================================
# verify_rule_matrix
# =========================================================================

class TestVerifyRuleMatrix:
    def test_all_transitions_converge(self, capsys):
        assert check() is True
        out = capsys.readouterr().out
        assert "OK: all 42 transitions converge" in out
        assert "FAIL" not in out
