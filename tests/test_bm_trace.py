"""Unit tests for bm_trace.py — back-mapping trace.

Tests cover: BackMapTrace lifecycle, hop and failure recording, summary
computation, serialization, and thread-local storage.
"""

import threading

from bm_trace import (
    BackMapTrace,
    FailureRecord,
    HopRecord,
    clear_trace,
    get_trace,
    set_trace,
)


# =========================================================================
# Recording
# =========================================================================

class TestRecording:
    def test_defaults(self):
        trace = BackMapTrace(trace_id="t-1")
        assert trace.hops == []
        assert trace.failures == []
        assert trace.rule_matrix_version == ""
        assert trace.started > 0

    def test_record_hop_copies_delta(self):
        trace = BackMapTrace(trace_id="t-1")
        delta = {"cycle_highway": ""}
        trace.record_hop("CycleHighway", "No", "BicycleWay", delta, 0)
        delta["highway"] = "path"

        assert trace.hops == [HopRecord("CycleHighway", "No", "BicycleWay", {"cycle_highway": ""}, 0)]

    def test_record_failure(self):
        trace = BackMapTrace(trace_id="t-1")
        trace.record_failure("stall_detected", "did not move", {"from": "No"})
        assert trace.failures == [FailureRecord("stall_detected", "did not move", {"from": "No"})]


# =========================================================================
# Summary
# =========================================================================

class TestSummary:
    def test_empty(self):
        s = BackMapTrace(trace_id="t-1").summary_dict()
        assert s["final_outcome"] == "empty"
        assert s["total_hops"] == 0
        assert s["max_depth"] == 0

    def test_success(self):
        trace = BackMapTrace(trace_id="t-1", rule_matrix_version="2025-08-21")
        trace.record_hop("CycleHighway", "No", "BicycleWay", {}, 0)
        trace.record_hop("BicycleWay", "No", "No", {}, 1)
        s = trace.summary_dict()
        assert s["final_outcome"] == "success"
        assert s["total_hops"] == 2
        assert s["max_depth"] == 2
        assert s["rule_matrix_version"] == "2025-08-21"
        assert s["hops"][1] == {"from": "BicycleWay", "to": "No", "reached": "No", "depth": 1}

    def test_error_without_hops(self):
        trace = BackMapTrace(trace_id="t-1")
        trace.record_failure("precondition_violated", "bad tags")
        assert trace.summary_dict()["final_outcome"] == "error"

    def test_partial(self):
        trace = BackMapTrace(trace_id="t-1")
        trace.record_hop("No", "BicycleLane", "No", {}, 0)
        trace.record_failure("stall_detected", "did not move")
        assert trace.summary_dict()["final_outcome"] == "partial"

    def test_hop_records_capped(self):
        trace = BackMapTrace(trace_id="t-1")
        for i in range(BackMapTrace.MAX_HOP_RECORDS + 10):
            trace.record_hop("No", "BicycleWay", "BicycleWay", {}, 0)
        s = trace.summary_dict()
        assert s["total_hops"] == BackMapTrace.MAX_HOP_RECORDS + 10
        assert len(s["hops"]) == BackMapTrace.MAX_HOP_RECORDS

    def test_log_summary(self, caplog):
        trace = BackMapTrace(trace_id="t-9")
        with caplog.at_level("INFO", logger="bm_trace"):
            trace.log_summary()
        assert "[trace-summary] trace=t-9" in caplog.text

    def test_full_trace_dict(self):
        trace = BackMapTrace(trace_id="t-1")
        trace.record_hop("No", "BicycleWay", "BicycleWay", {"highway": "cycleway"}, 0)
        trace.record_failure("cycle_detected", "loop", {"depth": 3})
        full = trace.full_trace_dict()
        assert full["hops"][0]["delta"] == {"highway": "cycleway"}
        assert full["failure_records"] == [
            {"kind": "cycle_detected", "message": "loop", "context": {"depth": 3}}
        ]


# =========================================================================
# Thread-local storage
# =========================================================================

class TestThreadLocal:
    def test_set_get_clear(self):
        trace = BackMapTrace(trace_id="t-1")
        set_trace(trace)
        assert get_trace() is trace
        clear_trace()
        assert get_trace() is None

    def test_isolated_between_threads(self):
        set_trace(BackMapTrace(trace_id="main"))
        seen = []

        def worker():
            seen.append(get_trace())

        t = threading.Thread(target=worker)
        t.start()
        t.join()
        assert seen == [None]
        assert get_trace().trace_id == "main"
