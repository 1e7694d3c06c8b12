"""
Call-scoped tracing for back-mapping diagnostics.

Provides a thread-local BackMapTrace that records:
  - Per-hop transitions (from, to, reached category, delta, depth)
  - Failures (kind, message, context) raised by the back-mapper
  - End-of-call summary (hops, failures, outcome)

Usage:
    from bm_trace import BackMapTrace, get_trace, set_trace, clear_trace

    # In a batch job or CLI:
    trace = BackMapTrace(trace_id=str(way_id))
    set_trace(trace)
    ...
    trace.log_summary()
    clear_trace()

    # In the back-mapper (automatically):
    trace = get_trace()
    if trace:
        trace.record_hop(...)
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


# =============================================================================
# Data classes for trace records
# =============================================================================

@dataclass
class HopRecord:
    """One rule application."""
    from_category: str    # simplified category before the hop
    to_category: str      # requested target
    reached: str          # simplified category after reclassification
    delta: Dict[str, str]
    depth: int            # 0 for the first hop of a call


@dataclass
class FailureRecord:
    """A back-mapping failure, recorded before it is raised."""
    kind: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)


# =============================================================================
# Trace context
# =============================================================================

@dataclass
class BackMapTrace:
    """Accumulates hop and failure records for one back-mapping job."""
    trace_id: str
    started: float = field(default_factory=time.time)
    hops: List[HopRecord] = field(default_factory=list)
    failures: List[FailureRecord] = field(default_factory=list)
    rule_matrix_version: str = ""

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record_hop(
        self,
        from_category: str,
        to_category: str,
        reached: str,
        delta: Dict[str, str],
        depth: int,
    ):
        rec = HopRecord(
            from_category=from_category,
            to_category=to_category,
            reached=reached,
            delta=dict(delta),
            depth=depth,
        )
        self.hops.append(rec)
        logger.debug(
            "  [hop] trace=%s depth=%d %s -> %s reached=%s delta=%s",
            self.trace_id,
            depth,
            from_category,
            to_category,
            reached,
            rec.delta,
        )

    def record_failure(self, kind: str, message: str, context: Optional[Dict[str, Any]] = None):
        rec = FailureRecord(kind=kind, message=message, context=dict(context or {}))
        self.failures.append(rec)
        logger.info(
            "  [failure] trace=%s kind=%s %s",
            self.trace_id,
            kind,
            message,
        )

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    # Maximum per-hop records persisted in summary_dict to prevent bloat.
    MAX_HOP_RECORDS = 500

    def summary_dict(self) -> Dict[str, Any]:
        """Return a summary dict suitable for logging and JSON output."""
        total_elapsed = int((time.time() - self.started) * 1000)
        max_depth = max((h.depth for h in self.hops), default=-1) + 1

        if self.failures and not self.hops:
            outcome = "error"
        elif self.failures:
            outcome = "partial"
        elif not self.hops:
            outcome = "empty"
        else:
            outcome = "success"

        hops = [
            {
                "from": h.from_category,
                "to": h.to_category,
                "reached": h.reached,
                "depth": h.depth,
            }
            for h in self.hops[:self.MAX_HOP_RECORDS]
        ]

        result = {
            "trace_id": self.trace_id,
            "total_elapsed_ms": total_elapsed,
            "total_hops": len(self.hops),
            "max_depth": max_depth,
            "failures": len(self.failures),
            "final_outcome": outcome,
            "hops": hops,
        }
        if self.rule_matrix_version:
            result["rule_matrix_version"] = self.rule_matrix_version
        return result

    def log_summary(self):
        """Emit a single structured summary log line."""
        s = self.summary_dict()
        logger.info(
            "[trace-summary] trace=%s total_ms=%d hops=%d max_depth=%d "
            "failures=%d outcome=%s",
            s["trace_id"],
            s["total_elapsed_ms"],
            s["total_hops"],
            s["max_depth"],
            s["failures"],
            s["final_outcome"],
        )

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def hops_to_list(self) -> List[Dict[str, Any]]:
        return [
            {
                "from": h.from_category,
                "to": h.to_category,
                "reached": h.reached,
                "delta": dict(h.delta),
                "depth": h.depth,
            }
            for h in self.hops
        ]

    def failures_to_list(self) -> List[Dict[str, Any]]:
        return [
            {"kind": f.kind, "message": f.message, "context": dict(f.context)}
            for f in self.failures
        ]

    def full_trace_dict(self) -> Dict[str, Any]:
        """Complete trace data for debug output."""
        summary = self.summary_dict()
        summary["hops"] = self.hops_to_list()
        summary["failure_records"] = self.failures_to_list()
        return summary


# =============================================================================
# Thread-local storage
# =============================================================================

_trace_local = threading.local()


def get_trace() -> Optional[BackMapTrace]:
    """Get the current thread's back-mapping trace, or None."""
    return getattr(_trace_local, "ctx", None)


def set_trace(ctx: Optional[BackMapTrace]):
    """Set the trace context for the current thread."""
    _trace_local.ctx = ctx


def clear_trace():
    """Clear the current trace context."""
    _trace_local.ctx = None
