"""Analytics reporter.

Counts lifecycle events for one stage/source stream and, when the stream
terminates, writes a single analytics event through AnalyticsSink:

counts:  started_docs, ended_docs, failed_docs (started but never ended)
samples: latency_ms per document (element_started -> element_ended), summarized to p50/p90/p99
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional
import time
from ..analytics.schemas import make_event
from ..analytics.sink import AnalyticsSink
from .base import LifecycleReporter


class AnalyticsReporter(LifecycleReporter):
    name = "analytics"

    def __init__(self, sink: AnalyticsSink, *, run_id: str, stage: str = "tagging", source: str = "", layer: str = "enrichment"):
        self.sink = sink
        self.run_id = run_id
        self.stage = stage
        self.source = source
        self.layer = layer

        self.started = 0
        self.ended = 0
        self.latencies_ms: List[float] = []
        self.status: Optional[str] = None
        self._inflight: Dict[Any, float] = {}

    def element_started(self, doc_id: Any) -> None:
        self.started += 1
        self._inflight[doc_id] = time.monotonic()

    def element_ended(self, doc_id: Any) -> None:
        self.ended += 1
        t0 = self._inflight.pop(doc_id, None)
        if t0 is not None:
            self.latencies_ms.append((time.monotonic() - t0) * 1000.0)

    def stage_completed(self) -> None:
        self._emit("completed")

    def stage_errored(self, error: BaseException) -> None:
        self._emit("errored", error=f"{type(error).__name__}: {error}")

    def _emit(self, status: str, error: Optional[str] = None) -> None:
        self.status = status
        ev = make_event(
            run_id=self.run_id,
            stage=self.stage,
            source=self.source,
            layer=self.layer,
            status=status,
            counts={"started_docs": self.started, "ended_docs": self.ended, "failed_docs": self.started - self.ended},
            metric_samples={"latency_ms": list(self.latencies_ms)} if self.latencies_ms else None,
            error=error,
        )
        self.sink.emit(ev)
        self.sink.flush_aggregates()
