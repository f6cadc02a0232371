"""Analytics sink.

Two storage layers:
1) Raw events (append-only Parquet): `analytics/events/stage=.../date=.../events.parquet`
2) Aggregates (append-only Parquet): `analytics/aggregates/daily_aggregates.parquet`

Reporters can pass raw samples via event["metric_samples"] = {"latency_ms": [...]};
they are summarized into p50/p90/p99 before the event is written.
"""

from __future__ import annotations
from typing import Any, Dict, List
import os
import numpy as np
import pyarrow as pa
import pyarrow.parquet as pq
from datetime import datetime, timezone


def _percentiles(xs: List[float], ps=(50, 90, 99)) -> Dict[str, float]:
    if not xs:
        return {}
    arr = np.array(xs, dtype=np.float64)
    return {f"p{p}": float(np.percentile(arr, p)) for p in ps}


class AnalyticsSink:
    def __init__(self, out_dir: str, run_id: str):
        self.out_dir = out_dir
        self.run_id = run_id
        self.events_dir = os.path.join(out_dir, "analytics", "events")
        self.aggs_dir = os.path.join(out_dir, "analytics", "aggregates")
        os.makedirs(self.events_dir, exist_ok=True)
        os.makedirs(self.aggs_dir, exist_ok=True)

        # key=(date, stage, source) -> counters; flushed by flush_aggregates()
        self._agg: Dict[tuple, Dict[str, Any]] = {}

    def emit(self, event: Dict[str, Any]) -> str:
        stage = event["stage"]
        date = datetime.fromtimestamp(event["timestamp_ms"] / 1000, tz=timezone.utc).date().isoformat()

        metric_samples = event.pop("metric_samples", None) or {}
        event.setdefault("metrics", {})
        for k, xs in metric_samples.items():
            for pk, pv in _percentiles(xs).items():
                event["metrics"][f"{k}_{pk}"] = pv

        p = os.path.join(self.events_dir, f"stage={stage}", f"date={date}", "events.parquet")
        os.makedirs(os.path.dirname(p), exist_ok=True)
        self._append_parquet(p, [event])

        key = (date, stage, event["source"])
        cur = self._agg.get(key, {
            "date": date, "stage": stage, "source": event["source"],
            "started_docs": 0, "ended_docs": 0, "failed_docs": 0, "streams_errored": 0,
        })
        counts = event.get("counts", {})
        cur["started_docs"] += int(counts.get("started_docs", 0))
        cur["ended_docs"] += int(counts.get("ended_docs", 0))
        cur["failed_docs"] += int(counts.get("failed_docs", 0))
        if event.get("status") == "errored":
            cur["streams_errored"] += 1
        for mk, mv in (event.get("metrics") or {}).items():
            if isinstance(mv, (int, float)):
                cur[mk] = float(mv)
        self._agg[key] = cur
        return p

    def flush_aggregates(self) -> None:
        if not self._agg:
            return
        rows = list(self._agg.values())
        p = os.path.join(self.aggs_dir, "daily_aggregates.parquet")
        self._append_parquet(p, rows)
        self._agg.clear()

    def _normalize_row(self, row: Dict[str, Any]) -> Dict[str, Any]:
        # empty dicts cannot be written as Parquet structs
        return {k: (None if isinstance(v, dict) and not v else v) for k, v in row.items()}

    def _append_parquet(self, path: str, rows: List[Dict[str, Any]]) -> None:
        table = pa.Table.from_pylist([self._normalize_row(r) for r in rows])

        if os.path.exists(path):
            if os.path.getsize(path) == 0:
                os.remove(path)
            else:
                existing = pq.read_table(path)
                existing_rows = [self._normalize_row(r) for r in existing.to_pylist()]
                try:
                    table = pa.concat_tables([pa.Table.from_pylist(existing_rows, schema=existing.schema), table], promote_options="default")
                except (pa.ArrowInvalid, pa.ArrowTypeError):
                    # schema drifted between events; re-infer over all rows
                    table = pa.Table.from_pylist(existing_rows + [self._normalize_row(r) for r in rows])

        pq.write_table(table, path, compression="zstd")
