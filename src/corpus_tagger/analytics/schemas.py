"""Analytics event schemas.

One event is emitted per stage when its stream terminates.
Events are stored to Parquet by AnalyticsSink.

This module defines helper constructors and recommended keys, but does not
force strict validation.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional
import time


def make_event(
    *,
    run_id: str,
    stage: str,
    source: str,
    layer: str,
    status: str,
    counts: Dict[str, int],
    metrics: Optional[Dict[str, float]] = None,
    metric_samples: Optional[Dict[str, List[float]]] = None,
    error: Optional[str] = None,
) -> Dict[str, Any]:
    ev = {
        "run_id": run_id,
        "stage": stage,
        "source": source,
        "layer": layer,
        "status": status,  # completed | errored
        "timestamp_ms": int(time.time() * 1000),
        "counts": counts,
        "metrics": metrics or {},
        "error": error,
    }
    if metric_samples:
        ev["metric_samples"] = metric_samples
    return ev
