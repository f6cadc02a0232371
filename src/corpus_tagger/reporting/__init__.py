"""Lifecycle reporters.

Reporters are named in config under `reporters:`; `make_reporter` builds the
composite the host hands to the stage.
"""

from __future__ import annotations
from typing import List, Optional
from .base import LifecycleReporter, NullReporter
from .logging_reporter import LoggingReporter
from .composite import CompositeReporter
from .analytics import AnalyticsReporter
from ..analytics.sink import AnalyticsSink
from ..errors import ConfigError


def make_reporter(
    names: List[str],
    *,
    stage: str = "tagging",
    source: str = "",
    run_id: str = "run",
    sink: Optional[AnalyticsSink] = None,
) -> LifecycleReporter:
    reporters: List[LifecycleReporter] = []
    for n in names:
        if n == "logging":
            reporters.append(LoggingReporter(stage=stage))
        elif n == "analytics":
            if sink is None:
                raise ConfigError("analytics reporter needs an AnalyticsSink")
            reporters.append(AnalyticsReporter(sink, run_id=run_id, stage=stage, source=source))
        elif n in ("null", "none"):
            continue
        else:
            raise ConfigError(f"Unknown reporter: {n}. Available: ['logging', 'analytics', 'null']")
    if not reporters:
        return NullReporter()
    if len(reporters) == 1:
        return reporters[0]
    return CompositeReporter(*reporters)


__all__ = [
    "LifecycleReporter",
    "NullReporter",
    "LoggingReporter",
    "CompositeReporter",
    "AnalyticsReporter",
    "make_reporter",
]
