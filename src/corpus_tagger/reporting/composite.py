from __future__ import annotations
from typing import Any, List
import logging
from .base import LifecycleReporter

log = logging.getLogger("corpus_tagger.reporting")


class CompositeReporter(LifecycleReporter):
    """Fans each event out to several reporters; one failing reporter does not starve the rest."""

    name = "composite"

    def __init__(self, *reporters: LifecycleReporter):
        self.reporters: List[LifecycleReporter] = list(reporters)

    def _fan_out(self, event: str, *args: Any) -> None:
        for r in self.reporters:
            try:
                getattr(r, event)(*args)
            except Exception:
                log.warning(f"Reporter {r.name} failed on {event}", exc_info=True)

    def element_started(self, doc_id: Any) -> None:
        self._fan_out("element_started", doc_id)

    def element_ended(self, doc_id: Any) -> None:
        self._fan_out("element_ended", doc_id)

    def stage_completed(self) -> None:
        self._fan_out("stage_completed")

    def stage_errored(self, error: BaseException) -> None:
        self._fan_out("stage_errored", error)
