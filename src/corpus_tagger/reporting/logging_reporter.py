from __future__ import annotations
from typing import Any, Optional
import logging
from .base import LifecycleReporter


class LoggingReporter(LifecycleReporter):
    """Writes lifecycle events to a logger (per-document at DEBUG, terminal events at INFO/ERROR)."""

    name = "logging"

    def __init__(self, stage: str = "tagging", logger: Optional[logging.Logger] = None):
        self.stage = stage
        self.log = logger or logging.getLogger("corpus_tagger.reporting")

    def element_started(self, doc_id: Any) -> None:
        self.log.debug(f"stage={self.stage} started doc_id={doc_id}")

    def element_ended(self, doc_id: Any) -> None:
        self.log.debug(f"stage={self.stage} ended doc_id={doc_id}")

    def stage_completed(self) -> None:
        self.log.info(f"stage={self.stage} completed")

    def stage_errored(self, error: BaseException) -> None:
        self.log.error(f"stage={self.stage} errored: {type(error).__name__}: {error}")
