"""Lifecycle reporter interface.

The host coordinator tracks progress through these four notifications:
- element_started(doc_id) / element_ended(doc_id) bracket the work on one document
- stage_completed() / stage_errored(error) are terminal, at most one per stream

Reporters are shared collaborators. The stage treats every call as best-effort:
an exception raised here is logged by the stage and never aborts the stream.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any


class LifecycleReporter(ABC):
    name: str = "reporter"

    @abstractmethod
    def element_started(self, doc_id: Any) -> None:
        ...

    @abstractmethod
    def element_ended(self, doc_id: Any) -> None:
        ...

    @abstractmethod
    def stage_completed(self) -> None:
        ...

    @abstractmethod
    def stage_errored(self, error: BaseException) -> None:
        ...


class NullReporter(LifecycleReporter):
    name = "null"

    def element_started(self, doc_id: Any) -> None:
        pass

    def element_ended(self, doc_id: Any) -> None:
        pass

    def stage_completed(self) -> None:
        pass

    def stage_errored(self, error: BaseException) -> None:
        pass
