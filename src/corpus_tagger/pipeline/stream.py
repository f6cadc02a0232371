"""Push-style stream plumbing.

A Subscriber receives documents one at a time plus exactly one terminal event
(completion or error). `run_stream` is the minimal host loop that pushes an
upstream iterable into a stage:

- documents are pushed in iteration order, one at a time
- pulling stops as soon as the stage is terminated or unsubscribed
- an exception raised by the upstream iterator is delivered via stage.on_error
- exhaustion of the iterator calls stage.on_complete

Scheduling across stages, batching and retries belong to the caller.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional
import logging
from ..errors import StreamTerminatedError
from .context import Document

if TYPE_CHECKING:
    from ..stages.base import Stage

log = logging.getLogger("corpus_tagger.pipeline.stream")


class Subscriber(ABC):
    @abstractmethod
    def on_item(self, doc: Document) -> None:
        ...

    @abstractmethod
    def on_complete(self) -> None:
        ...

    @abstractmethod
    def on_error(self, error: BaseException) -> None:
        ...


@dataclass
class StreamResult:
    pushed: int = 0
    error: Optional[BaseException] = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def run_stream(upstream: Iterable[Document], stage: "Stage", *, raise_on_error: bool = False) -> StreamResult:
    result = StreamResult()
    it = iter(upstream)
    while True:
        if stage.is_terminated:
            break
        if stage.is_unsubscribed:
            result.cancelled = True
            log.info(f"stage={stage.name} unsubscribed after {result.pushed} docs; stopping upstream")
            break
        try:
            doc = next(it)
        except StopIteration:
            stage.on_complete()
            break
        except Exception as e:
            log.error(f"upstream failed after {result.pushed} docs: {e}")
            stage.on_error(e)
            break
        result.pushed += 1
        stage.on_item(doc)

    result.error = stage.error
    if result.error is not None and raise_on_error:
        raise StreamTerminatedError(f"stage {stage.name} terminated with error: {result.error}") from result.error
    return result
