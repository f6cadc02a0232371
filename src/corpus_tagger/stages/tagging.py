"""Tagging stage: labels each document with a pluggable backend.

Per document (`process`):
1. report element_started(doc_id), before any backend call
2. ask the LabelPolicy whether the backend should run
3. call backend.label(text, lang) at most once; failures propagate
4. stamp every returned label with the document language
5. append the stamped labels (existing labels are never dropped or reordered)
6. report element_ended(doc_id); skipped when the backend failed

Stream interception (`on_item` / `on_complete` / `on_error`):
- a processing failure terminates the stream: stage_errored is reported once and
  the error is forwarded downstream; later documents are dropped
- completion is reported once (stage_completed) and forwarded
- completion and error are mutually exclusive; the first one wins

Reporter failures are logged and swallowed so they never turn into processing failures.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Any, List, Optional
import logging
from ..backends.base import LabelBackend
from ..errors import BackendError
from ..pipeline.context import Document, Label
from ..pipeline.stream import Subscriber
from ..reporting.base import LifecycleReporter, NullReporter
from .base import Stage
from .policy import LabelPolicy, parse_policy, should_label


def stamp_language(labels: List[Label], language: str) -> List[Label]:
    """Return copies of `labels` whose language is set to `language`."""
    return [replace(l, language=language) for l in labels]


class TaggingStage(Stage):
    name = "tagging"
    layer = "enrichment"

    def __init__(
        self,
        backend: LabelBackend,
        downstream: Subscriber,
        *,
        reporter: Optional[LifecycleReporter] = None,
        policy: Any = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.backend = backend
        self.downstream = downstream
        self.reporter = reporter or NullReporter()
        self._policy = parse_policy(policy)
        self.log = logger or logging.getLogger("corpus_tagger.stages.tagging")

        self._terminated = False
        self._unsubscribed = False
        self._error: Optional[BaseException] = None

    @property
    def policy(self) -> LabelPolicy:
        return self._policy

    @property
    def is_terminated(self) -> bool:
        return self._terminated

    @property
    def is_unsubscribed(self) -> bool:
        return self._unsubscribed

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def unsubscribe(self) -> None:
        """Stop forwarding; the in-flight document (if any) still finishes."""
        self._unsubscribed = True

    def process(self, doc: Document) -> Document:
        """Label one document; backend errors propagate.

        Skipped documents keep their labels untouched but still get a
        `tagging_skipped_v1` entry in `transform_chain`.
        """
        self._report("element_started", doc.doc_id)

        if should_label(self._policy, doc):
            labels = self.backend.label(doc.text, doc.lang)
            if labels is None:
                raise BackendError("backend returned no label list", backend=self.backend.name, doc_text=doc.text)
            doc.add_labels(stamp_language(list(labels), doc.lang))
            doc.transform_chain.append(f"tagging_{self.backend.name}_v1")
        else:
            self.log.info(f"Document skipped (labels already exist) doc_id={doc.doc_id}")
            doc.transform_chain.append("tagging_skipped_v1")

        self._report("element_ended", doc.doc_id)
        return doc

    def on_item(self, doc: Document) -> None:
        if self._terminated:
            self.log.debug(f"stage={self.name} already terminated; dropping doc_id={doc.doc_id}")
            return
        if self._unsubscribed:
            self.log.debug(f"stage={self.name} unsubscribed; dropping doc_id={doc.doc_id}")
            return
        try:
            doc = self.process(doc)
            self.downstream.on_item(doc)
        except Exception as e:
            self.log.error(f"Processing failed doc_id={doc.doc_id}: {e}")
            self.on_error(e)

    def on_complete(self) -> None:
        if self._terminated:
            self.log.debug(f"stage={self.name} already terminated; ignoring completion")
            return
        self._terminated = True
        self._report("stage_completed")
        self.downstream.on_complete()

    def on_error(self, error: BaseException) -> None:
        if self._terminated:
            self.log.debug(f"stage={self.name} already terminated; ignoring error: {error}")
            return
        self._terminated = True
        self._error = error
        self._report("stage_errored", error)
        self.downstream.on_error(error)

    def _report(self, event: str, *args: Any) -> None:
        try:
            getattr(self.reporter, event)(*args)
        except Exception:
            self.log.warning(f"Reporter {getattr(self.reporter, 'name', '?')} failed on {event}", exc_info=True)
