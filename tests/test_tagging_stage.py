from __future__ import annotations

import logging

import pytest

from corpus_tagger.errors import BackendError
from corpus_tagger.logging_ import null_logger
from corpus_tagger.pipeline.context import Document, Label
from corpus_tagger.pipeline.stream import run_stream
from corpus_tagger.sinks.base import CollectingSubscriber
from corpus_tagger.stages.policy import LabelPolicy
from corpus_tagger.stages.tagging import TaggingStage, stamp_language
from tests.fixtures.fakes import (
    ExplodingReporter,
    FailingBackend,
    RecordingReporter,
    StubBackend,
    make_docs,
)


def _stage(backend, policy=None, reporter=None):
    sink = CollectingSubscriber()
    reporter = reporter or RecordingReporter()
    return TaggingStage(backend, sink, reporter=reporter, policy=policy), sink, reporter


def test_default_policy_labels_once_and_stamps_language():
    backend = StubBackend([Label("greeting")])
    stage, sink, _ = _stage(backend)
    doc = Document(doc_id="m1", text="hello", lang="en")

    stage.on_item(doc)

    assert backend.call_count == 1
    assert backend.calls == [("hello", "en")]
    assert sink.docs[0].labels == [Label("greeting", language="en")]
    assert stage.policy is LabelPolicy.UNSET


@pytest.mark.parametrize("policy", [None, "all", LabelPolicy.ALL])
def test_all_or_unset_invokes_backend_exactly_once(policy):
    backend = StubBackend([Label("a"), Label("b")])
    stage, sink, _ = _stage(backend, policy=policy)
    existing = [Label("old", language="de")]
    doc = Document(doc_id="m1", text="t", lang="it", labels=list(existing))

    stage.on_item(doc)

    assert backend.call_count == 1
    out = sink.docs[0]
    assert out.labels[:1] == existing
    assert [l.text for l in out.labels] == ["old", "a", "b"]
    assert all(l.language == "it" for l in out.labels[1:])


def test_new_policy_skips_documents_that_already_have_labels():
    backend = StubBackend()
    stage, sink, reporter = _stage(backend, policy="new")
    labels = [Label("manual", language="en"), Label("other", language="fr")]
    doc = Document(doc_id="m1", text="t", lang="en", labels=list(labels))

    stage.on_item(doc)

    assert backend.call_count == 0
    assert sink.docs[0].labels == labels
    assert sink.docs[0].transform_chain == ["tagging_skipped_v1"]
    assert reporter.events == [("started", "m1"), ("ended", "m1")]


@pytest.mark.parametrize("labels", [None, []])
def test_new_policy_labels_documents_without_labels(labels):
    backend = StubBackend([Label("x", language="zz"), Label("y")])
    stage, sink, _ = _stage(backend, policy=LabelPolicy.NEW)

    stage.on_item(Document(doc_id="m1", text="t", lang="pt", labels=labels))

    assert backend.call_count == 1
    assert sink.docs[0].labels == [Label("x", language="pt"), Label("y", language="pt")]
    assert sink.docs[0].transform_chain == ["tagging_stub_v1"]


def test_stamping_does_not_mutate_backend_labels():
    shared = Label("topic", language="xx")
    backend = StubBackend([shared])
    stage, sink, _ = _stage(backend)

    stage.on_item(Document(doc_id="1", text="a", lang="en"))
    stage.on_item(Document(doc_id="2", text="b", lang="fr"))

    assert shared.language == "xx"
    assert sink.docs[0].labels[0].language == "en"
    assert sink.docs[1].labels[0].language == "fr"


def test_stamp_language_keeps_order_and_backend_fields():
    labels = [Label("a", score=0.9, source="kw", extra={"k": 1}), Label("b", language="de")]
    stamped = stamp_language(labels, "es")
    assert [l.text for l in stamped] == ["a", "b"]
    assert stamped[0].score == 0.9 and stamped[0].extra == {"k": 1}
    assert {l.language for l in stamped} == {"es"}


def test_append_only_for_every_policy():
    for policy in (None, "all", "new"):
        backend = StubBackend([Label("n1"), Label("n2")])
        stage, sink, _ = _stage(backend, policy=policy)
        before = [Label("p1", language="en"), Label("p2", language="en")]
        stage.on_item(Document(doc_id="x", text="t", lang="en", labels=list(before)))
        after = sink.docs[0].labels
        assert len(after) >= len(before)
        assert after[: len(before)] == before


def test_lifecycle_brackets_each_document_in_order():
    stage, sink, reporter = _stage(StubBackend())
    run_stream(make_docs(3), stage)

    assert reporter.events == [
        ("started", "d1"), ("ended", "d1"),
        ("started", "d2"), ("ended", "d2"),
        ("started", "d3"), ("ended", "d3"),
        ("completed",),
    ]
    assert [d.doc_id for d in sink.docs] == ["d1", "d2", "d3"]
    assert sink.completed and sink.error is None


def test_backend_failure_on_third_of_five_terminates_stream():
    backend = FailingBackend(fail_on_call=3)
    stage, sink, reporter = _stage(backend)

    result = run_stream(make_docs(5), stage)

    assert [d.doc_id for d in sink.docs] == ["d1", "d2"]
    assert all(d.labels == [Label("greeting", language="en")] for d in sink.docs)
    assert ("started", "d3") in reporter.events
    assert ("ended", "d3") not in reporter.events
    assert len(reporter.kinds("errored")) == 1
    assert reporter.kinds("completed") == []
    assert [t for t, _ in backend.calls] == ["text 1", "text 2", "text 3"]
    assert not any(e[1] in ("d4", "d5") for e in reporter.events if len(e) > 1)
    assert isinstance(sink.error, BackendError)
    assert not sink.completed
    assert result.error is sink.error
    assert result.pushed == 3
    assert stage.is_terminated


def test_unexpected_exception_is_a_processing_failure():
    backend = FailingBackend(fail_on_call=1, error=KeyError("boom"))
    stage, sink, reporter = _stage(backend)

    stage.on_item(Document(doc_id="m1", text="t", lang="en"))

    assert isinstance(sink.error, KeyError)
    assert reporter.events[0] == ("started", "m1")
    assert reporter.events[1][0] == "errored"
    assert len(reporter.events) == 2


def test_backend_returning_none_is_a_backend_error():
    class NoneBackend(StubBackend):
        def label(self, text, language):
            super().label(text, language)
            return None

    stage, sink, reporter = _stage(NoneBackend())
    stage.on_item(Document(doc_id="m1", text="t", lang="en"))

    assert isinstance(sink.error, BackendError)
    assert ("ended", "m1") not in reporter.events


def test_terminal_events_fire_at_most_once():
    stage, sink, reporter = _stage(StubBackend())
    stage.on_complete()
    stage.on_complete()
    stage.on_error(RuntimeError("late"))
    stage.on_item(Document(doc_id="late", text="t", lang="en"))

    assert reporter.events == [("completed",)]
    assert sink.completed and sink.error is None and sink.docs == []


def test_error_then_completion_keeps_error():
    stage, sink, reporter = _stage(StubBackend())
    err = RuntimeError("upstream broke")
    stage.on_error(err)
    stage.on_complete()

    assert reporter.events == [("errored", err)]
    assert sink.error is err
    assert not sink.completed
    assert stage.error is err


def test_reporter_failures_do_not_abort_the_stream(caplog):
    reporter = ExplodingReporter()
    stage, sink, _ = _stage(StubBackend(), reporter=reporter)

    with caplog.at_level(logging.WARNING, logger="corpus_tagger.stages.tagging"):
        result = run_stream(make_docs(2), stage)

    assert result.ok
    assert [d.doc_id for d in sink.docs] == ["d1", "d2"]
    assert sink.completed
    assert reporter.events == [
        ("started", "d1"), ("ended", "d1"),
        ("started", "d2"), ("ended", "d2"),
        ("completed",),
    ]
    assert "Reporter exploding failed on element_started" in caplog.text


def test_reporter_failure_does_not_replace_processing_error():
    reporter = ExplodingReporter()
    backend = FailingBackend(fail_on_call=1)
    stage, sink, _ = _stage(backend, reporter=reporter)

    stage.on_item(Document(doc_id="m1", text="t", lang="en"))

    assert sink.error is backend.error
    assert reporter.kinds("errored") == [("errored", backend.error)]


def test_downstream_failure_terminates_with_error():
    class BrokenSink(CollectingSubscriber):
        def write(self, doc):
            raise OSError("disk full")

    reporter = RecordingReporter()
    sink = BrokenSink()
    stage = TaggingStage(StubBackend(), sink, reporter=reporter)

    stage.on_item(Document(doc_id="m1", text="t", lang="en"))

    assert isinstance(sink.error, OSError)
    assert reporter.events[-1][0] == "errored"


def test_unsubscribe_stops_forwarding_after_in_flight_document():
    sink = CollectingSubscriber()
    reporter = RecordingReporter()

    class CancellingBackend(StubBackend):
        def label(self, text, language):
            out = super().label(text, language)
            if self.call_count == 2:
                stage.unsubscribe()
            return out

    backend = CancellingBackend()
    stage = TaggingStage(backend, sink, reporter=reporter)
    result = run_stream(make_docs(5), stage)

    assert [d.doc_id for d in sink.docs] == ["d1", "d2"]
    assert backend.call_count == 2
    assert result.cancelled
    assert not sink.completed and sink.error is None


def test_injected_logger_receives_skip_message(caplog):
    logger = logging.getLogger("test.injected")
    sink = CollectingSubscriber()
    stage = TaggingStage(StubBackend(), sink, policy="new", logger=logger)

    with caplog.at_level(logging.INFO, logger="test.injected"):
        stage.on_item(Document(doc_id="m1", text="t", lang="en", labels=[Label("x")]))

    assert any(r.name == "test.injected" and "skipped" in r.getMessage() for r in caplog.records)


def test_null_logger_can_be_injected():
    stage = TaggingStage(StubBackend(), CollectingSubscriber(), policy="new", logger=null_logger("test.null"))
    stage.on_item(Document(doc_id="m1", text="t", lang="en", labels=[Label("x")]))
    assert stage.log.name == "test.null"
