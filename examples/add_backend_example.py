"""Example: adding a label backend without modifying the registry module.

Registers a toy backend at runtime, then runs the tagging stage over a few
in-memory documents and prints what came out.
"""

from typing import List

from corpus_tagger.backends import LabelBackend, register_backend, list_backends, make_backend
from corpus_tagger.pipeline.context import Document, Label
from corpus_tagger.pipeline.stream import run_stream
from corpus_tagger.reporting import LoggingReporter
from corpus_tagger.sinks.base import CollectingSubscriber
from corpus_tagger.stages.tagging import TaggingStage


class LengthBackend(LabelBackend):
    """Labels texts as short or long."""

    name = "length"

    def __init__(self, max_short: int = 40):
        self.max_short = max_short

    def label(self, text: str, language: str) -> List[Label]:
        return [Label("short" if len(text) <= self.max_short else "long", source=self.name)]


register_backend("length", LengthBackend)

print("Registered backends:")
for name in list_backends():
    print(f"  {name}")

docs = [
    Document(doc_id="a", text="Hello there", lang="en"),
    Document(doc_id="b", text="Un texte nettement plus long que quarante caracteres.", lang="fr"),
    Document(doc_id="c", text="Already labeled", lang="en", labels=[Label("manual", language="en")]),
]

sink = CollectingSubscriber()
stage = TaggingStage(make_backend("length", max_short=20), sink, reporter=LoggingReporter(), policy="new")
run_stream(docs, stage)

for d in sink.docs:
    print(d.doc_id, [(l.text, l.language) for l in d.labels or []], d.transform_chain)

# Now you can use it in config:
# tagger:
#   backend: length
#   options: {max_short: 80}
