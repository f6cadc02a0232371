"""Downstream subscribers (sinks).

A sink is the last Subscriber in the chain. It receives labeled documents and
exactly one terminal event. Every sink tracks:
- count: documents received
- completed / error: how the stream ended
"""

from __future__ import annotations
from typing import List, Optional
from ..pipeline.context import Document
from ..pipeline.stream import Subscriber


class Sink(Subscriber):
    name: str = "sink"

    def __init__(self):
        self.count = 0
        self.completed = False
        self.error: Optional[BaseException] = None

    @property
    def status(self) -> str:
        if self.error is not None:
            return "errored"
        return "completed" if self.completed else "open"

    def on_item(self, doc: Document) -> None:
        self.count += 1
        self.write(doc)

    def on_complete(self) -> None:
        self.completed = True
        self.close()

    def on_error(self, error: BaseException) -> None:
        self.error = error
        self.close()

    def write(self, doc: Document) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass


class CollectingSubscriber(Sink):
    """Keeps every document in memory; used by tests and small interactive runs."""

    name = "memory"

    def __init__(self):
        super().__init__()
        self.docs: List[Document] = []

    def write(self, doc: Document) -> None:
        self.docs.append(doc)
