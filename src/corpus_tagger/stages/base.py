"""Stage interface.

A stage is a Subscriber sitting between an upstream producer and a downstream
Subscriber. Stages must:
- process one Document at a time, synchronously, in arrival order
- forward each processed Document to the downstream subscriber
- intercept the terminal event (completion or error) and forward it exactly once
- append a transform_chain entry for auditability
"""

from __future__ import annotations
from abc import abstractmethod
from typing import Optional
from ..pipeline.context import Document
from ..pipeline.stream import Subscriber


class Stage(Subscriber):
    name: str = "stage"
    layer: str = "enrichment"

    @abstractmethod
    def process(self, doc: Document) -> Document:
        ...

    @property
    @abstractmethod
    def is_terminated(self) -> bool:
        ...

    @property
    @abstractmethod
    def is_unsubscribed(self) -> bool:
        ...

    @property
    @abstractmethod
    def error(self) -> Optional[BaseException]:
        ...
