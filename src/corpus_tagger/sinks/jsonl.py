from __future__ import annotations
from typing import Any, Dict, List
from ..pipeline.context import Document
from ..storage.writer import append_jsonl
from .base import Sink


class JSONLSubscriber(Sink):
    """Appends labeled documents to a JSONL file, buffering `flush_every` rows."""

    name = "jsonl"

    def __init__(self, path: str, flush_every: int = 1000):
        super().__init__()
        self.path = path
        self.flush_every = max(1, int(flush_every))
        self._buf: List[Dict[str, Any]] = []

    def write(self, doc: Document) -> None:
        self._buf.append(doc.to_dict())
        if len(self._buf) >= self.flush_every:
            self.flush()

    def flush(self) -> None:
        if self._buf:
            append_jsonl(self.path, self._buf)
            self._buf.clear()

    def close(self) -> None:
        # documents emitted before an error are still valid output
        self.flush()
