from __future__ import annotations
import os
from typing import List
from ..pipeline.context import Document
from ..storage.writer import write_docs_shard
from .base import Sink


class ParquetSubscriber(Sink):
    """Writes labeled documents as `docs/source=<source>/shard_NNNNNN.parquet`."""

    name = "parquet"

    def __init__(self, out_dir: str, source: str, shard_docs: int = 5000):
        super().__init__()
        self.base = os.path.join(out_dir, "docs", f"source={source}")
        self.shard_docs = max(1, int(shard_docs))
        self.shard_idx = 0
        self.paths: List[str] = []
        self._shard: List[Document] = []

    def write(self, doc: Document) -> None:
        self._shard.append(doc)
        if len(self._shard) >= self.shard_docs:
            self._flush_shard()

    def _flush_shard(self) -> None:
        if not self._shard:
            return
        path = os.path.join(self.base, f"shard_{self.shard_idx:06d}.parquet")
        write_docs_shard(path, self._shard)
        self.paths.append(path)
        self._shard = []
        self.shard_idx += 1

    def close(self) -> None:
        self._flush_shard()
