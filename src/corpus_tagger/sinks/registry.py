"""Sink registry.

The host builds one sink per source from `output.format`.
"""

from __future__ import annotations
import os
from .base import Sink, CollectingSubscriber
from .jsonl import JSONLSubscriber
from .parquet import ParquetSubscriber


def make_sink(fmt: str, *, out_dir: str, source: str, shard_docs: int = 5000) -> Sink:
    fmt = (fmt or "jsonl").lower()
    if fmt == "jsonl":
        return JSONLSubscriber(os.path.join(out_dir, "docs", f"source={source}", "labeled.jsonl"), flush_every=shard_docs)
    if fmt == "parquet":
        return ParquetSubscriber(out_dir, source, shard_docs=shard_docs)
    if fmt == "memory":
        return CollectingSubscriber()
    raise ValueError(f"Unknown output format: {fmt}. Available: ['jsonl', 'parquet', 'memory']")
