"""Output writers.

- labeled documents as Parquet shards (explicit Arrow schema, labels as list<struct>)
- JSONL append for labeled documents and error logs
- a run manifest at the end
"""

from __future__ import annotations
from typing import Any, Dict, List
import json
import os
import pyarrow as pa
import pyarrow.parquet as pq
from ..pipeline.context import Document


def label_type() -> pa.DataType:
    return pa.struct([
        ("text", pa.string()),
        ("language", pa.string()),
        ("score", pa.float64()),
        ("source", pa.string()),
    ])


def docs_schema() -> pa.Schema:
    return pa.schema([
        ("doc_id", pa.string()),
        ("source", pa.string()),
        ("lang", pa.string()),
        ("text", pa.string()),
        ("url", pa.string()),
        ("source_file", pa.string()),
        ("labels", pa.list_(label_type())),
        ("transform_chain", pa.list_(pa.string())),
        ("created_at_ms", pa.int64()),
    ], metadata={"schema_version": "v1"})


def write_docs_shard(path: str, docs: List[Document]) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    rows = []
    for d in docs:
        rows.append({
            "doc_id": str(d.doc_id),
            "source": d.source or "",
            "lang": d.lang or "",
            "text": d.text or "",
            "url": d.url,
            "source_file": d.source_file,
            # backend-specific extras are not part of the columnar schema
            "labels": [
                {"text": l.text, "language": l.language, "score": l.score, "source": l.source}
                for l in (d.labels or [])
            ],
            "transform_chain": list(d.transform_chain),
            "created_at_ms": int(d.created_at_ms),
        })
    table = pa.Table.from_pylist(rows, schema=docs_schema())
    pq.write_table(table, path, compression="zstd")


def append_jsonl(path: str, rows: List[Dict[str, Any]]) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        for r in rows:
            f.write(json.dumps(r, ensure_ascii=False) + "\n")


def write_manifest(path: str, manifest: Dict[str, Any]) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2, ensure_ascii=False)
