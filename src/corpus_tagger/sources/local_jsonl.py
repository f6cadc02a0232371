"""Local JSONL source.

Each line should be JSON with at least:
- text
Optional:
- id (falls back to sha256 of the text)
- lang / language (falls back to the source's `language`, then "en")
- labels: list of strings or {"text": ..., "language": ...} objects
- url

Supports multiple input formats:
- Single file: "path/to/file.jsonl"
- Multiple files: ["path/to/file1.jsonl", "path/to/file2.jsonl"]
- Directory: "path/to/directory/" (all .jsonl files, recursive)
- Glob pattern: "path/to/*.jsonl" or "path/to/**/*.jsonl"

Malformed lines are logged and skipped. I/O errors propagate so the host can
terminate the stream with them.
"""

from __future__ import annotations
import glob
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union
from ..pipeline.context import Document, Label
from ..utils.hashing import sha256_hex
from .base import DataSource, SourceSpec

log = logging.getLogger("corpus_tagger.sources.local_jsonl")


class LocalJSONLSource(DataSource):
    def __init__(self, spec: SourceSpec):
        self.spec = spec
        self.name = spec.name
        self.files = self._resolve_files(spec.dataset)

    def _resolve_files(self, dataset: Union[str, List[str]]) -> List[str]:
        if isinstance(dataset, list):
            files: List[str] = []
            for item in dataset:
                files.extend(self._resolve_files(item))
            return files

        dataset = str(dataset)
        if any(ch in dataset for ch in "*?["):
            matched = glob.glob(dataset, recursive=True)
            return sorted(f for f in matched if os.path.isfile(f) and f.endswith(".jsonl"))

        path = Path(dataset)
        if path.is_dir():
            return sorted({str(f) for f in path.glob("**/*.jsonl") if f.is_file()})
        # single file; a missing one is reported when streaming
        return [dataset]

    def metadata(self) -> Dict[str, Any]:
        return {
            "kind": "local_jsonl",
            "files": self.files,
            "file_count": len(self.files),
            "total_size_bytes": sum(os.path.getsize(f) for f in self.files if os.path.exists(f)),
        }

    def stream(self) -> Iterable[Document]:
        for file_path in self.files:
            if not os.path.exists(file_path):
                log.warning(f"File not found: {file_path}, skipping")
                continue
            with open(file_path, "r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        ex = json.loads(line)
                    except json.JSONDecodeError as e:
                        log.warning(f"Invalid JSON in {file_path}:{line_num}: {e}")
                        continue
                    if not isinstance(ex, dict):
                        log.warning(f"Expected a JSON object in {file_path}:{line_num}, got {type(ex).__name__}")
                        continue
                    doc = self._to_doc(ex, file_path, line_num)
                    if doc is not None:
                        yield doc

    def _to_doc(self, ex: Dict[str, Any], file_path: str, line_num: int) -> Optional[Document]:
        s = self.spec
        text = ex.get(s.text_field) or ""
        lang = ex.get(s.language_field) or ex.get("language") or s.language or "en"

        raw_labels = ex.get(s.labels_field)
        labels: Optional[List[Label]] = None
        if raw_labels is not None:
            if not isinstance(raw_labels, list):
                log.warning(f"Invalid labels in {file_path}:{line_num}: expected a list, got {type(raw_labels).__name__}")
                return None
            try:
                labels = [Label.from_value(v) for v in raw_labels]
            except (TypeError, ValueError) as e:
                log.warning(f"Invalid labels in {file_path}:{line_num}: {e}")
                return None

        known = {s.text_field, s.id_field, s.language_field, "language", s.labels_field, s.url_field}
        raw_id = ex.get(s.id_field)
        return Document(
            doc_id=str(raw_id) if raw_id is not None else sha256_hex(text),
            text=text,
            lang=str(lang),
            labels=labels,
            source=s.name,
            url=ex.get(s.url_field),
            source_file=file_path,
            extra={k: v for k, v in ex.items() if k not in known},
        )
