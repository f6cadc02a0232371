"""Data source plugin interface.

All sources expose a `stream()` generator yielding Documents, which the host
pushes into the tagging stage one at a time.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union
from ..pipeline.context import Document


@dataclass
class SourceSpec:
    name: str
    kind: str                       # implementation key, e.g. local_jsonl
    dataset: Union[str, List[str]]  # file, list of files, directory or glob pattern
    text_field: str = "text"
    id_field: str = "id"
    language_field: str = "lang"    # falls back to "language"
    labels_field: str = "labels"
    url_field: str = "url"
    language: Optional[str] = None  # default language when a record has none


class DataSource:
    """Base interface for all sources."""
    name: str

    def metadata(self) -> Dict[str, Any]:
        return {}

    def stream(self) -> Iterable[Document]:
        raise NotImplementedError
