"""Core pipeline data model.

Document is the representation flowing through the tagging stage.
The stage only ever appends to `labels` and `transform_chain`; everything else
is provenance carried through untouched.

Label is deliberately loose: backends may attach a score, their own name and any
extra fields, but `text` and `language` are the fields the stage relies on.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional
import time


@dataclass
class Label:
    text: str
    language: Optional[str] = None
    score: Optional[float] = None
    source: Optional[str] = None  # backend name that produced the label
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_value(cls, value: Any) -> "Label":
        """Build a Label from a plain string or a dict (as stored in JSONL inputs)."""
        if isinstance(value, Label):
            return value
        if isinstance(value, str):
            return cls(text=value)
        if isinstance(value, dict):
            known = {"text", "language", "score", "source", "extra"}
            text = value.get("text", value.get("value"))
            if text is None:
                raise ValueError(f"label has no text: {value!r}")
            extra = dict(value.get("extra") or {})
            extra.update({k: v for k, v in value.items() if k not in known and k != "value"})
            return cls(
                text=str(text),
                language=value.get("language"),
                score=value.get("score"),
                source=value.get("source"),
                extra=extra,
            )
        raise TypeError(f"unsupported label value: {type(value).__name__}")


@dataclass
class Document:
    # identity
    doc_id: str
    text: str
    lang: str = "en"

    # labels accumulate; None means "never labeled"
    labels: Optional[List[Label]] = None

    # provenance
    source: str = ""
    url: Optional[str] = None
    source_file: Optional[str] = None

    # governance
    transform_chain: List[str] = field(default_factory=list)
    created_at_ms: int = field(default_factory=lambda: int(time.time() * 1000))

    # custom metadata carried through from the input record
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def has_labels(self) -> bool:
        return bool(self.labels)

    def add_labels(self, labels: List[Label]) -> None:
        """Append labels, keeping existing ones and their order."""
        if self.labels is None:
            self.labels = []
        self.labels.extend(labels)

    def to_dict(self) -> Dict[str, Any]:
        row = {
            "doc_id": self.doc_id,
            "text": self.text,
            "lang": self.lang,
            "labels": [l.to_dict() for l in (self.labels or [])],
            "source": self.source,
            "url": self.url,
            "source_file": self.source_file,
            "transform_chain": list(self.transform_chain),
            "created_at_ms": self.created_at_ms,
        }
        if self.extra:
            row["extra"] = self.extra
        return row
