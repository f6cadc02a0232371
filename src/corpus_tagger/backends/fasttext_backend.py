"""FastText classifier backend.

Wraps a supervised fastText model (e.g. a domain classifier) and turns its top-k
predictions into Labels. The `__label__` prefix is stripped and predictions below
`threshold` are dropped.

`fasttext` is an optional dependency (`pip install corpus-tagger[fasttext]`).
A preloaded model object can be passed directly, which is how tests use it.
"""

from __future__ import annotations
import os
from typing import Any, List, Optional
from ..errors import BackendError, ConfigError
from ..pipeline.context import Label
from .base import LabelBackend


def _load_model(path: str) -> Any:
    try:
        import fasttext
    except ImportError as e:
        raise ImportError(
            f"fastText backend requires the fasttext package. "
            f"Install with: pip install corpus-tagger[fasttext]. "
            f"Original error: {e}"
        )
    return fasttext.load_model(path)


class FastTextBackend(LabelBackend):
    name = "fasttext"

    def __init__(
        self,
        model_path: Optional[str] = None,
        *,
        model: Any = None,
        k: int = 5,
        threshold: float = 0.5,
        label_prefix: str = "__label__",
    ):
        if model is None:
            if not model_path:
                raise ConfigError("fasttext backend needs `model_path` (or a loaded `model`)")
            if not os.path.exists(model_path):
                raise ConfigError(f"fasttext model not found: {model_path}")
            model = _load_model(model_path)
        self.model = model
        self.model_path = model_path
        self.k = int(k)
        self.threshold = float(threshold)
        self.label_prefix = label_prefix

    def label(self, text: str, language: str) -> List[Label]:
        # fastText predicts line by line and rejects embedded newlines
        line = " ".join((text or "").split())
        try:
            names, scores = self.model.predict(line, k=self.k)
        except Exception as e:
            raise BackendError(f"prediction failed: {e}", backend=self.name, doc_text=text) from e

        out: List[Label] = []
        for name, score in zip(names, scores):
            score = float(score)
            if score < self.threshold:
                continue
            tag = name[len(self.label_prefix):] if name.startswith(self.label_prefix) else name
            out.append(Label(text=tag, language=language, score=score, source=self.name))
        return out
