"""Source registry.

Adding a new source:
1) implement a DataSource subclass
2) register it under a new `kind` with register_source()
3) reference it in build.yaml
"""

from __future__ import annotations
from typing import Callable, Dict
from .base import DataSource, SourceSpec
from .local_jsonl import LocalJSONLSource

_REGISTRY: Dict[str, Callable[[SourceSpec], DataSource]] = {
    "local_jsonl": LocalJSONLSource,
}


def register_source(kind: str, factory: Callable[[SourceSpec], DataSource]) -> None:
    if kind in _REGISTRY:
        raise ValueError(f"Source kind '{kind}' already registered")
    _REGISTRY[kind] = factory


def make_source(spec: SourceSpec) -> DataSource:
    if spec.kind not in _REGISTRY:
        raise ValueError(f"Unknown source kind: {spec.kind}. Available: {sorted(_REGISTRY)}")
    return _REGISTRY[spec.kind](spec)
