"""Backend registry.

Backends are configured by name in `build.yaml` (`tagger.backend`), with their
constructor arguments under `tagger.options`.

Teams can add new backends by:
1) implementing LabelBackend (in `corpus_tagger.backends.*` or an external package)
2) calling `register_backend(name, factory)` at startup

Built-in backends are registered on import via corpus_tagger.backends.__init__
"""

from __future__ import annotations
from typing import Any, Callable, Dict, List
from .base import LabelBackend

BackendFactory = Callable[..., LabelBackend]

_BACKENDS: Dict[str, BackendFactory] = {}


def register_backend(name: str, factory: BackendFactory) -> None:
    if name in _BACKENDS:
        raise ValueError(f"Backend '{name}' already registered")
    _BACKENDS[name] = factory


def list_backends() -> List[str]:
    return sorted(_BACKENDS)


def make_backend(name: str, **options: Any) -> LabelBackend:
    if name not in _BACKENDS:
        raise KeyError(
            f"Unknown backend: {name}. "
            f"Available: {list_backends()}. "
            f"Register with register_backend()"
        )
    return _BACKENDS[name](**options)
