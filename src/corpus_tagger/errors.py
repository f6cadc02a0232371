"""Exception hierarchy.

Two error classes matter to the stage:
- processing failures (BackendError or anything raised while labeling) terminate the stream
- reporting failures are logged by the stage and never raised from it

ConfigError is raised while building objects from YAML, before any document flows.
"""

from __future__ import annotations
from typing import Any, Dict, Optional


class TaggerError(Exception):
    """Base class for corpus_tagger errors."""


class BackendError(TaggerError):
    """A label backend could not label a text."""

    def __init__(self, message: str, *, backend: Optional[str] = None, doc_text: Optional[str] = None):
        super().__init__(message)
        self.backend = backend
        # keep only a short preview; documents can be huge
        self.doc_text = doc_text[:200] if doc_text else doc_text

    def __str__(self) -> str:
        msg = super().__str__()
        if self.backend:
            return f"[{self.backend}] {msg}"
        return msg


class ConfigError(TaggerError, ValueError):
    """Invalid configuration value."""


class StreamTerminatedError(TaggerError):
    """The stream ended with an error (raised by run_stream when asked to)."""

    def __init__(self, message: str, *, manifest: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        # set by build_local on fail-fast runs, after the manifest is on disk
        self.manifest = manifest
