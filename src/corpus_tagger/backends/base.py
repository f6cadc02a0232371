"""Label backend interface.

A backend turns (text, language) into an ordered list of Labels. It is picked by
name from the registry and injected into the stage; the stage never subclasses it.

Contract:
- label() is synchronous; async or parallel backends hide that behind the call
- the returned order is backend-defined, ideally stable for identical input
- failures raise BackendError, never return a silent empty list
- `language` may be ignored by language-agnostic backends; the stage stamps it anyway
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List
from ..errors import BackendError
from ..pipeline.context import Label

__all__ = ["LabelBackend", "BackendError", "label_texts"]


class LabelBackend(ABC):
    name: str = "backend"

    @abstractmethod
    def label(self, text: str, language: str) -> List[Label]:
        raise NotImplementedError


def label_texts(labels: List[Label]) -> List[str]:
    return [l.text for l in labels]
