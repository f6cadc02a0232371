"""Label backends package.

Auto-registers built-in backends on import so they can be named in config.
"""

from .base import LabelBackend, BackendError, label_texts
from .registry import register_backend, list_backends, make_backend


def _auto_register_backends():
    from .keyword import KeywordBackend
    from .fasttext_backend import FastTextBackend

    registered = list_backends()
    if "keyword" not in registered:
        register_backend("keyword", KeywordBackend)
    if "fasttext" not in registered:
        register_backend("fasttext", FastTextBackend)


_auto_register_backends()

__all__ = [
    "LabelBackend",
    "BackendError",
    "label_texts",
    "register_backend",
    "list_backends",
    "make_backend",
]
