"""Label policy: decides whether a document is sent to the backend.

Config key (`tagger.calculate`):
- all  : label every document flowing through the stream
- new  : label only documents with no labels yet (None or empty list)
- absent : same as all

The policy is fixed when the stage is built and never changes afterwards.
"""

from __future__ import annotations
from enum import Enum
from typing import Any
from ..errors import ConfigError
from ..pipeline.context import Document


class LabelPolicy(str, Enum):
    ALL = "all"
    NEW = "new"
    UNSET = "unset"


def parse_policy(value: Any) -> LabelPolicy:
    if value is None:
        return LabelPolicy.UNSET
    if isinstance(value, LabelPolicy):
        return value
    v = str(value).strip().lower()
    if v == "all":
        return LabelPolicy.ALL
    if v == "new":
        return LabelPolicy.NEW
    raise ConfigError(f"Unknown label policy: {value!r} (expected 'all' or 'new')")


def should_label(policy: LabelPolicy, doc: Document) -> bool:
    if policy is LabelPolicy.NEW:
        return not doc.has_labels
    return True
