"""Keyword/regex rule backend.

Rules come straight from YAML:
```yaml
rules:
  - label: greeting
    keywords: ["hello", "hi", "good morning"]
  - label: finance
    patterns: ["\\b(stock|bond)s?\\b"]
    languages: ["en"]
```

- keywords match case-insensitively on word boundaries
- patterns are Python regexes (case-insensitive)
- a rule with `languages` only fires for those languages
- score = fraction of the rule's keywords/patterns that matched

Labels come out in rule order, so output is stable for identical input.
"""

from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Pattern
from ..errors import ConfigError
from ..pipeline.context import Label
from .base import LabelBackend


@dataclass
class KeywordRule:
    label: str
    patterns: List[Pattern[str]]
    languages: Optional[List[str]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def applies_to(self, language: str) -> bool:
        return not self.languages or (language or "").lower() in self.languages

    def score(self, text: str) -> float:
        hits = sum(1 for p in self.patterns if p.search(text))
        return hits / len(self.patterns)


def _compile_rule(raw: Dict[str, Any]) -> KeywordRule:
    name = raw.get("label")
    if not name:
        raise ConfigError(f"keyword rule without a label: {raw!r}")
    compiled: List[Pattern[str]] = []
    try:
        for kw in raw.get("keywords", []) or []:
            compiled.append(re.compile(r"\b" + re.escape(str(kw)) + r"\b", re.IGNORECASE))
        for pat in raw.get("patterns", []) or []:
            compiled.append(re.compile(str(pat), re.IGNORECASE))
    except re.error as e:
        raise ConfigError(f"invalid pattern in rule {name!r}: {e}") from e
    if not compiled:
        raise ConfigError(f"keyword rule {name!r} has no keywords or patterns")
    langs = raw.get("languages")
    return KeywordRule(
        label=str(name),
        patterns=compiled,
        languages=[str(l).lower() for l in langs] if langs else None,
        extra=dict(raw.get("extra") or {}),
    )


class KeywordBackend(LabelBackend):
    name = "keyword"

    def __init__(self, rules: List[Dict[str, Any]], min_score: float = 0.0):
        if not isinstance(rules, list):
            raise ConfigError("keyword backend expects `rules` to be a list")
        self.rules = [_compile_rule(r) for r in rules]
        self.min_score = float(min_score)

    def label(self, text: str, language: str) -> List[Label]:
        out: List[Label] = []
        for rule in self.rules:
            if not rule.applies_to(language):
                continue
            s = rule.score(text or "")
            if s > 0 and s >= self.min_score:
                out.append(Label(text=rule.label, language=language, score=s, source=self.name, extra=dict(rule.extra)))
        return out
