"""Configuration loading.

Everything is driven by one YAML file (see configs/build.yaml). The only setting
the tagging stage itself consumes is `tagger.calculate` (all | new); the rest
configures the host: backend, reporters, sources and output.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List
import yaml
from .errors import ConfigError
from .stages.policy import LabelPolicy, parse_policy


def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


@dataclass(frozen=True)
class TaggerConfig:
    backend: str
    policy: LabelPolicy = LabelPolicy.UNSET
    options: Dict[str, Any] = field(default_factory=dict)
    reporters: List[str] = field(default_factory=lambda: ["logging"])

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "TaggerConfig":
        tagger = cfg.get("tagger") or {}
        if not isinstance(tagger, dict):
            raise ConfigError("`tagger` must be a mapping")
        backend = tagger.get("backend")
        if not backend:
            raise ConfigError("`tagger.backend` is required")
        options = tagger.get("options") or {}
        if not isinstance(options, dict):
            raise ConfigError("`tagger.options` must be a mapping")
        reporters = cfg.get("reporters", ["logging"])
        if isinstance(reporters, str):
            reporters = [reporters]
        return cls(
            backend=str(backend),
            policy=parse_policy(tagger.get("calculate")),
            options=dict(options),
            reporters=[str(r) for r in (reporters or [])],
        )
