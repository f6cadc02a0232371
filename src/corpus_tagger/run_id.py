"""Run ID resolution: explicit or auto-generated from config.

Auto-generation (`run.run_id_auto`) joins:
- the name of the first source (include_input_name, default true)
- a compact UTC timestamp YYYYMMDDHHMMSS
"""

from __future__ import annotations
import re
from datetime import datetime, timezone
from typing import Any, Dict


def generate_run_id(cfg: Dict[str, Any], auto_cfg: Dict[str, Any]) -> str:
    separator = str(auto_cfg.get("separator", "_"))
    parts = []
    if auto_cfg.get("include_input_name", True):
        sources = cfg.get("sources") or []
        name = (sources[0].get("name") if sources else None) or "run"
        parts.append(re.sub(r"[^\w\-]", "_", str(name)))
    parts.append(datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S"))
    return separator.join(parts)


def resolve_run_id(cfg: Dict[str, Any]) -> str:
    """Return run.run_id, or an auto-generated id when run.run_id_auto is enabled, or 'run'."""
    run = cfg.get("run") or {}
    explicit = run.get("run_id")
    if explicit is not None and str(explicit).strip():
        return str(explicit).strip()
    auto_cfg = run.get("run_id_auto")
    if isinstance(auto_cfg, dict) and auto_cfg.get("enabled", True):
        return generate_run_id(cfg, auto_cfg)
    return "run"


def resolve_out_dir(cfg: Dict[str, Any], run_id: str) -> str:
    out_dir = (cfg.get("run") or {}).get("out_dir") or "storage"
    return out_dir.replace("{run_id}", run_id)
