"""Local build runner.

Runs the tagging stage over every configured source, sequentially:
- one backend instance, shared by all sources
- per source: a fresh stage, reporter and sink (each source is one stream)
- a processing failure terminates that source's stream; the run moves on to the
  next source unless `run.fail_fast` is set, in which case the remaining sources
  are skipped and StreamTerminatedError is raised once the manifest is written
- writes `manifests/<run_id>.json` and appends failures to `errors/errors.jsonl`

This module is the entrypoint used by the CLI; hosts embedding the stage in their
own pipeline construct TaggingStage directly.
"""

from __future__ import annotations
from typing import Any, Dict, Optional
import logging
import os
import time
from tqdm import tqdm

from ..analytics.sink import AnalyticsSink
from ..backends import make_backend
from ..config import TaggerConfig
from ..errors import ConfigError, StreamTerminatedError
from ..reporting import make_reporter
from ..run_id import resolve_run_id, resolve_out_dir
from ..sinks.registry import make_sink
from ..sources.base import SourceSpec
from ..sources.registry import make_source
from ..stages.tagging import TaggingStage
from ..storage.writer import append_jsonl, write_manifest
from .stream import run_stream

log = logging.getLogger("corpus_tagger.build")


def build_local(cfg: Dict[str, Any], *, run_id: Optional[str] = None, out_dir: Optional[str] = None) -> Dict[str, Any]:
    run = cfg.get("run") or {}
    run_id = run_id or resolve_run_id(cfg)
    out_dir = out_dir or resolve_out_dir(cfg, run_id)
    fail_fast = bool(run.get("fail_fast", False))
    show_progress = bool(run.get("progress", True))
    output = cfg.get("output") or {}
    fmt = output.get("format", "jsonl")
    shard_docs = int(output.get("shard_docs", 5000))

    tcfg = TaggerConfig.from_dict(cfg)
    sources = cfg.get("sources") or []
    if not sources:
        raise ConfigError("no `sources` configured")

    backend = make_backend(tcfg.backend, **tcfg.options)
    analytics = AnalyticsSink(out_dir=out_dir, run_id=run_id) if "analytics" in tcfg.reporters else None
    log.info(f"Run {run_id}: backend={tcfg.backend} policy={tcfg.policy.value} reporters={tcfg.reporters} out_dir={out_dir}")

    start_time_ms = int(time.time() * 1000)
    per_source: Dict[str, Dict[str, Any]] = {}
    fatal: Optional[BaseException] = None

    for s_cfg in sources:
        spec = SourceSpec(**s_cfg)
        src = make_source(spec)
        sink = make_sink(fmt, out_dir=out_dir, source=spec.name, shard_docs=shard_docs)
        reporter = make_reporter(tcfg.reporters, stage=TaggingStage.name, source=spec.name, run_id=run_id, sink=analytics)
        stage = TaggingStage(backend, sink, reporter=reporter, policy=tcfg.policy)

        log.info(f"Starting source={spec.name} kind={spec.kind} meta={src.metadata()}")
        docs = src.stream()
        bar = tqdm(docs, desc=f"source={spec.name}", unit="doc") if show_progress else None

        t0 = time.monotonic()
        try:
            result = run_stream(bar if bar is not None else docs, stage)
        finally:
            if bar is not None:
                bar.close()
            # release file handles when the stream stopped early
            if hasattr(docs, "close"):
                docs.close()
        elapsed = time.monotonic() - t0

        entry: Dict[str, Any] = {
            "status": sink.status,
            "pushed_docs": result.pushed,
            "written_docs": sink.count,
            "elapsed_s": round(elapsed, 3),
        }
        if result.error is not None:
            entry["error"] = f"{type(result.error).__name__}: {result.error}"
            append_jsonl(os.path.join(out_dir, "errors", "errors.jsonl"), [{
                "run_id": run_id,
                "source": spec.name,
                "stage": stage.name,
                "error_type": type(result.error).__name__,
                "error": str(result.error),
                "written_before_error": sink.count,
                "ts_ms": int(time.time() * 1000),
            }])
            log.error(f"Source {spec.name} terminated with error after {sink.count} docs: {result.error}")
            if fail_fast:
                fatal = result.error
        else:
            log.info(f"Source {spec.name} complete: written={sink.count} in {elapsed:.1f}s")
        per_source[spec.name] = entry
        if fatal is not None:
            break

    manifest = {
        "run_id": run_id,
        "start_time_ms": start_time_ms,
        "end_time_ms": int(time.time() * 1000),
        "backend": tcfg.backend,
        "policy": tcfg.policy.value,
        "total_written_docs": sum(s["written_docs"] for s in per_source.values()),
        "errored_sources": sorted(n for n, s in per_source.items() if s["status"] == "errored"),
        "sources": per_source,
        "outputs": {
            "docs_dir": os.path.join(out_dir, "docs"),
            "errors": os.path.join(out_dir, "errors", "errors.jsonl"),
            "analytics_events": os.path.join(out_dir, "analytics", "events"),
        },
    }
    manifest_path = os.path.join(out_dir, "manifests", f"{run_id}.json")
    write_manifest(manifest_path, manifest)
    log.info(f"Build complete. manifest={manifest_path}")
    if fatal is not None:
        raise StreamTerminatedError(
            f"stage {TaggingStage.name} terminated with error (fail_fast): {fatal}", manifest=manifest
        ) from fatal
    return manifest
