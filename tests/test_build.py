from __future__ import annotations

import json
import logging
import os

import pytest
import yaml

from corpus_tagger.cli import main
from corpus_tagger.errors import StreamTerminatedError
from corpus_tagger.pipeline.build import build_local

RULES = [
    {"label": "greeting", "keywords": ["hello", "bonjour"]},
    {"label": "weather", "keywords": ["rain"]},
]


def _write_jsonl(path, rows):
    with open(path, "w", encoding="utf-8") as f:
        for r in rows:
            f.write(json.dumps(r) + "\n")


def _cfg(tmp_path, data, **overrides):
    cfg = {
        "run": {"run_id": "t1", "out_dir": str(tmp_path / "out" / "{run_id}"), "progress": False},
        "tagger": {"backend": "keyword", "calculate": "new", "options": {"rules": RULES}},
        "reporters": ["logging", "analytics"],
        "sources": [{"name": "demo", "kind": "local_jsonl", "dataset": str(data)}],
        "output": {"format": "jsonl"},
    }
    cfg.update(overrides)
    return cfg


def test_build_local_labels_and_writes_manifest(tmp_path):
    data = tmp_path / "in.jsonl"
    _write_jsonl(data, [
        {"id": "m1", "text": "Hello, rain again", "lang": "en"},
        {"id": "m2", "text": "Bonjour", "lang": "fr"},
        {"id": "m3", "text": "hello", "lang": "en", "labels": ["manual"]},
    ])

    manifest = build_local(_cfg(tmp_path, data))

    out_dir = tmp_path / "out" / "t1"
    rows = [json.loads(l) for l in (out_dir / "docs" / "source=demo" / "labeled.jsonl").read_text(encoding="utf-8").splitlines()]
    labels = {r["doc_id"]: [(l["text"], l["language"]) for l in r["labels"]] for r in rows}
    assert labels == {
        "m1": [("greeting", "en"), ("weather", "en")],
        "m2": [("greeting", "fr")],
        "m3": [("manual", None)],
    }
    assert manifest["sources"]["demo"] == {
        "status": "completed",
        "pushed_docs": 3,
        "written_docs": 3,
        "elapsed_s": manifest["sources"]["demo"]["elapsed_s"],
    }
    assert manifest["policy"] == "new"
    assert manifest["errored_sources"] == []
    assert json.loads((out_dir / "manifests" / "t1.json").read_text(encoding="utf-8"))["total_written_docs"] == 3
    assert (out_dir / "analytics" / "aggregates" / "daily_aggregates.parquet").exists()


def test_build_local_records_errored_source_and_continues(tmp_path, monkeypatch):
    data = tmp_path / "in.jsonl"
    _write_jsonl(data, [{"id": str(i), "text": f"hello {i}"} for i in range(5)])

    from corpus_tagger.backends.keyword import KeywordBackend
    from corpus_tagger.errors import BackendError

    original = KeywordBackend.label

    def flaky(self, text, language):
        if text == "hello 2":
            raise BackendError("model crashed", backend=self.name)
        return original(self, text, language)

    monkeypatch.setattr(KeywordBackend, "label", flaky)
    good = tmp_path / "good.jsonl"
    _write_jsonl(good, [{"id": "g", "text": "rain"}])
    cfg = _cfg(tmp_path, data)
    cfg["sources"].append({"name": "other", "kind": "local_jsonl", "dataset": str(good)})

    manifest = build_local(cfg)

    assert manifest["errored_sources"] == ["demo"]
    demo = manifest["sources"]["demo"]
    assert demo["status"] == "errored"
    assert demo["written_docs"] == 2
    assert "model crashed" in demo["error"]
    assert manifest["sources"]["other"]["status"] == "completed"

    errors = (tmp_path / "out" / "t1" / "errors" / "errors.jsonl").read_text(encoding="utf-8").splitlines()
    assert len(errors) == 1
    assert json.loads(errors[0])["error_type"] == "BackendError"


def test_cli_tag_and_backends(tmp_path, capsys, root_handlers):
    data = tmp_path / "in.jsonl"
    _write_jsonl(data, [{"id": "m1", "text": "hello"}])
    cfg = _cfg(tmp_path, data, output={"format": "parquet"})
    cfg["reporters"] = ["logging"]
    cfg_path = tmp_path / "build.yaml"
    cfg_path.write_text(yaml.safe_dump(cfg), encoding="utf-8")

    assert main(["tag", "--config", str(cfg_path)]) == 0
    assert os.path.exists(tmp_path / "out" / "t1" / "docs" / "source=demo" / "shard_000000.parquet")
    assert os.path.exists(tmp_path / "out" / "t1" / "logs" / "t1.log")

    assert main(["backends"]) == 0
    assert "keyword" in capsys.readouterr().out


@pytest.fixture
def root_handlers():
    root = logging.getLogger()
    saved, level = list(root.handlers), root.level
    yield
    for h in root.handlers:
        if h not in saved:
            h.close()
    root.handlers[:] = saved
    root.setLevel(level)


def _always_failing(monkeypatch):
    from corpus_tagger.backends.keyword import KeywordBackend
    from corpus_tagger.errors import BackendError

    def broken(self, text, language):
        raise BackendError("model crashed", backend=self.name)

    monkeypatch.setattr(KeywordBackend, "label", broken)


def test_fail_fast_writes_records_before_raising(tmp_path, monkeypatch):
    _always_failing(monkeypatch)
    data = tmp_path / "in.jsonl"
    _write_jsonl(data, [{"id": "m1", "text": "hello"}])
    cfg = _cfg(tmp_path, data)
    cfg["run"]["fail_fast"] = True
    cfg["sources"].append({"name": "never", "kind": "local_jsonl", "dataset": str(data)})

    with pytest.raises(StreamTerminatedError) as exc_info:
        build_local(cfg)

    out_dir = tmp_path / "out" / "t1"
    manifest = json.loads((out_dir / "manifests" / "t1.json").read_text(encoding="utf-8"))
    assert manifest["errored_sources"] == ["demo"]
    assert "never" not in manifest["sources"]
    assert exc_info.value.manifest == manifest
    errors = (out_dir / "errors" / "errors.jsonl").read_text(encoding="utf-8").splitlines()
    assert [json.loads(e)["source"] for e in errors] == ["demo"]


def test_cli_fail_fast_returns_error_status(tmp_path, monkeypatch, capsys, root_handlers):
    _always_failing(monkeypatch)
    data = tmp_path / "in.jsonl"
    _write_jsonl(data, [{"id": "m1", "text": "hello"}])
    cfg = _cfg(tmp_path, data)
    cfg["run"]["fail_fast"] = True
    cfg["reporters"] = ["logging"]
    cfg_path = tmp_path / "build.yaml"
    cfg_path.write_text(yaml.safe_dump(cfg), encoding="utf-8")

    assert main(["tag", "--config", str(cfg_path)]) == 1
    assert "fail_fast" in capsys.readouterr().out
    assert (tmp_path / "out" / "t1" / "manifests" / "t1.json").exists()
