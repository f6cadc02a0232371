"""CLI entrypoint.

Commands:
- `corpus-tagger tag --config configs/build.yaml [--log-level DEBUG]`
- `corpus-tagger backends` : list registered label backends

`tag` exits with status 1 when any source stream terminated with an error.
"""

from __future__ import annotations
import argparse
import sys
from typing import Any, Dict, List, Optional
from rich.console import Console
from rich.table import Table
from rich import box
from rich.markup import escape

from .backends import list_backends
from .config import load_yaml
from .errors import StreamTerminatedError
from .logging_ import setup_logging
from .pipeline.build import build_local
from .run_id import resolve_run_id, resolve_out_dir


def _summary_table(manifest: Dict[str, Any]) -> Table:
    table = Table(title=f"[bold]Run {manifest['run_id']}[/bold]", box=box.ROUNDED, border_style="green")
    table.add_column("Source", style="cyan")
    table.add_column("Status")
    table.add_column("Pushed", justify="right")
    table.add_column("Written", justify="right")
    table.add_column("Error", style="red")
    for name, s in manifest["sources"].items():
        status = "[green]completed[/green]" if s["status"] == "completed" else f"[red]{s['status']}[/red]"
        table.add_row(name, status, f"{s['pushed_docs']:,}", f"{s['written_docs']:,}", escape(s.get("error", "")))
    return table


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="corpus-tagger")
    sub = p.add_subparsers(dest="cmd", required=True)

    pt = sub.add_parser("tag", help="Run the tagging stage over configured sources")
    pt.add_argument("--config", required=True)
    pt.add_argument("--log-level", default="INFO")

    sub.add_parser("backends", help="List registered label backends")

    args = p.parse_args(argv)
    console = Console()

    if args.cmd == "backends":
        for name in list_backends():
            console.print(name)
        return 0

    cfg = load_yaml(args.config)
    run_id = resolve_run_id(cfg)
    out_dir = resolve_out_dir(cfg, run_id)
    setup_logging(out_dir=out_dir, run_id=run_id, level=args.log_level)

    try:
        manifest = build_local(cfg, run_id=run_id, out_dir=out_dir)
    except StreamTerminatedError as e:
        console.print(f"[red]Run stopped (fail_fast):[/red] {escape(str(e))}")
        if e.manifest is not None:
            console.print(_summary_table(e.manifest))
        return 1
    console.print(_summary_table(manifest))
    return 1 if manifest["errored_sources"] else 0


if __name__ == "__main__":
    sys.exit(main())
