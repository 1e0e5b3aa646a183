from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

from pydantic import ValidationError

from horder.backup.snapshot import export_snapshot, restore_snapshot
from horder.core.config import get_settings
from horder.core.logging import configure_logging
from horder.demo import seed_default_catalog
from horder.domain.accounting.reports import WINDOW_LABELS, TimeWindow, compute_stats
from horder.domain.errors import HorderError
from horder.persistence.db import init_db, session_scope
from horder.persistence.repositories import SqlRepository


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Horder back-office CLI")
    top = parser.add_subparsers(dest="command", required=True)

    backup = top.add_parser("backup", help="Dump all collections to a JSON snapshot")
    backup.add_argument("--out", default=None, help="Output file (default: stdout)")

    restore = top.add_parser("restore", help="Replace all collections with a JSON snapshot")
    restore.add_argument("path", help="Snapshot file produced by 'backup'")

    top.add_parser("seed", help="Insert the default product catalog when the catalog is empty")

    stats = top.add_parser("stats", help="Revenue / profit / order count for a time window")
    stats.add_argument("--window", choices=sorted(WINDOW_LABELS), default="month")
    stats.add_argument("--start", default=None, help="YYYY-MM-DD (custom window)")
    stats.add_argument("--end", default=None, help="YYYY-MM-DD (custom window)")

    serve = top.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    return parser


def _print(data: dict) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _run_backup(args: argparse.Namespace) -> int:
    with session_scope() as session:
        snapshot = export_snapshot(SqlRepository(session))
    text = json.dumps(snapshot, ensure_ascii=False, indent=2)
    if args.out:
        Path(args.out).write_text(text, encoding="utf-8")
    else:
        print(text)
    return 0


def _run_restore(args: argparse.Namespace) -> int:
    try:
        snapshot = json.loads(Path(args.path).read_text(encoding="utf-8"))
        with session_scope() as session:
            result = restore_snapshot(SqlRepository(session), snapshot)
    except (HorderError, json.JSONDecodeError, OSError) as exc:
        print(f"restore failed: {exc}", file=sys.stderr)
        return 2
    _print({"success": True, "restored": asdict(result)})
    return 0


def _run_seed(_: argparse.Namespace) -> int:
    with session_scope() as session:
        _print(seed_default_catalog(SqlRepository(session)))
    return 0


def _run_stats(args: argparse.Namespace) -> int:
    try:
        window = TimeWindow(kind=args.window, start=args.start, end=args.end)
    except ValidationError as exc:
        print(f"invalid window: {exc.errors()[0].get('msg')}", file=sys.stderr)
        return 2
    with session_scope() as session:
        stats = compute_stats(SqlRepository(session).list_orders(), window)
    _print({"window": window.kind, "label": window.label, **asdict(stats)})
    return 0


def _run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "horder.main:app",
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
        log_level=settings.log_level.lower(),
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    parser = _build_parser()
    args = parser.parse_args(argv)
    init_db()

    handlers = {
        "backup": _run_backup,
        "restore": _run_restore,
        "seed": _run_seed,
        "stats": _run_stats,
        "serve": _run_serve,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.error("unsupported command")
        return 2
    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
