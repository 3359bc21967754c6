from __future__ import annotations

import argparse
import asyncio
from functools import partial
import json
import logging
from pathlib import Path
import sys

from .client import fetch_widget_data_async
from .config import Config, load_config
from .connection import test_connection
from .dashboard import RefreshRequest
from .errors import FinboardError
from .storage import load_state, save_state
from .widgets import WIDGET_TYPES

logger = logging.getLogger(__name__)


def _probe(cfg: Config, endpoint: str):
    return test_connection(
        endpoint,
        timeout=cfg.timeout,
        max_depth=cfg.max_depth,
        provider_hosts=cfg.provider_hosts,
        symbol_param=cfg.symbol_param,
        default_symbol=cfg.default_symbol,
        user_agent=cfg.user_agent,
    )


def _print_widget(w) -> None:
    state = "loading" if w.is_loading else ("error: " + w.error if w.error else ("ready" if w.data is not None else "idle"))
    print(f"{w.id}  {w.type:<5}  {w.title}  [{state}]")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="finboard")
    ap.add_argument("--config", default="config.yaml", help="Path to config.yaml")
    ap.add_argument("--state", help="Override storage.path from config")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("probe", help="Test an endpoint and list its fields")
    p.add_argument("endpoint")

    p = sub.add_parser("add", help="Add a widget")
    p.add_argument("--type", choices=WIDGET_TYPES, required=True)
    p.add_argument("--title", required=True)
    p.add_argument("--endpoint", required=True)
    p.add_argument("--description")
    p.add_argument("--fields", help="Comma separated field keys (default: all)")
    p.add_argument("--refresh-interval", type=int)

    sub.add_parser("list", help="List widgets")

    p = sub.add_parser("refresh", help="Refresh widgets (all when no id is given)")
    p.add_argument("ids", nargs="*")

    p = sub.add_parser("remove", help="Remove a widget")
    p.add_argument("id")

    p = sub.add_parser("export", help="Export the dashboard as JSON")
    p.add_argument("--out", help="Write to this file instead of stdout")

    p = sub.add_parser("import", help="Replace the dashboard with an exported one")
    p.add_argument("file")
    return ap


def run(args: argparse.Namespace, cfg: Config) -> None:
    if args.command == "probe":
        result = _probe(cfg, args.endpoint)
        for f in result.fields:
            print(f"{f.key:<20} {f.value_type:<8} {f.path:<30} {json.dumps(f.sample)}")
        return

    state_path = Path(args.state) if args.state else cfg.storage_path
    fetcher = partial(
        fetch_widget_data_async, timeout=cfg.timeout, window=cfg.window, user_agent=cfg.user_agent,
    )
    store = load_state(state_path, cfg.namespace, fetcher=fetcher)
    store.cache.default_ttl = cfg.cache_ttl

    if args.command == "add":
        result = _probe(cfg, args.endpoint)
        fields = result.fields
        if args.fields:
            wanted = [k.strip() for k in args.fields.split(",") if k.strip()]
            by_key = {f.key: f for f in fields}
            missing = [k for k in wanted if k not in by_key]
            if missing:
                raise FinboardError(f"Unknown fields: {', '.join(missing)}")
            fields = [by_key[k] for k in wanted]
        pending = store.add_widget({
            "type": args.type,
            "title": args.title,
            "description": args.description,
            "endpoint": args.endpoint,
            "selected_fields": fields,
            "config": {"refresh_interval": args.refresh_interval},
        })
        asyncio.run(store.run_refreshes(pending))
        for r in pending:
            _print_widget(store.get_widget(r.widget_id))
    elif args.command == "list":
        for w in store.widgets:
            _print_widget(w)
        return
    elif args.command == "refresh":
        ids = args.ids or [w.id for w in store.widgets]
        asyncio.run(store.run_refreshes(RefreshRequest(i) for i in ids))
        for i in ids:
            w = store.get_widget(i)
            if w is not None:
                _print_widget(w)
    elif args.command == "remove":
        store.remove_widget(args.id)
    elif args.command == "export":
        text = store.export_dashboard()
        if args.out:
            Path(args.out).write_text(text, encoding="utf-8")
        else:
            print(text)
        return
    elif args.command == "import":
        pending = store.import_dashboard(Path(args.file).read_text(encoding="utf-8"))
        asyncio.run(store.run_refreshes(pending))

    save_state(state_path, store, cfg.namespace)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_config(args.config)
    logging.basicConfig(level=cfg.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        run(args, cfg)
    except FinboardError as e:
        logger.error("%s", e)
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0
