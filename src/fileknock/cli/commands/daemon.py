"""Daemon and watch-inspection commands."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional

from fileknock.cli.formatters import print_error, print_info, print_json, print_table, print_warning
from fileknock.core.config import Settings
from fileknock.core.errors import ConfigError
from fileknock.core.models import WatchEntry


def load_settings_arg(args: argparse.Namespace) -> Optional[Settings]:
    """Load settings from ``--settings`` (or the default), printing errors."""
    path = Path(args.settings) if getattr(args, "settings", None) else None
    try:
        return Settings(path)
    except ConfigError as e:
        print_error(str(e))
        return None


def cmd_run(args: argparse.Namespace) -> int:
    """Run fileknockd in the foreground."""
    from fileknock.core.daemon import Daemon

    settings = load_settings_arg(args)
    if settings is None:
        return 1
    if args.log_level:
        settings.log_level(args.log_level)
    if args.log_file:
        settings.log_file(args.log_file)

    daemon = Daemon(settings, config_dirs=args.config_dir or None)
    return daemon.run()


def cmd_watches(args: argparse.Namespace) -> int:
    """Compile the configuration without subscribing and list the watches."""
    from fileknock.core.compiler import ConfigCompiler
    from fileknock.core.notifier import DryRunNotifier
    from fileknock.core.pending import PendingQueue
    from fileknock.core.registry import WatchRegistry
    from fileknock.utils.logging import setup_logging

    settings = load_settings_arg(args)
    if settings is None:
        return 1
    setup_logging(level="ERROR" if args.quiet else "WARNING")

    config_dirs = args.config_dir or settings.data.config_dirs
    registry = WatchRegistry()
    report = ConfigCompiler(DryRunNotifier(PendingQueue()), registry).compile_dirs(config_dirs)

    if args.json:
        print_json({
            "config_dirs": list(config_dirs),
            "watches": [_entry_row(entry) for entry in report.registered],
            "inert": [_entry_row(entry) for entry in report.inert],
            "failed": [_entry_row(entry) for entry in report.failed],
            "rejected": [str(path) for path in report.rejected],
        })
        return 0 if not (report.failed or report.rejected) else 1

    print_table(
        ["id", "kind", "target", "on_close", "on_close_write", "source"],
        [_entry_row(entry) for entry in report.registered],
    )
    for entry in report.inert:
        print_warning(f"No actions configured: {entry.target} ({entry.source})")
    for entry in report.failed:
        print_error(f"Cannot watch: {entry.target} ({entry.source})")
    for path in report.rejected:
        print_error(f"Rejected: {path}")
    if not args.quiet:
        print_info(f"{report.files} config file(s) in {len(config_dirs)} director(ies)")

    return 0 if not (report.failed or report.rejected) else 1


def _entry_row(entry: WatchEntry) -> dict:
    return {
        "id": entry.watch_id if entry.is_subscribed else "-",
        "kind": "path" if entry.is_directory else "file",
        "target": entry.target,
        "on_close": entry.on_close_action or "",
        "on_close_write": entry.on_close_write_action or "",
        "source": str(entry.source) if entry.source else "",
    }


def register_commands(subparsers: argparse._SubParsersAction) -> None:
    """Register daemon commands."""
    # run
    run_parser = subparsers.add_parser(
        "run",
        help="Run fileknockd in the foreground",
    )
    run_parser.add_argument(
        "-c", "--config-dir",
        action="append",
        metavar="DIR",
        help="Drop-in config directory (repeatable; replaces the configured list)",
    )
    run_parser.add_argument(
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    run_parser.add_argument(
        "--log-file",
        help="Also log to this file",
    )
    run_parser.set_defaults(func=cmd_run)

    # watches
    watches_parser = subparsers.add_parser(
        "watches",
        help="Show the watches the configuration declares",
    )
    watches_parser.add_argument(
        "-c", "--config-dir",
        action="append",
        metavar="DIR",
        help="Drop-in config directory (repeatable; replaces the configured list)",
    )
    watches_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    watches_parser.set_defaults(func=cmd_watches)
