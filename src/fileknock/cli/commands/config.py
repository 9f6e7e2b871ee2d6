"""Daemon settings commands."""

from __future__ import annotations

import argparse
from pathlib import Path

from fileknock.cli.commands.daemon import load_settings_arg
from fileknock.cli.formatters import print_error, print_info, print_json, print_success
from fileknock.core.config import Settings
from fileknock.core.errors import ConfigError
from fileknock.utils.paths import get_settings_file

KNOWN_KEYS = (
    "health_check",
    "queue_capacity",
    "inherit_environment",
    "log_level",
    "log_file",
    "add_config_dir",
)


def cmd_config(args: argparse.Namespace) -> int:
    """Show current settings."""
    settings = load_settings_arg(args)
    if settings is None:
        return 1

    if getattr(args, "json", False):
        print_json(settings._to_dict())
        return 0

    data = settings.data
    source = settings.path if settings.path.exists() else f"{settings.path} (not present, using defaults)"
    print(f"Settings file: {source}")
    print()
    print("Config directories:")
    for config_dir in data.config_dirs:
        print(f"  - {config_dir}")
    print(f"Health check interval: {data.health_check_interval}s")
    print(f"Queue capacity: {data.queue_capacity}")
    print(f"Inherit environment: {data.inherit_environment}")
    print(f"Log level: {data.logging.level}")
    print(f"Log file: {data.logging.file or '(console only)'}")
    return 0


def cmd_config_init(args: argparse.Namespace) -> int:
    """Write a settings file with the default values."""
    path = Path(args.settings) if args.settings else get_settings_file()

    if path.exists() and not args.force:
        print_info(f"Settings file already exists: {path}")
        print_info("Use --force to overwrite it with defaults")
        return 0

    try:
        Settings(path, load=False).save()
    except OSError as e:
        print_error(f"Cannot write {path}: {e}")
        return 1

    print_success(f"Created {path}")
    return 0


def cmd_config_set(args: argparse.Namespace) -> int:
    """Set a settings value."""
    key = args.key
    value = args.value

    settings = load_settings_arg(args)
    if settings is None:
        return 1

    try:
        if key == "health_check":
            settings.health_check(int(value))
        elif key == "queue_capacity":
            settings.queue_capacity(int(value))
        elif key == "inherit_environment":
            settings.inherit_environment(value.lower() in ("true", "1", "yes"))
        elif key == "log_level":
            settings.log_level(value)
        elif key == "log_file":
            settings.log_file(value if value.lower() not in ("", "none") else None)
        elif key == "add_config_dir":
            settings.add_config_dir(value)
        else:
            print_error(f"Unknown settings key: {key}")
            print_info(f"Known keys: {', '.join(KNOWN_KEYS)}")
            return 1
    except (ValueError, ConfigError) as e:
        print_error(f"Invalid value for {key}: {e}")
        return 1

    try:
        settings.save()
    except OSError as e:
        print_error(f"Cannot write {settings.path}: {e}")
        return 1

    print_success(f"Set {key} = {value}")
    return 0


def register_commands(subparsers: argparse._SubParsersAction) -> None:
    """Register settings commands."""
    config_parser = subparsers.add_parser(
        "config",
        help="Show or change daemon settings",
    )
    config_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    config_parser.set_defaults(func=cmd_config)

    config_sub = config_parser.add_subparsers(
        dest="config_command",
        metavar="<subcommand>",
    )

    # config init
    init_parser = config_sub.add_parser(
        "init",
        help="Write a settings file with default values",
    )
    init_parser.add_argument(
        "-f", "--force",
        action="store_true",
        help="Overwrite an existing settings file",
    )
    init_parser.set_defaults(func=cmd_config_init)

    # config set
    set_parser = config_sub.add_parser(
        "set",
        help="Set a settings value",
    )
    set_parser.add_argument("key", help=f"Settings key ({', '.join(KNOWN_KEYS)})")
    set_parser.add_argument("value", help="Value to set")
    set_parser.set_defaults(func=cmd_config_set)
