"""Main CLI entry point."""

from __future__ import annotations

import argparse
import sys

from fileknock import __version__


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="fileknock",
        description="fileknock - run actions when watched files are closed",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  fileknock run            Run the daemon in the foreground
  fileknock watches        Show the watches the configuration declares
  fileknock install        Install fileknockd as a systemd service
  fileknock status         Show service status
  fileknock config         Show daemon settings

Watch config: /etc/fileknock.d/*  (MonitorPath|MonitorFile, FileClosedExec, FileClosedWriteExec)
Settings:     /etc/fileknock/fileknockd.json
""",
    )

    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"fileknock {__version__}",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    parser.add_argument(
        "-s", "--settings",
        metavar="FILE",
        help="Daemon settings file (default: /etc/fileknock/fileknockd.json)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        metavar="<command>",
        title="Commands",
    )

    from fileknock.cli.commands import config, daemon, install

    daemon.register_commands(subparsers)
    install.register_commands(subparsers)
    config.register_commands(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    # Handle config without subcommand
    if args.command == "config" and args.config_command is None:
        from fileknock.cli.commands.config import cmd_config
        return cmd_config(args)

    if hasattr(args, "func"):
        try:
            return args.func(args)
        except KeyboardInterrupt:
            print("\nInterrupted")
            return 130
        except Exception as e:
            if not args.quiet:
                print(f"Error: {e}", file=sys.stderr)
            return 1
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
