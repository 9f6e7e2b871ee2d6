"""Service installation and control commands."""

from __future__ import annotations

import argparse
import time
from pathlib import Path
from typing import Optional

from fileknock.cli.commands.daemon import load_settings_arg
from fileknock.cli.formatters import print_error, print_info, print_success, print_warning
from fileknock.service.base import ServiceManager, ServiceStatus
from fileknock.service.factory import get_platform_name, get_service_manager, is_service_supported


def _manager(args: argparse.Namespace) -> Optional[ServiceManager]:
    """Return the service manager, or print why there is none."""
    if not is_service_supported():
        print_error("Service management not supported on this platform")
        print_info("You can still run fileknockd in the foreground with: fileknock run")
        return None
    settings = getattr(args, "settings", None)
    if settings:
        from fileknock.service.linux import SystemdServiceManager
        return SystemdServiceManager(settings_path=Path(settings).resolve())
    return get_service_manager()


def cmd_install(args: argparse.Namespace) -> int:
    """Install fileknockd as a system service."""
    manager = _manager(args)
    if manager is None:
        return 1

    print_info(f"Installing fileknockd service ({get_platform_name()})...")

    if manager.is_installed():
        print_warning("Service is already installed")
        if not args.force:
            print_info("Use --force to reinstall")
            return 0

    if manager.install():
        print_success("Service installed successfully")
        print_info("Start the service with: fileknock start")
        return 0

    print_error("Failed to install service (are you root?)")
    return 1


def cmd_uninstall(args: argparse.Namespace) -> int:
    """Remove the fileknockd system service."""
    manager = _manager(args)
    if manager is None:
        return 1

    print_info("Uninstalling fileknockd service...")

    if not manager.is_installed():
        print_info("Service is not installed")
        return 0

    if manager.uninstall():
        print_success("Service uninstalled successfully")
        return 0

    print_error("Failed to uninstall service")
    return 1


def cmd_start(args: argparse.Namespace) -> int:
    """Start the fileknockd service."""
    manager = _manager(args)
    if manager is None:
        return 1

    if not manager.is_installed():
        print_error("Service is not installed")
        print_info("Install with: fileknock install")
        return 1

    if manager.status().status == ServiceStatus.RUNNING:
        print_info("Service is already running")
        return 0

    if manager.start():
        print_success("Service started")
        return 0

    print_error("Failed to start service")
    return 1


def cmd_stop(args: argparse.Namespace) -> int:
    """Stop the fileknockd service."""
    manager = _manager(args)
    if manager is None:
        return 1

    if not manager.is_installed():
        print_error("Service is not installed")
        return 1

    if manager.status().status != ServiceStatus.RUNNING:
        print_info("Service is not running")
        return 0

    if manager.stop():
        print_success("Service stopped")
        return 0

    print_error("Failed to stop service")
    return 1


def cmd_reload(args: argparse.Namespace) -> int:
    """Ask the running service to re-read its watch configuration."""
    manager = _manager(args)
    if manager is None:
        return 1

    if manager.status().status != ServiceStatus.RUNNING:
        print_error("Service is not running")
        return 1

    if manager.reload():
        print_success("Reload requested")
        return 0

    print_error("Failed to reload service")
    return 1


def cmd_status(args: argparse.Namespace) -> int:
    """Show service status and a settings summary."""
    from fileknock.cli.formatters import print_header, print_status

    print_header("Service Status")

    if is_service_supported():
        try:
            info = get_service_manager().status()
            print_status("fileknockd", info.status.value)
            if info.pid:
                print(f"    PID: {info.pid}")
        except OSError as e:
            print_error(f"Could not get service status: {e}")
    else:
        print_info(f"Service management not available ({get_platform_name()})")

    print_header("Configuration")
    settings = load_settings_arg(args)
    if settings is None:
        return 1

    data = settings.data
    print(f"Settings file: {settings.path}")
    print(f"Config directories: {len(data.config_dirs)}")
    for config_dir in data.config_dirs:
        marker = "" if Path(config_dir).is_dir() else "  (missing)"
        print(f"  - {config_dir}{marker}")
    print(f"Log file: {data.logging.file or '(journal)'}")
    return 0


def cmd_logs(args: argparse.Namespace) -> int:
    """Show the fileknockd log, following the log file when one is configured."""
    settings = load_settings_arg(args)
    if settings is None:
        return 1
    log_file = settings.data.logging.file

    if log_file is None:
        if not is_service_supported():
            print_error("No log file configured")
            return 1
        print(get_service_manager().logs(args.lines), end="")
        return 0

    if not log_file.exists():
        print_error(f"Log file not found: {log_file}")
        return 1

    print_info(f"Following {log_file} (Ctrl+C to stop)\n")

    try:
        with open(log_file, "r", encoding="utf-8", errors="replace") as f:
            if args.lines > 0:
                for line in f.readlines()[-args.lines:]:
                    print(line, end="")

            f.seek(0, 2)
            last_size = log_file.stat().st_size

            while True:
                current_size = log_file.stat().st_size
                if current_size < last_size:
                    f.seek(0)
                    print_info("--- Log file rotated ---")

                line = f.readline()
                if line:
                    print(line, end="")
                else:
                    time.sleep(0.5)

                last_size = current_size

    except KeyboardInterrupt:
        print("\n")
        return 0
    except OSError as e:
        print_error(f"Error reading log: {e}")
        return 1


def register_commands(subparsers: argparse._SubParsersAction) -> None:
    """Register service management commands."""
    # install
    install_parser = subparsers.add_parser(
        "install",
        help="Install fileknockd as a systemd service",
    )
    install_parser.add_argument(
        "-f", "--force",
        action="store_true",
        help="Force reinstall if already installed",
    )
    install_parser.set_defaults(func=cmd_install)

    # uninstall
    uninstall_parser = subparsers.add_parser(
        "uninstall",
        help="Remove the fileknockd systemd service",
    )
    uninstall_parser.set_defaults(func=cmd_uninstall)

    # start
    start_parser = subparsers.add_parser(
        "start",
        help="Start the fileknockd service",
    )
    start_parser.set_defaults(func=cmd_start)

    # stop
    stop_parser = subparsers.add_parser(
        "stop",
        help="Stop the fileknockd service",
    )
    stop_parser.set_defaults(func=cmd_stop)

    # reload
    reload_parser = subparsers.add_parser(
        "reload",
        help="Make the running service re-read its watch configuration",
    )
    reload_parser.set_defaults(func=cmd_reload)

    # status
    status_parser = subparsers.add_parser(
        "status",
        help="Show service status",
    )
    status_parser.set_defaults(func=cmd_status)

    # logs
    logs_parser = subparsers.add_parser(
        "logs",
        help="Show the fileknockd log",
    )
    logs_parser.add_argument(
        "-n", "--lines",
        type=int,
        default=20,
        help="Number of lines to show initially (default: 20)",
    )
    logs_parser.set_defaults(func=cmd_logs)
