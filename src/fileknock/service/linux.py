"""Linux systemd service manager."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import Optional

from fileknock.service.base import ServiceInfo, ServiceManager, ServiceStatus
from fileknock.utils.logging import get_logger


class SystemdServiceManager(ServiceManager):
    """
    Service manager for Linux using a systemd system unit.

    fileknockd watches system paths and runs actions as root, so the unit is
    installed system-wide and managing it requires root.
    """

    UNIT_DIR = Path("/etc/systemd/system")

    UNIT_FILE_TEMPLATE = """\
[Unit]
Description={description}
After=local-fs.target

[Service]
Type=simple
ExecStart={python} -m fileknock{settings} run
ExecReload=/bin/kill -HUP $MAINPID
Restart=on-failure
RestartSec=5

[Install]
WantedBy=multi-user.target
"""

    def __init__(self, unit_dir: Optional[Path] = None, settings_path: Optional[Path] = None) -> None:
        self._logger = get_logger("fileknock.service")
        self._unit_dir = unit_dir or self.UNIT_DIR
        self._unit_file = self._unit_dir / f"{self.SERVICE_NAME}.service"
        self._settings_path = settings_path

    @property
    def platform_name(self) -> str:
        return "systemd"

    @property
    def unit_file(self) -> Path:
        return self._unit_file

    def _run_systemctl(self, *args: str) -> subprocess.CompletedProcess:
        """Run a systemctl command."""
        return subprocess.run(["systemctl", *args], capture_output=True, text=True)

    def render_unit(self, python_path: Optional[str] = None) -> str:
        """Render the unit file for the given interpreter."""
        settings = f" --settings {self._settings_path}" if self._settings_path else ""
        return self.UNIT_FILE_TEMPLATE.format(
            description=self.SERVICE_DESCRIPTION,
            python=python_path or sys.executable,
            settings=settings,
        )

    def install(self, python_path: Optional[str] = None) -> bool:
        """Install fileknockd as a systemd service."""
        try:
            self._unit_dir.mkdir(parents=True, exist_ok=True)
            self._unit_file.write_text(self.render_unit(python_path))
            self._logger.info(f"Created service file: {self._unit_file}")
        except OSError as e:
            self._logger.error(f"Failed to write unit file: {e}")
            return False

        result = self._run_systemctl("daemon-reload")
        if result.returncode != 0:
            self._logger.error(f"Failed to reload systemd: {result.stderr}")
            return False

        result = self._run_systemctl("enable", self.SERVICE_NAME)
        if result.returncode != 0:
            self._logger.error(f"Failed to enable service: {result.stderr}")
            return False

        self._logger.info(f"Service '{self.SERVICE_NAME}' installed and enabled")
        return True

    def uninstall(self) -> bool:
        """Remove the systemd service."""
        self.stop()
        self._run_systemctl("disable", self.SERVICE_NAME)

        try:
            if self._unit_file.exists():
                self._unit_file.unlink()
                self._logger.info(f"Removed service file: {self._unit_file}")
        except OSError as e:
            self._logger.error(f"Failed to remove unit file: {e}")
            return False

        self._run_systemctl("daemon-reload")
        self._logger.info(f"Service '{self.SERVICE_NAME}' uninstalled")
        return True

    def _control(self, verb: str) -> bool:
        result = self._run_systemctl(verb, self.SERVICE_NAME)
        if result.returncode != 0:
            self._logger.error(f"Failed to {verb} service: {result.stderr}")
            return False
        self._logger.info(f"Service '{self.SERVICE_NAME}': {verb} ok")
        return True

    def start(self) -> bool:
        return self._control("start")

    def stop(self) -> bool:
        return self._control("stop")

    def reload(self) -> bool:
        return self._control("reload")

    def status(self) -> ServiceInfo:
        """Get current service status."""
        if not self.is_installed():
            return ServiceInfo(
                name=self.SERVICE_NAME,
                status=ServiceStatus.NOT_INSTALLED,
            )

        result = self._run_systemctl("is-active", self.SERVICE_NAME)
        status_text = result.stdout.strip()

        if status_text in ("active", "reloading"):
            status = ServiceStatus.RUNNING
        elif status_text in ("inactive", "deactivating"):
            status = ServiceStatus.STOPPED
        elif status_text == "failed":
            status = ServiceStatus.ERROR
        else:
            status = ServiceStatus.UNKNOWN

        pid = None
        if status == ServiceStatus.RUNNING:
            result = self._run_systemctl("show", "-p", "MainPID", self.SERVICE_NAME)
            try:
                pid_str = result.stdout.strip().split("=")[1]
                pid = int(pid_str) if pid_str != "0" else None
            except (IndexError, ValueError):
                pass

        return ServiceInfo(
            name=self.SERVICE_NAME,
            status=status,
            pid=pid,
            description=self.SERVICE_DESCRIPTION,
        )

    def is_installed(self) -> bool:
        return self._unit_file.exists()

    def logs(self, lines: int = 50) -> str:
        """Get recent service logs from the journal."""
        result = subprocess.run(
            ["journalctl", "-u", self.SERVICE_NAME, "-n", str(lines), "--no-pager"],
            capture_output=True,
            text=True,
        )
        return result.stdout
