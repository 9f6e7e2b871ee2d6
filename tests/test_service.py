"""Tests for the systemd service manager."""

from __future__ import annotations

import subprocess
import sys

import pytest

from fileknock.service.base import ServiceStatus
from fileknock.service.linux import SystemdServiceManager


@pytest.fixture
def manager(tmp_path, monkeypatch):
    manager = SystemdServiceManager(unit_dir=tmp_path / "system")
    calls = []

    def fake_systemctl(*args):
        calls.append(args)
        stdout = "active\n" if args[0] == "is-active" else "MainPID=1234\n"
        return subprocess.CompletedProcess(["systemctl", *args], 0, stdout=stdout, stderr="")

    monkeypatch.setattr(manager, "_run_systemctl", fake_systemctl)
    manager.calls = calls
    return manager


def test_unit_runs_the_daemon_and_reloads_with_sighup():
    unit = SystemdServiceManager().render_unit("/usr/bin/python3")

    assert "ExecStart=/usr/bin/python3 -m fileknock run" in unit
    assert "ExecReload=/bin/kill -HUP $MAINPID" in unit
    assert "WantedBy=multi-user.target" in unit


def test_unit_passes_custom_settings(tmp_path):
    settings = tmp_path / "fk.json"
    unit = SystemdServiceManager(settings_path=settings).render_unit("/usr/bin/python3")

    assert f"-m fileknock --settings {settings} run" in unit


def test_install_writes_unit_and_enables(manager):
    assert manager.install() is True

    assert manager.is_installed()
    assert sys.executable in manager.unit_file.read_text()
    assert ("daemon-reload",) in manager.calls
    assert ("enable", "fileknockd") in manager.calls


def test_status_reports_pid_when_running(manager):
    manager.install()

    info = manager.status()

    assert info.status == ServiceStatus.RUNNING
    assert info.pid == 1234


def test_status_not_installed(manager):
    assert manager.status().status == ServiceStatus.NOT_INSTALLED


def test_uninstall_removes_unit(manager):
    manager.install()

    assert manager.uninstall() is True
    assert not manager.is_installed()
    assert ("disable", "fileknockd") in manager.calls
