"""Tests for the key=value drop-in reader."""

from __future__ import annotations

import pytest

from fileknock.core.errors import ConfigError
from fileknock.core.keyvalue import KeyValueStore


def test_comments_blank_lines_and_lines_without_equals_are_ignored():
    store = KeyValueStore.parse(
        "# a comment\n"
        "\n"
        "   # indented comment = still a comment\n"
        "just some words\n"
        "MonitorPath=/srv/in\n"
    )
    assert list(store) == [("MonitorPath", "/srv/in")]
    assert len(store) == 1


def test_keys_are_case_insensitive():
    store = KeyValueStore.parse("monitorpath=/srv/in\n")
    assert store.get("MonitorPath") == "/srv/in"
    assert store.get("MONITORPATH") == "/srv/in"
    assert "MonitorPath" in store


def test_keys_and_values_are_trimmed():
    store = KeyValueStore.parse("  FileClosedExec   =   /usr/bin/handler  \n")
    assert store.get("FileClosedExec") == "/usr/bin/handler"


def test_value_keeps_later_equals_signs():
    store = KeyValueStore.parse("FileClosedExec=/opt/run=now\n")
    assert store.get("FileClosedExec") == "/opt/run=now"


def test_first_occurrence_wins():
    store = KeyValueStore.parse("MonitorFile=/first\nmonitorfile=/second\n")
    assert store.get("MonitorFile") == "/first"


def test_missing_key():
    store = KeyValueStore.parse("a=1\n")
    assert store.get("b") is None
    assert "b" not in store
    assert store.get_bool("b") is False
    assert store.get_int("b") == 0


@pytest.mark.parametrize("value", ["true", "Yes", "1", "'true'", '"y"', "(T)", "[yes]"])
def test_get_bool_true(value):
    assert KeyValueStore.parse(f"flag={value}\n").get_bool("flag") is True


@pytest.mark.parametrize("value", ["false", "no", "0", "", "off", "'n'"])
def test_get_bool_false(value):
    assert KeyValueStore.parse(f"flag={value}\n").get_bool("flag") is False


@pytest.mark.parametrize(
    "value, expected",
    [("42", 42), ("-7", -7), ("+5", 5), ("12abc", 12), ("abc", 0), ("", 0)],
)
def test_get_int(value, expected):
    assert KeyValueStore.parse(f"n={value}\n").get_int("n") == expected


def test_load_reads_file(tmp_path):
    path = tmp_path / "uploads"
    path.write_text("MonitorPath=/srv/uploads\n")

    store = KeyValueStore.load(path)

    assert store.path == path
    assert store.get("MonitorPath") == "/srv/uploads"


def test_load_missing_file_raises_config_error(tmp_path):
    with pytest.raises(ConfigError):
        KeyValueStore.load(tmp_path / "nope")


def test_load_undecodable_file_raises_config_error(tmp_path):
    path = tmp_path / "binary"
    path.write_bytes(b"MonitorPath=\xff\xfe\n")

    with pytest.raises(ConfigError):
        KeyValueStore.load(path)
