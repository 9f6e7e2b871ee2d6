"""Core daemon functionality."""

from fileknock.core.compiler import ConfigCompiler
from fileknock.core.config import Settings
from fileknock.core.daemon import Daemon, DaemonState
from fileknock.core.dispatcher import EventDispatcher
from fileknock.core.executor import ActionExecutor, build_environment
from fileknock.core.keyvalue import KeyValueStore
from fileknock.core.models import ChangeEvent, EventMask, WatchEntry
from fileknock.core.notifier import DryRunNotifier, Notifier
from fileknock.core.registry import WatchRegistry
from fileknock.core.shutdown import ShutdownHandler

__all__ = [
    "ActionExecutor",
    "ChangeEvent",
    "ConfigCompiler",
    "Daemon",
    "DaemonState",
    "DryRunNotifier",
    "EventDispatcher",
    "EventMask",
    "KeyValueStore",
    "Notifier",
    "Settings",
    "ShutdownHandler",
    "WatchEntry",
    "WatchRegistry",
    "build_environment",
]
