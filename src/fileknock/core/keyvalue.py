"""Reader for the ``key=value`` drop-in configuration format.

Each line holds one ``key=value`` pair. Lines whose first non-blank character
is ``#`` are comments, blank lines are ignored, and so are lines without an
``=``. Keys are matched case-insensitively and values are trimmed of
surrounding whitespace. When a key appears more than once the first
occurrence wins.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterator, Optional, Union

from fileknock.core.errors import ConfigError

_TRUE_PREFIXES = ("t", "T", "y", "Y", "1")
_WRAPPING_CHARS = "\"'(["
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class KeyValueStore:
    """
    Parsed contents of a single configuration file.

    Example:
        store = KeyValueStore.load("/etc/fileknock.d/uploads.conf")
        path = store.get("MonitorPath")
    """

    def __init__(self, pairs: Optional[list[tuple[str, str]]] = None, path: Optional[Path] = None) -> None:
        self.path = path
        self._pairs: list[tuple[str, str]] = list(pairs or [])

    @classmethod
    def load(cls, path: Union[str, Path]) -> KeyValueStore:
        """
        Load a configuration file.

        Args:
            path: File to read.

        Returns:
            The parsed store.

        Raises:
            ConfigError: If the file cannot be read or decoded.
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        return cls.parse(text, path=path)

    @classmethod
    def parse(cls, text: str, path: Optional[Path] = None) -> KeyValueStore:
        """Parse configuration text into a store."""
        pairs = []
        for raw_line in text.splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            key, sep, value = line.partition("=")
            if not sep:
                continue
            pairs.append((key.strip(), value.strip()))
        return cls(pairs, path=path)

    def get(self, key: str) -> Optional[str]:
        """Return the value for ``key`` (case-insensitive), or None."""
        wanted = key.lower()
        for name, value in self._pairs:
            if name.lower() == wanted:
                return value
        return None

    def get_bool(self, key: str) -> bool:
        """
        Interpret a value as a boolean.

        Leading quote and bracket characters are skipped; the value is true
        when it then starts with ``t``, ``y`` or ``1`` in any case.
        """
        value = self.get(key)
        if value is None:
            return False
        return value.lstrip(_WRAPPING_CHARS).startswith(_TRUE_PREFIXES)

    def get_int(self, key: str) -> int:
        """Return the leading integer of a value, or 0 if absent or unparsable."""
        value = self.get(key)
        if value is None:
            return 0
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else 0

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __repr__(self) -> str:
        return f"KeyValueStore(path={self.path}, items={len(self._pairs)})"
