"""Output helpers for CLI commands."""

from __future__ import annotations

import json
from typing import Any

STATUS_SYMBOLS = {
    "running": "[+]",
    "stopped": "[-]",
    "error": "[!]",
}


def format_table(headers: list[str], rows: list[dict[str, Any]]) -> str:
    """Lay ``rows`` out in left-aligned columns under ``headers``."""
    if not rows:
        return "(no watches)"

    cells = [[str(row.get(h, "")) for h in headers] for row in rows]
    widths = [max(len(h), *(len(r[i]) for r in cells)) for i, h in enumerate(headers)]

    def line(values: list[str]) -> str:
        return "  ".join(v.ljust(w) for v, w in zip(values, widths)).rstrip()

    out = [line(headers), line(["-" * w for w in widths])]
    out.extend(line(values) for values in cells)
    return "\n".join(out)


def print_table(headers: list[str], rows: list[dict[str, Any]]) -> None:
    print(format_table(headers, rows))


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def print_status(name: str, status: str) -> None:
    """Print a service status line such as ``[+] running fileknockd``."""
    print(f"{STATUS_SYMBOLS.get(status, '[?]')} {status} {name}")


def print_header(text: str) -> None:
    print(f"\n{text}")
    print("=" * len(text))


def print_success(message: str) -> None:
    print(f"[+] {message}")


def print_error(message: str) -> None:
    print(f"[!] {message}")


def print_info(message: str) -> None:
    print(f"[*] {message}")


def print_warning(message: str) -> None:
    print(f"[~] {message}")
