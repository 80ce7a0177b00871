"""Operator-facing console output for deployer workflows.

Thin wrapper around :mod:`rich`.  Status lines, vendor unit outcomes and
live subprocess output all go through this module; ``logger.*`` calls are
kept for structured logging.

Messages routinely carry paths, descriptor labels (``charts[1]``) and raw
installer errors, so every caller-supplied string is escaped before Rich
sees it.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

console = Console(stderr=False, force_terminal=None)

# ── Symbols ────────────────────────────────────────────────────────────────

_PASS = "[bold green]✓[/]"
_FAIL = "[bold red]✗[/]"
_ARROW = "[bold cyan]›[/]"
_DOT = "[dim]·[/]"

# ── Phase headers ──────────────────────────────────────────────────────────


def phase(title: str) -> None:
    """Print a bold header for a command (``DEPLOY``, ``VENDORS``, ...)."""
    console.print()
    console.print(f"[bold blue]── {escape(title)} ──[/]")


# ── Status lines ───────────────────────────────────────────────────────────


def ok(msg: str) -> None:
    console.print(f"  {_PASS} {escape(msg)}")


def fail(msg: str) -> None:
    console.print(f"  {_FAIL} [red]{escape(msg)}[/]")


def step(msg: str) -> None:
    """In-progress action, e.g. ``Deploying web to namespace web``."""
    console.print(f"  {_ARROW} {escape(msg)}")


def info(msg: str) -> None:
    console.print(f"  {_DOT} [dim]{escape(msg)}[/]")


def detail(key: str, value: str) -> None:
    """Indented key/value line (release version, namespace, ...)."""
    console.print(f"    [bold]{escape(key)}[/]: {escape(value)}")


def unit_outcome(name: str, kind: str, error: str = "") -> None:
    """One vendor unit result; *error* empty means the unit deployed."""
    label = f"{kind} {name}"
    if error:
        fail(f"{label}: {error}")
    else:
        ok(f"{label} deployed")


# ── Subprocess output ──────────────────────────────────────────────────────


def stream_line(line: str) -> None:
    """Echo one line of subprocess output verbatim.

    Markup and highlighting are off: installer output contains square
    brackets that Rich would otherwise swallow.
    """
    console.print(line, markup=False, highlight=False, soft_wrap=True)


# ── Panels ─────────────────────────────────────────────────────────────────


def _panel(title: str, body: str, color: str) -> None:
    console.print()
    console.print(
        Panel(
            Text(body),
            title=f"[bold {color}]{escape(title)}[/]",
            border_style=color,
            padding=(1, 2),
        )
    )


def success_panel(title: str, body: str) -> None:
    _panel(title, body, "green")


def error_panel(title: str, body: str) -> None:
    """Consolidated failure message, command output included verbatim."""
    _panel(title, body, "red")
