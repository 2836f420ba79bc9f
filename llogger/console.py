"""
Shared Rich Console singletons for terminal output.

This module creates the console instances used across the whole package.
Instead of each module opening its own handle on stdout, they all import and
share these, so every byte llogger writes goes through one coordinated
pipeline.

Why a singleton?
  - The console knows the terminal state we depend on: whether stdout is a
    real terminal, how many columns it has, whether colour is supported.
    Every spinner frame is measured against that width, so all parts of the
    package must agree on it.
  - The multiplexer is the only writer of the stream while spinners are
    animating. Sharing one console makes "only writer" a property of the
    code rather than a convention.
  - Tests can patch `console` in one place and every module picks up the
    replacement.

`error_console` writes to stderr. It is the last-resort channel used when
writing to `console` itself failed (closed pipe, broken terminal), so it must
never share a file with it.

Usage:
    from .console import console
    console.print("[yellow]Warning: ...[/yellow]")
"""

from rich.console import Console

# All regular output, spinner frames included.
console = Console()

# Failures that cannot be reported on `console`.
error_console = Console(stderr=True)
