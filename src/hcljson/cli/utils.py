"""
hcljson CLI utilities.

Shared helpers used across CLI modules.
"""

from __future__ import annotations

import logging
import platform

import typer

from hcljson._version import get_version


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"hcljson {get_version()}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Log to stderr; DEBUG when verbose, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        force=True,
    )
