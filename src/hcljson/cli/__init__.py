"""
hcljson CLI.

- convert.py: HCL to JSON conversion
- utils.py: Shared utilities
"""

from __future__ import annotations

import sys

import typer

from hcljson.cli.convert import convert_command
from hcljson.cli.utils import version_callback

app = typer.Typer(
    help="hcljson – convert HCL configuration to JSON",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
) -> None:
    """hcljson CLI main callback for global options."""
    pass


app.command(name="convert")(convert_command)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


if __name__ == "__main__":
    main(sys.argv[1:])

__all__ = ["app", "main"]
