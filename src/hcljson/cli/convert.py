"""
Conversion commands for hcljson CLI.

- convert: Convert an HCL file to JSON
"""

from __future__ import annotations

import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from hcljson.cli.utils import configure_logging
from hcljson.core.convert import hcl_to_json
from hcljson.core.errors import HclJsonError
from hcljson.core.settings import ConverterSettings, load_settings

err_console = Console(stderr=True)


def _resolve_settings(
    config: Path | None,
    indent: int | None,
    escape_html: bool | None,
) -> ConverterSettings:
    """Combine settings from the config file with command-line overrides."""
    settings = load_settings(config) if config else ConverterSettings()
    overrides: dict[str, object] = {}
    if indent is not None:
        overrides["indent"] = indent
    if escape_html is not None:
        overrides["escape_html"] = escape_html
    if overrides:
        settings = settings.model_copy(update=overrides)
    return settings


def convert_command(
    file: str = typer.Argument(
        ...,
        help="HCL file to convert ('-' reads standard input)",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file (default: stdout)",
    ),
    indent: int | None = typer.Option(
        None,
        "--indent",
        "-i",
        min=0,
        help="Pretty-print with this many spaces of indentation",
    ),
    escape_html: bool | None = typer.Option(
        None,
        "--escape-html/--no-escape-html",
        help="Escape <, > and & in strings",
    ),
    config: Path | None = typer.Option(  # noqa: B008
        None,
        "--config",
        "-c",
        help="Settings file (hcljson.toml or pyproject.toml)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Log each block and expression as it is converted",
    ),
) -> None:
    """
    Convert an HCL file to JSON.

    Literal values become JSON values. Expressions that would need
    evaluating are kept as "${...}" strings.

    Examples:
        hcljson convert main.tf                 # Print to stdout
        hcljson convert main.tf -o main.tf.json # Save to file
        cat main.tf | hcljson convert - -i 2    # Pretty-print stdin
    """
    configure_logging(verbose)

    try:
        settings = _resolve_settings(config, indent, escape_html)
        if file == "-":
            data = sys.stdin.buffer.read()
            filename = "<stdin>"
        else:
            path = Path(file)
            data = path.read_bytes()
            filename = str(path)
        result = hcl_to_json(data, filename, settings)
    except OSError as e:
        err_console.print(
            f"[red]Unable to read {escape(file)}: {escape(str(e))}[/red]",
            highlight=False,
            soft_wrap=True,
        )
        raise typer.Exit(code=1)
    except HclJsonError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]", highlight=False, soft_wrap=True)
        raise typer.Exit(code=1)

    if output:
        output.write_bytes(result)
        err_console.print(
            f"[green]JSON written to {escape(str(output))}[/green]",
            highlight=False,
            soft_wrap=True,
        )
    else:
        typer.echo(result, nl=False)
