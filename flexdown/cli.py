"""flexdown command line: render components and check template syntax."""

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from . import __version__
from .builder import ComponentParser
from .config import FlexdownConfig
from .errors import FlexdownComponentError, FlexdownSyntaxError
from .evaluator import render as render_component
from .tools import Tools, load_tools

app = typer.Typer(help="flexdown: render .fx component templates")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    )
):
    """flexdown: render .fx component templates"""
    pass


def _parse_json_mapping(text: Optional[str], option: str) -> dict:
    if not text:
        return {}
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"not valid JSON: {e}", param_hint=option)
    if not isinstance(value, dict):
        raise typer.BadParameter("expected a JSON object", param_hint=option)
    return value


def _load_tool_paths(paths: Optional[List[Path]]) -> dict:
    if not paths:
        return {}
    try:
        return load_tools(paths)
    except (FileNotFoundError, ValueError) as e:
        raise typer.BadParameter(str(e), param_hint="--tools")


@app.command()
def render(
    component: str = typer.Argument(..., help="Dotted component name, e.g. pages.home"),
    views: Optional[Path] = typer.Option(
        None, "--views", help="Directory holding .fx components (overrides FLEXDOWN_VIEWS)"
    ),
    locals_json: Optional[str] = typer.Option(
        None, "--locals", "-l", help='Locals as a JSON object, e.g. \'{"user": {"name": "Ann"}}\''
    ),
    globals_json: Optional[str] = typer.Option(None, "--globals", "-g", help="Globals as a JSON object"),
    tools: Optional[List[Path]] = typer.Option(
        None, "--tools", "-t", help="Python file or directory whose public functions become tools (can be repeated)"
    ),
    no_cache: bool = typer.Option(False, "--no-cache", help="Do not cache parsed components"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
):
    """Render a component and print the result.

    Examples:
        flexdown render pages.home --views ./views
        flexdown render emails.welcome -l '{"user": {"name": "Ann"}}'
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    console = Console(stderr=True)

    locals_map = _parse_json_mapping(locals_json, "--locals")
    globals_map = _parse_json_mapping(globals_json, "--globals")

    tools_map = _load_tool_paths(tools)
    if verbose and tools_map:
        typer.echo(f"Loaded tools: {', '.join(sorted(tools_map))}", err=True)

    overrides = {"globals": globals_map, "tools": tools_map}
    if views is not None:
        overrides["views"] = views
    if no_cache:
        overrides["cache"] = False
    config = FlexdownConfig.from_env(**overrides)

    try:
        output = render_component(component, locals_map, config=config)
    except (FlexdownSyntaxError, FlexdownComponentError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    typer.echo(output)


@app.command()
def check(
    template_file: Path = typer.Argument(..., help="Path to .fx component file"),
):
    """Parse a component file and report syntax errors.

    Examples:
        flexdown check views/pages/home.fx
    """
    console = Console()

    if not template_file.exists():
        console.print(f"[red]Error: {template_file} not found[/red]")
        raise typer.Exit(1)

    try:
        parser = ComponentParser(template_file.name, template_file.read_text(encoding="utf-8"))
    except FlexdownSyntaxError as e:
        console.print(f"[red]✗ Parsing error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Syntax OK ({len(parser.nodes)} top-level statements)")


@app.command("tools")
def list_tools(
    tools: Optional[List[Path]] = typer.Option(
        None, "--tools", "-t", help="Also list tools from a Python file or directory (can be repeated)"
    ),
):
    """List the tools available to templates."""
    names = set(Tools.list_registered()) | set(_load_tool_paths(tools))
    for name in sorted(names):
        typer.echo(f"@{name}")


if __name__ == "__main__":
    app()
