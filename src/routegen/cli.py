from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from routegen.config import RouteGenConfig, find_pyproject, load_config
from routegen.core.placeholders import extract_placeholders
from routegen.domain.models import report_route_set
from routegen.errors import RouteGenError
from routegen.extractors.declarations import read_declaration_file
from routegen.orchestrator.pipeline import derive_module, generate_file, run_build

app = typer.Typer(no_args_is_help=True, add_completion=False)

console = Console()
err_console = Console(stderr=True)

# set by the callback, read by commands
_state: dict[str, Optional[Path]] = {"config": None}


def setup_logging(verbose: bool) -> None:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root_logger.addHandler(
        RichHandler(console=err_console, show_time=False, show_path=verbose, markup=False)
    )


@app.callback()
def main_options(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output"),
    config: Optional[str] = typer.Option(
        None, help="pyproject.toml to read [tool.routegen] from (default: nearest one)"
    ),
) -> None:
    setup_logging(verbose)
    _state["config"] = Path(config).expanduser().resolve() if config else None


def _load(near: Path, **overrides) -> RouteGenConfig:
    pyproject = _state["config"] or find_pyproject(near)
    try:
        return load_config(pyproject, **overrides)
    except RouteGenError as exc:
        _fail(exc)


def _fail(exc: RouteGenError) -> NoReturn:
    err_console.print(f"[bold red]error[/bold red]: {escape(str(exc))}", highlight=False, soft_wrap=True)
    raise typer.Exit(code=1)


def _existing_file(file: str) -> Path:
    path = Path(file).expanduser().resolve()
    if not path.is_file():
        raise typer.BadParameter(f"Declaration file does not exist: {path}")
    return path


@app.command()
def generate(
    file: str = typer.Argument(..., help="Declaration file (e.g. api.routes.py)"),
    out: Optional[str] = typer.Option(None, help="Output path (default: derived from FILE)"),
    stdout: bool = typer.Option(False, "--stdout", help="Print the module instead of writing it"),
    method_type: Optional[str] = typer.Option(None, help="Name of the Method enumeration"),
    strict: bool = typer.Option(
        False, help="Fail on unrouted variants and duplicate route annotations"
    ),
) -> None:
    path = _existing_file(file)
    overrides = {"method_type": method_type}
    if strict:
        overrides.update(require_all_routed=True, reject_duplicate_routes=True)
    config = _load(path.parent, **overrides)

    try:
        result = generate_file(
            path,
            config,
            out=Path(out).expanduser() if out else None,
            write=not stdout,
        )
    except RouteGenError as exc:
        _fail(exc)

    if stdout:
        typer.echo(result.text, nl=False)
        return

    routes = sum(len(d.routed) for d in result.route_sets)
    state = "[bold green]Wrote[/bold green]" if result.written else "[dim]Unchanged[/dim]"
    console.print(f"{state} {result.output_path} ({len(result.route_sets)} route set(s), {routes} route(s))")


@app.command()
def build(
    root: str = typer.Argument(".", help="Directory to scan for declaration files"),
    max_files: Optional[int] = typer.Option(None, help="Limit processed files (debug)"),
) -> None:
    root_path = Path(root).expanduser().resolve()
    if not root_path.is_dir():
        raise typer.BadParameter(f"Root is not a directory: {root_path}")
    config = _load(root_path)

    try:
        result = run_build(root_path, config, max_files=max_files)
    except RouteGenError as exc:
        _fail(exc)

    console.print(f"[bold green]routegen[/bold green] build: {root_path}")
    console.print(f"Declaration files: {result.files_scanned}")
    for r in result.results:
        mark = "wrote" if r.written else "same "
        console.print(f"  {mark} {r.output_path.relative_to(root_path)}")
    console.print(f"Routes: [bold]{result.route_count}[/bold], files written: {result.written_files}")


@app.command()
def check(
    file: str = typer.Argument(..., help="Declaration file to validate"),
    format: str = typer.Option("table", help="Output format: table|json"),
) -> None:
    path = _existing_file(file)
    fmt = format.lower().strip()
    if fmt not in ("table", "json"):
        raise typer.BadParameter("format must be one of: table, json")
    config = _load(path.parent)

    try:
        declaration = read_declaration_file(path, config)
        reports = [report_route_set(d) for d in derive_module(declaration, config)]
    except RouteGenError as exc:
        _fail(exc)

    if fmt == "json":
        typer.echo(json.dumps([r.model_dump() for r in reports], indent=2))
        return

    for report in reports:
        table = Table(title=f"{report.name} ({path.name}:{report.line})", show_header=True, header_style="bold")
        table.add_column("VARIANT", no_wrap=True)
        table.add_column("FIELDS")
        table.add_column("METHOD", no_wrap=True)
        table.add_column("URL")

        for e in report.routes:
            table.add_row(
                e.variant,
                escape(", ".join(e.fields)) if e.shape == "positional" else "-",
                e.method or "[yellow]unrouted[/yellow]",
                escape(e.url_template or ""),
            )
        console.print(table)


@app.command()
def placeholders(template: str = typer.Argument(..., help='URL template, e.g. "/users/{id}"')) -> None:
    names = extract_placeholders(template)
    if not names:
        console.print("[dim]no placeholders[/dim]")
        return
    for i, name in enumerate(names):
        console.print(f"  {i:>2}  {escape(name)}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
