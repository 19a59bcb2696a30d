"""Mediare CLI - jump from a request or view model to its companion file."""

from __future__ import annotations

import json
import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from mediare.config import Action, CompanionConfig, ItemNode, ProjectNode
from mediare.dotnet.solution import load_solution
from mediare.forest import enumerate_projects
from mediare.host import ConsoleSink, StaticHost, go_to_companion
from mediare.output import build_result, write_output
from mediare.resolver import resolve
from mediare.snapshot import SnapshotError, dump_snapshot, load_snapshot


@click.group()
def cli() -> None:
    """Mediare - find the handler for a command, the mapper for a view model."""
    pass


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def _load_source(source: str) -> tuple[str | None, list[ProjectNode]]:
    """Load a forest from a .sln file or a JSON snapshot."""
    if source.lower().endswith(".json"):
        try:
            return load_snapshot(source)
        except SnapshotError as e:
            raise click.BadParameter(str(e), param_hint="SOURCE") from e
    return None, load_solution(source)


def _count_items(items: list[ItemNode]) -> int:
    return sum(1 + _count_items(item.children) for item in items)


@cli.command("goto")
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.argument("document", required=False)
@click.option("--extension", default=".cs", show_default=True, help="Source file extension")
@click.option("--skip-suffix", multiple=True, help="Additional file endings to ignore")
@click.option("-o", "--output", "output_path", default=None, help="Write the result as JSON to a file")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.option("--verbose", is_flag=True, help="Log traversal details")
@click.pass_context
def goto_cmd(
    ctx: click.Context,
    source: str,
    document: str | None,
    extension: str,
    skip_suffix: tuple[str, ...],
    output_path: str | None,
    as_json: bool,
    verbose: bool,
) -> None:
    """Resolve the companion of DOCUMENT within SOURCE (.sln or snapshot .json)."""
    _configure_logging(verbose)
    snapshot_document, projects = _load_source(source)
    document = document or snapshot_document
    if not document:
        raise click.UsageError("No DOCUMENT given and the snapshot names none.")

    defaults = CompanionConfig()
    config = CompanionConfig(
        source_extension=extension,
        skip_suffixes=defaults.skip_suffixes + tuple(skip_suffix),
    )

    if as_json:
        resolution = resolve(document, projects, config)
        click.echo(json.dumps(build_result(resolution, document), indent=2))
    else:
        host = StaticHost(document, projects)
        resolution = go_to_companion(host, ConsoleSink(), config)
        if resolution.action is Action.SKIP:
            Console().print(f"[yellow]Not a {extension} document:[/yellow] {document}")

    if output_path:
        write_output(build_result(resolution, document), output_path)

    ctx.exit(0 if resolution.action is Action.OPEN else 1)


@cli.command("projects")
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.option("--verbose", is_flag=True, help="Log traversal details")
def projects_cmd(source: str, verbose: bool) -> None:
    """List the projects of SOURCE in traversal order."""
    _configure_logging(verbose)
    _, roots = _load_source(source)

    table = Table(title=f"Projects: {click.format_filename(source)}", show_edge=False)
    table.add_column("#", justify="right")
    table.add_column("Project", style="bold")
    table.add_column("Kind")
    table.add_column("Items", justify="right")

    for i, project in enumerate(enumerate_projects(roots), start=1):
        table.add_row(str(i), project.name, project.kind.value, str(_count_items(project.items)))

    Console().print(table)


@cli.command("snapshot")
@click.argument("solution", type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output", "output_path", required=True, help="Snapshot JSON file path")
@click.option("-d", "--document", default=None, help="Active document name to record")
def snapshot_cmd(solution: str, output_path: str, document: str | None) -> None:
    """Export the project forest of SOLUTION as a JSON snapshot."""
    dump_snapshot(load_solution(solution), output_path, document)
    Console().print(f"[green]Snapshot written to:[/green] {output_path}")


if __name__ == "__main__":
    cli()
