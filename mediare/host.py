"""Host and sink interfaces, and the go-to-companion command handler."""

from __future__ import annotations

import logging
from typing import Protocol, Sequence, runtime_checkable

from rich.console import Console
from rich.table import Table

from mediare.config import (
    Action,
    CompanionConfig,
    MatchedFile,
    ProjectNode,
    Resolution,
)
from mediare.resolver import resolve

logger = logging.getLogger(__name__)

MESSAGE_TITLE = "Mediare"


@runtime_checkable
class Host(Protocol):
    """Supplies the active document and the live project forest."""

    def active_document_name(self) -> str | None:
        ...

    def projects(self) -> Sequence[ProjectNode]:
        ...


@runtime_checkable
class Sink(Protocol):
    """Opens a resolved file or tells the user why it could not."""

    def open_file(self, path: str) -> None:
        ...

    def show_message(
        self, title: str, message: str, matches: Sequence[MatchedFile],
    ) -> None:
        ...


class StaticHost:
    """A host over an already-built forest."""

    def __init__(
        self, document_name: str | None, projects: Sequence[ProjectNode],
    ) -> None:
        self._document_name = document_name
        self._projects = list(projects)

    def active_document_name(self) -> str | None:
        return self._document_name

    def projects(self) -> Sequence[ProjectNode]:
        return self._projects


class ConsoleSink:
    """Renders resolutions to a terminal with Rich."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def open_file(self, path: str) -> None:
        self.console.print(f"[green]Open:[/green] {path}", soft_wrap=True)

    def show_message(
        self, title: str, message: str, matches: Sequence[MatchedFile],
    ) -> None:
        self.console.print(f"[bold]{title}[/bold]")
        self.console.print(message, soft_wrap=True)
        if not matches:
            return

        table = Table(show_edge=False)
        table.add_column("File", style="bold")
        table.add_column("Project")
        table.add_column("Path")
        for match in matches:
            table.add_row(match.filename, match.project_name, match.full_path)
        self.console.print(table)


def report_message(resolution: Resolution) -> str:
    return f"{resolution.target_filename}\nNumber of files: {resolution.count}"


def go_to_companion(
    host: Host, sink: Sink, config: CompanionConfig | None = None,
) -> Resolution:
    """Resolve the host's active document and hand the outcome to ``sink``."""
    resolution = resolve(host.active_document_name(), host.projects(), config)

    if resolution.action is Action.OPEN:
        sink.open_file(resolution.open_path)
    elif resolution.action is Action.REPORT:
        sink.show_message(
            MESSAGE_TITLE,
            report_message(resolution),
            list(resolution.matches.values()),
        )
    else:
        logger.debug("Active document has no companion convention; nothing to do")

    return resolution
