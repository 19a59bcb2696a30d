"""Walk project item trees and resolve the companion of an open document."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from mediare.config import (
    CompanionConfig,
    ItemNode,
    MatchedFile,
    ProjectNode,
    Resolution,
)
from mediare.forest import iter_projects
from mediare.naming import target_filename

logger = logging.getLogger(__name__)


def _is_skipped(path: str | None, skip_suffixes: tuple[str, ...]) -> bool:
    return not path or path.endswith(tuple(skip_suffixes))


def _walk_items(
    items: Iterable[ItemNode | None], project: ProjectNode, config: CompanionConfig,
) -> Iterator[MatchedFile]:
    for item in items:
        if item is None:
            continue

        # Descendants first
        yield from _walk_items(item.children, project, config)

        if item.kind.is_folder:
            continue

        if _is_skipped(item.canonical_path, config.skip_suffixes):
            continue
        yield MatchedFile.from_item(item, project)


def iter_project_items(
    project: ProjectNode, config: CompanionConfig | None = None,
) -> Iterator[MatchedFile]:
    """Yield a candidate for every file item in ``project``'s item tree.

    Folders and virtual folders are never candidates; items of an unknown
    kind are treated as files. Absent paths and paths with a skipped ending
    are dropped. Only the item's first path is considered.
    """
    return _walk_items(project.items, project, config or CompanionConfig())


def find_matches(
    target: str,
    projects: Iterable[ProjectNode],
    config: CompanionConfig | None = None,
) -> dict[str, MatchedFile]:
    """Collect files named ``target`` across ``projects``, keyed by full path."""
    config = config or CompanionConfig()
    matches: dict[str, MatchedFile] = {}
    for project in projects:
        for candidate in iter_project_items(project, config):
            if candidate.filename != target:
                continue
            if candidate.full_path in matches:
                logger.debug(f"Duplicate match ignored: {candidate.full_path}")
                continue
            matches[candidate.full_path] = candidate
    return matches


def resolve(
    document_name: str | None,
    root_projects: Iterable[ProjectNode | None],
    config: CompanionConfig | None = None,
) -> Resolution:
    """Resolve the companion file for ``document_name`` in a project forest.

    The result's action is OPEN for exactly one match, REPORT for zero or
    several, and SKIP when the document is not an eligible source file.
    """
    config = config or CompanionConfig()
    target = target_filename(document_name, config)
    if target is None:
        logger.debug(f"Not a {config.source_extension} document: {document_name!r}")
        return Resolution()

    matches = find_matches(target, iter_projects(root_projects), config)
    logger.debug(f"{target}: {len(matches)} match(es)")
    return Resolution(target_filename=target, matches=matches)
