"""Flatten a solution's project forest, resolving solution folders."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from mediare.config import ProjectKind, ProjectNode

logger = logging.getLogger(__name__)


def iter_projects(root_projects: Iterable[ProjectNode | None]) -> Iterator[ProjectNode]:
    """Lazily yield every project in the forest.

    Solution folders yield their nested projects first (depth-first), then
    themselves. Each node is yielded at most once.
    """
    visited: set[int] = set()
    for project in root_projects:
        yield from _walk(project, visited)


def _walk(project: ProjectNode | None, visited: set[int]) -> Iterator[ProjectNode]:
    if project is None:
        return
    if id(project) in visited:
        logger.debug(f"Project already visited, skipping: {project.name}")
        return
    visited.add(id(project))

    if project.kind is ProjectKind.SOLUTION_FOLDER:
        for sub_project in project.sub_projects():
            yield from _walk(sub_project, visited)

    yield project


def enumerate_projects(root_projects: Iterable[ProjectNode | None]) -> list[ProjectNode]:
    """Return the flattened project forest in enumeration order."""
    return list(iter_projects(root_projects))
