"""Parse .sln files (custom text format, not XML) into a project forest."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field

import networkx as nx

from mediare.config import ItemKind, ItemNode, ProjectKind, ProjectNode
from mediare.dotnet.project import load_project_items

logger = logging.getLogger(__name__)


@dataclass
class SolutionProject:
    """A project entry from a .sln file."""
    type_guid: str
    name: str
    path: str
    project_guid: str
    solution_items: list[str] = field(default_factory=list)

    @property
    def kind(self) -> ProjectKind:
        return ProjectKind.parse(self.type_guid)


@dataclass
class SolutionFile:
    path: str
    projects: list[SolutionProject] = field(default_factory=list)
    nested: list[tuple[str, str]] = field(default_factory=list)  # (child, parent)


# Project("{TYPE-GUID}") = "Name", "Path\To\Project.csproj", "{PROJECT-GUID}"
_PROJECT_RE = re.compile(
    r'^\s*Project\(\"\{([^}]+)\}\"\)\s*=\s*\"([^\"]+)\"\s*,\s*\"([^\"]+)\"\s*,\s*\"\{([^}]+)\}\"',
)
_SECTION_RE = re.compile(r'^\s*(Project|Global)Section\((\w+)\)')
_END_SECTION_RE = re.compile(r'^\s*End(Project|Global)Section\b')
_END_PROJECT_RE = re.compile(r'^\s*EndProject\s*$')
# {CHILD-GUID} = {PARENT-GUID}
_NESTED_RE = re.compile(r'^\s*\{([^}]+)\}\s*=\s*\{([^}]+)\}')
# Path\To\Item = Path\To\Item
_SOLUTION_ITEM_RE = re.compile(r'^\s*(.+?)\s*=\s*(.+?)\s*$')


def parse_solution(sln_path: str) -> SolutionFile:
    """Parse a .sln file, keeping solution folders and their nesting."""
    solution = SolutionFile(path=sln_path)
    try:
        with open(sln_path, "r", encoding="utf-8-sig") as f:
            lines = f.read().splitlines()
    except OSError as e:
        logger.warning(f"Failed to read {sln_path}: {e}")
        return solution

    current: SolutionProject | None = None
    section: str | None = None

    for line in lines:
        match = _PROJECT_RE.match(line)
        if match:
            current = SolutionProject(
                type_guid=match.group(1).upper(),
                name=match.group(2),
                # Normalise path separators
                path=match.group(3).replace("\\", "/"),
                project_guid=match.group(4).upper(),
            )
            solution.projects.append(current)
            continue

        if _END_PROJECT_RE.match(line):
            current = None
            continue

        match = _SECTION_RE.match(line)
        if match:
            section = match.group(2)
            continue

        if _END_SECTION_RE.match(line):
            section = None
            continue

        if section == "NestedProjects":
            match = _NESTED_RE.match(line)
            if match:
                solution.nested.append((match.group(1).upper(), match.group(2).upper()))
        elif section == "SolutionItems" and current is not None:
            match = _SOLUTION_ITEM_RE.match(line)
            if match:
                current.solution_items.append(match.group(2).replace("\\", "/"))

    return solution


def _nesting_graph(solution: SolutionFile) -> nx.DiGraph:
    """Build the parent -> child graph, dropping entries that cannot hold."""
    graph = nx.DiGraph()
    by_guid = {p.project_guid: p for p in solution.projects}
    for project in solution.projects:
        graph.add_node(project.project_guid)

    for child, parent in solution.nested:
        if child not in by_guid or parent not in by_guid:
            logger.warning(f"Nested project entry names an unknown project: {child} -> {parent}")
            continue
        if by_guid[parent].kind is not ProjectKind.SOLUTION_FOLDER:
            logger.warning(f"Nesting parent is not a solution folder: {by_guid[parent].name}")
            continue
        if graph.in_degree(child) > 0:
            logger.warning(f"Project nested more than once: {by_guid[child].name}")
            continue
        if child == parent or nx.has_path(graph, child, parent):
            logger.warning(f"Nesting cycle dropped: {by_guid[child].name} -> {by_guid[parent].name}")
            continue
        graph.add_edge(parent, child)

    return graph


def load_solution(sln_path: str) -> list[ProjectNode]:
    """Build the root project forest for a solution file."""
    solution = parse_solution(sln_path)
    sln_dir = os.path.dirname(os.path.abspath(sln_path))
    graph = _nesting_graph(solution)
    order = {p.project_guid: i for i, p in enumerate(solution.projects)}

    nodes: dict[str, ProjectNode] = {}
    for sp in solution.projects:
        kind = sp.kind
        if kind is ProjectKind.SOLUTION_FOLDER:
            nodes[sp.project_guid] = ProjectNode(name=sp.name, kind=kind)
            continue

        project_path = os.path.normpath(os.path.join(sln_dir, sp.path))
        items: list[ItemNode] = []
        if project_path.endswith("proj"):
            items = load_project_items(project_path)
        else:
            logger.debug(f"Not an MSBuild project, no items loaded: {sp.path}")
        nodes[sp.project_guid] = ProjectNode(
            name=sp.name, kind=kind, items=items, path=project_path,
        )

    # Solution folders: nested projects first, then solution items
    for sp in solution.projects:
        if sp.kind is not ProjectKind.SOLUTION_FOLDER:
            continue
        folder = nodes[sp.project_guid]
        for child in sorted(graph.successors(sp.project_guid), key=order.__getitem__):
            sub_project = nodes[child]
            folder.items.append(ItemNode(
                name=sub_project.name, kind=ItemKind.OTHER, sub_project=sub_project,
            ))
        for item_path in sp.solution_items:
            full_path = os.path.normpath(os.path.join(sln_dir, item_path))
            folder.items.append(ItemNode(
                name=os.path.basename(full_path),
                kind=ItemKind.FILE,
                file_paths=[full_path],
            ))

    return [
        nodes[sp.project_guid]
        for sp in solution.projects
        if graph.in_degree(sp.project_guid) == 0
    ]
