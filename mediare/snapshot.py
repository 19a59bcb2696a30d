"""JSON snapshots of a host's project forest.

A host plugin can export the live forest (with its raw kind identifiers) so
resolution can be replayed outside the IDE. Kinds are classified once, on
load; identifiers that are not recognised load as ``Other``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

from mediare.config import ItemKind, ItemNode, ProjectKind, ProjectNode


class SnapshotError(ValueError):
    """Raised when a snapshot file is not a valid forest."""


def _item_from_dict(data: Any) -> ItemNode:
    if not isinstance(data, dict):
        raise SnapshotError(f"Item must be an object, got {type(data).__name__}")
    files = data.get("files") or []
    if not isinstance(files, list):
        raise SnapshotError(f"Item files must be a list: {data.get('name')!r}")
    sub_project = data.get("sub_project")
    return ItemNode(
        name=str(data.get("name", "")),
        kind=ItemKind.parse(data.get("kind")),
        children=[_item_from_dict(c) for c in data.get("children") or []],
        file_paths=[f if isinstance(f, str) and f else None for f in files],
        sub_project=_project_from_dict(sub_project) if sub_project else None,
    )


def _project_from_dict(data: Any) -> ProjectNode:
    if not isinstance(data, dict):
        raise SnapshotError(f"Project must be an object, got {type(data).__name__}")
    return ProjectNode(
        name=str(data.get("name", "")),
        kind=ProjectKind.parse(data.get("kind")),
        items=[_item_from_dict(i) for i in data.get("items") or []],
        path=data.get("path"),
    )


def forest_from_dict(data: Any) -> tuple[str | None, list[ProjectNode]]:
    """Build (document name, root projects) from decoded snapshot JSON."""
    if not isinstance(data, dict):
        raise SnapshotError("Snapshot root must be an object")
    projects = data.get("projects", [])
    if not isinstance(projects, list):
        raise SnapshotError("Snapshot 'projects' must be a list")
    return data.get("document"), [_project_from_dict(p) for p in projects]


def load_snapshot(path: str) -> tuple[str | None, list[ProjectNode]]:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Invalid snapshot JSON in {path}: {e}") from e
    return forest_from_dict(data)


def _item_to_dict(item: ItemNode) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": item.name,
        "kind": item.kind.value,
        "files": list(item.file_paths),
    }
    if item.children:
        data["children"] = [_item_to_dict(c) for c in item.children]
    if item.sub_project is not None:
        data["sub_project"] = _project_to_dict(item.sub_project)
    return data


def _project_to_dict(project: ProjectNode) -> dict[str, Any]:
    return {
        "name": project.name,
        "kind": project.kind.value,
        "path": project.path,
        "items": [_item_to_dict(i) for i in project.items],
    }


def forest_to_dict(
    projects: Sequence[ProjectNode], document_name: str | None = None,
) -> dict[str, Any]:
    return {
        "document": document_name,
        "projects": [_project_to_dict(p) for p in projects],
    }


def dump_snapshot(
    projects: Sequence[ProjectNode], output_path: str, document_name: str | None = None,
) -> None:
    """Write a forest snapshot to a JSON file."""
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(forest_to_dict(projects, document_name), indent=2))
