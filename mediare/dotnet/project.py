"""Parse .csproj/.vbproj/.vcxproj files (XML with MSBuild schema) into item trees."""

from __future__ import annotations

import glob
import logging
import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from mediare.config import ItemKind, ItemNode

logger = logging.getLogger(__name__)

# Item types that name something other than a file in the project tree
_NON_FILE_ITEMS = {
    "Reference", "ProjectReference", "PackageReference", "COMReference",
    "FrameworkReference", "Analyzer", "BootstrapperPackage", "WCFMetadata",
    "Service", "ProjectConfiguration", "ProjectCapability", "Filter",
    "InternalsVisibleTo", "Using", "PackageVersion", "Folder",
}

# Default compile globs for SDK-style projects
_SDK_SOURCE_EXTENSIONS = {
    ".csproj": ".cs",
    ".vbproj": ".vb",
    ".fsproj": ".fs",
}

_IGNORED_DIRS = {"bin", "obj", "node_modules", "packages", "TestResults"}


@dataclass
class ProjectItem:
    """A file entry from an <ItemGroup>."""
    item_type: str
    include: str
    dependent_upon: str = ""
    link: str = ""


@dataclass
class ProjectInfo:
    """Parsed item information from an MSBuild project file."""
    path: str
    sdk_style: bool = False
    items: list[ProjectItem] = field(default_factory=list)
    removes: list[str] = field(default_factory=list)
    updates: list[ProjectItem] = field(default_factory=list)
    folders: list[str] = field(default_factory=list)


def _split_includes(value: str) -> list[str]:
    return [
        part.strip().replace("\\", "/")
        for part in value.split(";")
        if part.strip()
    ]


def parse_project(project_path: str) -> ProjectInfo:
    """Parse an MSBuild project file and return its file items.

    Handles both SDK-style and legacy project formats.
    """
    info = ProjectInfo(path=project_path)

    try:
        tree = ET.parse(project_path)
        root = tree.getroot()
    except (ET.ParseError, OSError) as e:
        logger.warning(f"Failed to parse {project_path}: {e}")
        return info

    # Strip namespace from tags for easier querying
    ns = ""
    if root.tag.startswith("{"):
        ns = root.tag.split("}")[0] + "}"

    info.sdk_style = bool(root.get("Sdk")) or root.find(f"{ns}Sdk") is not None

    for group in root.iter(f"{ns}ItemGroup"):
        for element in group:
            if not isinstance(element.tag, str):
                continue
            item_type = element.tag[len(ns):]
            include = element.get("Include", "")

            if item_type == "Folder":
                info.folders.extend(_split_includes(include))
                continue
            if item_type in _NON_FILE_ITEMS:
                continue

            info.removes.extend(_split_includes(element.get("Remove", "")))
            update = element.get("Update", "")
            if not include and not update:
                continue

            dependent_upon = _metadata(element, ns, "DependentUpon")
            link = _metadata(element, ns, "Link").replace("\\", "/")
            for path in _split_includes(update):
                info.updates.append(ProjectItem(
                    item_type=item_type,
                    include=path,
                    dependent_upon=dependent_upon,
                    link=link,
                ))
            for path in _split_includes(include):
                info.items.append(ProjectItem(
                    item_type=item_type,
                    include=path,
                    dependent_upon=dependent_upon,
                    link=link,
                ))

    return info


def _metadata(element: ET.Element, ns: str, name: str) -> str:
    """Read item metadata given either as an attribute or a child element."""
    value = element.get(name, "")
    if not value:
        child = element.find(f"{ns}{name}")
        if child is not None and child.text:
            value = child.text
    return value.strip()


def _expand(project_dir: str, pattern: str) -> list[str]:
    """Return project-relative paths for an include, globbing wildcards."""
    if "*" not in pattern and "?" not in pattern:
        return [pattern]
    matches = glob.glob(os.path.join(project_dir, pattern), recursive=True)
    return sorted(
        os.path.relpath(m, project_dir).replace("\\", "/")
        for m in matches
        if os.path.isfile(m)
    )


def _implicit_sources(project_dir: str, extension: str) -> list[str]:
    """Walk the project directory the way SDK-style default globs do."""
    found = []
    for dirpath, dirnames, filenames in os.walk(project_dir):
        # Filter ignored directories in-place
        dirnames[:] = [
            d for d in sorted(dirnames)
            if d not in _IGNORED_DIRS and not d.startswith(".")
        ]
        for filename in sorted(filenames):
            if filename.endswith(extension):
                rel = os.path.relpath(os.path.join(dirpath, filename), project_dir)
                found.append(rel.replace("\\", "/"))
    return found


class _TreeBuilder:
    """Assembles folder and file nodes from project-relative paths."""

    def __init__(self, project_dir: str) -> None:
        self.project_dir = project_dir
        self.roots: list[ItemNode] = []
        self._folders: dict[tuple[str, ...], ItemNode] = {}

    def children_of(self, parts: tuple[str, ...]) -> list[ItemNode]:
        if not parts:
            return self.roots
        return self.folder(parts).children

    def folder(self, parts: tuple[str, ...]) -> ItemNode:
        node = self._folders.get(parts)
        if node is None:
            node = ItemNode(
                name=parts[-1],
                kind=ItemKind.FOLDER,
                file_paths=[os.path.join(self.project_dir, *parts)],
            )
            self.children_of(parts[:-1]).append(node)
            self._folders[parts] = node
        return node


def _split_parts(rel_path: str) -> tuple[str, ...]:
    return tuple(p for p in rel_path.split("/") if p and p != ".")


def load_project_items(project_path: str) -> list[ItemNode]:
    """Build the item tree a project shows for its files.

    Include paths become nested physical folders; ``Link`` places an item at
    its link location and ``DependentUpon`` nests it under its parent file.
    """
    info = parse_project(project_path)
    project_dir = os.path.dirname(os.path.abspath(project_path))
    builder = _TreeBuilder(project_dir)

    entries: list[tuple[str, str, str]] = []  # (display path, full path, dependent upon)
    seen: set[str] = set()

    removed: set[str] = set()
    for pattern in info.removes:
        for rel in _expand(project_dir, pattern):
            removed.add(os.path.normpath(os.path.join(project_dir, rel)))

    # Update="..." only changes metadata of items included elsewhere
    updated: dict[str, str] = {}
    for item in info.updates:
        for rel in _expand(project_dir, item.include):
            full_path = os.path.normpath(os.path.join(project_dir, rel))
            if item.dependent_upon:
                updated[full_path] = item.dependent_upon

    def add(display: str, include: str, dependent_upon: str = "") -> None:
        full_path = os.path.normpath(os.path.join(project_dir, include))
        if full_path in seen or full_path in removed:
            return
        seen.add(full_path)
        entries.append((display, full_path, dependent_upon or updated.get(full_path, "")))

    if info.sdk_style:
        extension = _SDK_SOURCE_EXTENSIONS.get(os.path.splitext(project_path)[1].lower())
        if extension:
            for rel in _implicit_sources(project_dir, extension):
                add(rel, rel)

    for item in info.items:
        for rel in _expand(project_dir, item.include):
            display = item.link if item.link and rel == item.include else rel
            add(display, rel, item.dependent_upon)

    # First pass: file nodes, indexed by containing folder and name
    nodes: list[tuple[ItemNode, tuple[str, ...], str]] = []
    index: dict[tuple[tuple[str, ...], str], ItemNode] = {}
    for display, full_path, dependent_upon in entries:
        parts = _split_parts(display)
        if not parts:
            continue
        node = ItemNode(name=parts[-1], kind=ItemKind.FILE, file_paths=[full_path])
        nodes.append((node, parts[:-1], dependent_upon))
        index.setdefault((parts[:-1], parts[-1]), node)

    # Second pass: attach, nesting dependent files under their parent file
    parent_of: dict[int, ItemNode] = {}
    for node, folder_parts, dependent_upon in nodes:
        parent = None
        if dependent_upon:
            name = dependent_upon.replace("\\", "/").rsplit("/", 1)[-1]
            parent = index.get((folder_parts, name))
            if parent is not None and _reaches(parent, node, parent_of):
                logger.warning(f"Circular DependentUpon ignored for {node.name}")
                parent = None
        if parent is None:
            builder.children_of(folder_parts).append(node)
        else:
            parent.children.append(node)
            parent_of[id(node)] = parent

    # Empty <Folder> entries
    for folder in info.folders:
        parts = _split_parts(folder)
        if parts:
            builder.folder(parts)

    return builder.roots


def _reaches(start: ItemNode, target: ItemNode, parent_of: dict[int, ItemNode]) -> bool:
    """Whether following dependent-file parents from ``start`` hits ``target``."""
    node: ItemNode | None = start
    while node is not None:
        if node is target:
            return True
        node = parent_of.get(id(node))
    return False
