"""Core data types and configuration for companion resolution."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator


# Automation-model item kinds
_PHYSICAL_FILE_GUID = "6BB5F8EE-4483-11D3-8BCF-00C04F8EC28C"
_PHYSICAL_FOLDER_GUID = "6BB5F8EF-4483-11D3-8BCF-00C04F8EC28C"
_VIRTUAL_FOLDER_GUID = "6BB5F8F0-4483-11D3-8BCF-00C04F8EC28C"

# Solution folders: automation-model kind and .sln type GUID
_SOLUTION_FOLDER_KIND_GUID = "66A26720-8FB5-11D2-AA7E-00C04F688DDE"
_SOLUTION_FOLDER_TYPE_GUID = "2150E333-8FDC-42A3-9474-1A3956D46DE8"

# Compilable project type GUIDs
_CSHARP_GUID = "FAE04EC0-301F-11D3-BF4B-00C04F79EFBC"
_CSHARP_SDK_GUID = "9A19103F-16F7-4668-BE54-9A1E7A4F7556"
_VBNET_GUID = "F184B08F-C81C-45F6-A57F-5ABD9991F28F"
_CPP_GUID = "8BC9CEB8-8B4A-11D0-8D11-00A0C91BC942"

_PROJECT_GUIDS = {_CSHARP_GUID, _CSHARP_SDK_GUID, _VBNET_GUID, _CPP_GUID}


def _normalise_guid(identifier: str | None) -> str | None:
    """Return the upper-case GUID for an identifier, or None if it is not one."""
    if not identifier:
        return None
    try:
        return str(uuid.UUID(identifier.strip())).upper()
    except (ValueError, AttributeError, TypeError):
        return None


class ItemKind(str, Enum):
    FOLDER = "Folder"
    VIRTUAL_FOLDER = "VirtualFolder"
    FILE = "File"
    OTHER = "Other"

    @classmethod
    def parse(cls, identifier: str | None) -> ItemKind:
        """Classify a host item kind identifier.

        Accepts the automation-model GUIDs (braces optional) and the enum
        values themselves. Anything else, including identifiers that are not
        GUIDs at all, is OTHER.
        """
        if isinstance(identifier, ItemKind):
            return identifier
        for kind in cls:
            if identifier == kind.value:
                return kind
        guid = _normalise_guid(identifier)
        if guid == _PHYSICAL_FOLDER_GUID:
            return cls.FOLDER
        if guid == _VIRTUAL_FOLDER_GUID:
            return cls.VIRTUAL_FOLDER
        if guid == _PHYSICAL_FILE_GUID:
            return cls.FILE
        return cls.OTHER

    @property
    def is_folder(self) -> bool:
        return self in (ItemKind.FOLDER, ItemKind.VIRTUAL_FOLDER)


class ProjectKind(str, Enum):
    PROJECT = "Project"
    SOLUTION_FOLDER = "SolutionFolder"
    OTHER = "Other"

    @classmethod
    def parse(cls, identifier: str | None) -> ProjectKind:
        """Classify a host project kind or .sln project type GUID."""
        if isinstance(identifier, ProjectKind):
            return identifier
        for kind in cls:
            if identifier == kind.value:
                return kind
        guid = _normalise_guid(identifier)
        if guid in (_SOLUTION_FOLDER_KIND_GUID, _SOLUTION_FOLDER_TYPE_GUID):
            return cls.SOLUTION_FOLDER
        if guid in _PROJECT_GUIDS:
            return cls.PROJECT
        return cls.OTHER


class Action(str, Enum):
    SKIP = "skip"
    OPEN = "open"
    REPORT = "report"


def _base_name(path: str) -> str:
    return path.replace("\\", "/").rsplit("/", 1)[-1]


@dataclass(eq=False)
class ItemNode:
    """A node in a project's content tree.

    A single logical item may map to more than one physical file; entries in
    ``file_paths`` may be None when the host cannot supply a path.
    """
    name: str
    kind: ItemKind | str = ItemKind.FILE
    children: list[ItemNode] = field(default_factory=list)
    file_paths: list[str | None] = field(default_factory=list)
    sub_project: ProjectNode | None = None

    def __post_init__(self) -> None:
        self.kind = ItemKind.parse(self.kind)

    @property
    def canonical_path(self) -> str | None:
        return self.file_paths[0] if self.file_paths else None


@dataclass(eq=False)
class ProjectNode:
    name: str
    kind: ProjectKind | str = ProjectKind.PROJECT
    items: list[ItemNode] = field(default_factory=list)
    path: str | None = None

    def __post_init__(self) -> None:
        self.kind = ProjectKind.parse(self.kind)

    def sub_projects(self) -> Iterator[ProjectNode]:
        """Yield the projects nested under this node's items, skipping gaps."""
        for item in self.items:
            if item is not None and item.sub_project is not None:
                yield item.sub_project


@dataclass(frozen=True)
class MatchedFile:
    filename: str
    project_name: str
    full_path: str

    @classmethod
    def from_item(
        cls, item: ItemNode, project: ProjectNode, path: str | None = None,
    ) -> MatchedFile:
        full_path = path if path is not None else item.canonical_path
        if not full_path:
            raise ValueError(f"Item {item.name!r} has no file path")
        return cls(
            filename=_base_name(full_path),
            project_name=project.name,
            full_path=full_path,
        )


@dataclass
class Resolution:
    target_filename: str | None = None
    matches: dict[str, MatchedFile] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.matches)

    @property
    def action(self) -> Action:
        if self.target_filename is None:
            return Action.SKIP
        if len(self.matches) == 1:
            return Action.OPEN
        return Action.REPORT

    @property
    def open_path(self) -> str | None:
        if self.action is Action.OPEN:
            return next(iter(self.matches))
        return None


@dataclass
class CompanionConfig:
    source_extension: str = ".cs"
    suffix_rules: tuple[tuple[tuple[str, ...], str], ...] = (
        (("Command", "Query", "Request"), "Handler"),
        (("ViewModel", "DataRecord"), "Mapper"),
    )
    skip_suffixes: tuple[str, ...] = (".vcxproj.filters", ".vcxproj")

    @property
    def command_like_suffixes(self) -> tuple[str, ...]:
        return self.suffix_rules[0][0] if self.suffix_rules else ()

    @property
    def model_like_suffixes(self) -> tuple[str, ...]:
        return self.suffix_rules[1][0] if len(self.suffix_rules) > 1 else ()
