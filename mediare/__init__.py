"""Mediare - Navigate from a source file to its companion by naming convention."""

from mediare.config import (
    Action,
    CompanionConfig,
    ItemKind,
    ItemNode,
    MatchedFile,
    ProjectKind,
    ProjectNode,
    Resolution,
)
from mediare.forest import enumerate_projects
from mediare.resolver import resolve

__version__ = "0.1.0"
__all__ = [
    "Action",
    "CompanionConfig",
    "ItemKind",
    "ItemNode",
    "MatchedFile",
    "ProjectKind",
    "ProjectNode",
    "Resolution",
    "enumerate_projects",
    "resolve",
]
