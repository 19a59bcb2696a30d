"""JSON serialisation of a resolution."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from mediare.config import Resolution


def build_result(resolution: Resolution, document_name: str | None) -> dict[str, Any]:
    """Build a JSON-ready summary of a resolution."""
    return {
        "document": document_name,
        "target": resolution.target_filename,
        "action": resolution.action.value,
        "count": resolution.count,
        "open_path": resolution.open_path,
        "matches": [
            {
                "filename": m.filename,
                "project": m.project_name,
                "path": m.full_path,
            }
            for m in resolution.matches.values()
        ],
    }


def write_output(result: dict[str, Any], output_path: str) -> None:
    """Write a resolution summary to a JSON file."""
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(result, f, indent=2)
