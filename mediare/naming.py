"""Naming convention: derive the companion file name for a document."""

from __future__ import annotations

from mediare.config import CompanionConfig


def _match_rule(base_name: str, config: CompanionConfig) -> tuple[str, str]:
    """Return (matched ending, suffix) for the first rule that applies."""
    for endings, suffix in config.suffix_rules:
        for ending in endings:
            if base_name.endswith(ending):
                return ending, suffix
    return "", ""


def companion_suffix(base_name: str, config: CompanionConfig | None = None) -> str:
    """Return the suffix that replaces ``base_name``'s ending; first rule wins."""
    return _match_rule(base_name, config or CompanionConfig())[1]


def target_filename(
    document_name: str | None, config: CompanionConfig | None = None,
) -> str | None:
    """Compute the companion file name for an open document.

    Returns None when there is no document or it is not a source file of
    the configured extension. The base name is everything before the first
    dot, so ``Order.Designer.cs`` targets the companion of ``Order``. A
    matched ending is replaced by its suffix: ``OrderCommand`` becomes
    ``OrderHandler``.
    """
    config = config or CompanionConfig()
    if not document_name or not document_name.endswith(config.source_extension):
        return None

    base = document_name.split(".")[0]
    ending, suffix = _match_rule(base, config)
    if ending:
        base = base[:-len(ending)]
    return f"{base}{suffix}{config.source_extension}"
