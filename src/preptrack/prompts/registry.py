"""Prompt registry.

Loads Markdown prompt templates shipped inside the package and fills in
{variable} placeholders.

Usage:
    from preptrack.prompts.registry import get_prompt

    prompt = get_prompt("revision/timetable", exam="NEET", subject="Physics")
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"


def _read_template(key: str) -> str:
    """Read a template by key, e.g. "revision/timetable".

    Raises:
        FileNotFoundError: If no template exists for the key
    """
    file_path = TEMPLATES_DIR / f"{key}.md"
    if not file_path.is_file():
        raise FileNotFoundError(f"Prompt not found: {key} (looked at {file_path})")
    return file_path.read_text(encoding="utf-8")


@lru_cache(maxsize=32)
def _cached_template(key: str) -> str:
    return _read_template(key)


def get_prompt(key: str, use_cache: bool = True, **variables: object) -> str:
    """Load a template and substitute {name} placeholders.

    Placeholders without a matching variable are left untouched.

    Args:
        key: Template key relative to the templates directory
        use_cache: Reuse previously loaded template text
        **variables: Values to substitute

    Raises:
        FileNotFoundError: If the template doesn't exist
    """
    content = _cached_template(key) if use_cache else _read_template(key)
    for name, value in variables.items():
        content = content.replace(f"{{{name}}}", str(value))
    return content


def list_prompts() -> list[str]:
    """Sorted keys of all available templates."""
    if not TEMPLATES_DIR.exists():
        logger.warning("prompts_dir_not_found", path=str(TEMPLATES_DIR))
        return []
    return sorted(
        path.relative_to(TEMPLATES_DIR).with_suffix("").as_posix()
        for path in TEMPLATES_DIR.rglob("*.md")
    )


def clear_cache() -> None:
    """Forget cached template text."""
    _cached_template.cache_clear()
