"""
Bundled blueprint templates.

Each template is a ``<template_id>.json`` file in this directory using the
same JSON shape the text-generation service produces.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import List, Optional

from ..blueprint import Blueprint
from ..errors import BlueprintValidationError, TemplateNotFoundError

log = logging.getLogger("guildsmith.templates")

BUNDLED_DIR = Path(__file__).parent
_TEMPLATE_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def _search_dirs(extra_dir: Optional[str]) -> List[Path]:
    dirs = []
    if extra_dir:
        dirs.append(Path(extra_dir))
    dirs.append(BUNDLED_DIR)
    return dirs


def template_path(template_id: str, extra_dir: Optional[str] = None) -> Path:
    if not _TEMPLATE_ID_RE.match(template_id or ""):
        raise TemplateNotFoundError(f"Invalid template id: {template_id!r}")
    for directory in _search_dirs(extra_dir):
        candidate = directory / f"{template_id}.json"
        if candidate.is_file():
            return candidate
    raise TemplateNotFoundError(f"Template not found: {template_id}")


def load_template(template_id: str, extra_dir: Optional[str] = None) -> Blueprint:
    """Load and validate a named template."""
    path = template_path(template_id, extra_dir)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise BlueprintValidationError([f"{path.name}: invalid JSON ({e})"]) from e
    log.info("Loaded template %s from %s", template_id, path)
    return Blueprint.from_dict(data)


def list_templates(extra_dir: Optional[str] = None) -> List[str]:
    ids = set()
    for directory in _search_dirs(extra_dir):
        if directory.is_dir():
            ids.update(p.stem for p in directory.glob("*.json"))
    return sorted(ids)
