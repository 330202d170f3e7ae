"""Filesystem pattern helpers.

Rules:
- write report files under workspace/ unless an absolute path is given
- print only the report itself to stdout
"""
from __future__ import annotations

from pathlib import Path

WORKSPACE_DIR = Path("workspace")


def ensure_workspace() -> Path:
    WORKSPACE_DIR.mkdir(parents=True, exist_ok=True)
    return WORKSPACE_DIR


def workspace_root() -> Path:
    return ensure_workspace()


def write_text(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
