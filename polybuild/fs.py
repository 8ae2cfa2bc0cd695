"""Filesystem helpers for materialising a generated build script."""

from __future__ import annotations

import os
import shlex
from pathlib import Path

from polybuild.logging import get_logger

EXECUTABLE_MODE = 0o755

log = get_logger(__name__)


def get_validated_full_path(path: str | Path) -> Path:
    """Return the absolute form of *path*, raising if nothing is there."""
    full = Path(path).resolve()
    if not full.exists():
        raise FileNotFoundError(f"Path '{full}' does not exist.")
    return full


def with_preamble(script: str, source_dir: str | Path | None = None) -> str:
    """Wrap composed fragments into a standalone bash script."""
    lines = ["#!/bin/bash", "set -euo pipefail", ""]
    if source_dir is not None:
        lines += [f"cd {shlex.quote(str(source_dir))}", ""]
    body = script if script.endswith("\n") else script + "\n"
    return "\n".join(lines) + "\n" + body


def write_script(path: str | Path, content: str) -> Path:
    """Write *content* to *path* and mark it executable."""
    target = Path(path)
    log.info("writing output script to '%s'", target)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    os.chmod(target, EXECUTABLE_MODE)
    return target
