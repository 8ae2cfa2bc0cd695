"""Python project detector.

Heuristics:
- `requirements.txt`, `pyproject.toml` or `setup.py` at the root → Python.
- Otherwise any `*.py` file at the root is enough.
- Version comes from `runtime.txt` (`python-3.11.6`) or `.python-version`,
  falling back to the configured default.
"""

from __future__ import annotations

import re

from polybuild.detect.base import DetectionResult
from polybuild.repo import SourceRepo

LANGUAGE = "python"
_MARKER_FILES = ("requirements.txt", "pyproject.toml", "setup.py")
_RUNTIME_RE = re.compile(r"^\s*python-(\d+(?:\.\d+){0,2})\s*$")
_VERSION_RE = re.compile(r"^\s*(\d+(?:\.\d+){0,2})\s*$")


def _first_line(repo: SourceRepo, name: str) -> str:
    """First meaningful line of *name*; an undecodable file pins nothing."""
    try:
        lines = repo.read_all_lines(name)
    except UnicodeDecodeError:
        return ""
    for line in lines:
        if line.strip() and not line.lstrip().startswith("#"):
            return line
    return ""


def read_pinned_version(repo: SourceRepo) -> tuple[str | None, str | None]:
    """Return ``(version, source_file)`` pinned in the repo, if any."""
    if repo.file_exists("runtime.txt"):
        m = _RUNTIME_RE.match(_first_line(repo, "runtime.txt"))
        if m:
            return m.group(1), "runtime.txt"
    if repo.file_exists(".python-version"):
        m = _VERSION_RE.match(_first_line(repo, ".python-version"))
        if m:
            return m.group(1), ".python-version"
    return None, None


class PythonDetector:
    def __init__(self, default_version: str | None = None) -> None:
        self.default_version = default_version

    def detect(self, repo: SourceRepo) -> DetectionResult | None:
        markers = [name for name in _MARKER_FILES if repo.file_exists(name)]
        notes: list[str] = []
        if markers:
            notes.append(f"Found {', '.join(markers)}")
        elif next(repo.enumerate_files("*.py", recursive=False), None) is not None:
            notes.append("Found *.py at the repository root")
        else:
            return None

        version, source = read_pinned_version(repo)
        if version:
            notes.append(f"Version {version} pinned in {source}")
        else:
            version = self.default_version
            notes.append("No version pinned; using the default")
        return DetectionResult(language=LANGUAGE, language_version=version, notes=notes)
