"""Node.js package detector.

Heuristics:
- A `package.json` at the root marks a Node.js project.
- Version: `engines.node` when it names a single numeric version (an optional
  `v`, `^`, `~`, `=` or `>=` in front is tolerated), else `.nvmrc`, else the
  configured default.  Real ranges (`12 - 14`, `>=12 <16`) fall back too.
"""

from __future__ import annotations

import json
import re

from polybuild.detect.base import DetectionResult
from polybuild.repo import SourceRepo

LANGUAGE = "nodejs"
_PLAIN_VERSION_RE = re.compile(r"^\s*(?:\^|~|>=|=)?\s*v?(\d+(?:\.\d+){0,2})(?:\.x)?\s*$")


def read_package_json(repo: SourceRepo) -> dict | None:
    if not repo.file_exists("package.json"):
        return None
    try:
        data = json.loads(repo.read_file("package.json"))
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _read_nvmrc(repo: SourceRepo) -> str | None:
    try:
        return repo.read_file(".nvmrc")
    except UnicodeDecodeError:
        return None


def parse_engine_version(spec: str | None) -> str | None:
    if not spec or not isinstance(spec, str):
        return None
    m = _PLAIN_VERSION_RE.match(spec)
    return m.group(1) if m else None


class NodeDetector:
    def __init__(self, default_version: str | None = None) -> None:
        self.default_version = default_version

    def detect(self, repo: SourceRepo) -> DetectionResult | None:
        if not repo.file_exists("package.json"):
            return None
        notes = ["Found package.json"]
        pkg = read_package_json(repo)
        if pkg is None:
            notes.append("package.json is not a valid JSON object")
            pkg = {}

        engines = pkg.get("engines") or {}
        version = parse_engine_version(engines.get("node") if isinstance(engines, dict) else None)
        if version:
            notes.append(f"Version {version} from engines.node")
        elif repo.file_exists(".nvmrc"):
            version = parse_engine_version(_read_nvmrc(repo))
            if version:
                notes.append(f"Version {version} from .nvmrc")
        if not version:
            version = self.default_version
            notes.append("No version pinned; using the default")
        return DetectionResult(language=LANGUAGE, language_version=version, notes=notes)
