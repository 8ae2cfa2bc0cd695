"""Shared data holders for one script generation call."""

from __future__ import annotations

from dataclasses import dataclass, field

from polybuild.repo import SourceRepo


@dataclass(frozen=True)
class ScriptGeneratorContext:
    """What the caller asked for.  Empty language/version mean "auto-detect"."""

    repo: SourceRepo
    language: str | None = None
    language_version: str | None = None

    @property
    def requested_language(self) -> str | None:
        return (self.language or "").strip() or None

    @property
    def requested_version(self) -> str | None:
        return (self.language_version or "").strip() or None


@dataclass
class BuildState:
    """Mutable state scoped to a single generation call.

    ``required_tools`` maps a tool name (``node``, ``python``) to the version
    the build needs; platforms fill it once they are selected.
    """

    context: ScriptGeneratorContext
    resolved_versions: dict[str, str] = field(default_factory=dict)
    required_tools: dict[str, str] = field(default_factory=dict)

    @property
    def repo(self) -> SourceRepo:
        return self.context.repo


@dataclass
class GeneratedScript:
    script: str
    fragments: list[str]
    platforms: list[str]
    resolved_versions: dict[str, str] = field(default_factory=dict)
    required_tools: dict[str, str] = field(default_factory=dict)
