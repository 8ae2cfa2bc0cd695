"""Script generation: resolve a platform and version, then compose fragments.

Two modes, chosen by whether the caller named a language:

- explicit: every enabled platform with that name is a candidate; each one
  resolves the requested version (or its own detected default) against the
  versions it supports, and every surviving candidate contributes.
- auto-detect: the first enabled platform whose detector recognises the repo
  decides the language and version, which are then validated exactly as if
  the caller had supplied them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from polybuild.buildpacks.base import Platform
from polybuild.buildpacks.node import NodePlatform
from polybuild.buildpacks.python import PythonPlatform
from polybuild.detect.base import DetectionResult
from polybuild.errors import (
    LanguageNotDetectedError,
    UnsupportedLanguageError,
    UnsupportedVersionError,
)
from polybuild.logging import get_logger
from polybuild.repo import LocalSourceRepo, SourceRepo
from polybuild.settings import EnvironmentSettingsProvider
from polybuild.types import BuildState, GeneratedScript, ScriptGeneratorContext
from polybuild.versions import resolve_version


def default_platforms(settings: EnvironmentSettingsProvider | None = None) -> list[Platform]:
    """The built-in platforms, in detection priority order."""
    return [PythonPlatform(settings), NodePlatform(settings)]


def _unique(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


class ScriptGenerator:
    def __init__(
        self,
        platforms: Sequence[Platform] | None = None,
        settings: EnvironmentSettingsProvider | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.settings = settings if settings is not None else EnvironmentSettingsProvider()
        self.platforms: list[Platform] = (
            list(platforms) if platforms is not None else default_platforms(self.settings)
        )
        self.log = logger or get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def enabled_platforms(self, context: ScriptGeneratorContext) -> list[Platform]:
        return [p for p in self.platforms if p.is_enabled(context)]

    def detect(self, repo: SourceRepo) -> tuple[Platform, DetectionResult] | None:
        """Run the enabled detectors in order; the first match wins."""
        context = ScriptGeneratorContext(repo=repo)
        return self._detect_first(context, self.enabled_platforms(context))

    def try_generate_script(self, context: ScriptGeneratorContext) -> tuple[bool, str]:
        """Return ``(True, script)``; failures raise a ScriptGenerationError."""
        return True, self.generate_script(context).script

    def generate_script(self, context: ScriptGeneratorContext) -> GeneratedScript:
        enabled = self.enabled_platforms(context)
        language = context.requested_language

        if language:
            candidates = self._select_candidates(
                context, enabled, language, context.requested_version
            )
        else:
            detected = self._detect_first(context, enabled)
            if detected is None:
                raise LanguageNotDetectedError()
            platform, result = detected
            if not result.language_version:
                raise UnsupportedVersionError(platform.name, None)
            candidates = self._select_candidates(
                context, enabled, result.language, result.language_version
            )

        return self._compose(context, candidates)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _detect_first(
        self, context: ScriptGeneratorContext, enabled: Sequence[Platform]
    ) -> tuple[Platform, DetectionResult] | None:
        for platform in enabled:
            result = platform.detect(context.repo)
            if result is not None:
                self.log.info(
                    "detected %s %s via platform '%s'",
                    result.language,
                    result.language_version or "(no version)",
                    platform.name,
                )
                return platform, result
        self.log.info("no platform recognised the repository")
        return None

    def _select_candidates(
        self,
        context: ScriptGeneratorContext,
        enabled: Sequence[Platform],
        language: str,
        version: str | None,
    ) -> list[tuple[Platform, str]]:
        """Match *language* by name, then resolve a version per platform.

        With no *version*, each platform's own detector provides the default.
        """
        named = [p for p in enabled if p.name == language]
        if not named:
            raise UnsupportedLanguageError(language, _unique(p.name for p in enabled))

        selected: list[tuple[Platform, str]] = []
        detected_version: str | None = None
        for platform in named:
            wanted = version
            if wanted is None:
                result = platform.detect(context.repo)
                wanted = result.language_version if result is not None else None
                if not wanted:
                    self.log.debug("dropping %r: no version detected", platform)
                    continue
                detected_version = detected_version or wanted

            resolved = resolve_version(wanted, platform.supported_versions)
            if resolved is None:
                self.log.debug("dropping %r: version %s not supported", platform, wanted)
                continue
            self.log.debug("selected %r at version %s", platform, resolved)
            selected.append((platform, resolved))

        if not selected:
            supported = _unique(v for p in named for v in p.supported_versions)
            raise UnsupportedVersionError(language, version or detected_version, supported)
        return selected

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def _compose(
        self, context: ScriptGeneratorContext, candidates: Sequence[tuple[Platform, str]]
    ) -> GeneratedScript:
        state = BuildState(context=context)
        fragments: list[str] = []
        contributors: list[str] = []
        for platform, version in candidates:
            platform.set_version(state, version)
            platform.set_required_tools(context.repo, version, state.required_tools)
            fragment = platform.generate(state)
            if not fragment:
                self.log.debug("%r declined to generate a fragment", platform)
                continue
            fragments.append(fragment)
            contributors.append(platform.name)

        if not fragments:
            raise LanguageNotDetectedError()

        self.log.info("composed build script from %s", ", ".join(contributors))
        return GeneratedScript(
            script="\n".join(fragments),
            fragments=fragments,
            platforms=contributors,
            resolved_versions=dict(state.resolved_versions),
            required_tools=dict(state.required_tools),
        )


def generate_for_path(
    root: str | Path,
    language: str | None = None,
    language_version: str | None = None,
    *,
    environ: dict[str, str] | None = None,
) -> GeneratedScript:
    """Build the script for the directory *root* with the built-in platforms.

    Environment overrides come from ``<root>/build.env`` and the process
    environment (or *environ*).
    """
    repo = LocalSourceRepo(root)
    settings = EnvironmentSettingsProvider.from_repo(repo.root_path, environ=environ)
    generator = ScriptGenerator(settings=settings)
    context = ScriptGeneratorContext(
        repo=repo, language=language, language_version=language_version
    )
    return generator.generate_script(context)
