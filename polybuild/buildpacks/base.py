"""The platform contract every buildpack implements.

A platform owns one language/runtime: the versions it can build, a detector
that recognises repositories written for it, and a generator that turns a
resolved version into a bash fragment.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, MutableMapping

from polybuild.detect.base import DetectionResult, LanguageDetector
from polybuild.repo import SourceRepo
from polybuild.settings import EnvironmentSettingsProvider
from polybuild.types import BuildState, ScriptGeneratorContext


class Platform(ABC):
    name: str = ""

    def __init__(
        self,
        supported_versions: Iterable[str],
        detector: LanguageDetector | None = None,
        settings: EnvironmentSettingsProvider | None = None,
        *,
        name: str | None = None,
    ) -> None:
        if name is not None:
            self.name = name
        if not self.name:
            raise ValueError(f"{type(self).__name__} must define a platform name")
        versions = tuple(v.strip() for v in supported_versions if v and v.strip())
        if not versions:
            raise ValueError(f"Platform '{self.name}' must support at least one version")
        self._supported_versions = versions
        self._detector = detector
        self._settings = settings if settings is not None else EnvironmentSettingsProvider()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    @property
    def supported_versions(self) -> tuple[str, ...]:
        return self._supported_versions

    @property
    def settings(self) -> EnvironmentSettingsProvider:
        return self._settings

    def detect(self, repo: SourceRepo) -> DetectionResult | None:
        if self._detector is None:
            return None
        return self._detector.detect(repo)

    def is_enabled(self, context: ScriptGeneratorContext) -> bool:
        """Disabled when ``DISABLE_<NAME>_BUILD`` is set to a true value."""
        return not self._settings.get_bool(f"DISABLE_{self.name.upper()}_BUILD")

    def set_version(self, state: BuildState, version: str) -> None:
        state.resolved_versions[self.name] = version

    def set_required_tools(
        self, repo: SourceRepo, version: str, tools: MutableMapping[str, str]
    ) -> None:
        tools[self.name] = version

    def resolved_version(self, state: BuildState) -> str:
        return state.resolved_versions[self.name]

    @abstractmethod
    def generate(self, state: BuildState) -> str | None:
        """Return this platform's bash fragment, or ``None`` to decline."""
