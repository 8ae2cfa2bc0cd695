"""Classified failures raised when no platform can build a repository."""

from __future__ import annotations

from collections.abc import Iterable


class ScriptGenerationError(Exception):
    """Base class for every failure the script generator reports."""


class UnsupportedLanguageError(ScriptGenerationError):
    """No enabled platform is named after the requested or detected language."""

    def __init__(self, language: str, supported: Iterable[str]) -> None:
        self.language = language
        self.supported = tuple(supported)
        super().__init__(
            f"'{language}' platform is not supported. "
            f"Supported platforms are: {', '.join(self.supported)}"
        )


class UnsupportedVersionError(ScriptGenerationError):
    """The language matched, but none of its platforms supports the version.

    ``version`` is ``None`` when no version could be detected at all.
    """

    def __init__(
        self, language: str, version: str | None, supported: Iterable[str] = ()
    ) -> None:
        self.language = language
        self.version = version
        self.supported = tuple(supported)
        if version:
            message = (
                f"The '{language}' version '{version}' is not supported. "
                f"Supported versions are: {', '.join(self.supported)}"
            )
        else:
            message = f"Couldn't detect a version for the platform '{language}' in the repo."
        super().__init__(message)


class LanguageNotDetectedError(ScriptGenerationError):
    """Nothing recognised the repository, or every selected platform declined."""

    def __init__(self, message: str = "Could not detect the language from repo.") -> None:
        super().__init__(message)
