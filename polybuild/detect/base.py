"""Detection API shared by every platform.

A detector looks at a source repository and either recognises it, reporting
the language and (when it can tell) the version, or returns ``None``.
"""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, Field, field_validator

from polybuild.repo import SourceRepo


class DetectionResult(BaseModel):
    """Normalized detection result.

    Attributes
    ----------
    language: str
        Platform name the repository belongs to (e.g., "python", "nodejs").
    language_version: str | None
        Version or version prefix the repository asks for; ``None`` when
        nothing could be inferred.
    notes: list[str]
        Free-form observations from the detector.
    """

    language: str = Field(min_length=1)
    language_version: str | None = None
    notes: list[str] = []

    @field_validator("language_version", mode="before")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v


class LanguageDetector(Protocol):
    def detect(self, repo: SourceRepo) -> DetectionResult | None: ...
