"""Python buildpack.

Emits a fragment that creates a virtualenv with the resolved interpreter and
installs the project into it:
- `requirements.txt` → `pip install -r requirements.txt`
- `pyproject.toml` / `setup.py` → `pip install .`

Repositories with neither are declined (no fragment).
"""

from __future__ import annotations

from polybuild.buildpacks.base import Platform
from polybuild.detect.python_files import LANGUAGE, PythonDetector
from polybuild.settings import EnvironmentSettingsProvider
from polybuild.types import BuildState

SUPPORTED_VERSIONS = ("3.8.18", "3.9.18", "3.10.13", "3.11.6", "3.12.0")
DEFAULT_VERSION = "3.11"
DEFAULT_VIRTUALENV = ".venv"


class PythonPlatform(Platform):
    name = LANGUAGE

    def __init__(self, settings: EnvironmentSettingsProvider | None = None) -> None:
        settings = settings if settings is not None else EnvironmentSettingsProvider()
        default = settings.get("PYTHON_DEFAULT_VERSION", DEFAULT_VERSION)
        super().__init__(SUPPORTED_VERSIONS, PythonDetector(default), settings)

    def generate(self, state: BuildState) -> str | None:
        repo = state.repo
        version = self.resolved_version(state)
        has_requirements = repo.file_exists("requirements.txt")
        installable = repo.file_exists("pyproject.toml") or repo.file_exists("setup.py")
        if not (has_requirements or installable):
            return None

        major_minor = ".".join(version.split(".")[:2])
        venv = self.settings.get("VIRTUALENV_NAME", DEFAULT_VIRTUALENV)
        lines = [
            f"# python {version}",
            f'echo "Building with Python {version}"',
            f"python{major_minor} -m venv {venv}",
            f". {venv}/bin/activate",
            "python -m pip install --upgrade pip",
        ]
        if has_requirements:
            lines.append("python -m pip install -r requirements.txt")
        if installable:
            lines.append("python -m pip install .")
        return "\n".join(lines) + "\n"
