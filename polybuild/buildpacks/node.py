"""Node.js buildpack.

Installs dependencies with the package manager the lockfile points at and
runs the `build` script when `package.json` declares one:
- `yarn.lock` → `yarn install --frozen-lockfile`
- `package-lock.json` → `npm ci`
- otherwise → `npm install`
"""

from __future__ import annotations

from collections.abc import MutableMapping

from polybuild.buildpacks.base import Platform
from polybuild.detect.node_pkg import LANGUAGE, NodeDetector, read_package_json
from polybuild.repo import SourceRepo
from polybuild.settings import EnvironmentSettingsProvider
from polybuild.types import BuildState

SUPPORTED_VERSIONS = ("16.20.2", "18.18.2", "20.9.0")
DEFAULT_VERSION = "20"
DEFAULT_YARN_VERSION = "1.22.19"


class NodePlatform(Platform):
    name = LANGUAGE

    def __init__(self, settings: EnvironmentSettingsProvider | None = None) -> None:
        settings = settings if settings is not None else EnvironmentSettingsProvider()
        default = settings.get("NODE_DEFAULT_VERSION", DEFAULT_VERSION)
        super().__init__(SUPPORTED_VERSIONS, NodeDetector(default), settings)

    def set_required_tools(
        self, repo: SourceRepo, version: str, tools: MutableMapping[str, str]
    ) -> None:
        tools["node"] = version
        if repo.file_exists("yarn.lock"):
            tools["yarn"] = self.settings.get("YARN_VERSION", DEFAULT_YARN_VERSION)

    def generate(self, state: BuildState) -> str | None:
        repo = state.repo
        pkg = read_package_json(repo)
        if pkg is None:
            return None
        version = self.resolved_version(state)

        use_yarn = repo.file_exists("yarn.lock")
        if use_yarn:
            install = "yarn install --frozen-lockfile"
        elif repo.file_exists("package-lock.json"):
            install = "npm ci"
        else:
            install = "npm install"

        lines = [
            f"# nodejs {version}",
            f'echo "Building with Node.js {version}"',
            install,
        ]
        scripts = pkg.get("scripts") or {}
        if isinstance(scripts, dict) and "build" in scripts:
            lines.append("yarn run build" if use_yarn else "npm run build")
        return "\n".join(lines) + "\n"
