from __future__ import annotations

import json
from pathlib import Path

import pytest

from polybuild.buildpacks.node import NodePlatform
from polybuild.buildpacks.python import PythonPlatform
from polybuild.core import ScriptGenerator, default_platforms, generate_for_path
from polybuild.detect.node_pkg import NodeDetector, parse_engine_version
from polybuild.detect.python_files import PythonDetector
from polybuild.errors import LanguageNotDetectedError, UnsupportedVersionError
from polybuild.repo import LocalSourceRepo
from polybuild.settings import EnvironmentSettingsProvider
from polybuild.types import ScriptGeneratorContext


def _settings(**values: str) -> EnvironmentSettingsProvider:
    return EnvironmentSettingsProvider(environ=values)


def _write(root: Path, name: str, content: str) -> None:
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _package_json(root: Path, **fields) -> None:
    _write(root, "package.json", json.dumps({"name": "demo", "version": "1.0.0", **fields}))


def _generate(root: Path, language: str | None = None, version: str | None = None, **env: str):
    settings = _settings(**env)
    generator = ScriptGenerator(default_platforms(settings), settings)
    context = ScriptGeneratorContext(
        repo=LocalSourceRepo(root), language=language, language_version=version
    )
    return generator.generate_script(context)


# ---------------------------------------------------------------------------
# Python
# ---------------------------------------------------------------------------


def test_python_detector_reads_runtime_txt(tmp_path: Path) -> None:
    _write(tmp_path, "requirements.txt", "flask\n")
    _write(tmp_path, "runtime.txt", "python-3.9.18\n")

    result = PythonDetector("3.11").detect(LocalSourceRepo(tmp_path))

    assert result is not None
    assert result.language == "python"
    assert result.language_version == "3.9.18"


def test_python_detector_reads_python_version_file(tmp_path: Path) -> None:
    _write(tmp_path, "pyproject.toml", "[project]\nname = 'demo'\n")
    _write(tmp_path, ".python-version", "3.12\n")

    result = PythonDetector("3.11").detect(LocalSourceRepo(tmp_path))

    assert result is not None
    assert result.language_version == "3.12"


def test_python_detector_falls_back_to_default_version(tmp_path: Path) -> None:
    _write(tmp_path, "main.py", "print('hi')\n")

    result = PythonDetector("3.11").detect(LocalSourceRepo(tmp_path))

    assert result is not None
    assert result.language_version == "3.11"


def test_python_detector_ignores_other_repos(tmp_path: Path) -> None:
    _write(tmp_path, "README.md", "# nothing here\n")

    assert PythonDetector("3.11").detect(LocalSourceRepo(tmp_path)) is None


def test_python_fragment_installs_requirements(tmp_path: Path) -> None:
    _write(tmp_path, "requirements.txt", "flask\n")
    _write(tmp_path, "runtime.txt", "python-3.10\n")

    result = _generate(tmp_path)

    assert result.platforms == ["python"]
    assert result.resolved_versions == {"python": "3.10.13"}
    assert result.required_tools == {"python": "3.10.13"}
    assert "python3.10 -m venv .venv" in result.script
    assert "python -m pip install -r requirements.txt" in result.script
    assert "pip install ." not in result.script


def test_python_fragment_installs_project_with_custom_virtualenv(tmp_path: Path) -> None:
    _write(tmp_path, "pyproject.toml", "[project]\nname = 'demo'\n")

    result = _generate(tmp_path, "python", "3.12", VIRTUALENV_NAME="env")

    assert "python3.12 -m venv env" in result.script
    assert ". env/bin/activate" in result.script
    assert "python -m pip install ." in result.script


def test_python_declines_when_nothing_to_install(tmp_path: Path) -> None:
    _write(tmp_path, "main.py", "print('hi')\n")

    with pytest.raises(LanguageNotDetectedError):
        _generate(tmp_path)


def test_python_default_version_comes_from_settings(tmp_path: Path) -> None:
    _write(tmp_path, "requirements.txt", "flask\n")

    result = _generate(tmp_path, "python", PYTHON_DEFAULT_VERSION="3.8")

    assert result.resolved_versions["python"] == "3.8.18"


def test_python_pinned_to_unsupported_version(tmp_path: Path) -> None:
    _write(tmp_path, "requirements.txt", "flask\n")
    _write(tmp_path, "runtime.txt", "python-2.7.18\n")

    with pytest.raises(UnsupportedVersionError) as exc:
        _generate(tmp_path)

    assert exc.value.version == "2.7.18"
    assert "3.11.6" in exc.value.supported


# ---------------------------------------------------------------------------
# Node.js
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("spec", "expected"),
    [
        ("18", "18"),
        (">=18", "18"),
        ("^16.20", "16.20"),
        ("~20.9.0", "20.9.0"),
        ("v18.18.2", "18.18.2"),
        ("14.x", "14"),
        (">=12 <16", None),
        ("lts/*", None),
        (None, None),
    ],
)
def test_parse_engine_version(spec: str | None, expected: str | None) -> None:
    assert parse_engine_version(spec) == expected


def test_node_detector_prefers_engines_over_nvmrc(tmp_path: Path) -> None:
    _package_json(tmp_path, engines={"node": "18"})
    _write(tmp_path, ".nvmrc", "16\n")

    result = NodeDetector("20").detect(LocalSourceRepo(tmp_path))

    assert result is not None
    assert result.language == "nodejs"
    assert result.language_version == "18"


def test_node_detector_reads_nvmrc(tmp_path: Path) -> None:
    _package_json(tmp_path)
    _write(tmp_path, ".nvmrc", "v16.20.2\n")

    result = NodeDetector("20").detect(LocalSourceRepo(tmp_path))

    assert result is not None
    assert result.language_version == "16.20.2"


def test_node_detector_tolerates_broken_package_json(tmp_path: Path) -> None:
    _write(tmp_path, "package.json", "{not json")

    result = NodeDetector("20").detect(LocalSourceRepo(tmp_path))

    assert result is not None
    assert result.language_version == "20"


def test_node_fragment_uses_npm_ci_and_build_script(tmp_path: Path) -> None:
    _package_json(tmp_path, scripts={"build": "tsc"})
    _write(tmp_path, "package-lock.json", "{}")

    result = _generate(tmp_path)

    assert result.platforms == ["nodejs"]
    assert result.resolved_versions == {"nodejs": "20.9.0"}
    assert result.required_tools == {"node": "20.9.0"}
    assert "npm ci" in result.script
    assert "npm run build" in result.script


def test_node_fragment_uses_yarn_when_locked(tmp_path: Path) -> None:
    _package_json(tmp_path, scripts={"build": "vite build"})
    _write(tmp_path, "yarn.lock", "# yarn lockfile v1\n")

    result = _generate(tmp_path, "nodejs", "16", YARN_VERSION="1.22.0")

    assert result.required_tools == {"node": "16.20.2", "yarn": "1.22.0"}
    assert "yarn install --frozen-lockfile" in result.script
    assert "yarn run build" in result.script


def test_node_fragment_without_lockfile_or_build(tmp_path: Path) -> None:
    _package_json(tmp_path)

    result = _generate(tmp_path)

    assert "npm install" in result.script
    assert "run build" not in result.script


# ---------------------------------------------------------------------------
# Registry and environment gates
# ---------------------------------------------------------------------------


def test_python_is_detected_before_node(tmp_path: Path) -> None:
    _write(tmp_path, "requirements.txt", "flask\n")
    _package_json(tmp_path)

    result = _generate(tmp_path)

    assert result.platforms == ["python"]


def test_disable_setting_turns_a_platform_off(tmp_path: Path) -> None:
    _write(tmp_path, "requirements.txt", "flask\n")
    _package_json(tmp_path)

    result = _generate(tmp_path, DISABLE_PYTHON_BUILD="true")

    assert result.platforms == ["nodejs"]


def test_default_platforms_order() -> None:
    platforms = default_platforms(_settings())
    assert [type(p) for p in platforms] == [PythonPlatform, NodePlatform]
    assert [p.name for p in platforms] == ["python", "nodejs"]


def test_generate_for_path_reads_build_env(tmp_path: Path) -> None:
    _write(tmp_path, "requirements.txt", "flask\n")
    _package_json(tmp_path)
    _write(tmp_path, "build.env", "DISABLE_PYTHON_BUILD=1\nNODE_DEFAULT_VERSION=16\n")

    result = generate_for_path(tmp_path, environ={})

    assert result.platforms == ["nodejs"]
    assert result.resolved_versions == {"nodejs": "16.20.2"}


def test_python_detector_treats_undecodable_runtime_txt_as_unpinned(tmp_path: Path) -> None:
    _write(tmp_path, "requirements.txt", "flask\n")
    (tmp_path / "runtime.txt").write_bytes(b"python-\xff\xfe3.9\n")

    result = PythonDetector("3.11").detect(LocalSourceRepo(tmp_path))

    assert result is not None
    assert result.language_version == "3.11"


def test_node_detector_treats_undecodable_nvmrc_as_unpinned(tmp_path: Path) -> None:
    _package_json(tmp_path)
    (tmp_path / ".nvmrc").write_bytes(b"\xff\xfe16\n")

    result = NodeDetector("20").detect(LocalSourceRepo(tmp_path))

    assert result is not None
    assert result.language_version == "20"
