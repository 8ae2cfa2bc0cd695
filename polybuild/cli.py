"""polybuild CLI — detect a repository's platform and print its build script.

Commands:
- detect: show which platform recognises the repository, and at what version
- script: compose the build script (optionally pinning --platform / --platform-version)
- platforms: list registered platforms, whether they are enabled, and their versions
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from polybuild.core import ScriptGenerator
from polybuild.errors import ScriptGenerationError
from polybuild.fs import get_validated_full_path, with_preamble, write_script
from polybuild.logging import get_logger
from polybuild.repo import LocalSourceRepo
from polybuild.settings import EnvironmentSettingsProvider, get_settings
from polybuild.types import ScriptGeneratorContext
from polybuild.versions import sort_versions

app = typer.Typer(add_completion=False, help="Generate build scripts for source repositories")
console = Console()


def _generator_for(path: str) -> tuple[LocalSourceRepo, ScriptGenerator]:
    root = get_validated_full_path(path)
    repo = LocalSourceRepo(root)
    settings = EnvironmentSettingsProvider.from_repo(root)
    return repo, ScriptGenerator(settings=settings)


@app.callback()
def main(
    log_level: str | None = typer.Option(
        None, "--log-level", help="DEBUG | INFO | WARNING | ERROR"
    ),
) -> None:
    level = (log_level or get_settings().log_level).upper()
    if level not in logging.getLevelNamesMapping():
        raise typer.BadParameter(f"unknown log level '{level}'", param_hint="--log-level")
    get_logger("polybuild", level=level)


@app.command()
def detect(path: str = typer.Argument(".", help="Path to a source directory")) -> None:
    repo, generator = _generator_for(path)
    found = generator.detect(repo)
    if found is None:
        rprint("[red]Could not detect the language from repo.[/red]")
        raise typer.Exit(code=1)
    platform, result = found
    payload = {"platform": platform.name, **result.model_dump()}
    print(json.dumps(payload, indent=2))


@app.command()
def script(
    path: str = typer.Argument(".", help="Path to a source directory"),
    platform: str | None = typer.Option(None, "--platform", "-l", help="Platform name"),
    platform_version: str | None = typer.Option(
        None, "--platform-version", help="Full version or a major / major.minor prefix"
    ),
    output: str | None = typer.Option(None, "--output", "-o", help="Write script to this file"),
) -> None:
    repo, generator = _generator_for(path)
    context = ScriptGeneratorContext(
        repo=repo, language=platform, language_version=platform_version
    )
    try:
        generated = generator.generate_script(context)
    except ScriptGenerationError as exc:
        rprint(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    if not output:
        print(generated.script, end="" if generated.script.endswith("\n") else "\n")
        return

    target = write_script(output, with_preamble(generated.script, repo.root_path))
    table = Table(title="Build Script")
    table.add_column("Platform", style="cyan")
    table.add_column("Version")
    for name in generated.platforms:
        table.add_row(name, generated.resolved_versions.get(name, ""))
    console.print(table)
    if generated.required_tools:
        tools = ", ".join(f"{k}={v}" for k, v in generated.required_tools.items())
        rprint(f"Required tools: {tools}")
    rprint(f"[green]Script written:[/green] {target}")


@app.command()
def platforms(path: str = typer.Argument(".", help="Path to a source directory")) -> None:
    repo, generator = _generator_for(path)
    context = ScriptGeneratorContext(repo=repo)
    table = Table(title="Platforms")
    table.add_column("Name", style="cyan")
    table.add_column("Enabled")
    table.add_column("Supported versions")
    for p in generator.platforms:
        enabled = "[green]yes[/green]" if p.is_enabled(context) else "[red]no[/red]"
        table.add_row(p.name, enabled, ", ".join(sort_versions(p.supported_versions)))
    console.print(table)


if __name__ == "__main__":
    app()
