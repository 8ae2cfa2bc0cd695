"""Read-only view over the source tree being built."""

from __future__ import annotations

import fnmatch
import os
import shutil
import subprocess
from collections.abc import Iterator
from pathlib import Path
from typing import Protocol


class SourceRepo(Protocol):
    @property
    def root_path(self) -> Path: ...

    def file_exists(self, *paths: str) -> bool: ...

    def enumerate_files(self, pattern: str, recursive: bool = False) -> Iterator[str]: ...

    def read_file(self, *paths: str) -> str: ...

    def read_all_lines(self, *paths: str) -> list[str]: ...

    def get_commit_id(self) -> str | None: ...


def _has(cmd: str) -> bool:
    return shutil.which(cmd) is not None


class LocalSourceRepo:
    """A :class:`SourceRepo` backed by a directory on the local filesystem."""

    def __init__(self, root: str | Path) -> None:
        root = Path(root).resolve()
        if not root.is_dir():
            raise FileNotFoundError(f"Source directory does not exist: {root}")
        self._root = root

    def __repr__(self) -> str:
        return f"LocalSourceRepo({str(self._root)!r})"

    @property
    def root_path(self) -> Path:
        return self._root

    def _path(self, paths: tuple[str, ...]) -> Path:
        return self._root.joinpath(*paths)

    def file_exists(self, *paths: str) -> bool:
        return self._path(paths).is_file()

    def enumerate_files(self, pattern: str, recursive: bool = False) -> Iterator[str]:
        """Yield repo-relative posix paths of files whose name matches *pattern*.

        Entries are visited in sorted order so repeated walks are identical.
        """
        if not recursive:
            for entry in sorted(self._root.iterdir()):
                if entry.is_file() and fnmatch.fnmatch(entry.name, pattern):
                    yield entry.name
            return

        for dirpath, dirnames, filenames in os.walk(self._root):
            dirnames.sort()
            base = Path(dirpath)
            for name in sorted(filenames):
                if fnmatch.fnmatch(name, pattern):
                    yield (base / name).relative_to(self._root).as_posix()

    def read_file(self, *paths: str) -> str:
        return self._path(paths).read_text(encoding="utf-8")

    def read_all_lines(self, *paths: str) -> list[str]:
        return self.read_file(*paths).splitlines()

    def get_commit_id(self) -> str | None:
        if not _has("git"):
            return None
        proc = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            cwd=self._root,
            capture_output=True,
            text=True,
            check=False,
        )
        if proc.returncode != 0:
            return None
        return proc.stdout.strip() or None
