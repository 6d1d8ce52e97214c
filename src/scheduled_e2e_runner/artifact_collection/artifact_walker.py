"""Artifact discovery service."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path


def collect_artifacts(root_dirs: Iterable[Path | str]) -> list[Path]:
    """Return every regular file below the existing roots, depth-first.

    Missing roots are skipped. Directories are never included and symlinked
    directories are not followed.
    """
    files: list[Path] = []
    for root in root_dirs:
        root_path = Path(root)
        if not root_path.is_dir():
            continue
        files.extend(_walk(root_path.resolve()))
    return files


def _walk(directory: Path) -> Iterator[Path]:
    for entry in sorted(directory.iterdir()):
        if entry.is_symlink() and entry.is_dir():
            continue
        if entry.is_dir():
            yield from _walk(entry)
        elif entry.is_file():
            yield entry
