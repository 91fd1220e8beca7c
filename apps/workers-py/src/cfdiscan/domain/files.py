"""File-system helpers used while reorganizing invoice files."""

from __future__ import annotations

import logging
import os
import pathlib
import re
from typing import Iterable, List

logger = logging.getLogger(__name__)


def ensure_dir(path: pathlib.Path) -> pathlib.Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def ensure_directories(root: pathlib.Path, fragments: Iterable[str]) -> List[pathlib.Path]:
    """Create every fragment under root once; existing directories are fine."""
    created: List[pathlib.Path] = []
    seen = set()
    for fragment in fragments:
        parts = [part for part in fragment.split("/") if part]
        if not parts:
            continue
        target = root.joinpath(*parts)
        if target in seen:
            continue
        seen.add(target)
        created.append(ensure_dir(target))
    return created


def sanitize_filename(name: str, default: str = "cfdi") -> str:
    name = re.sub(r'[\\/:*?"<>|]+', "_", (name or "").strip())
    return name or default


def list_files(directory: pathlib.Path, extension: str) -> List[pathlib.Path]:
    """Sorted regular files in directory whose suffix matches, ignoring case."""
    wanted = extension.lower()
    return sorted(
        path
        for path in directory.iterdir()
        if path.is_file() and path.suffix.lower() == wanted
    )


def move_file(source: pathlib.Path, destination: pathlib.Path) -> bool:
    """Rename source to destination without overwriting.

    Returns False when both paths are the same file. Raises FileExistsError
    when destination is already taken; other OSErrors propagate untouched.
    """
    if source == destination:
        return False
    if destination.exists():
        if os.path.samefile(source, destination):
            return False
        raise FileExistsError(f"Refusing to overwrite {destination} with {source}")
    source.rename(destination)
    logger.debug("Moved %s -> %s", source, destination)
    return True
