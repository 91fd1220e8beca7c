from __future__ import annotations

from pathlib import Path
from typing import List, Protocol


class PageTextExtractor(Protocol):
    """Turn a companion file into pages of text lines."""

    def __call__(self, path: Path) -> List[List[str]]: ...
