"""Map stamp UUIDs to companion files found by name or by PDF text."""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    flags=re.IGNORECASE,
)

PageExtractor = Callable[[str], Sequence[Sequence[str]]]


def find_uuid(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    match = UUID_PATTERN.search(text)
    return match.group(0).upper() if match else None


def iter_uuids(lines: Iterable[str]) -> Iterator[str]:
    for line in lines:
        for match in UUID_PATTERN.finditer(line or ""):
            yield match.group(0).upper()


class IdentifierIndex(Mapping[str, str]):
    """Read-only UUID -> companion file name lookup.

    Keys are upper-cased. A match on the file name always wins over a match
    found inside another file's text.
    """

    def __init__(self, entries: Optional[Mapping[str, str]] = None) -> None:
        self._entries: Dict[str, str] = {k.upper(): v for k, v in (entries or {}).items()}

    def __getitem__(self, key: str) -> str:
        return self._entries[key.upper()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.upper() in self._entries

    def lookup(self, uuid: Optional[str]) -> Optional[str]:
        if not uuid:
            return None
        return self._entries.get(uuid.upper())

    @classmethod
    def build(cls, names: Sequence[str], extract_pages: PageExtractor) -> "IdentifierIndex":
        entries: Dict[str, str] = {}
        for name in names:
            uuid = find_uuid(name)
            if uuid:
                entries[uuid] = name
        by_name = len(entries)
        for name in names:
            pages: List[Sequence[str]] = list(extract_pages(name))
            for page in pages:
                for uuid in iter_uuids(page):
                    entries.setdefault(uuid, name)
        logger.debug(
            "Indexed %d companion ids (%d by name, %d by content)",
            len(entries),
            by_name,
            len(entries) - by_name,
        )
        return cls(entries)
