"""Ordered merged entry set.

This module holds the single mutable state of one merge call: the
surviving entry per path plus diagnostics gathered along the way.
"""

from __future__ import annotations

from typing import Iterator

from core.types import Collision, Entry, FormatHint


class MergedSet:
    """Ordered mapping from sanitized path to surviving entry.

    Paths keep the position of their first appearance even when a later
    entry replaces the content.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Entry] = {}
        self.collisions: list[Collision] = []
        self.format_hints: list[FormatHint] = []
        self.source_labels: list[str] = []

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries.values())

    def get(self, path: str) -> Entry | None:
        return self._entries.get(path)

    def put(self, entry: Entry) -> None:
        """Insert an entry or replace the entry at the same path in place."""
        self._entries[entry.path] = entry

    def paths(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def contents(self) -> dict[str, bytes]:
        """Return a path to content mapping in merge order."""
        return {path: entry.content for path, entry in self._entries.items()}
