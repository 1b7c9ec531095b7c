"""In-memory content store populated once per page load."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any


class ContentStore(Mapping[str, Any]):
    """Mapping from asset path to loaded content.

    An absent key means the asset had no data (never fetched, or its fetch
    failed); ``get`` returns ``None`` for it.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}

    def __getitem__(self, path: str) -> Any:
        return self._entries[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def put(self, path: str, value: Any) -> None:
        self._entries[path] = value

    def discard(self, path: str) -> None:
        self._entries.pop(path, None)

    def snapshot(self) -> dict[str, Any]:
        return dict(self._entries)

    def __repr__(self) -> str:
        return f"ContentStore({sorted(self._entries)!r})"
