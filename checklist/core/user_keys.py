from __future__ import annotations

from typing import Iterable, Mapping


class UserKeyMapper:
    """Maps the locally entered display name onto a catalog user key.

    Rules, first hit wins:
    1. configured aliases ``{substring: catalog_key}``, in declaration order;
    2. catalog keys contained in the name, longest key first.

    Matching is case-sensitive. An empty name never maps.
    """

    def __init__(self, aliases: Mapping[str, str] | None = None) -> None:
        self._aliases: list[tuple[str, str]] = [
            (needle, key) for needle, key in (aliases or {}).items() if needle.strip() and key.strip()
        ]

    def map(self, local_name: str | None, catalog_keys: Iterable[str] = ()) -> str | None:
        name = (local_name or "").strip()
        if not name:
            return None
        for needle, key in self._aliases:
            if needle in name:
                return key
        for key in sorted((k for k in catalog_keys if k), key=lambda k: (-len(k), k)):
            if key in name:
                return key
        return None
