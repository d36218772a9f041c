from __future__ import annotations

from typing import Any

from loguru import logger

# user key -> weekday ordinal (1=Sunday..7=Saturday) -> ordered task names
RemoteCatalog = dict[str, dict[int, list[str]]]


def parse_weekday_map(raw: Any) -> dict[int, list[str]]:
    """Turn ``{"2": ["Run", ...]}`` into ``{2: ["Run", ...]}``.

    Keys that are not plain ASCII digits in 1..7 are dropped silently;
    non-string task entries are dropped as well.
    """
    if not isinstance(raw, dict):
        return {}
    out: dict[int, list[str]] = {}
    for key, names in raw.items():
        text = str(key).strip()
        if not (text.isascii() and text.isdigit()):
            continue
        weekday = int(text)
        if not 1 <= weekday <= 7:
            continue
        if not isinstance(names, list):
            continue
        out[weekday] = [name for name in names if isinstance(name, str)]
    return out


def catalog_to_wire(catalog: RemoteCatalog) -> dict[str, dict[str, list[str]]]:
    return {
        user: {str(weekday): list(names) for weekday, names in sorted(days.items())}
        for user, days in catalog.items()
    }


def catalog_from_wire(raw: Any) -> RemoteCatalog:
    if not isinstance(raw, dict):
        return {}
    out: RemoteCatalog = {}
    for user, days in raw.items():
        if not isinstance(user, str) or not isinstance(days, dict):
            logger.warning("dropping malformed catalog entry user={!r}", user)
            continue
        out[user] = parse_weekday_map(days)
    return out
