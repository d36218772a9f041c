from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any, Final, Mapping

import yaml

from checklist.core.catalog import parse_weekday_map
from checklist.core.dates import weekday_ordinal

_EVERY_DAY: Final[list[str]] = ["Morning exercise", "Read 30 minutes", "In bed by 23:00"]

BUILTIN_WEEK: Final[dict[int, list[str]]] = {
    1: [*_EVERY_DAY, "Weekly review"],
    2: [*_EVERY_DAY, "Plan the week"],
    3: [*_EVERY_DAY, "Language practice"],
    4: [*_EVERY_DAY, "Run"],
    5: [*_EVERY_DAY, "Language practice"],
    6: [*_EVERY_DAY, "Run"],
    7: [*_EVERY_DAY, "Tidy up"],
}


class StaticWeeklyConfig:
    """Built-in weekly checklist used when the remote catalog has nothing for a user.

    YAML layout::

        default:
          1: [Read, Weekly review]
        users:
          Alice:
            2: [Swim]

    A user's own weekday entry wins over ``default``; a weekday missing
    from both gives an empty list.
    """

    def __init__(
        self,
        default: Mapping[int, list[str]] | None = None,
        users: Mapping[str, Mapping[int, list[str]]] | None = None,
    ) -> None:
        source = BUILTIN_WEEK if default is None else default
        self._default = {day: list(names) for day, names in source.items()}
        self._users = {
            name: {day: list(names) for day, names in days.items()} for name, days in (users or {}).items()
        }

    @classmethod
    def from_yaml(cls, path: str | Path) -> "StaticWeeklyConfig":
        with Path(path).open("r", encoding="utf-8") as handle:
            data: Any = yaml.safe_load(handle) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: top level must be a mapping")
        default = parse_weekday_map(data.get("default")) if "default" in data else None
        users_raw = data.get("users") or {}
        if not isinstance(users_raw, dict):
            raise ValueError(f"{path}: 'users' must be a mapping")
        users = {str(name): parse_weekday_map(days) for name, days in users_raw.items()}
        return cls(default=default, users=users)

    def tasks_for(self, day: date, user_name: str | None) -> list[str]:
        weekday = weekday_ordinal(day)
        personal = self._users.get((user_name or "").strip())
        if personal is not None and weekday in personal:
            return list(personal[weekday])
        return list(self._default.get(weekday, []))
