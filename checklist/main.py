import asyncio
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from loguru import logger

from checklist.bootstrap import build_facade
from checklist.config import get_settings
from checklist.facade import ReconciliationFacade
from checklist.logging_setup import setup_logging


def _load_env() -> str | None:
    env_path = find_dotenv(usecwd=True)
    if not env_path:
        logger.debug("no .env in {} or its parents; using process environment", Path.cwd())
        return None
    load_dotenv(env_path, override=True)
    logger.info("checklist env loaded from {}", env_path)
    return env_path


def _log_today(facade: ReconciliationFacade) -> None:
    today = facade.today()
    state = facade.get_effective_state(today)
    done = sum(1 for value in state.values() if value)
    logger.info(
        "today={} user={!r} done={}/{} tasks={}",
        today.isoformat(),
        facade.get_user_name() or "<unset>",
        done,
        len(state),
        state,
    )
    for day in facade.week_window(today):
        record = facade.get_record(day)
        logger.info("week day={} score={}", day.isoformat(), record.score if record else 0)


def main() -> None:
    _load_env()
    settings = get_settings()
    setup_logging(settings)

    facade = build_facade(settings)
    if settings.catalog_url and settings.refresh_on_startup:
        ok = asyncio.run(facade.refresh_remote_catalog())
        logger.info("startup catalog refresh ok={}", ok)
    elif not settings.catalog_url:
        logger.warning("CATALOG_URL is not set; using cached or built-in tasks")

    _log_today(facade)


if __name__ == "__main__":
    main()
