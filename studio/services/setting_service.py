"""AI settings and token usage statistics."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from studio.db.store import PersistenceStore
from studio.schemas.setting import GetSettingResponse, SaveSettingRequest, TokenUsageResponse

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def period_bounds(now: datetime) -> dict[str, tuple[datetime, datetime]]:
    """[start, end) of the UTC day, month and year containing ``now``."""
    now = now.astimezone(timezone.utc)
    day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    month = day.replace(day=1)
    year = month.replace(month=1)

    next_day = day + timedelta(days=1)
    next_month = month.replace(year=month.year + 1, month=1) if month.month == 12 else month.replace(month=month.month + 1)
    next_year = year.replace(year=year.year + 1)

    return {
        "daily": (day, next_day),
        "monthly": (month, next_month),
        "yearly": (year, next_year),
    }


class SettingService:
    def __init__(self, store: PersistenceStore, clock: Callable[[], datetime] = _utcnow):
        self.store = store
        self.clock = clock

    def get(self) -> GetSettingResponse:
        with self.store.exclusive() as tx:
            setting = tx.get_or_create_default_setting()
            return GetSettingResponse(
                api_url=setting.api_url,
                model=setting.model,
                has_api_key=bool(setting.api_key),
            )

    def save(self, payload: SaveSettingRequest) -> None:
        with self.store.exclusive() as tx:
            tx.save_setting(payload.api_url, payload.api_key, payload.model)
        logger.info("Saved AI settings (api_url=%s, model=%s)", payload.api_url, payload.model)

    def token_usage(self) -> TokenUsageResponse:
        bounds = period_bounds(self.clock())
        with self.store.exclusive() as tx:
            totals = {name: tx.sum_tokens_between(start, end) for name, (start, end) in bounds.items()}
        return TokenUsageResponse(**totals)
