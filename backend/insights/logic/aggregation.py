"""Dashboard statistics over recorded submissions."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from insights.constants import HISTORY_LIMIT, TIME_FILTERS, UNKNOWN_LABEL
from insights.errors import ValidationFailed
from insights.models import Store, StoreStats, SurveySubmission


def parse_timestamp(raw: str) -> Optional[datetime]:
    """Parse a stored ISO-8601 timestamp; naive values are taken as UTC."""
    try:
        parsed = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def check_window(days: int) -> int:
    if days not in TIME_FILTERS:
        raise ValidationFailed(f"days must be one of {TIME_FILTERS}, got {days}")
    return days


def filter_by_window(
    submissions: Iterable[SurveySubmission],
    days: int,
    now: Optional[datetime] = None,
) -> list[SurveySubmission]:
    """Keep submissions at or after `now - days`. Input order is preserved."""
    check_window(days)
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=days)
    kept = []
    for sub in submissions:
        ts = parse_timestamp(sub.timestamp)
        if ts is not None and ts >= cutoff:
            kept.append(sub)
    return kept


def _one_decimal(value: float) -> float:
    # half-up: 8.25 -> 8.3
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def per_store_stats(subset: Iterable[SurveySubmission], stores: Sequence[Store]) -> list[StoreStats]:
    scores: dict[str, list[int]] = defaultdict(list)
    for sub in subset:
        scores[sub.store_id].append(sub.nps_score)

    stats = []
    for store in stores:
        values = scores.get(store.id)
        if not values:
            continue
        stats.append(StoreStats(
            store_name=store.name,
            average_nps=_one_decimal(sum(values) / len(values)),
            count=len(values),
        ))
    return stats


def nps_band(score: int) -> str:
    if score >= 9:
        return "promoter"
    if score <= 6:
        return "detractor"
    return "passive"


def store_name(stores: Sequence[Store], store_id: str) -> str:
    for store in stores:
        if store.id == store_id:
            return store.name
    return UNKNOWN_LABEL


def history(subset: Sequence[SurveySubmission], stores: Sequence[Store], limit: int = HISTORY_LIMIT) -> list[dict]:
    """Most recent entries for the dashboard list, store names resolved."""
    return [
        {
            "id": sub.id,
            "customerName": sub.customer_name,
            "storeName": store_name(stores, sub.store_id),
            "npsScore": sub.nps_score,
            "band": nps_band(sub.nps_score),
            "timestamp": sub.timestamp,
        }
        for sub in subset[:limit]
    ]
