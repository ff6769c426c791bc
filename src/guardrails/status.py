"""Review freshness for brand guardrails."""

from datetime import datetime, timezone
from typing import Optional

from src.common.config import DEFAULT_STALENESS_CRITICAL_DAYS, DEFAULT_STALENESS_WARNING_DAYS
from src.guardrails.models import BrandGuardrails, GuardrailsStatus, StalenessLevel

UNKNOWN_REVIEW_DAYS = 999


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def get_guardrails_status(
    brand: Optional[BrandGuardrails],
    now: Optional[datetime] = None,
    *,
    critical_days: int = DEFAULT_STALENESS_CRITICAL_DAYS,
    warning_days: int = DEFAULT_STALENESS_WARNING_DAYS,
) -> GuardrailsStatus:
    """Classify how long ago a brand's guardrails were last reviewed.

    The review date falls back to last_updated, then created_at. A missing
    brand (or one with no dates at all) is reported as critically stale.
    """
    reviewed_at = None
    if brand is not None:
        reviewed_at = brand.last_reviewed or brand.last_updated or brand.created_at

    if reviewed_at is None:
        return GuardrailsStatus(
            is_stale=True,
            days_since_review=UNKNOWN_REVIEW_DAYS,
            needs_attention=True,
            staleness_level=StalenessLevel.CRITICAL,
        )

    now = _as_utc(now or datetime.now(timezone.utc))
    days = max(0, (now - _as_utc(reviewed_at)).days)

    if days >= critical_days:
        level = StalenessLevel.CRITICAL
    elif days >= warning_days:
        level = StalenessLevel.WARNING
    else:
        level = StalenessLevel.FRESH

    return GuardrailsStatus(
        is_stale=days >= critical_days,
        days_since_review=days,
        needs_attention=days >= warning_days,
        staleness_level=level,
    )
