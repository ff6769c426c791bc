"""Environment-driven settings for the Brandguard services.

Each service reads a small dataclass of settings built from environment
variables. Unset or blank variables fall back to the module defaults;
malformed values raise ConfigError at load time rather than at first use.

Variables:
    FIRESTORE_COLLECTION_PREFIX, GOOGLE_CLOUD_PROJECT, FIRESTORE_DATABASE_ID
    GUARDRAILS_VERSION, GUARDRAILS_STALE_DAYS, GUARDRAILS_WARNING_DAYS
    PREDICTION_HISTORY_WINDOW, PREDICTION_DEFAULT_COMPLIANCE_SCORE,
    PREDICTION_MAX_WORKERS
    BRANDGUARD_API_KEY
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

T = TypeVar("T")


class ConfigError(Exception):
    """Raised when a configuration value is present but unusable."""


def _optional_env(key: str) -> Optional[str]:
    value = os.getenv(key, "").strip()
    return value or None


def _str_env(key: str, default: str) -> str:
    return _optional_env(key) or default


def _parsed_env(key: str, default: T, parse: Callable[[str], T]) -> T:
    raw = _optional_env(key)
    if raw is None:
        return default
    try:
        return parse(raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid {parse.__name__} for {key}: {raw!r}") from exc


def _int_env(key: str, default: int) -> int:
    return _parsed_env(key, default, int)


def _float_env(key: str, default: float) -> float:
    return _parsed_env(key, default, float)


@dataclass
class FirestoreConfig:
    """Firestore project, database and collection prefix shared by every repository."""

    collection_prefix: str
    project_id: Optional[str] = None
    database_id: str = "(default)"


DEFAULT_COLLECTION_PREFIX = "brandguard_"


def load_firestore_config() -> FirestoreConfig:
    """Load Firestore configuration from environment variables."""
    return FirestoreConfig(
        collection_prefix=_str_env("FIRESTORE_COLLECTION_PREFIX", DEFAULT_COLLECTION_PREFIX),
        project_id=_optional_env("GOOGLE_CLOUD_PROJECT"),
        database_id=_str_env("FIRESTORE_DATABASE_ID", "(default)"),
    )


# =============================================================================
# Compliance Configuration
# =============================================================================

DEFAULT_GUARDRAILS_VERSION = "1.0.0"
DEFAULT_STALENESS_CRITICAL_DAYS = 90
DEFAULT_STALENESS_WARNING_DAYS = 75  # 2.5 months


@dataclass
class ComplianceSettings:
    """Combined settings for guardrail merging and compliance checking.

    guardrails_version is stamped on every compliance history row so audit
    readers can tell which rule semantics produced a score.
    """

    firestore: FirestoreConfig
    guardrails_version: str
    staleness_critical_days: int
    staleness_warning_days: int


def load_compliance_settings() -> ComplianceSettings:
    """Load compliance service settings from environment variables.

    Raises:
        ConfigError: If a variable is set but malformed, or the warning
            threshold is not below the critical threshold.
    """
    critical = _int_env("GUARDRAILS_STALE_DAYS", default=DEFAULT_STALENESS_CRITICAL_DAYS)
    warning = _int_env("GUARDRAILS_WARNING_DAYS", default=DEFAULT_STALENESS_WARNING_DAYS)
    if warning > critical:
        raise ConfigError(
            f"GUARDRAILS_WARNING_DAYS ({warning}) must not exceed GUARDRAILS_STALE_DAYS ({critical})"
        )
    return ComplianceSettings(
        firestore=load_firestore_config(),
        guardrails_version=_str_env("GUARDRAILS_VERSION", DEFAULT_GUARDRAILS_VERSION),
        staleness_critical_days=critical,
        staleness_warning_days=warning,
    )


# =============================================================================
# Performance Prediction Configuration
# =============================================================================

DEFAULT_HISTORY_WINDOW = 50
DEFAULT_COMPLIANCE_SCORE = 80.0
DEFAULT_PREDICTION_MAX_WORKERS = 4


@dataclass
class PredictionSettings:
    """Combined settings for the performance prediction service.

    history_window bounds how many analytics records feed base rates;
    default_compliance_score is used when the caller supplies none.
    """

    firestore: FirestoreConfig
    history_window: int
    default_compliance_score: float
    max_workers: int


def load_prediction_settings() -> PredictionSettings:
    """Load prediction service settings from environment variables."""
    history_window = _int_env("PREDICTION_HISTORY_WINDOW", default=DEFAULT_HISTORY_WINDOW)
    if history_window < 1:
        raise ConfigError(f"PREDICTION_HISTORY_WINDOW must be positive: {history_window}")
    return PredictionSettings(
        firestore=load_firestore_config(),
        history_window=history_window,
        default_compliance_score=_float_env(
            "PREDICTION_DEFAULT_COMPLIANCE_SCORE", default=DEFAULT_COMPLIANCE_SCORE
        ),
        max_workers=max(1, _int_env("PREDICTION_MAX_WORKERS", default=DEFAULT_PREDICTION_MAX_WORKERS)),
    )


# =============================================================================
# HTTP API Configuration
# =============================================================================


@dataclass
class ApiConfig:
    """Configuration for the Brandguard HTTP API.

    api_key guards the guardrail write endpoints. It is optional so the
    read-only endpoints can run in development without full configuration.
    """

    api_key: Optional[str]


def load_api_config() -> ApiConfig:
    """Load HTTP API configuration from environment variables."""
    return ApiConfig(api_key=_optional_env("BRANDGUARD_API_KEY"))
