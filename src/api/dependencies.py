"""FastAPI dependencies wiring repositories and services from settings.

Repositories are cached per process so the Firestore client is created once.
Tests replace the service getters through app.dependency_overrides.
"""

from functools import lru_cache

from src.common.config import load_compliance_settings, load_prediction_settings
from src.compliance.compliance_service import ComplianceService
from src.compliance.firestore_repository import ComplianceHistoryRepository
from src.guardrails.firestore_repository import GuardrailsRepository
from src.prediction.firestore_repository import AnalyticsRepository
from src.prediction.prediction_service import PredictionService


@lru_cache(maxsize=1)
def get_guardrails_repository() -> GuardrailsRepository:
    return GuardrailsRepository(load_compliance_settings().firestore)


@lru_cache(maxsize=1)
def get_history_repository() -> ComplianceHistoryRepository:
    return ComplianceHistoryRepository(load_compliance_settings().firestore)


@lru_cache(maxsize=1)
def get_analytics_repository() -> AnalyticsRepository:
    return AnalyticsRepository(load_prediction_settings().firestore)


def get_compliance_service() -> ComplianceService:
    return ComplianceService(
        get_guardrails_repository(),
        get_history_repository(),
        settings=load_compliance_settings(),
    )


def get_prediction_service() -> PredictionService:
    return PredictionService(get_analytics_repository(), settings=load_prediction_settings())
