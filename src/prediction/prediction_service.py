"""Orchestration service for content performance predictions.

Fetches brand history once, fans the four sub-predictions out over a thread
pool, aggregates them and persists the rows unless the call is ephemeral.
"""

import re
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from src.common.config import DEFAULT_COMPLIANCE_SCORE, DEFAULT_HISTORY_WINDOW, PredictionSettings
from src.common.firestore import PersistOutcome
from src.common.logging import get_logger, log_decision, log_error
from src.prediction.content_factors import analyze_content_factors
from src.prediction.firestore_repository import AnalyticsRepository
from src.prediction.models import PredictionContext, PredictionOutcome, PredictionResult
from src.prediction.predictors import (
    assess_risk,
    predict_engagement,
    predict_mlr_approval,
    recommend_ab_tests,
)

logger = get_logger(__name__)

UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)
MAX_WORKERS = 4


class PredictionError(Exception):
    """Raised when the prediction pipeline cannot produce a result."""


class InvalidContentIdError(PredictionError, ValueError):
    """Raised when a persisted prediction is requested for a non-UUID content_id."""

    def __init__(self, content_id: str):
        self.content_id = content_id
        super().__init__(
            f'Invalid content_id: "{content_id}". When ephemeral=false, content_id must be a '
            "valid UUID. For real-time analysis, set ephemeral=true."
        )


def is_valid_uuid(value: Optional[str]) -> bool:
    return bool(value) and UUID_RE.match(value) is not None


class PredictionService:
    """Predict MLR approval, engagement, risk and A/B potential for content."""

    def __init__(
        self,
        repository: AnalyticsRepository,
        settings: Optional[PredictionSettings] = None,
    ):
        self.repository = repository
        self.settings = settings

    @property
    def history_window(self) -> int:
        return self.settings.history_window if self.settings else DEFAULT_HISTORY_WINDOW

    @property
    def max_workers(self) -> int:
        configured = self.settings.max_workers if self.settings else MAX_WORKERS
        return max(1, min(MAX_WORKERS, configured))

    def predict_performance(
        self,
        content: str,
        brand_id: str,
        context: PredictionContext,
        compliance_score: Optional[float] = None,
    ) -> PredictionOutcome:
        """Run all four sub-predictions for content.

        Raises:
            InvalidContentIdError: If the call is not ephemeral and
                context.content_id is not a UUID. Nothing is fetched.
            PredictionError: If the historical fetch or a predictor fails.
        """
        started = time.perf_counter()

        if not context.ephemeral and not is_valid_uuid(context.content_id):
            raise InvalidContentIdError(context.content_id)

        if compliance_score is None:
            compliance_score = (
                self.settings.default_compliance_score if self.settings else DEFAULT_COMPLIANCE_SCORE
            )

        try:
            history = self.repository.get_historical_data(
                brand_id, context.content_type, limit=self.history_window
            )
        except Exception as exc:
            log_error(
                logger,
                "prediction_history_fetch_failed",
                content_id=context.content_id,
                error=exc,
                event="prediction_history_fetch_failed",
                brand_id=brand_id,
            )
            raise PredictionError(f"Performance prediction failed: {exc}") from exc

        factors = analyze_content_factors(content)

        try:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                mlr_future = executor.submit(predict_mlr_approval, factors, history, compliance_score)
                engagement_future = executor.submit(predict_engagement, factors, history, context)
                risk_future = executor.submit(assess_risk, factors, history, context)
                ab_future = executor.submit(recommend_ab_tests, factors)
                mlr = mlr_future.result()
                engagement = engagement_future.result()
                risk = risk_future.result()
                ab = ab_future.result()
        except Exception as exc:
            raise PredictionError(f"Performance prediction failed: {exc}") from exc

        confidences = [p.confidence_level for p in (mlr, engagement, risk, ab)]
        result = PredictionResult(
            mlr_approval=mlr,
            engagement_forecast=engagement,
            risk_assessment=risk,
            ab_recommendations=ab,
            overall_confidence=int(sum(confidences) / len(confidences) + 0.5),
            processing_time_ms=round((time.perf_counter() - started) * 1000, 2),
        )

        persist = self._persist(context, result, brand_id)

        log_decision(
            logger,
            content_id=context.content_id,
            action="performance_prediction",
            outcome="persisted" if persist.succeeded else ("ephemeral" if not persist.attempted else "persist_failed"),
            brand_id=brand_id,
            content_type=context.content_type.value,
            history_count=len(history),
            mlr_score=mlr.predicted_score,
            engagement_score=engagement.predicted_score,
            risk_score=risk.predicted_score,
            ab_score=ab.predicted_score,
            overall_confidence=result.overall_confidence,
            duration_ms=result.processing_time_ms,
        )
        return PredictionOutcome(result=result, persist=persist)

    def _persist(self, context: PredictionContext, result: PredictionResult, brand_id: str) -> PersistOutcome:
        if context.ephemeral:
            return PersistOutcome.skipped()
        try:
            self.repository.save_predictions(context.content_id, context.content_type, result)
        except Exception as exc:
            log_error(
                logger,
                "prediction_save_failed",
                content_id=context.content_id,
                error=exc,
                event="prediction_save_failed",
                brand_id=brand_id,
            )
            return PersistOutcome.failed(exc)
        return PersistOutcome.ok()
