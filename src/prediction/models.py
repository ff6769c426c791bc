"""Pydantic models for performance predictions and historical analytics."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from src.common.firestore import PersistOutcome
from src.compliance.models import ContentType


class PredictionType(str, Enum):
    MLR_APPROVAL = "mlr_approval"
    ENGAGEMENT = "engagement"
    RISK_SCORE = "risk_score"
    AB_RECOMMENDATION = "ab_recommendation"


class PredictionFactors(BaseModel):
    key_factors: List[str] = Field(default_factory=list)
    positive_indicators: List[str] = Field(default_factory=list)
    risk_indicators: List[str] = Field(default_factory=list)
    historical_patterns: List[str] = Field(default_factory=list)


class PerformancePrediction(BaseModel):
    """One sub-prediction. predicted_score and confidence_level are 0-100."""

    prediction_type: PredictionType
    predicted_score: int
    confidence_level: int
    prediction_factors: PredictionFactors
    recommendations: List[str] = Field(default_factory=list)


class PredictionResult(BaseModel):
    mlr_approval: PerformancePrediction
    engagement_forecast: PerformancePrediction
    risk_assessment: PerformancePrediction
    ab_recommendations: PerformancePrediction
    overall_confidence: int
    processing_time_ms: float

    def predictions(self) -> List[PerformancePrediction]:
        return [self.mlr_approval, self.engagement_forecast, self.risk_assessment, self.ab_recommendations]


class PredictionContext(BaseModel):
    """Where the content will run and whether results are kept.

    When ephemeral is True nothing is persisted and content_id may be any
    string; otherwise content_id must be a UUID.
    """

    content_type: ContentType
    content_id: str
    audience: Optional[str] = None
    market: Optional[str] = None
    channel: Optional[str] = None
    asset_type: Optional[str] = None
    ephemeral: bool = False


class AnalyticsMetrics(BaseModel):
    engagement_rate: Optional[float] = None
    conversion_rate: Optional[float] = None
    mlr_approval_time: Optional[float] = None
    approval_success_rate: Optional[float] = None
    audience_reach: Optional[float] = None
    click_through_rate: Optional[float] = None
    sentiment_score: Optional[float] = None


class ContentAnalytics(BaseModel):
    """Historical performance of past content (read-only input)."""

    content_id: str
    content_type: ContentType
    brand_id: str
    metrics: AnalyticsMetrics = Field(default_factory=AnalyticsMetrics)
    performance_score: Optional[float] = None
    created_at: Optional[datetime] = None


class PredictionRecord(BaseModel):
    """Stored row in performance_predictions."""

    id: str
    content_id: str
    content_type: ContentType
    prediction_type: PredictionType
    predicted_score: int
    confidence_level: int
    prediction_factors: PredictionFactors
    predicted_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert to Firestore-compatible dict."""
        return self.model_dump(mode="json")


@dataclass(frozen=True)
class PredictionOutcome:
    """Computed predictions plus what happened when persisting them."""

    result: PredictionResult
    persist: PersistOutcome
