"""Heuristic sub-predictions over content factors and brand history.

Each predictor is a pure function returning a PerformancePrediction with the
score clamped to [0, 100]. PredictionService runs them concurrently.
"""

import math
from typing import List, Optional, Sequence

from src.compliance.models import ContentType
from src.prediction.content_factors import ContentFactors
from src.prediction.models import (
    ContentAnalytics,
    PerformancePrediction,
    PredictionContext,
    PredictionFactors,
    PredictionType,
)

DEFAULT_COMPLIANCE_SCORE = 80.0
DEFAULT_APPROVAL_RATE = 70.0
DEFAULT_ENGAGEMENT = 50.0
DEFAULT_APPROVAL_DAYS = 14

CONFIDENCE_BASE = 30
CONFIDENCE_MIN = 30
CONFIDENCE_MAX = 95

RISK_BASE = 20
RISK_HISTORY_SCORE = 60
RISK_HISTORY_SHARE = 0.3

CHANNEL_ENGAGEMENT_ADJUSTMENTS = {"email": 5, "social": 8, "print": -5}


def _round(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def calculate_confidence(data_points: int, base_score: float) -> int:
    """Confidence grows with history size and with a strong base score."""
    confidence = CONFIDENCE_BASE
    if data_points >= 20:
        confidence += 30
    elif data_points >= 10:
        confidence += 20
    elif data_points >= 5:
        confidence += 10

    if base_score >= 80:
        confidence += 10
    elif base_score <= 40:
        confidence -= 10

    return int(_clamp(confidence, CONFIDENCE_MIN, CONFIDENCE_MAX))


def _indicators(*pairs) -> List[str]:
    return [text for present, text in pairs if present]


# --- MLR approval ---


def _mlr_recommendations(factors: ContentFactors, score: float) -> List[str]:
    return _indicators(
        (score < 70, "Consider adding regulatory disclaimers to improve approval likelihood"),
        (not factors.has_regulatory_language, "Include appropriate regulatory language and warnings"),
        (factors.has_marketing_claims, "Review marketing claims against approved indication"),
        (factors.has_superlatives, "Replace superlative language with evidence-based claims"),
        (not factors.has_clinical_evidence, "Reference clinical studies to support claims"),
    )


def predict_mlr_approval(
    factors: ContentFactors,
    history: Sequence[ContentAnalytics],
    compliance_score: Optional[float] = None,
) -> PerformancePrediction:
    if compliance_score is None:
        compliance_score = DEFAULT_COMPLIANCE_SCORE

    approval_history = [h for h in history if h.metrics.approval_success_rate is not None]
    approval_rate = (
        _mean([h.metrics.approval_success_rate for h in approval_history])
        if approval_history
        else DEFAULT_APPROVAL_RATE
    )

    score = compliance_score * 0.7 + approval_rate * 0.3
    if factors.has_regulatory_language:
        score += 10
    if factors.has_clinical_evidence:
        score += 5
    if factors.has_marketing_claims:
        score -= 15
    if factors.is_complex_content:
        score -= 5
    score = _clamp(score)

    approval_times = [h.metrics.mlr_approval_time for h in approval_history if h.metrics.mlr_approval_time is not None]
    approval_days = _round(_mean(approval_times)) if approval_times else DEFAULT_APPROVAL_DAYS

    return PerformancePrediction(
        prediction_type=PredictionType.MLR_APPROVAL,
        predicted_score=_round(score),
        confidence_level=calculate_confidence(len(approval_history), compliance_score),
        prediction_factors=PredictionFactors(
            key_factors=[
                "Compliance score",
                "Historical approval rate",
                "Regulatory language presence",
                "Clinical evidence citation",
            ],
            positive_indicators=_indicators(
                (factors.has_regulatory_language, "Contains appropriate regulatory language"),
                (factors.has_clinical_evidence, "References clinical evidence"),
                (factors.has_approved_claims, "Uses pre-approved claims"),
            ),
            risk_indicators=_indicators(
                (factors.has_marketing_claims, "Contains potentially problematic marketing claims"),
                (factors.has_superlatives, "Uses superlative language"),
                (factors.is_complex_content, "Complex content may require additional review"),
            ),
            historical_patterns=[
                f"Brand average approval rate: {_round(approval_rate)}%",
                f"Historical approval timeline: {approval_days} days",
            ],
        ),
        recommendations=_mlr_recommendations(factors, score),
    )


# --- Engagement ---


def _engagement_recommendations(factors: ContentFactors) -> List[str]:
    return _indicators(
        (not factors.has_call_to_action, "Add a clear, compelling call-to-action"),
        (factors.is_too_long, "Consider shortening content for better engagement"),
        (factors.is_too_short, "Expand content to provide more value to audience"),
        (
            not factors.has_emotional_language,
            "Include more engaging, emotional language while maintaining compliance",
        ),
        (not factors.is_personalized, "Use more personalized language to connect with audience"),
    )


def predict_engagement(
    factors: ContentFactors,
    history: Sequence[ContentAnalytics],
    context: PredictionContext,
) -> PerformancePrediction:
    engagement_history = [h for h in history if h.metrics.engagement_rate is not None]
    average = (
        _mean([h.metrics.engagement_rate for h in engagement_history])
        if engagement_history
        else DEFAULT_ENGAGEMENT
    )

    score = average
    if factors.has_call_to_action:
        score += 15
    if factors.has_emotional_language:
        score += 10
    if factors.is_personalized:
        score += 12
    if factors.has_visual_elements:
        score += 8
    if factors.is_optimal_length:
        score += 5
    if factors.is_too_long:
        score -= 10
    if factors.is_too_short:
        score -= 8
    score += CHANNEL_ENGAGEMENT_ADJUSTMENTS.get(context.channel or "", 0)
    score = _clamp(score)

    return PerformancePrediction(
        prediction_type=PredictionType.ENGAGEMENT,
        predicted_score=_round(score),
        confidence_level=calculate_confidence(len(engagement_history), average),
        prediction_factors=PredictionFactors(
            key_factors=[
                "Historical engagement rate",
                "Content structure and format",
                "Call-to-action presence",
                "Channel optimization",
            ],
            positive_indicators=_indicators(
                (factors.has_call_to_action, "Contains clear call-to-action"),
                (factors.has_emotional_language, "Uses engaging emotional language"),
                (factors.is_personalized, "Personalized content approach"),
                (factors.is_optimal_length, "Optimal content length"),
            ),
            risk_indicators=_indicators(
                (factors.is_too_long, "Content may be too long for audience"),
                (factors.is_too_short, "Content may lack sufficient detail"),
                (not factors.has_call_to_action, "Missing clear call-to-action"),
            ),
            historical_patterns=[
                f"Brand average engagement: {_round(average)}%",
                "Best performing content type: Educational content",
            ],
        ),
        recommendations=_engagement_recommendations(factors),
    )


# --- Risk ---


def _risk_recommendations(factors: ContentFactors, score: float) -> List[str]:
    return _indicators(
        (score > 60, "High risk content - recommend thorough legal review"),
        (factors.has_unapproved_claims, "Remove or modify potentially unapproved claims"),
        (factors.has_superlatives, "Replace absolute statements with qualified claims"),
        (not factors.has_regulatory_language, "Add required regulatory disclaimers and warnings"),
        (factors.has_competitive_claims, "Ensure competitive claims are substantiated and approved"),
    )


def assess_risk(
    factors: ContentFactors,
    history: Sequence[ContentAnalytics],
    context: PredictionContext,
) -> PerformancePrediction:
    score: float = RISK_BASE
    if factors.has_marketing_claims:
        score += 25
    if factors.has_superlatives:
        score += 15
    if factors.has_unapproved_claims:
        score += 30
    if factors.has_competitive_claims:
        score += 20
    if factors.is_complex_content:
        score += 10
    if not factors.has_regulatory_language and context.content_type == ContentType.ASSET:
        score += 15

    risky = [h for h in history if h.performance_score is not None and h.performance_score < RISK_HISTORY_SCORE]
    if history and len(risky) >= len(history) * RISK_HISTORY_SHARE:
        score += 10
    score = _clamp(score)

    risky_share = _round(len(risky) / max(len(history), 1) * 100)

    return PerformancePrediction(
        prediction_type=PredictionType.RISK_SCORE,
        predicted_score=_round(score),
        confidence_level=calculate_confidence(len(history), 80),
        prediction_factors=PredictionFactors(
            key_factors=[
                "Marketing claim analysis",
                "Regulatory compliance indicators",
                "Content complexity assessment",
                "Historical risk patterns",
            ],
            positive_indicators=_indicators(
                (factors.has_regulatory_language, "Contains regulatory disclaimers"),
                (factors.has_approved_claims, "Uses pre-approved claims"),
                (not factors.has_superlatives, "Avoids superlative language"),
            ),
            risk_indicators=_indicators(
                (factors.has_marketing_claims, "Contains marketing claims requiring review"),
                (factors.has_superlatives, "Uses superlative or absolute language"),
                (factors.has_unapproved_claims, "May contain unapproved claims"),
                (factors.has_competitive_claims, "Contains competitive comparisons"),
            ),
            historical_patterns=[
                f"{risky_share}% of similar content had issues",
                "Risk patterns based on brand history",
            ],
        ),
        recommendations=_risk_recommendations(factors, score),
    )


# --- A/B testing ---


def _testable_elements(factors: ContentFactors) -> List[str]:
    return _indicators(
        (factors.has_call_to_action, "call-to-action"),
        (factors.has_headlines, "headlines"),
        (factors.has_emotional_language, "tone"),
        (factors.has_visual_elements, "visuals"),
    )


def _ab_recommendations(elements: List[str], factors: ContentFactors) -> List[str]:
    recommendations = _indicators(
        ("call-to-action" in elements, "Test different call-to-action phrases and button colors"),
        ("headlines" in elements, "Test benefit-focused vs. feature-focused headlines"),
        ("tone" in elements, "Test professional vs. conversational tone variations"),
        ("visuals" in elements, "Test different visual elements and layouts"),
        (factors.has_emotional_language, "Test emotional vs. rational messaging approaches"),
    )
    return recommendations or ["Limited A/B testing opportunities - consider adding more variable elements"]


def recommend_ab_tests(factors: ContentFactors) -> PerformancePrediction:
    elements = _testable_elements(factors)
    return PerformancePrediction(
        prediction_type=PredictionType.AB_RECOMMENDATION,
        predicted_score=min(100, len(elements) * 20 + 20),
        confidence_level=85 if len(elements) > 2 else 60,
        prediction_factors=PredictionFactors(
            key_factors=[
                "Testable element identification",
                "Historical A/B test performance",
                "Content variation potential",
                "Audience segmentation opportunities",
            ],
            positive_indicators=[f"{len(elements)} testable elements identified"]
            + _indicators(
                (factors.has_call_to_action, "Multiple CTA options possible"),
                (factors.has_emotional_language, "Tone variations testable"),
            ),
            risk_indicators=_indicators(
                (len(elements) < 2, "Limited testing opportunities"),
                (not factors.has_call_to_action, "No clear action to optimize"),
            ),
            historical_patterns=[
                "A/B testing recommendations based on content analysis",
                f"Testable elements: {', '.join(elements)}",
            ],
        ),
        recommendations=_ab_recommendations(elements, factors),
    )
