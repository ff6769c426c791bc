"""Unit tests for the heuristic sub-predictors."""

import pytest

from src.compliance.models import ContentType
from src.prediction.content_factors import analyze_content_factors
from src.prediction.models import ContentAnalytics, PredictionContext, PredictionType
from src.prediction.predictors import (
    assess_risk,
    calculate_confidence,
    predict_engagement,
    predict_mlr_approval,
    recommend_ab_tests,
)

PLAIN = analyze_content_factors("Hello world")


def _context(content_type=ContentType.CAMPAIGN, channel=None) -> PredictionContext:
    return PredictionContext(content_type=content_type, content_id="c-1", channel=channel, ephemeral=True)


def _history(n: int, **metrics) -> list:
    performance_score = metrics.pop("performance_score", None)
    return [
        ContentAnalytics(
            content_id=f"h-{i}",
            content_type=ContentType.CAMPAIGN,
            brand_id="brand-1",
            metrics=metrics,
            performance_score=performance_score,
        )
        for i in range(n)
    ]


@pytest.mark.parametrize(
    "data_points,base_score,expected",
    [
        (0, 50, 30),
        (0, 30, 30),
        (5, 80, 50),
        (10, 50, 50),
        (25, 90, 70),
    ],
)
def test_calculate_confidence(data_points, base_score, expected):
    assert calculate_confidence(data_points, base_score) == expected


class TestMlrApproval:
    def test_defaults_without_history(self):
        prediction = predict_mlr_approval(PLAIN, [])

        assert prediction.prediction_type == PredictionType.MLR_APPROVAL
        assert prediction.predicted_score == 77
        assert prediction.confidence_level == 40
        assert prediction.prediction_factors.historical_patterns == [
            "Brand average approval rate: 70%",
            "Historical approval timeline: 14 days",
        ]
        assert prediction.recommendations == [
            "Include appropriate regulatory language and warnings",
            "Reference clinical studies to support claims",
        ]

    def test_history_and_low_compliance(self):
        history = _history(2, approval_success_rate=90, mlr_approval_time=10) + _history(
            1, approval_success_rate=90, mlr_approval_time=11
        )

        prediction = predict_mlr_approval(PLAIN, history, compliance_score=60)

        assert prediction.predicted_score == 69
        assert "Historical approval timeline: 10 days" in prediction.prediction_factors.historical_patterns
        assert prediction.recommendations[0] == (
            "Consider adding regulatory disclaimers to improve approval likelihood"
        )

    def test_regulatory_and_evidence_lift_score(self):
        factors = analyze_content_factors("Clinical study data. See full prescribing information.")

        prediction = predict_mlr_approval(factors, [])

        assert prediction.predicted_score == 92
        assert "Contains appropriate regulatory language" in prediction.prediction_factors.positive_indicators


class TestEngagement:
    def test_short_plain_content(self):
        assert predict_engagement(PLAIN, [], _context()).predicted_score == 42

    def test_channel_adjustment(self):
        assert predict_engagement(PLAIN, [], _context(channel="social")).predicted_score == 50
        assert predict_engagement(PLAIN, [], _context(channel="print")).predicted_score == 37

    def test_score_is_clamped(self):
        factors = analyze_content_factors("Click for your amazing image")
        history = _history(3, engagement_rate=99)

        prediction = predict_engagement(factors, history, _context(channel="social"))

        assert prediction.predicted_score == 100
        assert "Contains clear call-to-action" in prediction.prediction_factors.positive_indicators


class TestRisk:
    def test_unapproved_claims_drive_high_risk(self):
        factors = analyze_content_factors("This treatment is the best and guarantees a cure")

        campaign = assess_risk(factors, [], _context())
        asset = assess_risk(factors, [], _context(content_type=ContentType.ASSET))

        assert campaign.predicted_score == 90
        assert asset.predicted_score == 100
        assert campaign.predicted_score >= 75
        assert "May contain unapproved claims" in campaign.prediction_factors.risk_indicators
        assert campaign.recommendations[0] == "High risk content - recommend thorough legal review"

    def test_risky_history_share(self):
        history = _history(3, performance_score=50) + _history(7, performance_score=85)

        prediction = assess_risk(PLAIN, history, _context())

        assert prediction.predicted_score == 30
        assert "30% of similar content had issues" in prediction.prediction_factors.historical_patterns

    def test_minor_risky_history_ignored(self):
        history = _history(2, performance_score=50) + _history(8, performance_score=85)

        assert assess_risk(PLAIN, history, _context()).predicted_score == 20

    def test_empty_history_adds_nothing(self):
        assert assess_risk(PLAIN, [], _context()).predicted_score == 20


class TestAbRecommendations:
    def test_nothing_to_test(self):
        prediction = recommend_ab_tests(PLAIN)

        assert prediction.predicted_score == 20
        assert prediction.confidence_level == 60
        assert prediction.recommendations == [
            "Limited A/B testing opportunities - consider adding more variable elements"
        ]
        assert "Limited testing opportunities" in prediction.prediction_factors.risk_indicators

    def test_all_elements(self):
        prediction = recommend_ab_tests(analyze_content_factors("Click now!\nAn amazing image"))

        assert prediction.predicted_score == 100
        assert prediction.confidence_level == 85
        assert prediction.prediction_factors.positive_indicators[0] == "4 testable elements identified"


class TestLowerClamp:
    def test_mlr_floors_at_zero(self):
        content = " ".join(["word"] * 301) + " the best mechanism"
        factors = analyze_content_factors(content)
        assert factors.has_marketing_claims and factors.is_complex_content

        prediction = predict_mlr_approval(factors, _history(5, approval_success_rate=0), compliance_score=0)

        assert prediction.predicted_score == 0

    def test_engagement_floors_at_zero(self):
        history = _history(5, engagement_rate=0)

        prediction = predict_engagement(PLAIN, history, _context(channel="print"))

        assert prediction.predicted_score == 0
        assert "Content may lack sufficient detail" in prediction.prediction_factors.risk_indicators

    @pytest.mark.parametrize("content", ["Hello world", "This treatment is the best and guarantees a cure"])
    def test_every_sub_prediction_stays_in_range(self, content):
        factors = analyze_content_factors(content)
        zero_history = _history(5, approval_success_rate=0, engagement_rate=0, performance_score=0)
        context = _context(content_type=ContentType.ASSET, channel="print")

        predictions = [
            predict_mlr_approval(factors, zero_history, compliance_score=0),
            predict_engagement(factors, zero_history, context),
            assess_risk(factors, zero_history, context),
            recommend_ab_tests(factors),
        ]

        assert all(0 <= p.predicted_score <= 100 for p in predictions)
