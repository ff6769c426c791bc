"""Unit tests for PredictionService orchestration and persistence."""

import pytest

from src.compliance.models import ContentType
from src.prediction.firestore_repository import AnalyticsRepository
from src.prediction.models import PredictionContext, PredictionType
from src.prediction.prediction_service import (
    InvalidContentIdError,
    PredictionError,
    PredictionService,
    is_valid_uuid,
)
from tests.fakes import PREFIX, FailingFirestoreClient, FakeFirestoreClient

CONTENT_ID = "3f2b6c1e-8d4a-4e5f-9a7b-1c2d3e4f5a6b"
ANALYTICS = f"{PREFIX}content_analytics"
PREDICTIONS = f"{PREFIX}performance_predictions"


def _context(content_id: str = CONTENT_ID, ephemeral: bool = False) -> PredictionContext:
    return PredictionContext(content_type=ContentType.CAMPAIGN, content_id=content_id, ephemeral=ephemeral)


class SaveFailingRepository(AnalyticsRepository):
    def save_predictions(self, content_id, content_type, result):
        raise RuntimeError("predictions collection unavailable")


@pytest.mark.parametrize(
    "value,expected",
    [
        (CONTENT_ID, True),
        (CONTENT_ID.upper(), True),
        ("not-a-uuid", False),
        ("", False),
        (None, False),
    ],
)
def test_is_valid_uuid(value, expected):
    assert is_valid_uuid(value) is expected


def test_invalid_content_id_rejected_before_fetch(prediction_service, seeded_client):
    with pytest.raises(InvalidContentIdError):
        prediction_service.predict_performance("Hello world", "brand-1", _context("not-a-uuid"))

    assert seeded_client.collection(ANALYTICS).stream_calls == 0
    assert seeded_client.collection(PREDICTIONS).docs == {}


def test_ephemeral_call_accepts_any_id_and_writes_nothing(prediction_service, seeded_client):
    outcome = prediction_service.predict_performance(
        "Hello world", "brand-1", _context("not-a-uuid", ephemeral=True)
    )

    assert outcome.persist.attempted is False
    assert outcome.persist.succeeded is False
    assert outcome.result.overall_confidence == 43
    assert seeded_client.collection(ANALYTICS).stream_calls == 1
    assert seeded_client.collection(PREDICTIONS).docs == {}


def test_persisted_call_writes_four_rows(prediction_service, seeded_client):
    outcome = prediction_service.predict_performance("Hello world", "brand-1", _context())

    assert outcome.persist.attempted is True
    assert outcome.persist.succeeded is True
    rows = list(seeded_client.collection(PREDICTIONS).docs.values())
    assert len(rows) == 4
    assert {row["prediction_type"] for row in rows} == {t.value for t in PredictionType}
    assert all(row["content_id"] == CONTENT_ID for row in rows)
    assert all(row["content_type"] == "campaign" for row in rows)


def test_history_is_filtered_by_brand_and_type(prediction_service, seeded_client):
    docs = seeded_client.collection(ANALYTICS).docs
    docs["a-1"] = {
        "content_type": "campaign",
        "brand_id": "brand-1",
        "metrics": {"approval_success_rate": 100, "mlr_approval_time": 7},
        "created_at": "2026-02-01T00:00:00+00:00",
    }
    docs["a-2"] = {
        "content_type": "asset",
        "brand_id": "brand-1",
        "metrics": {"approval_success_rate": 0},
        "created_at": "2026-02-02T00:00:00+00:00",
    }
    docs["a-3"] = {
        "content_type": "campaign",
        "brand_id": "brand-2",
        "metrics": {"approval_success_rate": 0},
        "created_at": "2026-02-03T00:00:00+00:00",
    }

    outcome = prediction_service.predict_performance("Hello world", "brand-1", _context(ephemeral=True))

    patterns = outcome.result.mlr_approval.prediction_factors.historical_patterns
    assert patterns == ["Brand average approval rate: 100%", "Historical approval timeline: 7 days"]


def test_compliance_score_is_forwarded(prediction_service):
    outcome = prediction_service.predict_performance(
        "Hello world", "brand-1", _context(ephemeral=True), compliance_score=40
    )

    # 40 * 0.7 + 70 * 0.3
    assert outcome.result.mlr_approval.predicted_score == 49


def test_save_failure_keeps_result(firestore_config, seeded_client, prediction_settings):
    repository = SaveFailingRepository(firestore_config)
    repository._client = seeded_client
    service = PredictionService(repository, settings=prediction_settings)

    outcome = service.predict_performance("Hello world", "brand-1", _context())

    assert outcome.result.risk_assessment.predicted_score == 20
    assert outcome.persist.attempted is True
    assert outcome.persist.succeeded is False
    assert outcome.persist.error == "predictions collection unavailable"


def test_fetch_failure_raises_prediction_error(firestore_config, prediction_settings):
    repository = AnalyticsRepository(firestore_config)
    repository._client = FailingFirestoreClient()
    service = PredictionService(repository, settings=prediction_settings)

    with pytest.raises(PredictionError, match="Performance prediction failed"):
        service.predict_performance("Hello world", "brand-1", _context(ephemeral=True))


def test_unapproved_claims_scenario(prediction_service, seeded_client):
    outcome = prediction_service.predict_performance(
        "This treatment is the best and guarantees a cure", "brand-1", _context()
    )

    risk = outcome.result.risk_assessment
    assert risk.predicted_score >= 75
    assert "May contain unapproved claims" in risk.prediction_factors.risk_indicators
    assert all(0 <= p.predicted_score <= 100 for p in outcome.result.predictions())
    assert len(seeded_client.collection(PREDICTIONS).docs) == 4


def test_rejected_batch_leaves_no_prediction_rows(firestore_config, prediction_settings):
    client = FakeFirestoreClient(batch_fail_after=2)
    repository = AnalyticsRepository(firestore_config)
    repository._client = client
    service = PredictionService(repository, settings=prediction_settings)

    outcome = service.predict_performance("Hello world", "brand-1", _context())

    assert outcome.persist.attempted is True
    assert outcome.persist.succeeded is False
    assert "batch rejected" in outcome.persist.error
    assert client.collection(PREDICTIONS).docs == {}
