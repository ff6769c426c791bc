"""Unit tests for ComplianceService orchestration and history recording."""

from datetime import datetime, timedelta, timezone

import pytest

from src.compliance.compliance_service import ComplianceService
from src.compliance.firestore_repository import ComplianceHistoryRepository
from src.compliance.models import ContentType
from src.guardrails.merger import MissingBrandGuardrailsError
from src.guardrails.models import GuardrailLevel, StalenessLevel
from tests.fakes import PREFIX, FailingFirestoreClient

CONTENT = "Our trusted therapy offers proven efficacy with faster onset. See full prescribing information."


class TestMerged:
    def test_fetches_and_merges_all_tiers(self, compliance_service):
        merged = compliance_service.get_merged_guardrails("brand-1", "campaign-1", "asset-1")

        assert [item.level for item in merged.inheritance_chain] == [
            GuardrailLevel.BRAND,
            GuardrailLevel.CAMPAIGN,
            GuardrailLevel.ASSET,
        ]

    def test_unknown_children_are_skipped(self, compliance_service):
        merged = compliance_service.get_merged_guardrails("brand-1", "ghost-campaign", "ghost-asset")

        assert merged.campaign is None
        assert merged.asset is None
        assert len(merged.inheritance_chain) == 1

    def test_missing_brand_raises(self, compliance_service):
        with pytest.raises(MissingBrandGuardrailsError):
            compliance_service.get_merged_guardrails("ghost")


def test_guardrails_status_uses_settings(compliance_service, seeded_client):
    recent = (datetime.now(timezone.utc) - timedelta(days=80)).isoformat()
    seeded_client.collection(f"{PREFIX}brand_guardrails").docs["brand-1"]["last_reviewed"] = recent

    status = compliance_service.get_guardrails_status("brand-1")

    assert status.staleness_level == StalenessLevel.WARNING
    assert status.needs_attention is True
    assert compliance_service.get_guardrails_status("ghost").staleness_level == StalenessLevel.CRITICAL


def test_check_enhanced_content_compliance(compliance_service):
    check = compliance_service.check_enhanced_content_compliance(CONTENT, "brand-1", asset_id="asset-1")

    assert check.brand_compliance.score == 100
    assert check.campaign_compliance is None
    assert check.asset_compliance.score == 70
    assert check.overall_score == 85


class TestCheckAndRecord:
    def test_success_writes_history_row(self, compliance_service, seeded_client):
        outcome = compliance_service.check_and_record(
            CONTENT,
            "brand-1",
            content_id="content-1",
            content_type=ContentType.ASSET,
            campaign_id="campaign-1",
            asset_id="asset-1",
            checked_by="reviewer",
        )

        assert outcome.persist.attempted is True
        assert outcome.persist.succeeded is True
        rows = seeded_client.collection(f"{PREFIX}compliance_history").docs
        assert list(rows) == [outcome.history.id]
        row = rows[outcome.history.id]
        assert row["content_type"] == "asset"
        assert row["overall_compliance_score"] == outcome.check.overall_score
        assert row["guardrails_version"] == "1.0.0"
        assert row["has_overrides"] is True
        assert row["checked_by"] == "reviewer"
        assert "Missing required section: dosage" in row["warnings"]
        assert row["compliance_details"]["asset_level"]["format_adherence"] is False

    def test_write_failure_keeps_the_check(self, guardrails_repository, firestore_config, compliance_settings):
        history = ComplianceHistoryRepository(firestore_config)
        history._client = FailingFirestoreClient("history down")
        service = ComplianceService(guardrails_repository, history, settings=compliance_settings)

        outcome = service.check_and_record(
            CONTENT, "brand-1", content_id="content-1", content_type=ContentType.CAMPAIGN
        )

        assert outcome.check.overall_score == 100
        assert outcome.history is None
        assert outcome.persist.attempted is True
        assert outcome.persist.succeeded is False
        assert outcome.persist.error == "history down"

    def test_save_compliance_check_propagates_errors(
        self, guardrails_repository, firestore_config, compliance_settings
    ):
        history = ComplianceHistoryRepository(firestore_config)
        history._client = FailingFirestoreClient()
        service = ComplianceService(guardrails_repository, history, settings=compliance_settings)
        check = service.check_enhanced_content_compliance(CONTENT, "brand-1")

        with pytest.raises(RuntimeError):
            service.save_compliance_check("content-1", ContentType.CAMPAIGN, check)


def test_brand_only_record_has_no_overrides(compliance_service):
    check = compliance_service.check_enhanced_content_compliance(CONTENT, "brand-1")

    record = compliance_service.build_history_record("content-1", ContentType.CAMPAIGN, check)

    assert record.has_overrides is False
    assert record.campaign_compliance_score is None
    assert record.compliance_details["campaign_level"] is None


def test_history_is_newest_first_and_filtered(compliance_service, seeded_client):
    rows = seeded_client.collection(f"{PREFIX}compliance_history").docs
    base = {
        "content_type": "campaign",
        "brand_compliance_score": 90,
        "overall_compliance_score": 90,
        "guardrails_version": "1.0.0",
    }
    rows["h-old"] = {**base, "id": "h-old", "content_id": "c-1", "checked_at": "2026-01-01T00:00:00+00:00"}
    rows["h-new"] = {**base, "id": "h-new", "content_id": "c-1", "checked_at": "2026-03-01T00:00:00+00:00"}
    rows["h-asset"] = {
        **base,
        "id": "h-asset",
        "content_id": "c-1",
        "content_type": "asset",
        "checked_at": "2026-04-01T00:00:00+00:00",
    }
    rows["h-other"] = {**base, "id": "h-other", "content_id": "c-2", "checked_at": "2026-05-01T00:00:00+00:00"}

    history = compliance_service.get_compliance_history("c-1", ContentType.CAMPAIGN)

    assert [row.id for row in history] == ["h-new", "h-old"]
    assert compliance_service.get_compliance_history("c-9", ContentType.ASSET) == []
