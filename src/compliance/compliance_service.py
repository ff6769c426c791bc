"""Orchestration service for multi-level compliance checks.

Fetches the guardrail tiers, merges them, scores content against each tier
and optionally records the outcome in the compliance history.
"""

import time
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from src.common.config import (
    DEFAULT_GUARDRAILS_VERSION,
    DEFAULT_STALENESS_CRITICAL_DAYS,
    DEFAULT_STALENESS_WARNING_DAYS,
    ComplianceSettings,
)
from src.common.firestore import PersistOutcome
from src.common.logging import get_logger, log_audit, log_decision, log_error
from src.compliance.checker import evaluate_compliance
from src.compliance.firestore_repository import ComplianceHistoryRepository
from src.compliance.models import (
    ComplianceHistory,
    ComplianceRecordOutcome,
    ContentType,
    EnhancedComplianceCheck,
)
from src.guardrails.firestore_repository import GuardrailsRepository
from src.guardrails.merger import MissingBrandGuardrailsError, merge_guardrails
from src.guardrails.models import GuardrailsStatus, MergedGuardrails
from src.guardrails.status import get_guardrails_status

logger = get_logger(__name__)


class ComplianceService:
    """Merge guardrails and score content against them."""

    def __init__(
        self,
        guardrails_repository: GuardrailsRepository,
        history_repository: ComplianceHistoryRepository,
        settings: Optional[ComplianceSettings] = None,
    ):
        self.guardrails_repository = guardrails_repository
        self.history_repository = history_repository
        self.settings = settings

    @property
    def guardrails_version(self) -> str:
        return self.settings.guardrails_version if self.settings else DEFAULT_GUARDRAILS_VERSION

    def get_merged_guardrails(
        self,
        brand_id: str,
        campaign_id: Optional[str] = None,
        asset_id: Optional[str] = None,
    ) -> MergedGuardrails:
        """Fetch the requested tiers and merge them.

        Missing campaign or asset tiers are skipped.

        Raises:
            MissingBrandGuardrailsError: If the brand has no guardrails.
        """
        brand = self.guardrails_repository.get_brand_guardrails(brand_id)
        if brand is None:
            raise MissingBrandGuardrailsError(brand_id)

        campaign = self.guardrails_repository.get_campaign_guardrails(campaign_id) if campaign_id else None
        asset = self.guardrails_repository.get_asset_guardrails(asset_id) if asset_id else None

        merged = merge_guardrails(brand, campaign=campaign, asset=asset)
        logger.info(
            "guardrails_merged",
            extra={
                "event": "guardrails_merged",
                "brand_id": brand_id,
                "campaign_id": campaign_id,
                "asset_id": asset_id,
                "campaign_found": campaign is not None,
                "asset_found": asset is not None,
                "chain_length": len(merged.inheritance_chain),
            },
        )
        return merged

    def get_guardrails_status(self, brand_id: str) -> GuardrailsStatus:
        """Review staleness for a brand; a missing brand reports critical."""
        brand = self.guardrails_repository.get_brand_guardrails(brand_id)
        return get_guardrails_status(
            brand,
            critical_days=(
                self.settings.staleness_critical_days if self.settings else DEFAULT_STALENESS_CRITICAL_DAYS
            ),
            warning_days=(
                self.settings.staleness_warning_days if self.settings else DEFAULT_STALENESS_WARNING_DAYS
            ),
        )

    def check_enhanced_content_compliance(
        self,
        content: str,
        brand_id: str,
        campaign_id: Optional[str] = None,
        asset_id: Optional[str] = None,
        asset_type: Optional[str] = None,
    ) -> EnhancedComplianceCheck:
        """Score content against brand, campaign and asset tiers."""
        started = time.perf_counter()
        merged = self.get_merged_guardrails(brand_id, campaign_id, asset_id)
        check = evaluate_compliance(content, merged, asset_type=asset_type)

        log_decision(
            logger,
            content_id=None,
            action="compliance_check",
            outcome=str(check.overall_score),
            brand_id=brand_id,
            campaign_id=campaign_id,
            asset_id=asset_id,
            brand_score=check.brand_compliance.score,
            campaign_score=check.campaign_compliance.score if check.campaign_compliance else None,
            asset_score=check.asset_compliance.score if check.asset_compliance else None,
            critical_issue_count=len(check.critical_issues),
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return check

    def build_history_record(
        self,
        content_id: str,
        content_type: ContentType,
        check: EnhancedComplianceCheck,
        checked_by: Optional[str] = None,
    ) -> ComplianceHistory:
        warnings = list(check.brand_compliance.warnings)
        if check.campaign_compliance:
            warnings.extend(check.campaign_compliance.warnings)
        if check.asset_compliance:
            warnings.extend(check.asset_compliance.warnings)

        return ComplianceHistory(
            id=str(uuid.uuid4()),
            content_id=content_id,
            content_type=ContentType(content_type),
            brand_compliance_score=check.brand_compliance.score,
            campaign_compliance_score=check.campaign_compliance.score if check.campaign_compliance else None,
            asset_compliance_score=check.asset_compliance.score if check.asset_compliance else None,
            overall_compliance_score=check.overall_score,
            compliance_details={
                "brand_level": check.brand_compliance.model_dump(mode="json"),
                "campaign_level": (
                    check.campaign_compliance.model_dump(mode="json") if check.campaign_compliance else None
                ),
                "asset_level": check.asset_compliance.model_dump(mode="json") if check.asset_compliance else None,
            },
            suggestions=[action.action for action in check.recommended_actions],
            warnings=warnings,
            critical_issues=list(check.critical_issues),
            has_overrides=check.campaign_compliance is not None or check.asset_compliance is not None,
            checked_at=datetime.now(timezone.utc),
            checked_by=checked_by,
            guardrails_version=self.guardrails_version,
        )

    def save_compliance_check(
        self,
        content_id: str,
        content_type: ContentType,
        check: EnhancedComplianceCheck,
        checked_by: Optional[str] = None,
    ) -> ComplianceHistory:
        """Insert a history row for check. Repository errors propagate."""
        record = self.build_history_record(content_id, content_type, check, checked_by)
        self.history_repository.save_compliance_check(record)
        log_audit(
            logger,
            actor=checked_by,
            action="record_compliance_check",
            target=content_id,
            content_type=record.content_type.value,
            overall_score=record.overall_compliance_score,
            history_id=record.id,
        )
        return record

    def check_and_record(
        self,
        content: str,
        brand_id: str,
        *,
        content_id: str,
        content_type: ContentType,
        campaign_id: Optional[str] = None,
        asset_id: Optional[str] = None,
        asset_type: Optional[str] = None,
        checked_by: Optional[str] = None,
    ) -> ComplianceRecordOutcome:
        """Run a check and record it; a failed write does not fail the check."""
        check = self.check_enhanced_content_compliance(
            content, brand_id, campaign_id=campaign_id, asset_id=asset_id, asset_type=asset_type
        )
        try:
            record = self.save_compliance_check(content_id, content_type, check, checked_by)
        except Exception as exc:
            log_error(
                logger,
                "compliance_history_write_failed",
                content_id=content_id,
                error=exc,
                event="compliance_history_write_failed",
                brand_id=brand_id,
            )
            return ComplianceRecordOutcome(check=check, history=None, persist=PersistOutcome.failed(exc))
        return ComplianceRecordOutcome(check=check, history=record, persist=PersistOutcome.ok())

    def get_compliance_history(self, content_id: str, content_type: ContentType) -> List[ComplianceHistory]:
        """History rows for a content item, newest first."""
        return self.history_repository.get_compliance_history(content_id, content_type)
