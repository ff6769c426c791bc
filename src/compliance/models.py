"""Pydantic models for compliance check results and the compliance history.

EnhancedComplianceCheck is computed per request. ComplianceHistory rows are
write-once audit records stored in the compliance_history collection.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from src.common.firestore import PersistOutcome
from src.guardrails.models import GuardrailLevel, RuleCategory


class ContentType(str, Enum):
    CAMPAIGN = "campaign"
    ASSET = "asset"


class IssueSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BrandCompliance(BaseModel):
    """Brand-tier result. Sub-measures are percentages in [0, 100]."""

    score: int
    tone_match: int
    key_message_alignment: int
    regulatory_compliance: int
    suggestions: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class CampaignCompliance(BaseModel):
    score: int
    message_priority_adherence: bool
    audience_tone_match: bool
    competitive_positioning: bool
    warnings: List[str] = Field(default_factory=list)


class AssetCompliance(BaseModel):
    """Asset-tier result.

    channel_requirements_met and regulatory_placement_correct are reported
    for reviewers only and do not affect score.
    """

    score: int
    format_adherence: bool
    character_limit_compliance: bool
    channel_requirements_met: bool = True
    regulatory_placement_correct: bool = True
    warnings: List[str] = Field(default_factory=list)


class ComplianceIssue(BaseModel):
    level: GuardrailLevel
    category: RuleCategory
    message: str
    severity: IssueSeverity


class ComplianceRecommendation(BaseModel):
    priority: int
    action: str
    category: RuleCategory
    level: GuardrailLevel


class CompliancePerformancePrediction(BaseModel):
    """Quick outlook derived from the overall score alone."""

    mlr_approval_likelihood: int
    estimated_review_cycles: int
    risk_factors: List[str] = Field(default_factory=list)


class EnhancedComplianceCheck(BaseModel):
    overall_score: int
    brand_compliance: BrandCompliance
    campaign_compliance: Optional[CampaignCompliance] = None
    asset_compliance: Optional[AssetCompliance] = None
    critical_issues: List[ComplianceIssue] = Field(default_factory=list)
    recommended_actions: List[ComplianceRecommendation] = Field(default_factory=list)
    performance_prediction: CompliancePerformancePrediction


class ComplianceHistory(BaseModel):
    """One audit row per recorded compliance check."""

    id: str
    content_id: str
    content_type: ContentType
    brand_compliance_score: int
    campaign_compliance_score: Optional[int] = None
    asset_compliance_score: Optional[int] = None
    overall_compliance_score: int
    compliance_details: Dict[str, Any] = Field(default_factory=dict)
    suggestions: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    critical_issues: List[ComplianceIssue] = Field(default_factory=list)
    has_overrides: bool = False
    checked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    checked_by: Optional[str] = None
    guardrails_version: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to Firestore-compatible dict."""
        return self.model_dump(mode="json")


@dataclass(frozen=True)
class ComplianceRecordOutcome:
    """A computed check plus what happened when recording it."""

    check: EnhancedComplianceCheck
    history: Optional[ComplianceHistory]
    persist: PersistOutcome
