"""Pydantic models for the three guardrail tiers and the merged result.

Tier documents mirror the Firestore collections:
- brand_guardrails (one per brand, keyed by brand_id)
- campaign_guardrails (optional overlay, keyed by campaign_id)
- asset_guardrails (optional overlay, keyed by asset_id)

MergedGuardrails is derived by src.guardrails.merger and never persisted.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class GuardrailLevel(str, Enum):
    """Tier of specificity a rule comes from."""

    BRAND = "brand"
    CAMPAIGN = "campaign"
    ASSET = "asset"


class OverrideLevel(str, Enum):
    """How far a campaign or asset tier departs from its parent."""

    CAMPAIGN = "campaign"
    ASSET = "asset"
    CAMPAIGN_OVERRIDE = "campaign_override"
    BRAND_OVERRIDE = "brand_override"
    FULL_OVERRIDE = "full_override"


class RuleCategory(str, Enum):
    """Rule families tracked in rule_sources, issues and actions."""

    MESSAGING = "messaging"
    TONE = "tone"
    COMPETITIVE = "competitive"
    REGULATORY = "regulatory"
    VISUAL = "visual"
    FORMAT = "format"
    REVIEW = "review"


class StalenessLevel(str, Enum):
    FRESH = "fresh"
    WARNING = "warning"
    CRITICAL = "critical"


# --- Shared rule fragments ---


class KeyMessage(BaseModel):
    """A brand message; identity for de-duplication is the (id, text) pair."""

    id: str
    text: str

    def identity(self) -> tuple:
        return (self.id, self.text)


class ToneGuidelines(BaseModel):
    primary: str
    secondary: str
    descriptors: List[str] = Field(default_factory=list)


class ToneOverrides(BaseModel):
    """Partial tone; unset fields fall back to the next tier up."""

    primary: Optional[str] = None
    secondary: Optional[str] = None
    descriptors: Optional[List[str]] = None


class ToneAdjustments(ToneOverrides):
    # e.g. {"subject_line": "urgent"}
    context_specific: Optional[Dict[str, str]] = None


class RegulatoryMusts(BaseModel):
    disclaimers: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    required_language: List[str] = Field(default_factory=list)

    def total(self) -> int:
        return len(self.disclaimers) + len(self.warnings) + len(self.required_language)


class RegulatoryAdditions(RegulatoryMusts):
    """Campaign-level regulatory content appended to the brand's musts."""


class VisualStandards(BaseModel):
    logo_usage: Optional[str] = None
    color_guidelines: Optional[str] = None
    imagery_style: Optional[str] = None


# --- Brand tier ---


class BrandGuardrails(BaseModel):
    """Root rule set for a brand. Always present before lower tiers reference it."""

    id: str
    brand_id: str
    key_messages: List[KeyMessage] = Field(default_factory=list)
    tone_guidelines: ToneGuidelines
    content_dos: List[str] = Field(default_factory=list)
    content_donts: List[str] = Field(default_factory=list)
    regulatory_musts: RegulatoryMusts = Field(default_factory=RegulatoryMusts)
    visual_standards: VisualStandards = Field(default_factory=VisualStandards)
    competitive_advantages: List[str] = Field(default_factory=list)
    market_positioning: str = ""

    last_reviewed: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to Firestore-compatible dict."""
        return self.model_dump(mode="json")


# --- Campaign tier ---


class MarketRules(BaseModel):
    compliance_requirements: List[str] = Field(default_factory=list)
    regulatory_additions: List[str] = Field(default_factory=list)
    local_guidelines: Optional[str] = None


class MLRDeadlineRequirements(BaseModel):
    standard_timeline_days: int
    expedited_timeline_days: int
    critical_path_requirements: List[str] = Field(default_factory=list)


class ApprovalProcessOverrides(BaseModel):
    additional_reviewers: List[str] = Field(default_factory=list)
    skip_standard_reviews: List[str] = Field(default_factory=list)
    custom_workflow_steps: List[str] = Field(default_factory=list)


class CampaignGuardrails(BaseModel):
    """Optional per-campaign overlay. References exactly one brand and one campaign."""

    id: str
    campaign_id: str
    brand_id: str

    # Messaging customizations
    custom_key_messages: Optional[List[KeyMessage]] = None
    message_priority_overrides: Optional[Dict[str, int]] = None

    # Tone
    tone_overrides: Optional[ToneOverrides] = None
    audience_specific_tone: Optional[Dict[str, ToneGuidelines]] = None

    # Competitive focus
    competitive_focus: Optional[List[str]] = None
    competitive_messaging_emphasis: Optional[List[str]] = None

    # Market and regulatory
    market_specific_rules: Optional[Dict[str, MarketRules]] = None
    regulatory_additions: Optional[RegulatoryAdditions] = None

    # Review process
    mlr_deadline_requirements: Optional[MLRDeadlineRequirements] = None
    approval_process_overrides: Optional[ApprovalProcessOverrides] = None

    inherits_from_brand: bool = True
    override_level: OverrideLevel = OverrideLevel.CAMPAIGN
    customization_rationale: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    @field_validator("message_priority_overrides")
    @classmethod
    def _priorities_in_range(cls, value: Optional[Dict[str, int]]) -> Optional[Dict[str, int]]:
        if value is None:
            return value
        for message_id, priority in value.items():
            if not 1 <= priority <= 10:
                raise ValueError(
                    f"message priority for {message_id!r} must be between 1 and 10, got {priority}"
                )
        return value

    def to_dict(self) -> Dict[str, Any]:
        """Convert to Firestore-compatible dict."""
        return self.model_dump(mode="json")


# --- Asset tier ---


class ChannelRequirement(BaseModel):
    # Keyed by field name, e.g. {"title": 60, "body": 280}
    character_limits: Dict[str, int] = Field(default_factory=dict)
    format_requirements: List[str] = Field(default_factory=list)
    visual_constraints: List[str] = Field(default_factory=list)


class FormatConstraints(BaseModel):
    max_length: Optional[int] = None
    min_length: Optional[int] = None
    required_sections: Optional[List[str]] = None
    prohibited_elements: Optional[List[str]] = None


class CharacterLimits(BaseModel):
    subject: Optional[int] = None
    headline: Optional[int] = None
    body: Optional[int] = None
    cta: Optional[int] = None

    def as_dict(self) -> Dict[str, int]:
        return {k: v for k, v in self.model_dump().items() if v is not None}


class VisualRequirements(BaseModel):
    image_specs: List[str] = Field(default_factory=list)
    logo_placement: Optional[str] = None
    color_usage: List[str] = Field(default_factory=list)
    typography_rules: List[str] = Field(default_factory=list)


class RegulatoryPlacementRules(BaseModel):
    disclaimer_placement: Optional[str] = None  # header | footer | sidebar | inline
    fair_balance_requirements: List[str] = Field(default_factory=list)
    safety_info_prominence: Optional[str] = None  # high | medium | standard


class DisclaimerRequirements(BaseModel):
    required_disclaimers: List[str] = Field(default_factory=list)
    placement_rules: List[str] = Field(default_factory=list)
    font_size_requirements: Optional[str] = None


class ReviewWorkflowOverrides(BaseModel):
    additional_review_steps: List[str] = Field(default_factory=list)
    expedited_review_triggers: List[str] = Field(default_factory=list)
    approval_requirements: List[str] = Field(default_factory=list)


class ApprovalRequirements(BaseModel):
    required_approvers: List[str] = Field(default_factory=list)
    approval_sequence: List[str] = Field(default_factory=list)
    escalation_rules: List[str] = Field(default_factory=list)


class ABTestingGuidelines(BaseModel):
    test_variations: List[str] = Field(default_factory=list)
    success_metrics: List[str] = Field(default_factory=list)
    statistical_requirements: List[str] = Field(default_factory=list)


class EngagementTargets(BaseModel):
    open_rate: Optional[float] = None
    click_rate: Optional[float] = None
    conversion_rate: Optional[float] = None


class AssetGuardrails(BaseModel):
    """Most specific tier. One per asset; campaign_id is optional."""

    id: str
    asset_id: str
    campaign_id: Optional[str] = None
    brand_id: str
    asset_type: str

    message_customizations: Optional[List[KeyMessage]] = None
    tone_adjustments: Optional[ToneAdjustments] = None

    channel_requirements: Optional[Dict[str, ChannelRequirement]] = None
    format_constraints: Optional[FormatConstraints] = None
    character_limits: Optional[CharacterLimits] = None
    visual_requirements: Optional[VisualRequirements] = None

    regulatory_placement_rules: Optional[RegulatoryPlacementRules] = None
    disclaimer_requirements: Optional[DisclaimerRequirements] = None

    review_workflow_overrides: Optional[ReviewWorkflowOverrides] = None
    approval_requirements: Optional[ApprovalRequirements] = None

    ab_testing_guidelines: Optional[ABTestingGuidelines] = None
    engagement_targets: Optional[EngagementTargets] = None

    inherits_from_campaign: bool = True
    inherits_from_brand: bool = True
    override_level: OverrideLevel = OverrideLevel.ASSET
    customization_rationale: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to Firestore-compatible dict."""
        return self.model_dump(mode="json")


# --- Merged result ---


class EffectiveFormatConstraints(BaseModel):
    character_limits: Dict[str, int] = Field(default_factory=dict)
    required_sections: List[str] = Field(default_factory=list)
    prohibited_elements: List[str] = Field(default_factory=list)


class EffectiveRules(BaseModel):
    """Fully resolved rule set after inheritance (Asset > Campaign > Brand)."""

    key_messages: List[KeyMessage]
    tone_guidelines: ToneGuidelines
    content_dos: List[str]
    content_donts: List[str]
    regulatory_musts: RegulatoryMusts
    visual_standards: VisualStandards
    competitive_advantages: List[str]
    market_positioning: str
    # Asset-only; None when no asset tier contributed
    format_constraints: Optional[EffectiveFormatConstraints] = None
    channel_requirements: Optional[Dict[str, ChannelRequirement]] = None


class RuleSource(BaseModel):
    source_level: GuardrailLevel
    source_id: str
    is_override: bool


class InheritanceChainItem(BaseModel):
    level: GuardrailLevel
    id: str
    name: str
    has_customizations: bool


class MergedGuardrails(BaseModel):
    brand: BrandGuardrails
    campaign: Optional[CampaignGuardrails] = None
    asset: Optional[AssetGuardrails] = None
    effective_rules: EffectiveRules
    rule_sources: Dict[str, RuleSource]
    inheritance_chain: List[InheritanceChainItem]


class GuardrailsStatus(BaseModel):
    """Review freshness of a brand's guardrails."""

    is_stale: bool
    days_since_review: int
    needs_attention: bool
    staleness_level: StalenessLevel
