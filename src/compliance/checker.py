"""Tier-by-tier compliance scoring over merged guardrails.

The brand tier is always scored; campaign and asset tiers are scored only
when present. The overall score is the rounded mean of the tier scores.
"""

from typing import List, Optional

from src.compliance.brand_matcher import (
    any_present,
    check_brand_compliance,
    contains,
    keyword_present,
    round_half_up,
)
from src.compliance.models import (
    AssetCompliance,
    BrandCompliance,
    CampaignCompliance,
    ComplianceIssue,
    CompliancePerformancePrediction,
    ComplianceRecommendation,
    EnhancedComplianceCheck,
    IssueSeverity,
)
from src.guardrails.models import (
    AssetGuardrails,
    CampaignGuardrails,
    GuardrailLevel,
    KeyMessage,
    MergedGuardrails,
    RuleCategory,
)

CAMPAIGN_BASE_SCORE = 95
MESSAGE_PRIORITY_PENALTY = 15
AUDIENCE_TONE_PENALTY = 10
COMPETITIVE_POSITIONING_PENALTY = 10

ASSET_BASE_SCORE = 90
FORMAT_PENALTY = 20
CHARACTER_LIMIT_PENALTY = 15

REGULATORY_CRITICAL_THRESHOLD = 50
BRAND_ACTION_THRESHOLD = 80
MLR_LIKELIHOOD_CAP = 95
LOW_COMPLIANCE_THRESHOLD = 70


def _format_present(content_lower: str, phrase: str) -> bool:
    # Unstripped substring test; an empty entry is always present.
    return phrase.lower() in content_lower


def _top_priority_message(campaign: CampaignGuardrails) -> Optional[KeyMessage]:
    messages = campaign.custom_key_messages or []
    if not messages:
        return None
    priorities = campaign.message_priority_overrides or {}
    ranked = [m for m in messages if m.id in priorities]
    if not ranked:
        return messages[0]
    # min() keeps the first of equal priorities
    return min(ranked, key=lambda m: priorities[m.id])


def check_campaign_compliance(content: str, campaign: CampaignGuardrails) -> CampaignCompliance:
    content_lower = content.lower()
    warnings: List[str] = []
    score = CAMPAIGN_BASE_SCORE

    top = _top_priority_message(campaign)
    message_priority_adherence = top is None or keyword_present(content_lower, top.text)
    if not message_priority_adherence:
        score -= MESSAGE_PRIORITY_PENALTY
        warnings.append(f"Highest-priority campaign message not reflected: {top.text}")

    descriptors: List[str] = []
    if campaign.tone_overrides and campaign.tone_overrides.descriptors:
        descriptors.extend(campaign.tone_overrides.descriptors)
    for tone in (campaign.audience_specific_tone or {}).values():
        descriptors.extend(tone.descriptors)
    audience_tone_match = not descriptors or any_present(content_lower, descriptors)
    if not audience_tone_match:
        score -= AUDIENCE_TONE_PENALTY
        warnings.append("Content does not reflect the campaign audience tone")

    focus = campaign.competitive_focus or []
    competitive_positioning = not focus or any(keyword_present(content_lower, f) for f in focus)
    if not competitive_positioning:
        score -= COMPETITIVE_POSITIONING_PENALTY
        warnings.append("Content does not address the campaign competitive focus")

    return CampaignCompliance(
        score=max(0, score),
        message_priority_adherence=message_priority_adherence,
        audience_tone_match=audience_tone_match,
        competitive_positioning=competitive_positioning,
        warnings=warnings,
    )


def check_asset_compliance(
    content: str, asset: AssetGuardrails, asset_type: Optional[str] = None
) -> AssetCompliance:
    content_lower = content.lower()
    warnings: List[str] = []
    score = ASSET_BASE_SCORE

    format_adherence = True
    constraints = asset.format_constraints
    if constraints is not None:
        missing = [s for s in constraints.required_sections or [] if not _format_present(content_lower, s)]
        prohibited = [p for p in constraints.prohibited_elements or [] if _format_present(content_lower, p)]
        format_adherence = not missing and not prohibited
        for section in missing:
            warnings.append(f"Missing required section: {section}")
        for element in prohibited:
            warnings.append(f"Contains prohibited element: {element}")
    if not format_adherence:
        score -= FORMAT_PENALTY

    character_limit_compliance = True
    body_limit = asset.character_limits.body if asset.character_limits else None
    if body_limit is not None and len(content) > body_limit:
        character_limit_compliance = False
        score -= CHARACTER_LIMIT_PENALTY
        warnings.append(f"Content exceeds body character limit ({len(content)} > {body_limit})")

    channel = asset_type or asset.asset_type
    channel_requirements_met = True
    requirement = (asset.channel_requirements or {}).get(channel)
    if requirement is not None:
        channel_body = requirement.character_limits.get("body")
        within = channel_body is None or len(content) <= channel_body
        formats_ok = all(contains(content_lower, f) for f in requirement.format_requirements)
        channel_requirements_met = within and formats_ok
        if not channel_requirements_met:
            warnings.append(f"Content does not meet {channel} channel requirements")

    regulatory_placement_correct = True
    if asset.disclaimer_requirements is not None:
        for disclaimer in asset.disclaimer_requirements.required_disclaimers:
            if not contains(content_lower, disclaimer):
                regulatory_placement_correct = False
                warnings.append(f"Missing required disclaimer: {disclaimer}")

    return AssetCompliance(
        score=max(0, score),
        format_adherence=format_adherence,
        character_limit_compliance=character_limit_compliance,
        channel_requirements_met=channel_requirements_met,
        regulatory_placement_correct=regulatory_placement_correct,
        warnings=warnings,
    )


def _critical_issues(brand: BrandCompliance) -> List[ComplianceIssue]:
    if brand.regulatory_compliance >= REGULATORY_CRITICAL_THRESHOLD:
        return []
    return [
        ComplianceIssue(
            level=GuardrailLevel.BRAND,
            category=RuleCategory.REGULATORY,
            message="Critical regulatory language missing or misused.",
            severity=IssueSeverity.HIGH,
        )
    ]


def _recommended_actions(
    brand: BrandCompliance, asset: Optional[AssetCompliance]
) -> List[ComplianceRecommendation]:
    actions: List[ComplianceRecommendation] = []
    if brand.score < BRAND_ACTION_THRESHOLD:
        actions.append(
            ComplianceRecommendation(
                priority=1,
                action="Improve brand guideline compliance",
                category=RuleCategory.MESSAGING,
                level=GuardrailLevel.BRAND,
            )
        )
    if asset is not None and not asset.format_adherence:
        actions.append(
            ComplianceRecommendation(
                priority=2,
                action="Adjust content to meet asset format constraints",
                category=RuleCategory.FORMAT,
                level=GuardrailLevel.ASSET,
            )
        )
    return actions


def _performance_outlook(
    overall: int, brand: BrandCompliance, asset: Optional[AssetCompliance]
) -> CompliancePerformancePrediction:
    if overall > 80:
        cycles = 1
    elif overall > 60:
        cycles = 2
    else:
        cycles = 3

    risk_factors: List[str] = []
    if overall < LOW_COMPLIANCE_THRESHOLD:
        risk_factors.append("Low overall compliance score")
    if brand.warnings:
        risk_factors.append("Brand guideline warnings")
    if asset is not None and not asset.format_adherence:
        risk_factors.append("Format compliance issues")

    return CompliancePerformancePrediction(
        mlr_approval_likelihood=min(MLR_LIKELIHOOD_CAP, overall + 10),
        estimated_review_cycles=cycles,
        risk_factors=risk_factors,
    )


def evaluate_compliance(
    content: str, merged: MergedGuardrails, asset_type: Optional[str] = None
) -> EnhancedComplianceCheck:
    """Score content against every tier present in merged guardrails."""
    brand = check_brand_compliance(content, merged.brand)
    campaign = check_campaign_compliance(content, merged.campaign) if merged.campaign else None
    asset = check_asset_compliance(content, merged.asset, asset_type) if merged.asset else None

    scores = [brand.score]
    if campaign is not None:
        scores.append(campaign.score)
    if asset is not None:
        scores.append(asset.score)
    overall = round_half_up(sum(scores) / len(scores))

    return EnhancedComplianceCheck(
        overall_score=overall,
        brand_compliance=brand,
        campaign_compliance=campaign,
        asset_compliance=asset,
        critical_issues=_critical_issues(brand),
        recommended_actions=_recommended_actions(brand, asset),
        performance_prediction=_performance_outlook(overall, brand, asset),
    )
