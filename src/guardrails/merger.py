"""Resolve brand, campaign and asset tiers into one effective rule set.

Override priority is Asset > Campaign > Brand for every overridable field.
Regulatory content is additive only: a campaign may append to the brand's
musts, an asset can never remove or add to them.

Usage:
    from src.guardrails.merger import merge_guardrails

    merged = merge_guardrails(brand, campaign=campaign, asset=asset)
    merged.effective_rules.tone_guidelines.primary
"""

from typing import Dict, List, Optional

from src.guardrails.models import (
    AssetGuardrails,
    BrandGuardrails,
    CampaignGuardrails,
    EffectiveFormatConstraints,
    EffectiveRules,
    GuardrailLevel,
    InheritanceChainItem,
    KeyMessage,
    MergedGuardrails,
    RegulatoryMusts,
    RuleSource,
    ToneGuidelines,
)


class GuardrailsError(Exception):
    """Base exception for guardrail resolution errors."""


class MissingBrandGuardrailsError(GuardrailsError):
    """Raised when no brand tier exists for the requested brand."""

    def __init__(self, brand_id: Optional[str] = None):
        self.brand_id = brand_id
        suffix = f": {brand_id}" if brand_id else ""
        super().__init__(f"Brand guardrails not found{suffix}")


CHAIN_NAMES = {
    GuardrailLevel.BRAND: "Brand Guidelines",
    GuardrailLevel.CAMPAIGN: "Campaign Guidelines",
    GuardrailLevel.ASSET: "Asset Guidelines",
}


def _merge_key_messages(
    brand: BrandGuardrails,
    campaign: Optional[CampaignGuardrails],
    asset: Optional[AssetGuardrails],
) -> List[KeyMessage]:
    ordered: List[KeyMessage] = []
    if asset and asset.message_customizations:
        ordered.extend(asset.message_customizations)
    if campaign and campaign.custom_key_messages:
        ordered.extend(campaign.custom_key_messages)
    ordered.extend(brand.key_messages)

    seen = set()
    unique: List[KeyMessage] = []
    for message in ordered:
        if message.identity() in seen:
            continue
        seen.add(message.identity())
        unique.append(message)
    return unique


def _merge_tone(
    brand: BrandGuardrails,
    campaign: Optional[CampaignGuardrails],
    asset: Optional[AssetGuardrails],
) -> ToneGuidelines:
    layers = [
        asset.tone_adjustments if asset else None,
        campaign.tone_overrides if campaign else None,
    ]

    def resolve(field: str):
        for layer in layers:
            if layer is None:
                continue
            value = getattr(layer, field)
            if value is not None:
                return value
        return getattr(brand.tone_guidelines, field)

    return ToneGuidelines(
        primary=resolve("primary"),
        secondary=resolve("secondary"),
        descriptors=list(resolve("descriptors")),
    )


def _merge_regulatory(
    brand: BrandGuardrails, campaign: Optional[CampaignGuardrails]
) -> RegulatoryMusts:
    base = brand.regulatory_musts
    additions = campaign.regulatory_additions if campaign else None
    if additions is None:
        return base.model_copy(deep=True)
    return RegulatoryMusts(
        disclaimers=base.disclaimers + additions.disclaimers,
        warnings=base.warnings + additions.warnings,
        required_language=base.required_language + additions.required_language,
    )


def _format_constraints(asset: Optional[AssetGuardrails]) -> Optional[EffectiveFormatConstraints]:
    if asset is None or asset.format_constraints is None:
        return None
    constraints = asset.format_constraints
    return EffectiveFormatConstraints(
        character_limits=asset.character_limits.as_dict() if asset.character_limits else {},
        required_sections=list(constraints.required_sections or []),
        prohibited_elements=list(constraints.prohibited_elements or []),
    )


def _tone_contributor(
    campaign: Optional[CampaignGuardrails], asset: Optional[AssetGuardrails]
) -> Optional[GuardrailLevel]:
    def supplies_any(tone) -> bool:
        return tone is not None and any(
            getattr(tone, field) is not None for field in ("primary", "secondary", "descriptors")
        )

    if asset and supplies_any(asset.tone_adjustments):
        return GuardrailLevel.ASSET
    if campaign and supplies_any(campaign.tone_overrides):
        return GuardrailLevel.CAMPAIGN
    return None


def _source(
    level: Optional[GuardrailLevel],
    brand: BrandGuardrails,
    campaign: Optional[CampaignGuardrails],
    asset: Optional[AssetGuardrails],
) -> RuleSource:
    if level == GuardrailLevel.ASSET and asset is not None:
        return RuleSource(source_level=GuardrailLevel.ASSET, source_id=asset.id, is_override=True)
    if level == GuardrailLevel.CAMPAIGN and campaign is not None:
        return RuleSource(source_level=GuardrailLevel.CAMPAIGN, source_id=campaign.id, is_override=True)
    return RuleSource(source_level=GuardrailLevel.BRAND, source_id=brand.id, is_override=False)


def _rule_sources(
    brand: BrandGuardrails,
    campaign: Optional[CampaignGuardrails],
    asset: Optional[AssetGuardrails],
    effective: EffectiveRules,
) -> Dict[str, RuleSource]:
    if asset and asset.message_customizations:
        messages_level = GuardrailLevel.ASSET
    elif campaign and campaign.custom_key_messages:
        messages_level = GuardrailLevel.CAMPAIGN
    else:
        messages_level = None

    sources = {
        "key_messages": _source(messages_level, brand, campaign, asset),
        "tone_guidelines": _source(_tone_contributor(campaign, asset), brand, campaign, asset),
        "regulatory_musts": _source(
            GuardrailLevel.CAMPAIGN if campaign and campaign.regulatory_additions else None,
            brand,
            campaign,
            asset,
        ),
        "competitive_advantages": _source(
            GuardrailLevel.CAMPAIGN if campaign and campaign.competitive_focus else None,
            brand,
            campaign,
            asset,
        ),
    }
    if effective.format_constraints is not None:
        sources["format_constraints"] = _source(GuardrailLevel.ASSET, brand, campaign, asset)
    if effective.channel_requirements is not None:
        sources["channel_requirements"] = _source(GuardrailLevel.ASSET, brand, campaign, asset)
    return sources


def _inheritance_chain(
    brand: BrandGuardrails,
    campaign: Optional[CampaignGuardrails],
    asset: Optional[AssetGuardrails],
) -> List[InheritanceChainItem]:
    chain = [
        InheritanceChainItem(
            level=GuardrailLevel.BRAND,
            id=brand.id,
            name=CHAIN_NAMES[GuardrailLevel.BRAND],
            has_customizations=False,
        )
    ]
    if campaign is not None:
        chain.append(
            InheritanceChainItem(
                level=GuardrailLevel.CAMPAIGN,
                id=campaign.id,
                name=CHAIN_NAMES[GuardrailLevel.CAMPAIGN],
                has_customizations=True,
            )
        )
    if asset is not None:
        chain.append(
            InheritanceChainItem(
                level=GuardrailLevel.ASSET,
                id=asset.id,
                name=CHAIN_NAMES[GuardrailLevel.ASSET],
                has_customizations=True,
            )
        )
    return chain


def merge_guardrails(
    brand: Optional[BrandGuardrails],
    campaign: Optional[CampaignGuardrails] = None,
    asset: Optional[AssetGuardrails] = None,
) -> MergedGuardrails:
    """Merge the present tiers into a MergedGuardrails.

    Args:
        brand: Brand tier; required.
        campaign: Optional campaign overlay.
        asset: Optional asset overlay.

    Returns:
        MergedGuardrails with effective rules, per-category sources and the
        ordered inheritance chain (brand -> campaign -> asset, present tiers only).

    Raises:
        MissingBrandGuardrailsError: If brand is None.
    """
    if brand is None:
        raise MissingBrandGuardrailsError()

    competitive = list(campaign.competitive_focus or []) if campaign else []
    competitive.extend(brand.competitive_advantages)

    channel_requirements = None
    if asset is not None and asset.channel_requirements is not None:
        channel_requirements = {
            channel: requirement.model_copy(deep=True)
            for channel, requirement in asset.channel_requirements.items()
        }

    effective = EffectiveRules(
        key_messages=_merge_key_messages(brand, campaign, asset),
        tone_guidelines=_merge_tone(brand, campaign, asset),
        content_dos=list(brand.content_dos),
        content_donts=list(brand.content_donts),
        regulatory_musts=_merge_regulatory(brand, campaign),
        visual_standards=brand.visual_standards.model_copy(deep=True),
        competitive_advantages=competitive,
        market_positioning=brand.market_positioning,
        format_constraints=_format_constraints(asset),
        channel_requirements=channel_requirements,
    )

    return MergedGuardrails(
        brand=brand,
        campaign=campaign,
        asset=asset,
        effective_rules=effective,
        rule_sources=_rule_sources(brand, campaign, asset, effective),
        inheritance_chain=_inheritance_chain(brand, campaign, asset),
    )
