"""Unit tests for multi-level guardrail merging."""

import itertools

import pytest

from src.guardrails.merger import MissingBrandGuardrailsError, merge_guardrails
from src.guardrails.models import (
    AssetGuardrails,
    BrandGuardrails,
    CampaignGuardrails,
    GuardrailLevel,
)
from tests.fakes import asset_doc, brand_doc, campaign_doc


@pytest.fixture
def brand() -> BrandGuardrails:
    return BrandGuardrails.model_validate(brand_doc())


def _campaign(**overrides) -> CampaignGuardrails:
    return CampaignGuardrails.model_validate(campaign_doc(**overrides))


def _asset(**overrides) -> AssetGuardrails:
    return AssetGuardrails.model_validate(asset_doc(**overrides))


class TestBrandOnly:
    def test_effective_rules_equal_brand_fields(self, brand):
        merged = merge_guardrails(brand)
        rules = merged.effective_rules

        assert rules.key_messages == brand.key_messages
        assert rules.tone_guidelines == brand.tone_guidelines
        assert rules.content_dos == brand.content_dos
        assert rules.content_donts == brand.content_donts
        assert rules.regulatory_musts == brand.regulatory_musts
        assert rules.visual_standards == brand.visual_standards
        assert rules.competitive_advantages == brand.competitive_advantages
        assert rules.market_positioning == brand.market_positioning
        assert rules.format_constraints is None
        assert rules.channel_requirements is None

    def test_chain_has_single_brand_entry(self, brand):
        merged = merge_guardrails(brand)

        assert len(merged.inheritance_chain) == 1
        item = merged.inheritance_chain[0]
        assert item.level == GuardrailLevel.BRAND
        assert item.id == brand.id
        assert item.name == "Brand Guidelines"
        assert item.has_customizations is False

    def test_rule_sources_point_at_brand(self, brand):
        merged = merge_guardrails(brand)

        for source in merged.rule_sources.values():
            assert source.source_level == GuardrailLevel.BRAND
            assert source.source_id == brand.id
            assert source.is_override is False
        assert "format_constraints" not in merged.rule_sources

    def test_missing_brand_raises(self):
        with pytest.raises(MissingBrandGuardrailsError):
            merge_guardrails(None, campaign=_campaign())


class TestKeyMessages:
    def test_asset_then_campaign_then_brand_order(self, brand):
        asset = _asset(message_customizations=[{"id": "a-1", "text": "Asset headline message"}])
        merged = merge_guardrails(brand, campaign=_campaign(), asset=asset)

        ids = [m.id for m in merged.effective_rules.key_messages]
        assert ids == ["a-1", "ckm-1", "km-1", "km-2"]

    def test_duplicates_removed_first_occurrence_wins(self, brand):
        duplicate = {"id": "km-1", "text": "Proven efficacy in adults"}
        campaign = _campaign(custom_key_messages=[duplicate, {"id": "ckm-2", "text": "New"}])
        merged = merge_guardrails(brand, campaign=campaign)

        ids = [m.id for m in merged.effective_rules.key_messages]
        assert ids == ["km-1", "ckm-2", "km-2"]

    def test_same_id_different_text_is_kept(self, brand):
        campaign = _campaign(custom_key_messages=[{"id": "km-1", "text": "Reworded message"}])
        merged = merge_guardrails(brand, campaign=campaign)

        assert len(merged.effective_rules.key_messages) == 3

    def test_source_tracks_most_specific_contributor(self, brand):
        asset = _asset(message_customizations=[{"id": "a-1", "text": "Asset message"}])
        merged = merge_guardrails(brand, campaign=_campaign(), asset=asset)

        source = merged.rule_sources["key_messages"]
        assert source.source_level == GuardrailLevel.ASSET
        assert source.source_id == "asset-gr-1"
        assert source.is_override is True

    def test_source_is_campaign_without_asset_customizations(self, brand):
        merged = merge_guardrails(brand, campaign=_campaign(), asset=_asset())

        source = merged.rule_sources["key_messages"]
        assert source.source_level == GuardrailLevel.CAMPAIGN
        assert source.source_id == "campaign-gr-1"


class TestTone:
    @pytest.mark.parametrize(
        "asset_primary,campaign_primary",
        list(itertools.product([None, "calm"], [None, "energetic"])),
    )
    def test_primary_is_asset_then_campaign_then_brand(self, brand, asset_primary, campaign_primary):
        campaign = _campaign(tone_overrides={"primary": campaign_primary})
        asset = _asset(tone_adjustments={"primary": asset_primary})
        merged = merge_guardrails(brand, campaign=campaign, asset=asset)

        expected = asset_primary or campaign_primary or brand.tone_guidelines.primary
        assert merged.effective_rules.tone_guidelines.primary == expected

    def test_fields_resolve_independently(self, brand):
        campaign = _campaign(tone_overrides={"secondary": "bold"})
        asset = _asset(tone_adjustments={"descriptors": ["urgent"]})
        merged = merge_guardrails(brand, campaign=campaign, asset=asset)

        tone = merged.effective_rules.tone_guidelines
        assert tone.primary == "professional"
        assert tone.secondary == "bold"
        assert tone.descriptors == ["urgent"]
        assert merged.rule_sources["tone_guidelines"].source_level == GuardrailLevel.ASSET

    def test_no_tone_overrides_keeps_brand_source(self, brand):
        campaign = _campaign(tone_overrides=None)
        merged = merge_guardrails(brand, campaign=campaign)

        assert merged.effective_rules.tone_guidelines == brand.tone_guidelines
        assert merged.rule_sources["tone_guidelines"].source_level == GuardrailLevel.BRAND


class TestRegulatory:
    def test_campaign_additions_are_appended(self, brand):
        merged = merge_guardrails(brand, campaign=_campaign())

        musts = merged.effective_rules.regulatory_musts
        assert musts.disclaimers == ["Individual results may vary", "Offer valid in US only"]
        assert musts.warnings == brand.regulatory_musts.warnings
        assert merged.rule_sources["regulatory_musts"].source_level == GuardrailLevel.CAMPAIGN

    def test_additions_are_not_deduplicated(self, brand):
        campaign = _campaign(
            regulatory_additions={"disclaimers": ["Individual results may vary"], "warnings": [], "required_language": []}
        )
        merged = merge_guardrails(brand, campaign=campaign)

        assert merged.effective_rules.regulatory_musts.disclaimers.count("Individual results may vary") == 2

    def test_asset_never_changes_regulatory_musts(self, brand):
        asset = _asset(disclaimer_requirements={"required_disclaimers": ["Asset-only disclaimer"]})
        merged = merge_guardrails(brand, asset=asset)

        assert merged.effective_rules.regulatory_musts == brand.regulatory_musts

    @pytest.mark.parametrize("with_campaign", [True, False])
    @pytest.mark.parametrize("with_asset", [True, False])
    def test_merged_musts_never_shorter_than_brand(self, brand, with_campaign, with_asset):
        merged = merge_guardrails(
            brand,
            campaign=_campaign() if with_campaign else None,
            asset=_asset() if with_asset else None,
        )

        assert merged.effective_rules.regulatory_musts.total() >= brand.regulatory_musts.total()


class TestCompetitiveAndFormat:
    def test_campaign_focus_prepended(self, brand):
        merged = merge_guardrails(brand, campaign=_campaign())

        assert merged.effective_rules.competitive_advantages == [
            "Affordability",
            "Faster onset than alternatives",
        ]

    def test_format_constraints_from_asset(self, brand):
        merged = merge_guardrails(brand, asset=_asset())

        constraints = merged.effective_rules.format_constraints
        assert constraints is not None
        assert constraints.required_sections == ["dosage"]
        assert constraints.prohibited_elements == ["cure"]
        assert constraints.character_limits == {"subject": 60, "body": 2000}
        assert merged.rule_sources["format_constraints"].source_level == GuardrailLevel.ASSET

    def test_asset_without_format_constraints(self, brand):
        merged = merge_guardrails(brand, asset=_asset(format_constraints=None))

        assert merged.effective_rules.format_constraints is None
        assert "format_constraints" not in merged.rule_sources

    def test_channel_requirements_passed_through(self, brand):
        asset = _asset(channel_requirements={"email": {"character_limits": {"body": 500}}})
        merged = merge_guardrails(brand, asset=asset)

        assert merged.effective_rules.channel_requirements["email"].character_limits == {"body": 500}


def test_full_chain_order_and_names(brand):
    merged = merge_guardrails(brand, campaign=_campaign(), asset=_asset())

    assert [item.level for item in merged.inheritance_chain] == [
        GuardrailLevel.BRAND,
        GuardrailLevel.CAMPAIGN,
        GuardrailLevel.ASSET,
    ]
    assert [item.name for item in merged.inheritance_chain] == [
        "Brand Guidelines",
        "Campaign Guidelines",
        "Asset Guidelines",
    ]
    assert [item.has_customizations for item in merged.inheritance_chain] == [False, True, True]


def test_asset_without_campaign_skips_campaign_in_chain(brand):
    merged = merge_guardrails(brand, asset=_asset(campaign_id=None))

    assert [item.level for item in merged.inheritance_chain] == [GuardrailLevel.BRAND, GuardrailLevel.ASSET]
