"""Multi-level brand guardrails.

This package stores guardrails at three tiers (Brand -> Campaign -> Asset) in
Firestore and resolves them into one effective rule set. Override priority is
Asset > Campaign > Brand; regulatory content only ever accumulates.

Shared Utilities (from src/common/):
    - config: load_compliance_settings(), FirestoreConfig
    - firestore: get_firestore_client(), brand_guardrails_collection()
    - logging: Audit logs for guardrail edits

Modules:
    models: Pydantic models for the tiers, EffectiveRules and MergedGuardrails
    merger: merge_guardrails() and MissingBrandGuardrailsError
    firestore_repository: Tier reads, overlay create/update, review stamping
    status: Review staleness classification
    yaml_export: YAML rendering of merged guardrails
"""

from src.guardrails.merger import GuardrailsError, MissingBrandGuardrailsError, merge_guardrails
from src.guardrails.models import (
    AssetGuardrails,
    BrandGuardrails,
    CampaignGuardrails,
    EffectiveRules,
    GuardrailLevel,
    GuardrailsStatus,
    MergedGuardrails,
    RuleCategory,
    RuleSource,
)

__all__ = [
    "AssetGuardrails",
    "BrandGuardrails",
    "CampaignGuardrails",
    "EffectiveRules",
    "GuardrailLevel",
    "GuardrailsError",
    "GuardrailsStatus",
    "MergedGuardrails",
    "MissingBrandGuardrailsError",
    "RuleCategory",
    "RuleSource",
    "merge_guardrails",
]
