"""YAML export of resolved guardrails for reviewers and downstream tooling.

Only the effective rules, their sources and the inheritance chain are
exported. The raw tier records (audit fields, review process metadata) stay
out of the document.

Usage:
    from src.guardrails.yaml_export import merged_guardrails_to_yaml

    yaml_str = merged_guardrails_to_yaml(merged)
"""

from typing import Any, Dict

import yaml

from .models import MergedGuardrails


def merged_guardrails_to_yaml_dict(merged: MergedGuardrails) -> Dict[str, Any]:
    """Convert MergedGuardrails to a plain dict suitable for YAML.

    Args:
        merged: The merged guardrails to convert

    Returns:
        Dict with brand_id, campaign_id, asset_id, effective_rules,
        rule_sources and inheritance_chain.
    """
    return {
        "brand_id": merged.brand.brand_id,
        "campaign_id": merged.campaign.campaign_id if merged.campaign else None,
        "asset_id": merged.asset.asset_id if merged.asset else None,
        "effective_rules": merged.effective_rules.model_dump(mode="json", exclude_none=True),
        "rule_sources": {
            category: source.model_dump(mode="json")
            for category, source in merged.rule_sources.items()
        },
        "inheritance_chain": [item.model_dump(mode="json") for item in merged.inheritance_chain],
    }


def merged_guardrails_to_yaml(merged: MergedGuardrails) -> str:
    """Convert MergedGuardrails to a YAML string."""
    return yaml.dump(
        merged_guardrails_to_yaml_dict(merged),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
