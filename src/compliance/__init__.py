"""Compliance scoring against merged brand guardrails.

Modules:
    models: Pydantic models for per-tier results, EnhancedComplianceCheck, ComplianceHistory
    brand_matcher: Keyword/phrase matching against the brand tier
    checker: Campaign and asset checks, overall score, issues and actions
    firestore_repository: Compliance history inserts and newest-first reads
    compliance_service: Fetch, merge, score and record
"""
