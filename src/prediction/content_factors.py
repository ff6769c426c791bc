"""Regex feature extraction from marketing copy.

Every pattern is word-bounded and case-insensitive. Word counts split on
whitespace.
"""

import re
from dataclasses import dataclass


def _pattern(*terms: str) -> "re.Pattern[str]":
    return re.compile(r"\b(" + "|".join(terms) + r")\b", re.IGNORECASE)


CALL_TO_ACTION = _pattern("click", "call", "visit", "contact", "learn more", "get started", "sign up", "download")
EMOTIONAL = _pattern("amazing", "incredible", "breakthrough", "revolutionary", "transform", "improve", "better")
REGULATORY = _pattern(
    "indication",
    "contraindication",
    "side effects",
    "warnings",
    "precautions",
    "see full prescribing information",
)
CLINICAL = _pattern("study", "trial", "clinical", "research", "data", "evidence", "proven")
MARKETING_CLAIMS = _pattern("best", "leading", "number one", "superior", "most effective", "fastest")
SUPERLATIVES = _pattern(
    "most", "best", "greatest", "fastest", "strongest", "only", "never", "always", "all", "every"
)
APPROVED_CLAIMS = _pattern("fda approved", "clinically proven", "indicated for")
UNAPPROVED_CLAIMS = _pattern("cure", "miracle", "guarantee", "promise", "eliminate")
COMPETITIVE_CLAIMS = _pattern("versus", "compared to", "better than", "superior to")
VISUAL_ELEMENTS = _pattern("image", "chart", "graph", "infographic", "video")
PERSONALIZATION = _pattern("you", "your", "yours")
COMPLEX_TERMS = _pattern("mechanism", "pharmacokinetics", "bioavailability", "metabolism")

OPTIMAL_MIN_WORDS = 50
OPTIMAL_MAX_WORDS = 300
TOO_LONG_WORDS = 500
TOO_SHORT_WORDS = 20
COMPLEX_MIN_WORDS = 300


@dataclass(frozen=True)
class ContentFactors:
    word_count: int
    has_call_to_action: bool
    has_emotional_language: bool
    has_regulatory_language: bool
    has_clinical_evidence: bool
    has_marketing_claims: bool
    has_superlatives: bool
    has_approved_claims: bool
    has_unapproved_claims: bool
    has_competitive_claims: bool
    has_visual_elements: bool
    has_headlines: bool
    is_personalized: bool
    is_optimal_length: bool
    is_too_long: bool
    is_too_short: bool
    is_complex_content: bool


def analyze_content_factors(content: str) -> ContentFactors:
    word_count = len(content.split())
    return ContentFactors(
        word_count=word_count,
        has_call_to_action=bool(CALL_TO_ACTION.search(content)),
        has_emotional_language=bool(EMOTIONAL.search(content)),
        has_regulatory_language=bool(REGULATORY.search(content)),
        has_clinical_evidence=bool(CLINICAL.search(content)),
        has_marketing_claims=bool(MARKETING_CLAIMS.search(content)),
        has_superlatives=bool(SUPERLATIVES.search(content)),
        has_approved_claims=bool(APPROVED_CLAIMS.search(content)),
        has_unapproved_claims=bool(UNAPPROVED_CLAIMS.search(content)),
        has_competitive_claims=bool(COMPETITIVE_CLAIMS.search(content)),
        has_visual_elements=bool(VISUAL_ELEMENTS.search(content)),
        has_headlines="\n" in content or "#" in content,
        is_personalized=bool(PERSONALIZATION.search(content)),
        is_optimal_length=OPTIMAL_MIN_WORDS <= word_count <= OPTIMAL_MAX_WORDS,
        is_too_long=word_count > TOO_LONG_WORDS,
        is_too_short=word_count < TOO_SHORT_WORDS,
        is_complex_content=word_count > COMPLEX_MIN_WORDS and bool(COMPLEX_TERMS.search(content)),
    )
