"""Keyword matching of free text against a brand tier.

All matching is case-insensitive substring matching. Key messages and
competitive advantages are matched on a single leading keyword, so a message
counts as present when its most telling word appears in the content.
"""

import math
import re
from typing import Iterable, List

from src.compliance.models import BrandCompliance
from src.guardrails.models import BrandGuardrails

TONE_PENALTY = 20
KEY_MESSAGE_PENALTY = 15
DONTS_PENALTY = 30
COMPETITIVE_PENALTY = 10

_WORD_RE = re.compile(r"[a-z0-9][a-z0-9'\-]*")


def leading_keyword(text: str) -> str:
    """First word of at least four letters, else the first word ("" if none)."""
    words = _WORD_RE.findall(text.lower())
    for word in words:
        if len(word) >= 4:
            return word
    return words[0] if words else ""


def contains(content_lower: str, phrase: str) -> bool:
    phrase = phrase.strip().lower()
    return bool(phrase) and phrase in content_lower


def keyword_present(content_lower: str, text: str) -> bool:
    keyword = leading_keyword(text)
    return bool(keyword) and keyword in content_lower


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percentage(matched: int, total: int) -> int:
    if total == 0:
        return 100
    return round_half_up(100 * matched / total)


def any_present(content_lower: str, phrases: Iterable[str]) -> bool:
    return any(contains(content_lower, phrase) for phrase in phrases)


def check_brand_compliance(content: str, brand: BrandGuardrails) -> BrandCompliance:
    """Score content against the brand tier.

    Returns a BrandCompliance whose score starts at 100 and loses points for
    missing tone, missing key messages, violated content don'ts and missing
    competitive advantages.
    """
    content_lower = content.lower()
    suggestions: List[str] = []
    warnings: List[str] = []
    score = 100

    descriptors = brand.tone_guidelines.descriptors
    tone_hits = sum(1 for d in descriptors if contains(content_lower, d))
    tone_match = percentage(tone_hits, len(descriptors))
    if descriptors and tone_hits == 0:
        score -= TONE_PENALTY
        suggestions.append(f"Consider incorporating tone elements: {', '.join(descriptors)}")

    messages = brand.key_messages
    aligned = sum(1 for m in messages if keyword_present(content_lower, m.text))
    key_message_alignment = percentage(aligned, len(messages))
    if messages and aligned == 0:
        score -= KEY_MESSAGE_PENALTY
        suggestions.append("Consider including key brand messages in your content")

    violates_donts = any_present(content_lower, brand.content_donts)
    if violates_donts:
        score -= DONTS_PENALTY
        warnings.append("Content may violate brand guidelines (content don'ts)")

    advantages = brand.competitive_advantages
    if advantages and not any(keyword_present(content_lower, a) for a in advantages):
        score -= COMPETITIVE_PENALTY
        suggestions.append("Consider highlighting competitive advantages")

    regulatory = 100.0
    if violates_donts:
        regulatory -= 50
    required = brand.regulatory_musts.required_language
    missing = [phrase for phrase in required if not contains(content_lower, phrase)]
    if required:
        regulatory -= 50 * len(missing) / len(required)
    for phrase in missing:
        suggestions.append(f"Include required language: {phrase}")

    return BrandCompliance(
        score=max(0, score),
        tone_match=tone_match,
        key_message_alignment=key_message_alignment,
        regulatory_compliance=max(0, round_half_up(regulatory)),
        suggestions=suggestions,
        warnings=warnings,
    )
