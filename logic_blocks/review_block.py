"""
Review Block - Similarity Weight between a reviewer's profile and the user's.

Weights (summed, capped at 100):
    skin type         +40  exact, case-insensitive
    concern           +15  per review concern matching a user concern
    complexion        +10  within one tier on the Fitzpatrick scale
    sensitivity       +10  exact
    lifestyle          +5  any shared tag
    age                +5  within 5 years

Tiers: >=70 full, >=50 strong, >=30 partial, >=15 related, else none.
"""
from typing import Any, Dict, List, Optional
import logging
import math

from logic_blocks.matching import matches_concern

logger = logging.getLogger(__name__)

COMPLEXION_TIERS = (
    "Very Fair",
    "Fair",
    "Medium",
    "Olive",
    "Brown",
    "Dark Brown/Black",
)
_ROMAN = ("I", "II", "III", "IV", "V", "VI")

SKIN_TYPE_WEIGHT = 40
CONCERN_WEIGHT = 15
COMPLEXION_WEIGHT = 10
SENSITIVITY_WEIGHT = 10
LIFESTYLE_WEIGHT = 5
AGE_WEIGHT = 5
AGE_WINDOW = 5
MAX_SCORE = 100

TIER_THRESHOLDS = (("full", 70), ("strong", 50), ("partial", 30), ("related", 15))
TIER_LABELS = {"full": "Full Match", "strong": "Strong Match", "partial": "Partial Match", "related": "Related"}


def _complexion_index(value: Optional[str]) -> int:
    v = str(value or "").strip().lower()
    if not v:
        return -1
    for idx, tier in enumerate(COMPLEXION_TIERS):
        # accept the bare label or the "Type III - Medium" survey form
        if v in (tier.lower(), f"type {_ROMAN[idx]} - {tier}".lower()):
            return idx
    return -1


def is_complexion_match(a: Optional[str], b: Optional[str]) -> str:
    """'exact', 'close' (one tier apart) or 'none'."""
    idx_a = _complexion_index(a)
    idx_b = _complexion_index(b)
    if idx_a == -1 or idx_b == -1:
        return "none"
    diff = abs(idx_a - idx_b)
    if diff == 0:
        return "exact"
    if diff == 1:
        return "close"
    return "none"


def match_tier(score: float) -> str:
    for tier, threshold in TIER_THRESHOLDS:
        if score >= threshold:
            return tier
    return "none"


def tier_badge_label(tier: str, score: float) -> Optional[str]:
    label = TIER_LABELS.get(tier)
    if label is None:
        return None
    return f"{label} · {min(score, MAX_SCORE)}%"


def _norm(s) -> str:
    return str(s or "").strip().lower()


def _age(v) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    try:
        age = float(v)
    except (TypeError, ValueError):
        return None
    return age if math.isfinite(age) else None


def calculate_similarity_weight(review: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
    score = 0
    details: List[str] = []

    review_skin = _norm(review.get("skin_type"))
    if review_skin and review_skin == _norm(user.get("skin_type")):
        score += SKIN_TYPE_WEIGHT
        details.append("Skin type")

    user_concerns = list(user.get("concerns") or [])
    concern_count = sum(1 for rc in review.get("skin_concerns") or [] if matches_concern(rc, user_concerns))
    if concern_count:
        score += concern_count * CONCERN_WEIGHT
        details.append(f"{concern_count} concern{'s' if concern_count > 1 else ''}")

    complexion = is_complexion_match(review.get("complexion"), user.get("complexion"))
    if complexion != "none":
        score += COMPLEXION_WEIGHT
        details.append("Complexion" if complexion == "exact" else "Close complexion")

    if review.get("sensitivity") and user.get("sensitivity") and review.get("sensitivity") == user.get("sensitivity"):
        score += SENSITIVITY_WEIGHT
        details.append("Sensitivity")

    user_lifestyle = set(user.get("lifestyle") or [])
    if user_lifestyle and any(tag in user_lifestyle for tag in review.get("lifestyle") or []):
        score += LIFESTYLE_WEIGHT
        details.append("Lifestyle")

    review_age, user_age = _age(review.get("age")), _age(user.get("age"))
    if review_age is not None and user_age is not None and abs(review_age - user_age) <= AGE_WINDOW:
        score += AGE_WEIGHT
        details.append("Age range")

    score = min(score, MAX_SCORE)
    return {"score": score, "match_tier": match_tier(score), "match_details": details}


def rank_reviews(reviews: List[Dict[str, Any]], user: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Copies of the reviews with a `similarity` entry, most similar first."""
    ranked = [{**r, "similarity": calculate_similarity_weight(r, user)} for r in reviews or []]
    return sorted(ranked, key=lambda r: r["similarity"]["score"], reverse=True)


def run_block(context: Dict[str, Any]) -> Dict[str, Any]:
    reviews = rank_reviews(context.get("reviews") or [], context.get("user") or {})
    for r in reviews:
        r["similarity"]["badge"] = tier_badge_label(r["similarity"]["match_tier"], r["similarity"]["score"])
    logger.debug("Ranked %d reviews", len(reviews))
    return {"reviews": reviews, "count": len(reviews)}
