"""
Similar Block - ranks catalog products against a reference product and the user.

Additive point system (not normalised):
    same category                       +20
    concern shared with reference       +10 each
    concern matching a user concern     +12 each
    suits user skin type (or "all")     +15
    key ingredient shared w/ reference   +8 each
    key ingredient good for user         +6 each
    preference flag shared with user     +6 each
    rating >= 4.8 / >= 4.5              +10 / +5

Products scoring 0 are dropped. Ties keep catalog order (sorted() is stable).
match_reasons only explains the user-facing signals, not every point.
"""
from typing import Any, Dict, List, Mapping, Optional
import logging
import math

from logic_blocks.matching import matches_concern, matches_ingredient, skin_type_matches

logger = logging.getLogger(__name__)

CATEGORY_POINTS = 20
SHARED_CONCERN_POINTS = 10
USER_CONCERN_POINTS = 12
SKIN_TYPE_POINTS = 15
SHARED_INGREDIENT_POINTS = 8
BENEFICIAL_INGREDIENT_POINTS = 6
PREFERENCE_POINTS = 6
TOP_RATING, TOP_RATING_POINTS = 4.8, 10
HIGH_RATING, HIGH_RATING_POINTS = 4.5, 5


def _rating(v) -> float:
    # unparseable ratings score as unrated
    if v is None or isinstance(v, bool):
        return 0.0
    try:
        r = float(v)
    except (TypeError, ValueError):
        return 0.0
    return r if math.isfinite(r) else 0.0


def _shared_ci(items: List[str], reference_items: List[str]) -> List[str]:
    ref = {str(r).lower() for r in reference_items}
    return [i for i in items if str(i).lower() in ref]


def _score_product(product: Dict[str, Any], reference: Dict[str, Any], user_concerns: List[str],
                   user_skin_type: Optional[str], active_prefs: List[str]):
    score = 0
    reasons: List[str] = []
    concerns = list(product.get("concerns") or [])
    ingredients = list(product.get("key_ingredients") or [])

    if product.get("category") is not None and product.get("category") == reference.get("category"):
        score += CATEGORY_POINTS
        reasons.append(f"Same category: {product.get('category')}")

    shared = _shared_ci(concerns, reference.get("concerns") or [])
    if shared:
        score += len(shared) * SHARED_CONCERN_POINTS
        reasons.append(f"Addresses: {', '.join(shared)}")

    if user_concerns:
        matched = [c for c in concerns if matches_concern(c, user_concerns)]
        if matched:
            score += len(matched) * USER_CONCERN_POINTS
            reasons.append("Matches your concerns")

    if skin_type_matches(product.get("skin_types"), user_skin_type):
        score += SKIN_TYPE_POINTS

    shared_ings = _shared_ci(ingredients, reference.get("key_ingredients") or [])
    score += len(shared_ings) * SHARED_INGREDIENT_POINTS

    if user_concerns:
        beneficial = [i for i in ingredients if matches_ingredient(i, user_concerns)]
        score += len(beneficial) * BENEFICIAL_INGREDIENT_POINTS

    product_prefs = product.get("preferences") or {}
    score += sum(PREFERENCE_POINTS for k in active_prefs if product_prefs.get(k))

    rating = _rating(product.get("rating"))
    if rating >= TOP_RATING:
        score += TOP_RATING_POINTS
        reasons.append("Highly rated")
    elif rating >= HIGH_RATING:
        score += HIGH_RATING_POINTS

    return score, reasons


def score_similar_products(reference: Dict[str, Any], catalog: List[Dict[str, Any]],
                           user_concerns: Optional[List[str]] = None,
                           user_skin_type: Optional[str] = None,
                           user_preferences: Optional[Mapping[str, bool]] = None,
                           limit: int = 4) -> List[Dict[str, Any]]:
    """
    Score every catalog product except the reference and return the top `limit`
    as new dicts carrying match_score and match_reasons.
    """
    user_concerns = list(user_concerns or [])
    active_prefs = [k for k, v in (user_preferences or {}).items() if v]

    scored = []
    for product in catalog or []:
        if product.get("id") == reference.get("id"):
            continue
        score, reasons = _score_product(product, reference, user_concerns, user_skin_type, active_prefs)
        if score > 0:
            scored.append({**product, "match_score": score, "match_reasons": reasons})

    logger.debug("Similar products for %s: %d of %d scored above zero",
                 reference.get("id"), len(scored), len(catalog or []))
    scored = sorted(scored, key=lambda p: p["match_score"], reverse=True)
    return scored[:limit]


def run_block(context: Dict[str, Any]) -> Dict[str, Any]:
    user = context.get("user") or {}
    products = score_similar_products(
        context.get("product") or {},
        context.get("catalog") or [],
        user.get("concerns"),
        user.get("skin_type"),
        user.get("preferences"),
        limit=context.get("similar_limit", 4),
    )
    return {"products": products, "count": len(products)}
