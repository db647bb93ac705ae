"""
Compatible Block - products from other categories that can be layered with the
reference product.

Every reference/candidate key-ingredient pair goes through check_compatibility.
A single "avoid" pair disqualifies the candidate. Survivors are
"fully-compatible" (no caution pairs) or "use-with-care", and rank by level
first, then by compatibility percentage plus a profile-fit boost.
"""
from typing import Any, Dict, List, Optional
import logging

from logic_blocks.compatibility_block import AVOID, CAUTION, NO_KNOWN_CONFLICTS, check_compatibility
from logic_blocks.matching import matches_concern, skin_type_matches

logger = logging.getLogger(__name__)

FULLY_COMPATIBLE = "fully-compatible"
USE_WITH_CARE = "use-with-care"

CONCERN_BOOST = 10
SKIN_TYPE_BOOST = 10
MAX_NOTES = 2


def _unique(items: List[str]) -> List[str]:
    return list(dict.fromkeys(items))


def _tally_pairs(reference_ings: List[str], candidate_ings: List[str]) -> Dict[str, Any]:
    tally = {"safe": 0, "caution": 0, "avoid": 0, "reasons": [], "cautions": []}
    for ri in reference_ings:
        for ci in candidate_ings:
            if ri == ci:
                continue
            result = check_compatibility(ri, ci)
            if result.level == AVOID:
                tally["avoid"] += 1
            elif result.level == CAUTION:
                tally["caution"] += 1
                tally["cautions"].append(result.reason)
                if result.resolution:
                    tally["cautions"].append(result.resolution)
            else:
                tally["safe"] += 1
                if NO_KNOWN_CONFLICTS not in result.reason:
                    tally["reasons"].append(result.reason)
    return tally


def find_compatible_products(reference: Dict[str, Any], catalog: List[Dict[str, Any]],
                             user_concerns: Optional[List[str]] = None,
                             user_skin_type: Optional[str] = None,
                             limit: int = 8) -> List[Dict[str, Any]]:
    reference_names = list(reference.get("key_ingredients") or [])
    reference_ings = [str(i).lower() for i in reference_names]
    if not reference_ings:
        return []
    user_concerns = list(user_concerns or [])

    candidates = []
    for product in catalog or []:
        if product.get("id") == reference.get("id"):
            continue
        if product.get("category") == reference.get("category"):
            continue
        product_names = list(product.get("key_ingredients") or [])
        if not product_names:
            continue

        tally = _tally_pairs(reference_ings, [str(i).lower() for i in product_names])
        if tally["avoid"] > 0:
            logger.debug("Excluding %s: %d avoid pair(s) with %s",
                         product.get("id"), tally["avoid"], reference.get("id"))
            continue

        level = FULLY_COMPATIBLE if tally["caution"] == 0 else USE_WITH_CARE
        total = tally["safe"] + tally["caution"]
        compat_score = tally["safe"] * 100 / total if total > 0 else 100

        boost = 0
        if user_concerns:
            matched = [c for c in product.get("concerns") or [] if matches_concern(c, user_concerns)]
            boost += len(matched) * CONCERN_BOOST
        if skin_type_matches(product.get("skin_types"), user_skin_type):
            boost += SKIN_TYPE_BOOST

        reasons = _unique(tally["reasons"])[:MAX_NOTES]
        cautions = _unique(tally["cautions"])[:MAX_NOTES]
        if not reasons:
            reasons.append(f"{' & '.join(product_names[:2])} pairs safely with {' & '.join(reference_names[:2])}")

        candidates.append({
            **product,
            "compatibility_level": level,
            "compatibility_reasons": reasons,
            "caution_notes": cautions,
            "compatibility_score": compat_score + boost,
        })

    candidates = sorted(
        candidates,
        key=lambda p: (p["compatibility_level"] != FULLY_COMPATIBLE, -p["compatibility_score"]),
    )
    return candidates[:limit]


def run_block(context: Dict[str, Any]) -> Dict[str, Any]:
    user = context.get("user") or {}
    products = find_compatible_products(
        context.get("product") or {},
        context.get("catalog") or [],
        user.get("concerns"),
        user.get("skin_type"),
        limit=context.get("compatible_limit", 8),
    )
    return {"products": products, "count": len(products)}
