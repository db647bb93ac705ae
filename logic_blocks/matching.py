"""
Concern and ingredient matching against a user's concern list.

matches_concern is exact: the candidate must equal the user concern or one of
its listed variants. matches_ingredient is deliberately looser and uses
bidirectional substring containment so "Niacinamide 10%" hits "niacinamide".
"""
from typing import Iterable, Optional

from logic_blocks.synonyms import get_concern_variants, get_recommended_ingredients


def _norm(s) -> str:
    return str(s or "").strip().lower()


def matches_concern(candidate_concern: str, user_concerns: Optional[Iterable[str]]) -> bool:
    candidate = _norm(candidate_concern)
    if not candidate:
        return False
    for user_concern in user_concerns or []:
        key = _norm(user_concern)
        if not key:
            continue
        if candidate == key or candidate in get_concern_variants(key):
            return True
    return False


def product_matches_user_concerns(product_concerns: Optional[Iterable[str]],
                                  user_concerns: Optional[Iterable[str]]) -> bool:
    user_concerns = list(user_concerns or [])
    if not user_concerns:
        return False
    return any(matches_concern(pc, user_concerns) for pc in product_concerns or [])


def matches_ingredient(ingredient_name: str, user_concerns: Optional[Iterable[str]]) -> bool:
    ingredient = _norm(ingredient_name)
    if not ingredient:
        return False
    for user_concern in user_concerns or []:
        for fragment in get_recommended_ingredients(user_concern):
            if fragment in ingredient or ingredient in fragment:
                return True
    return False


def skin_type_matches(product_skin_types: Optional[Iterable[str]], user_skin_type: Optional[str]) -> bool:
    """True when the product lists the user's skin type or "all"."""
    skin = _norm(user_skin_type)
    if not skin:
        return False
    for st in product_skin_types or []:
        st = _norm(st)
        if st == skin or st == "all":
            return True
    return False
