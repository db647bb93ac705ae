"""
Time-of-day block: AM, PM or both for a product.

Cascade, each layer consulted only when the ones before it gave no signal:
  1. keywords in name + description
  2. ingredient names (key_ingredients + active_ingredients)
  3. category default
  4. both
Layers 1 and 2 are pooled: any AM/PM hit from either is final.
"""
from typing import Any, Dict, List
import logging

logger = logging.getLogger(__name__)

AM = "am"
PM = "pm"

# photosensitive or best paired with UV protection
AM_INGREDIENTS = [
    "vitamin c", "ascorbic acid", "l-ascorbic acid", "ferulic acid",
    "zinc oxide", "titanium dioxide", "avobenzone", "octinoxate", "homosalate",
]

# photosensitising or exfoliating
PM_INGREDIENTS = [
    "retinol", "retinal", "retinoid", "tretinoin", "adapalene", "tazarotene",
    "glycolic acid", "lactic acid", "mandelic acid", "salicylic acid",
    "benzoyl peroxide", "azelaic acid", "aha", "bha", "pha",
]

AM_KEYWORDS = [
    "day cream", "day moistur", "morning", "brightening", "antioxidant",
    "sunscreen", "sun protection", "spf", "uv ", "uv-",
]

PM_KEYWORDS = ["night", "overnight", "peel", "exfoliat", "resurfac", "retinol", "retinal"]

CATEGORY_DEFAULTS = {
    "sunscreen": [AM],
    "mask": [PM],
    "exfoliator": [PM],
    "cleanser": [AM, PM],
    "moisturizer": [AM, PM],
    "toner": [AM, PM],
    "essence": [AM, PM],
    "mist": [AM, PM],
    "oil": [AM, PM],
    "lip-care": [AM, PM],
    "eye-care": [AM, PM],
    "tool": [AM, PM],
}


def _contains_any(text: str, keywords: List[str]) -> bool:
    lower = str(text or "").lower().strip()
    return any(kw in lower for kw in keywords)


def _ingredient_names(product: Dict[str, Any]) -> List[str]:
    names = [str(i) for i in product.get("key_ingredients") or []]
    for active in product.get("active_ingredients") or []:
        names.append(str(active.get("name") or "") if isinstance(active, dict) else str(active))
    return names


def classify_time_of_day(product: Dict[str, Any]) -> List[str]:
    text = f"{product.get('name') or ''} {product.get('description') or ''}"
    has_am = _contains_any(text, AM_KEYWORDS)
    has_pm = _contains_any(text, PM_KEYWORDS)

    for name in _ingredient_names(product):
        has_am = has_am or _contains_any(name, AM_INGREDIENTS)
        has_pm = has_pm or _contains_any(name, PM_INGREDIENTS)

    if has_am or has_pm:
        slots = [slot for slot, hit in ((AM, has_am), (PM, has_pm)) if hit]
        logger.debug("%s: keyword/ingredient signal -> %s", product.get("id"), slots)
        return slots

    category = str(product.get("category") or "").lower().strip()
    default = CATEGORY_DEFAULTS.get(category)
    if default:
        logger.debug("%s: category default for %r -> %s", product.get("id"), category, default)
        return list(default)
    logger.debug("%s: no signal, defaulting to both", product.get("id"))
    return [AM, PM]


def run_block(context: Dict[str, Any]) -> Dict[str, Any]:
    slots = classify_time_of_day(context.get("product") or {})
    return {"slots": slots, "label": " & ".join(s.upper() for s in slots)}
