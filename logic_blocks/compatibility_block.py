"""
Compatibility Block - pairwise ingredient interaction check.

A fixed rule table classifies an ingredient pair as "avoid", "caution" or "safe".
Each rule holds two ingredient groups; a name belongs to a group when it contains
a group entry or the entry contains it (case-insensitive). A rule matches a pair
in either orientation, so check_compatibility(a, b) and check_compatibility(b, a)
always agree. Pairs outside the table are safe with a generic reason.
"""
from dataclasses import asdict, dataclass
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

SAFE = "safe"
CAUTION = "caution"
AVOID = "avoid"

NO_KNOWN_CONFLICTS = "No known conflicts between these ingredients."


@dataclass(frozen=True)
class CompatibilityRule:
    group_a: Tuple[str, ...]
    group_b: Tuple[str, ...]
    level: str
    reason: str
    resolution: Optional[str] = None


@dataclass(frozen=True)
class CompatibilityResult:
    level: str
    reason: str
    resolution: Optional[str] = None

    @property
    def compatible(self) -> bool:
        return self.level != AVOID

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["compatible"] = self.compatible
        return out


# Order matters: first match wins, hard conflicts first.
COMPATIBILITY_RULES: Tuple[CompatibilityRule, ...] = (
    CompatibilityRule(
        ("retinol", "retinoid", "tretinoin"), ("aha", "glycolic acid", "lactic acid"), AVOID,
        "Both are potent exfoliants that can cause severe irritation when combined",
        "Use AHAs and retinol on alternate nights"),
    CompatibilityRule(
        ("retinol", "retinoid", "tretinoin"), ("bha", "salicylic acid"), AVOID,
        "Over-exfoliation and barrier damage risk",
        "Use BHA in the morning or on alternate nights"),
    CompatibilityRule(
        ("retinol", "retinoid"), ("benzoyl peroxide",), AVOID,
        "Benzoyl peroxide oxidizes and deactivates retinol",
        "Use benzoyl peroxide in AM, retinol in PM"),
    CompatibilityRule(
        ("benzoyl peroxide",), ("vitamin c", "ascorbic acid"), AVOID,
        "Benzoyl peroxide oxidizes vitamin C, making it ineffective",
        "Never use together; use in completely separate routines"),
    CompatibilityRule(
        ("aha", "glycolic acid"), ("bha", "salicylic acid"), AVOID,
        "Over-exfoliation risk when layering multiple acids",
        "Use on alternate nights or choose combination products"),

    CompatibilityRule(
        ("vitamin c", "ascorbic acid"), ("niacinamide",), CAUTION,
        "May reduce efficacy of both (though recent research suggests this is minimal)",
        "Use in separate routines (Vitamin C AM, Niacinamide PM) or wait 15-20 minutes between"),
    CompatibilityRule(
        ("vitamin c", "ascorbic acid"), ("aha", "glycolic acid", "lactic acid"), CAUTION,
        "pH conflicts can reduce Vitamin C stability",
        "Use Vitamin C in AM, AHAs in PM"),
    CompatibilityRule(
        ("vitamin c", "ascorbic acid"), ("retinol", "retinoid"), CAUTION,
        "Different optimal pH levels may reduce efficacy",
        "Use Vitamin C in AM, Retinol in PM for best results"),
    CompatibilityRule(
        ("retinol", "retinoid"), ("vitamin c",), CAUTION,
        "Can be irritating for sensitive skin when combined",
        "AM/PM split or alternate nights for sensitive skin"),

    CompatibilityRule(
        ("niacinamide",), ("hyaluronic acid", "ceramides", "peptides", "squalane"), SAFE,
        "Niacinamide pairs well with hydrating and barrier-supporting ingredients"),
    CompatibilityRule(
        ("hyaluronic acid",), ("vitamin c", "retinol", "niacinamide", "peptides", "ceramides"), SAFE,
        "Hyaluronic acid is compatible with almost all actives"),
    CompatibilityRule(
        ("ceramides",), ("retinol", "aha", "bha", "niacinamide", "vitamin c"), SAFE,
        "Ceramides help buffer irritation from actives and support barrier function"),
    CompatibilityRule(
        ("peptides",), ("hyaluronic acid", "niacinamide", "ceramides", "vitamin c"), SAFE,
        "Peptides are gentle and work well with most skincare ingredients"),
    CompatibilityRule(
        ("centella asiatica", "cica"), ("niacinamide", "hyaluronic acid", "ceramides", "retinol"), SAFE,
        "Centella soothes and pairs well with irritating actives"),
)

_NO_CONFLICT = CompatibilityResult(SAFE, NO_KNOWN_CONFLICTS)


def _in_group(name: str, group: Tuple[str, ...]) -> bool:
    return any(entry in name or name in entry for entry in group)


@lru_cache(maxsize=4096)
def _lookup(a: str, b: str) -> CompatibilityResult:
    for rule in COMPATIBILITY_RULES:
        forward = _in_group(a, rule.group_a) and _in_group(b, rule.group_b)
        backward = _in_group(b, rule.group_a) and _in_group(a, rule.group_b)
        if forward or backward:
            return CompatibilityResult(rule.level, rule.reason, rule.resolution)
    return _NO_CONFLICT


def check_compatibility(ingredient_a: str, ingredient_b: str) -> CompatibilityResult:
    a = str(ingredient_a or "").strip().lower()
    b = str(ingredient_b or "").strip().lower()
    # blank names would substring-match every group entry
    if not a or not b or a == b:
        return _NO_CONFLICT
    # canonical order keeps one cache entry per unordered pair
    if b < a:
        a, b = b, a
    return _lookup(a, b)


def check_multiple_compatibility(ingredients: List[str]) -> List[Dict[str, Any]]:
    """Every non-safe pair within a single ingredient list (e.g. a routine)."""
    conflicts = []
    for i in range(len(ingredients)):
        for j in range(i + 1, len(ingredients)):
            result = check_compatibility(ingredients[i], ingredients[j])
            if result.level != SAFE:
                conflicts.append({"pair": [ingredients[i], ingredients[j]], "result": result.to_dict()})
    return conflicts


def run_block(context: Dict[str, Any]) -> Dict[str, Any]:
    product = context.get("product") or {}
    ingredients = list(product.get("key_ingredients") or [])
    conflicts = check_multiple_compatibility(ingredients)
    logger.debug("Product %s: %d conflicting pair(s) among %d key ingredients",
                 product.get("id"), len(conflicts), len(ingredients))
    return {"conflicts": conflicts}
