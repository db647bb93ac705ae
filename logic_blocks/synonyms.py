"""
Synonym index - static lookup tables shared by the matchers.

 - CONCERN_MAP: canonical concern key -> accepted product concern variants
   (the key itself is always the first variant).
 - INGREDIENT_MAP: canonical concern key -> ingredient name fragments known to
   address that concern.
 - SURVEY_CONCERN_MAP: raw skin survey labels -> canonical concern key.

Tables are data-driven: adding a concern means adding a row, no code changes.
Keys are lowercase; lookups lowercase and strip their input.
"""
from types import MappingProxyType
from typing import Mapping, Tuple

CONCERN_MAP: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "acne": ("acne", "breakouts", "blemishes", "pimples", "acne prone"),
    "aging": ("aging", "anti-aging", "wrinkles", "fine lines", "firmness", "signs of aging"),
    "dryness": ("dryness", "dry skin", "dehydration", "hydration", "lack of hydration", "moisturizing"),
    "oiliness": ("oiliness", "oily skin", "excess oil", "shine control"),
    "sensitivity": ("sensitivity", "sensitive skin", "redness", "irritation", "rosacea",
                    "barrier repair", "calming", "gentle"),
    "hyperpigmentation": ("hyperpigmentation", "dark spots", "uneven skin tone", "discoloration",
                          "brightening", "sun damage", "tone"),
    "pores": ("pores", "large pores", "pore minimizing", "enlarged pores", "congestion", "congested"),
    "dullness": ("dullness", "dull skin", "radiance", "glow", "brightening"),
    "texture": ("texture", "rough texture", "smoothing", "uneven texture",
                "textural irregularities", "exfoliation"),
    "dark circles": ("dark circles", "under-eye circles", "eye bags", "eye care"),
    "sun protection": ("sun protection", "spf", "uv", "sunscreen"),
    "scarring": ("scarring", "scars", "healing", "post-acne"),
})

INGREDIENT_MAP: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "acne": ("salicylic acid", "benzoyl peroxide", "niacinamide", "tea tree", "zinc"),
    "aging": ("retinol", "vitamin c", "peptides", "hyaluronic acid", "collagen"),
    "dryness": ("hyaluronic acid", "ceramides", "squalane", "glycerin", "shea butter"),
    "oiliness": ("niacinamide", "salicylic acid", "clay", "zinc", "witch hazel"),
    "sensitivity": ("centella asiatica", "aloe vera", "chamomile", "oat extract", "allantoin", "ceramides"),
    "hyperpigmentation": ("vitamin c", "niacinamide", "alpha arbutin", "kojic acid", "azelaic acid"),
    "pores": ("niacinamide", "salicylic acid", "retinol", "clay", "aha"),
    "dullness": ("vitamin c", "aha", "glycolic acid", "lactic acid", "niacinamide"),
    "texture": ("aha", "bha", "retinol", "glycolic acid", "lactic acid"),
    "dark circles": ("vitamin c", "caffeine", "retinol", "peptides", "vitamin k"),
    "sun protection": ("zinc oxide", "titanium dioxide", "avobenzone", "vitamin e"),
    "scarring": ("retinol", "vitamin c", "niacinamide", "aha", "centella asiatica"),
})

# Exact labels offered by the skin survey
SURVEY_CONCERN_MAP: Mapping[str, str] = MappingProxyType({
    "uneven skin tone": "hyperpigmentation",
    "dullness": "dullness",
    "enlarged pores": "pores",
    "textural irregularities": "texture",
    "damaged skin barrier": "sensitivity",
    "signs of aging": "aging",
    "acne prone": "acne",
    "sun protection": "sun protection",
    "exzema": "sensitivity",
    "eczema": "sensitivity",
    "lack of hydration": "dryness",
    "sun damage": "hyperpigmentation",
    "rosacea": "sensitivity",
    "dark circles": "dark circles",
    "congested skin": "pores",
    "scarring": "scarring",
    "looking for gentle products": "sensitivity",
})


def _key(value: str) -> str:
    return str(value or "").strip().lower()


def get_concern_variants(concern: str) -> Tuple[str, ...]:
    """Variants accepted for a canonical concern; empty for unknown keys."""
    return CONCERN_MAP.get(_key(concern), ())


def get_recommended_ingredients(concern: str) -> Tuple[str, ...]:
    """Ingredient fragments recommended for a concern; empty for unknown keys."""
    return INGREDIENT_MAP.get(_key(concern), ())


def normalize_user_concern(label: str) -> str:
    """
    Map a raw survey label to its canonical concern key.
    "Acne Prone" -> "acne", "Signs of Aging" -> "aging".
    Labels that are not survey labels come back lowercased and stripped.
    """
    lowered = _key(label)
    return SURVEY_CONCERN_MAP.get(lowered, lowered)
