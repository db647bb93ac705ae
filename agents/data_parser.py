# agents/data_parser.py
from typing import List, Optional, Any, Dict, Union
from pydantic import BaseModel, field_validator
import re

from logic_blocks.synonyms import normalize_user_concern

PRICE_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")


def _split_list(v, field_name: str) -> List[str]:
    # Accept comma/semicolon-separated string or list
    if v is None:
        return []
    if isinstance(v, (list, tuple)):
        return [s.strip() for s in v if s and isinstance(s, str) and s.strip()]
    if isinstance(v, str):
        return [s.strip() for s in re.split(r"[;,]", v) if s.strip()]
    raise ValueError(f"{field_name} must be a list or string")


def _parse_number(v) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        return float(v)
    if isinstance(v, str):
        # "$24.99", "24.99 USD", "1,299"
        match = PRICE_RE.search(v)
        if match:
            try:
                return float(match.group(0).replace(",", ""))
            except ValueError:
                return None
    return None


def _parse_int(v) -> Optional[int]:
    n = _parse_number(v)
    return int(n) if n is not None else None


def _parse_flags(v) -> Dict[str, bool]:
    # {"vegan": true} or ["vegan", "crueltyFree"]
    if not v:
        return {}
    if isinstance(v, (list, tuple)):
        return {str(k): True for k in v}
    return {str(k): bool(flag) for k, flag in dict(v).items()}


def _first(raw: Dict[str, Any], *keys):
    for k in keys:
        if raw.get(k) is not None:
            return raw.get(k)
    return None


class ActiveIngredient(BaseModel):
    name: str
    concentration: Optional[float] = None
    concentration_unit: Optional[str] = None
    is_key_active: bool = False

    @field_validator("concentration", mode="before")
    @classmethod
    def parse_concentration(cls, v):
        return _parse_number(v)


class ProductSize(BaseModel):
    value: float
    unit: str

    @field_validator("unit", mode="before")
    @classmethod
    def normalize_unit(cls, v):
        return str(v or "").strip().lower()


class ProductModel(BaseModel):
    id: Union[int, str]
    name: str
    brand: Optional[str] = None
    category: Optional[str] = None
    description: str = ""
    price: Optional[float] = None
    rating: float = 0.0
    review_count: int = 0
    skin_types: List[str] = []
    concerns: List[str] = []
    key_ingredients: List[str] = []
    active_ingredients: List[ActiveIngredient] = []
    preferences: Dict[str, bool] = {}
    size: Optional[ProductSize] = None
    in_stock: bool = True
    source: Optional[str] = None

    @field_validator("skin_types", "concerns", "key_ingredients", mode="before")
    @classmethod
    def normalize_lists(cls, v, info):
        return _split_list(v, info.field_name)

    @field_validator("price", mode="before")
    @classmethod
    def parse_price(cls, v):
        return _parse_number(v)

    @field_validator("rating", mode="before")
    @classmethod
    def parse_rating(cls, v):
        rating = _parse_number(v)
        if rating is None:
            return 0.0
        return min(max(rating, 0.0), 5.0)

    @field_validator("review_count", mode="before")
    @classmethod
    def parse_review_count(cls, v):
        return _parse_int(v) or 0

    @field_validator("active_ingredients", mode="before")
    @classmethod
    def normalize_actives(cls, v):
        if not v:
            return []
        out = []
        for item in v:
            if isinstance(item, str):
                out.append({"name": item})
            elif isinstance(item, dict):
                out.append({
                    "name": item.get("name"),
                    "concentration": item.get("concentration"),
                    "concentration_unit": _first(item, "concentration_unit", "concentrationUnit"),
                    "is_key_active": bool(_first(item, "is_key_active", "isKeyActive")),
                })
            else:
                out.append(item)
        return out

    @field_validator("preferences", mode="before")
    @classmethod
    def normalize_preferences(cls, v):
        return _parse_flags(v)


class UserProfile(BaseModel):
    skin_type: Optional[str] = None
    concerns: List[str] = []
    preferences: Dict[str, bool] = {}
    complexion: Optional[str] = None
    sensitivity: Optional[str] = None
    lifestyle: List[str] = []
    age: Optional[int] = None

    @field_validator("concerns", mode="before")
    @classmethod
    def normalize_concerns(cls, v):
        # survey labels ("Acne Prone") -> canonical keys ("acne"), order kept
        keys = [normalize_user_concern(c) for c in _split_list(v, "concerns")]
        return list(dict.fromkeys(k for k in keys if k))

    @field_validator("lifestyle", mode="before")
    @classmethod
    def normalize_lifestyle(cls, v):
        return _split_list(v, "lifestyle")

    @field_validator("preferences", mode="before")
    @classmethod
    def normalize_preferences(cls, v):
        return _parse_flags(v)

    @field_validator("age", mode="before")
    @classmethod
    def parse_age(cls, v):
        return _parse_int(v)


class ReviewModel(BaseModel):
    id: Optional[Union[int, str]] = None
    product_id: Optional[Union[int, str]] = None
    rating: Optional[float] = None
    text: str = ""
    skin_type: Optional[str] = None
    skin_concerns: List[str] = []
    complexion: Optional[str] = None
    sensitivity: Optional[str] = None
    lifestyle: List[str] = []
    age: Optional[int] = None

    @field_validator("skin_concerns", "lifestyle", mode="before")
    @classmethod
    def normalize_lists(cls, v, info):
        return _split_list(v, info.field_name)

    @field_validator("age", mode="before")
    @classmethod
    def parse_age(cls, v):
        return _parse_int(v)


def parse_raw_product(raw: Dict[str, Any]) -> ProductModel:
    """
    Parse one raw catalog record into a validated ProductModel.
    Accepts both the storefront's camelCase keys and snake_case keys.
    """
    mapping = {
        "id": raw.get("id"),
        "name": _first(raw, "name", "product_name", "Product Name"),
        "brand": raw.get("brand"),
        "category": raw.get("category"),
        "description": raw.get("description") or "",
        "price": raw.get("price"),
        "rating": raw.get("rating"),
        "review_count": _first(raw, "review_count", "reviewCount"),
        "skin_types": _first(raw, "skin_types", "skinTypes", "skin_type"),
        "concerns": raw.get("concerns"),
        "key_ingredients": _first(raw, "key_ingredients", "keyIngredients", "ingredients"),
        "active_ingredients": _first(raw, "active_ingredients", "activeIngredients"),
        "preferences": raw.get("preferences"),
        "size": raw.get("size"),
        "in_stock": _first(raw, "in_stock", "inStock"),
        "source": raw.get("source"),
    }
    return ProductModel(**{k: v for k, v in mapping.items() if v is not None})


def parse_user_profile(raw: Dict[str, Any]) -> UserProfile:
    """Assemble the user profile from survey answers / session state."""
    mapping = {
        "skin_type": _first(raw, "skin_type", "skinType"),
        "concerns": _first(raw, "concerns", "primary_concerns", "primaryConcerns"),
        "preferences": raw.get("preferences"),
        "complexion": raw.get("complexion"),
        "sensitivity": raw.get("sensitivity"),
        "lifestyle": raw.get("lifestyle"),
        "age": raw.get("age"),
    }
    return UserProfile(**{k: v for k, v in mapping.items() if v is not None})


def parse_review(raw: Dict[str, Any]) -> ReviewModel:
    # reviewer profile may be nested or flat
    profile = _first(raw, "profile", "reviewer_profile", "reviewerProfile") or raw
    mapping = {
        "id": raw.get("id"),
        "product_id": _first(raw, "product_id", "productId"),
        "rating": raw.get("rating"),
        "text": _first(raw, "text", "body", "comment"),
        "skin_type": _first(profile, "skin_type", "skinType"),
        "skin_concerns": _first(profile, "skin_concerns", "skinConcerns", "concerns"),
        "complexion": profile.get("complexion"),
        "sensitivity": profile.get("sensitivity"),
        "lifestyle": profile.get("lifestyle"),
        "age": profile.get("age"),
    }
    return ReviewModel(**{k: v for k, v in mapping.items() if v is not None})


class CatalogParserAgent:
    def __init__(self, config: Dict = None):
        self.config = config or {}

    def run(self, raw_catalog: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Returns canonical dicts (ProductModel.model_dump()) in catalog order.
        """
        return [parse_raw_product(raw).model_dump() for raw in raw_catalog or []]
