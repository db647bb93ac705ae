"""
Compare Block - side-by-side metrics for a small selection (1-3) of products.

 - PPML: price per millilitre after converting the declared size to ml.
 - Best / worst value: lowest / highest PPML among products that have PPML data.
   Products without a valid price or size are left out, never counted as 0.
 - Highest concentration: per active ingredient with a numeric concentration,
   the first product holding the maximum is flagged.
 - Highlights: min/max of price, rating and review count across the selection.

A highlight needs something to contrast against: nothing is flagged when fewer
than two products carry the value or when all values are equal.
"""
from typing import Any, Dict, List, Optional
import logging
import math

logger = logging.getLogger(__name__)

ML_PER_OZ = 29.5735

UNIT_TO_ML = {
    "ml": 1.0,
    "oz": ML_PER_OZ,
    "fl oz": ML_PER_OZ,
    # 1 g ~ 1 ml for most skincare products
    "g": 1.0,
}

MISSING_DATA_TEXT = {
    "price": "Price unavailable",
    "size": "Size not available",
    "rating": "No reviews yet",
    "brand": "",
    "ingredients": "Ingredients not provided",
}


def _safe_number(v) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def _norm_name(name) -> str:
    return str(name or "").strip().lower()


# ---------------------------------------------------------------- size & price

def convert_to_ml(size: Optional[Dict[str, Any]]) -> Optional[float]:
    if not size:
        return None
    value = _safe_number(size.get("value"))
    if value is None or value <= 0:
        return None
    factor = UNIT_TO_ML.get(_norm_name(size.get("unit")))
    if factor is None:
        return None
    return value * factor


def format_size(size: Optional[Dict[str, Any]]) -> Optional[str]:
    value = _safe_number((size or {}).get("value"))
    if value is None or value <= 0:
        return None
    return f"{size.get('value')} {size.get('unit')}"


def has_valid_price(product: Dict[str, Any]) -> bool:
    price = _safe_number(product.get("price"))
    return price is not None and price > 0


def has_valid_size(product: Dict[str, Any]) -> bool:
    value = _safe_number((product.get("size") or {}).get("value"))
    return value is not None and value > 0


def calculate_ppml(product: Dict[str, Any]) -> Optional[float]:
    if not has_valid_price(product):
        return None
    ml = convert_to_ml(product.get("size"))
    if not ml:
        return None
    return float(product["price"]) / ml


def has_ppml_data(product: Dict[str, Any]) -> bool:
    return calculate_ppml(product) is not None


def format_ppml(ppml: Optional[float]) -> Optional[str]:
    if ppml is None or not math.isfinite(ppml):
        return None
    return f"${ppml:.2f}/ml"


def missing_data_text(field: str) -> str:
    return MISSING_DATA_TEXT.get(field, "")


# -------------------------------------------------------------- concentrations

def _has_concentration(ingredient: Dict[str, Any]) -> bool:
    return _safe_number(ingredient.get("concentration")) is not None


def has_concentration_data(product: Dict[str, Any]) -> bool:
    return any(_has_concentration(i) for i in product.get("active_ingredients") or [])


def format_concentration(ingredient: Dict[str, Any]) -> str:
    if not _has_concentration(ingredient):
        return "Unknown"
    unit = ingredient.get("concentration_unit") or "%"
    return f"{ingredient['concentration']}{unit}"


def get_primary_active_ingredient(product: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    actives = product.get("active_ingredients") or []
    if not actives:
        return None
    for ing in actives:
        if ing.get("is_key_active"):
            return ing
    for ing in actives:
        if _has_concentration(ing):
            return ing
    return actives[0]


# ------------------------------------------------------------------- metrics

def calculate_comparison_metrics(products: List[Dict[str, Any]]) -> Dict[str, Any]:
    metrics: Dict[str, Any] = {
        "best_value_product_id": None,
        "best_ppml": None,
        "worst_value_product_id": None,
        "worst_ppml": None,
        "highest_concentrations": {},
        "products_with_ppml": 0,
        "products_with_concentration": 0,
        "total": len(products or []),
    }
    if not products:
        return metrics

    ppml_data = []
    for product in products:
        ppml = calculate_ppml(product)
        if ppml is not None:
            ppml_data.append((product.get("id"), ppml))
        if has_concentration_data(product):
            metrics["products_with_concentration"] += 1
    metrics["products_with_ppml"] = len(ppml_data)

    values = [v for _, v in ppml_data]
    if len(ppml_data) >= 2 and min(values) != max(values):
        best = min(ppml_data, key=lambda d: d[1])
        worst = max(ppml_data, key=lambda d: d[1])
        metrics["best_value_product_id"], metrics["best_ppml"] = best
        metrics["worst_value_product_id"], metrics["worst_ppml"] = worst
    else:
        logger.debug("Best/worst value suppressed: %d of %d products have PPML",
                     len(ppml_data), len(products))

    counts: Dict[str, int] = {}
    for product in products:
        for ing in product.get("active_ingredients") or []:
            if _has_concentration(ing):
                name = _norm_name(ing.get("name"))
                counts[name] = counts.get(name, 0) + 1

    highest: Dict[str, Dict[str, Any]] = {}
    for product in products:
        for ing in product.get("active_ingredients") or []:
            if not _has_concentration(ing):
                continue
            name = _norm_name(ing.get("name"))
            conc = float(ing["concentration"])
            current = highest.get(name)
            # strict > keeps the first product on ties
            if current is None or conc > current["concentration"]:
                highest[name] = {"product_id": product.get("id"), "concentration": conc, "count": counts[name]}
    metrics["highest_concentrations"] = highest
    return metrics


def has_highest_concentration(product_id, ingredient_name: str, metrics: Dict[str, Any]) -> bool:
    entry = metrics.get("highest_concentrations", {}).get(_norm_name(ingredient_name))
    return bool(entry) and entry["product_id"] == product_id and entry["count"] >= 2


def is_best_value(product_id, metrics: Dict[str, Any]) -> bool:
    best = metrics.get("best_value_product_id")
    return best is not None and best == product_id and metrics.get("products_with_ppml", 0) >= 2


def is_worst_value(product_id, metrics: Dict[str, Any]) -> bool:
    worst = metrics.get("worst_value_product_id")
    return worst is not None and worst == product_id and metrics.get("products_with_ppml", 0) >= 2


def coverage_summary(count: int, total: int, noun: str = "size info") -> str:
    return f"{count}/{total} have {noun}"


# ---------------------------------------------------------------- highlights

def metric_extremes(values: List[Optional[float]]):
    """(min, max) of the known values, or None when there is nothing to contrast."""
    known = [v for v in values if v is not None]
    if len(known) < 2 or min(known) == max(known):
        return None
    return min(known), max(known)


def compute_highlights(products: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """One flag dict per product, in selection order."""
    products = products or []
    flags: List[Dict[str, Any]] = [{"product_id": p.get("id")} for p in products]
    if len(products) < 2:
        return flags

    metrics = {
        "price": [float(p["price"]) if has_valid_price(p) else None for p in products],
        "rating": [_safe_number(p.get("rating")) for p in products],
        "review_count": [_safe_number(p.get("review_count")) for p in products],
    }
    names = {
        "price": ("lowest_price", "highest_price"),
        "rating": ("lowest_rating", "highest_rating"),
        "review_count": ("least_reviews", "most_reviews"),
    }
    for metric, values in metrics.items():
        extremes = metric_extremes(values)
        low_name, high_name = names[metric]
        for pf, value in zip(flags, values):
            pf[low_name] = extremes is not None and value == extremes[0]
            pf[high_name] = extremes is not None and value == extremes[1]
    return flags


def _primary_active_cell(product: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    primary = get_primary_active_ingredient(product)
    if primary is None:
        return None
    return {"name": primary.get("name"), "concentration": format_concentration(primary)}


def build_comparison_rows(products: List[Dict[str, Any]], metrics: Dict[str, Any]) -> List[Dict[str, Any]]:
    rows = []
    for product in products:
        pid = product.get("id")
        ppml = calculate_ppml(product)
        rows.append({
            "product_id": pid,
            "name": product.get("name"),
            "ppml": ppml,
            "ppml_label": format_ppml(ppml),
            "size_label": format_size(product.get("size")) if has_valid_size(product) else missing_data_text("size"),
            "primary_active": _primary_active_cell(product),
            "has_ppml_data": ppml is not None,
            "is_best_value": is_best_value(pid, metrics),
            "is_worst_value": is_worst_value(pid, metrics),
            "ingredients": [
                {
                    "name": ing.get("name"),
                    "concentration": format_concentration(ing),
                    "is_highest": _has_concentration(ing) and has_highest_concentration(pid, ing.get("name"), metrics),
                }
                for ing in product.get("active_ingredients") or []
            ],
        })
    return rows


def run_block(context: Dict[str, Any]) -> Dict[str, Any]:
    selection = list(context.get("selection") or [])
    metrics = calculate_comparison_metrics(selection)
    total = len(selection)
    return {
        "metrics": metrics,
        "rows": build_comparison_rows(selection, metrics),
        "highlights": compute_highlights(selection),
        "ppml_summary": coverage_summary(metrics["products_with_ppml"], total, "size info"),
        "concentration_summary": coverage_summary(metrics["products_with_concentration"], total, "concentration data"),
    }
