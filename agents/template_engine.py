# agents/template_engine.py
"""
TemplateEngineAgent.

Assembles the product detail page and the comparison page from block outputs.
- Card fields are picked from the annotated product dicts; missing values fall
  back to conservative defaults rather than raising.
- Blocks that failed are passed through as {"error": ...} and logged.
- Every page carries provenance (last_updated, source).
"""
from typing import Dict, Any
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

CARD_FIELDS = ("id", "name", "brand", "category", "price", "rating", "review_count", "in_stock")


def _card(product: Dict[str, Any], *extra: str) -> Dict[str, Any]:
    card = {k: product.get(k) for k in CARD_FIELDS}
    for k in extra:
        card[k] = product.get(k)
    return card


def _block(blocks: Dict[str, Any], name: str) -> Dict[str, Any]:
    out = blocks.get(name) or {}
    if "error" in out:
        logger.warning("[templater] Block %s failed: %s", name, out["error"])
    return out


class TemplateEngineAgent:
    def __init__(self, config: Dict = None):
        self.config = config or {}

    def _product_detail(self, product: Dict[str, Any], blocks: Dict[str, Any]) -> Dict[str, Any]:
        tod = _block(blocks, "time_of_day_block")
        similar = _block(blocks, "similar_block")
        compatible = _block(blocks, "compatible_block")
        reviews = _block(blocks, "review_block")
        conflicts = _block(blocks, "compatibility_block")
        return {
            "product": _card(product, "key_ingredients", "concerns", "skin_types"),
            "time_of_day": tod.get("slots") or [],
            "time_of_day_label": tod.get("label") or "",
            "ingredient_conflicts": conflicts.get("conflicts") or [],
            "similar_products": [
                _card(p, "match_score", "match_reasons") for p in similar.get("products") or []
            ],
            "compatible_products": [
                _card(p, "compatibility_level", "compatibility_score", "compatibility_reasons", "caution_notes")
                for p in compatible.get("products") or []
            ],
            "reviews": reviews.get("reviews") or [],
            "errors": {k: v["error"] for k, v in blocks.items() if isinstance(v, dict) and "error" in v},
        }

    def _comparison(self, blocks: Dict[str, Any]) -> Dict[str, Any]:
        compare = _block(blocks, "compare_block")
        metrics = dict(compare.get("metrics") or {})
        return {
            "rows": compare.get("rows") or [],
            "highlights": compare.get("highlights") or [],
            "best_value_product_id": metrics.get("best_value_product_id"),
            "worst_value_product_id": metrics.get("worst_value_product_id"),
            "ppml_summary": compare.get("ppml_summary"),
            "concentration_summary": compare.get("concentration_summary"),
        }

    def run(self, product_model: Dict, blocks: Dict) -> Dict:
        result: Dict[str, Any] = {
            "product_detail": self._product_detail(product_model, blocks),
            "comparison": self._comparison(blocks),
        }

        # Provenance
        timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        result["product_detail"]["last_updated"] = timestamp
        result["product_detail"]["source"] = "personalization_engine"
        result["comparison"]["last_updated"] = timestamp
        result["comparison"]["source"] = "compare_block"
        return result
