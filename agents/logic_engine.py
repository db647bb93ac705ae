"""
PersonalizationEngineAgent - runs registered logic blocks over one shared context.

Each block module in logic_blocks/ must expose run_block(context) -> dict.
Context keys:
    product     reference product dict
    catalog     list of product dicts (read-only)
    user        user profile dict
    reviews     review dicts for the reference product
    selection   1-3 product dicts picked for side-by-side comparison
    similar_limit / compatible_limit
Blocks never see each other's output and never mutate the context.
"""
from typing import Any, Dict, List, Optional
import importlib
import logging
logger = logging.getLogger(__name__)

REGISTERED_BLOCKS = [
    "time_of_day_block",
    "compatibility_block",
    "similar_block",
    "compatible_block",
    "review_block",
    "compare_block",
]


class PersonalizationEngineAgent:
    def __init__(self, config: Dict = None, blocks: Optional[List[str]] = None):
        self.config = config or {}
        self.blocks = list(blocks or REGISTERED_BLOCKS)

    def _build_context(self, product: Dict[str, Any], catalog: List[Dict[str, Any]],
                       user: Optional[Dict[str, Any]], reviews: Optional[List[Dict[str, Any]]],
                       selection: Optional[List[Dict[str, Any]]]) -> Dict[str, Any]:
        return {
            "product": product,
            "catalog": catalog or [],
            "user": user or {},
            "reviews": reviews or [],
            "selection": selection or [],
            "similar_limit": self.config.get("similar_limit", 4),
            "compatible_limit": self.config.get("compatible_limit", 8),
        }

    def run(self, product: Dict[str, Any], catalog: List[Dict[str, Any]], user: Dict[str, Any] = None,
            reviews: List[Dict[str, Any]] = None, selection: List[Dict[str, Any]] = None) -> Dict:
        """
        Runs each registered block. A block that fails to import or raises is
        recorded as {'error': ...} and the remaining blocks still run.
        """
        context = self._build_context(product, catalog, user, reviews, selection)
        blocks = {}
        for blk in self.blocks:
            try:
                mod = importlib.import_module(f"logic_blocks.{blk}")
            except ImportError as e:
                blocks[blk] = {"error": f"import error: {e}"}
                continue

            if not hasattr(mod, "run_block"):
                blocks[blk] = {"error": "no run_block() in block module"}
                continue

            try:
                blocks[blk] = mod.run_block(context)
            except Exception as e:
                logger.exception("Block %s execution failed: %s", blk, e)
                blocks[blk] = {"error": str(e)}

        logger.info("Blocks executed for product %s: %s", product.get("id"), list(blocks.keys()))
        return {"blocks": blocks}
