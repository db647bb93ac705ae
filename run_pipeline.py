"""
Pipeline entrypoint.

Reads one JSON input holding the catalog, the user's profile, the reference
product id, optional reviews and an optional comparison selection, then runs
parse -> logic blocks -> templates and writes product_detail.json and
comparison.json.

Input shape:
    {
      "catalog": [...],
      "user": {...},
      "reference_id": 12,
      "reviews": [...],
      "compare_ids": [12, 7, 3]
    }
"""

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, Any

import config
from logging_config import setup_logging
from agents.data_parser import CatalogParserAgent, parse_user_profile, parse_review
from agents.logic_engine import PersonalizationEngineAgent
from agents.template_engine import TemplateEngineAgent

logger = logging.getLogger("run_pipeline")


def _read_input(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Input not found: {p}")
    return json.loads(p.read_text(encoding="utf-8"))


def _write_outputs(pages: Dict[str, Any], outdir: str) -> Dict[str, str]:
    """
    Write product_detail.json and comparison.json into outdir.
    Return dict mapping logical names to written file paths.
    """
    out = Path(outdir)
    out.mkdir(parents=True, exist_ok=True)

    def _dump(obj, name):
        path = out / name
        content = json.dumps(obj, indent=2, ensure_ascii=False)
        path.write_text(content, encoding="utf-8")
        return str(path)

    detail_path = _dump(pages["product_detail"], "product_detail.json")
    comparison_path = _dump(pages["comparison"], "comparison.json")
    return {"product_detail": detail_path, "comparison": comparison_path}


def _find(catalog, product_id):
    for product in catalog:
        if str(product["id"]) == str(product_id):
            return product
    raise KeyError(f"Product {product_id!r} not in catalog")


def build_and_run(raw_input: Dict[str, Any], outdir: str, reference_id=None) -> Dict[str, str]:
    catalog = CatalogParserAgent().run(raw_input.get("catalog") or [])
    logger.info("Parsed catalog: %d products", len(catalog))

    reference_id = reference_id if reference_id is not None else raw_input.get("reference_id")
    reference = _find(catalog, reference_id)
    user = parse_user_profile(raw_input.get("user") or {}).model_dump()
    reviews = [parse_review(r).model_dump() for r in raw_input.get("reviews") or []]
    selection = [_find(catalog, pid) for pid in raw_input.get("compare_ids") or []]
    logger.info("Reference product: %s; %d reviews; %d selected for comparison",
                reference.get("name"), len(reviews), len(selection))

    engine = PersonalizationEngineAgent(config={
        "similar_limit": config.SIMILAR_LIMIT,
        "compatible_limit": config.COMPATIBLE_LIMIT,
    })
    blocks = engine.run(reference, catalog, user, reviews, selection)["blocks"]

    pages = TemplateEngineAgent().run(reference, blocks)
    artifacts = _write_outputs(pages, outdir)
    logger.info("Wrote artifacts: %s", artifacts)
    return artifacts


def main():
    parser = argparse.ArgumentParser(description="Run the personalization pipeline.")
    parser.add_argument("-i", "--input", default="inputs/storefront_input.json", help="Path to input JSON")
    parser.add_argument("-o", "--outdir", default=config.OUTPUT_DIR, help="Output directory for JSON artifacts")
    parser.add_argument("-p", "--product-id", default=None, help="Override reference_id from the input")
    args = parser.parse_args()

    setup_logging(config.LOG_LEVEL)
    logger.info("Starting pipeline. Input=%s Outdir=%s", args.input, args.outdir)
    raw = _read_input(args.input)
    artifacts = build_and_run(raw, args.outdir, reference_id=args.product_id)
    logger.info("Pipeline complete. Artifacts: %s", artifacts)


if __name__ == "__main__":
    main()
