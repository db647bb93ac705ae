# cli.py
import json
from pathlib import Path
from typing import List, Optional
import typer
from logging import getLogger

import config
from logging_config import setup_logging
from agents.data_parser import CatalogParserAgent, parse_user_profile
from logic_blocks.compatibility_block import check_compatibility
from logic_blocks.compatible_block import find_compatible_products
from logic_blocks.similar_block import score_similar_products
from logic_blocks.time_of_day_block import classify_time_of_day

logger = getLogger(__name__)

app = typer.Typer(help="Personalization scoring primitives.")


def _load_catalog(path: Path):
    raw = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(raw, dict):
        raw = raw.get("catalog") or []
    return CatalogParserAgent().run(raw)


def _find(catalog, product_id: str):
    for product in catalog:
        if str(product["id"]) == product_id:
            return product
    raise typer.BadParameter(f"product {product_id} not in catalog")


def _user(concern, skin_type, preference=None):
    # same normalization as the pipeline: "Acne Prone" -> "acne"
    return parse_user_profile({"concerns": concern or [], "skin_type": skin_type, "preferences": preference or []})


def _echo(obj):
    typer.echo(json.dumps(obj, indent=2, ensure_ascii=False))


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v")):
    setup_logging("DEBUG" if verbose else config.LOG_LEVEL)


@app.command("check-pair")
def check_pair(ingredient_a: str, ingredient_b: str):
    """Classify two ingredients as safe / caution / avoid."""
    _echo(check_compatibility(ingredient_a, ingredient_b).to_dict())


@app.command("time-of-day")
def time_of_day(catalog: Path, product_id: str):
    _echo({"product_id": product_id, "slots": classify_time_of_day(_find(_load_catalog(catalog), product_id))})


@app.command("similar")
def similar(catalog: Path, product_id: str,
            concern: Optional[List[str]] = typer.Option(None, "--concern", "-c"),
            skin_type: Optional[str] = typer.Option(None, "--skin-type", "-s"),
            preference: Optional[List[str]] = typer.Option(None, "--preference"),
            limit: int = config.SIMILAR_LIMIT):
    products = _load_catalog(catalog)
    user = _user(concern, skin_type, preference)
    ranked = score_similar_products(_find(products, product_id), products, user.concerns, user.skin_type,
                                    user.preferences, limit=limit)
    logger.info("similar %s -> %d products", product_id, len(ranked))
    _echo([{"id": p["id"], "name": p["name"], "match_score": p["match_score"],
            "match_reasons": p["match_reasons"]} for p in ranked])


@app.command("compatible")
def compatible(catalog: Path, product_id: str,
               concern: Optional[List[str]] = typer.Option(None, "--concern", "-c"),
               skin_type: Optional[str] = typer.Option(None, "--skin-type", "-s"),
               limit: int = config.COMPATIBLE_LIMIT):
    products = _load_catalog(catalog)
    user = _user(concern, skin_type)
    ranked = find_compatible_products(_find(products, product_id), products, user.concerns, user.skin_type,
                                      limit=limit)
    logger.info("compatible %s -> %d products", product_id, len(ranked))
    _echo([{"id": p["id"], "name": p["name"], "level": p["compatibility_level"],
            "score": p["compatibility_score"], "caution_notes": p["caution_notes"]} for p in ranked])


if __name__ == "__main__":
    app()
