import math
import logging

from logic_blocks.compare_block import (
    calculate_comparison_metrics,
    calculate_ppml,
    compute_highlights,
    convert_to_ml,
    coverage_summary,
    format_concentration,
    format_ppml,
    get_primary_active_ingredient,
    has_highest_concentration,
    is_best_value,
    is_worst_value,
    run_block,
)


def _product(pid, price=None, size=None, actives=None, rating=4.0, review_count=10):
    return {"id": pid, "name": f"P{pid}", "price": price, "size": size, "active_ingredients": actives or [],
            "rating": rating, "review_count": review_count}


def test_unit_conversion():
    assert convert_to_ml({"value": 30, "unit": "ml"}) == 30
    assert math.isclose(convert_to_ml({"value": 1, "unit": "fl oz"}), 29.5735)
    assert convert_to_ml({"value": 50, "unit": "g"}) == 50
    assert convert_to_ml({"value": 2, "unit": "tablets"}) is None
    assert convert_to_ml({"value": 0, "unit": "ml"}) is None
    assert convert_to_ml(None) is None


def test_ppml_requires_price_and_size():
    assert calculate_ppml(_product(1, price=30, size={"value": 30, "unit": "ml"})) == 1.0
    assert calculate_ppml(_product(2, price=0, size={"value": 30, "unit": "ml"})) is None
    assert calculate_ppml(_product(3, price=20)) is None
    assert format_ppml(0.5) == "$0.50/ml"
    assert format_ppml(None) is None


def test_best_and_worst_value_ignore_missing_data():
    products = [
        _product(1, price=40, size={"value": 20, "unit": "ml"}),   # 2.0/ml
        _product(2, price=None, size={"value": 50, "unit": "ml"}),
        _product(3, price=30, size={"value": 60, "unit": "ml"}),   # 0.5/ml
    ]
    metrics = calculate_comparison_metrics(products)
    assert metrics["products_with_ppml"] == 2
    assert metrics["best_value_product_id"] == 3
    assert metrics["worst_value_product_id"] == 1
    assert is_best_value(3, metrics) and not is_best_value(2, metrics)
    assert is_worst_value(1, metrics)


def test_value_suppressed_with_one_or_equal_ppml():
    single = calculate_comparison_metrics([_product(1, price=10, size={"value": 10, "unit": "ml"}), _product(2)])
    assert single["best_value_product_id"] is None

    equal = calculate_comparison_metrics([
        _product(1, price=10, size={"value": 10, "unit": "ml"}),
        _product(2, price=20, size={"value": 20, "unit": "ml"}),
    ])
    assert equal["best_value_product_id"] is None
    assert equal["worst_value_product_id"] is None


def test_highest_concentration_first_on_ties_and_unknown_never_flagged():
    products = [
        _product(1, actives=[{"name": "Niacinamide", "concentration": 10}, {"name": "Zinc", "concentration": None}]),
        _product(2, actives=[{"name": "niacinamide ", "concentration": 10}, {"name": "Zinc", "concentration": 1}]),
        _product(3, actives=[{"name": "Niacinamide", "concentration": 5}]),
    ]
    metrics = calculate_comparison_metrics(products)
    assert metrics["products_with_concentration"] == 3
    assert has_highest_concentration(1, "Niacinamide", metrics) is True
    assert has_highest_concentration(2, "Niacinamide", metrics) is False
    # only one product has a numeric zinc concentration
    assert has_highest_concentration(2, "Zinc", metrics) is False
    assert format_concentration({"name": "Zinc", "concentration": None}) == "Unknown"
    assert format_concentration({"name": "Zinc", "concentration": 1, "concentration_unit": "mg"}) == "1mg"


def test_primary_active_ingredient():
    actives = [{"name": "Water"}, {"name": "Niacinamide", "concentration": 5}, {"name": "Zinc", "is_key_active": True}]
    assert get_primary_active_ingredient({"active_ingredients": actives})["name"] == "Zinc"
    assert get_primary_active_ingredient({"active_ingredients": actives[:2]})["name"] == "Niacinamide"
    assert get_primary_active_ingredient({"active_ingredients": []}) is None


def test_highlights_min_max():
    products = [
        _product(1, price=20, rating=4.5, review_count=100),
        _product(2, price=35, rating=4.5, review_count=40),
        _product(3, price=None, rating=4.5, review_count=40),
    ]
    first, second, third = compute_highlights(products)
    assert [f["product_id"] for f in (first, second, third)] == [1, 2, 3]
    assert first["lowest_price"] and not first["highest_price"]
    assert second["highest_price"]
    assert not third["lowest_price"] and not third["highest_price"]
    # all ratings equal -> nothing to contrast
    assert not any(f["highest_rating"] or f["lowest_rating"] for f in (first, second, third))
    assert first["most_reviews"] and second["least_reviews"] and third["least_reviews"]


def test_highlights_suppressed_for_single_product():
    assert compute_highlights([_product(1, price=20)]) == [{"product_id": 1}]


def test_highlights_follow_selection_order_not_ids():
    twins = [_product(None, price=10), _product(None, price=25)]
    cheap, pricey = compute_highlights(twins)
    assert cheap["lowest_price"] and not cheap["highest_price"]
    assert pricey["highest_price"] and not pricey["lowest_price"]


def test_run_block_summaries():
    selection = [
        _product(1, price=30, size={"value": 30, "unit": "ml"}, actives=[{"name": "Retinol", "concentration": 0.5}]),
        _product(2, price=10, size={"value": 1, "unit": "oz"}),
        _product(3),
    ]
    out = run_block({"selection": selection})
    assert out["ppml_summary"] == coverage_summary(2, 3) == "2/3 have size info"
    assert out["concentration_summary"] == "1/3 have concentration data"
    rows = {r["product_id"]: r for r in out["rows"]}
    assert rows[2]["is_best_value"] and rows[1]["is_worst_value"]
    assert rows[3]["size_label"] == "Size not available"
    assert rows[1]["ingredients"][0]["is_highest"] is False
    assert rows[1]["primary_active"] == {"name": "Retinol", "concentration": "0.5%"}
    assert rows[3]["primary_active"] is None
    assert rows[1]["size_label"] == "30 ml"


def test_equal_ppml_suppresses_value_flags(caplog):
    caplog.set_level(logging.DEBUG, logger="logic_blocks.compare_block")
    same = [_product(1, price=30, size={"value": 30, "unit": "ml"}), _product(2, price=60, size={"value": 60, "unit": "ml"})]
    metrics = calculate_comparison_metrics(same)
    assert metrics["best_value_product_id"] is None and metrics["worst_value_product_id"] is None
    assert "Best/worst value suppressed: 2 of 2" in caplog.text
