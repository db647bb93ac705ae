import logging

from logic_blocks.time_of_day_block import classify_time_of_day, run_block


def _product(**fields):
    base = {"name": "Daily Wash", "description": "A gentle foaming wash.", "category": "cleanser",
            "key_ingredients": ["Glycerin"], "active_ingredients": []}
    base.update(fields)
    return base


def test_category_default_when_no_signal():
    assert classify_time_of_day(_product()) == ["am", "pm"]


def test_keyword_short_circuits_category():
    assert classify_time_of_day(_product(description="Rinse off overnight buildup.")) == ["pm"]


def test_am_keyword():
    assert classify_time_of_day(_product(name="Mineral SPF 50", category="moisturizer")) == ["am"]


def test_ingredient_layer():
    assert classify_time_of_day(_product(key_ingredients=["Retinol 0.3%"])) == ["pm"]
    assert classify_time_of_day(_product(active_ingredients=[{"name": "L-Ascorbic Acid", "concentration": 15}])) == ["am"]


def test_keyword_and_ingredient_combine_to_both():
    assert classify_time_of_day(_product(name="Morning Glow", key_ingredients=["Glycolic Acid"])) == ["am", "pm"]


def test_category_defaults():
    assert classify_time_of_day(_product(category="Sunscreen")) == ["am"]
    assert classify_time_of_day(_product(category="mask")) == ["pm"]


def test_unknown_category_falls_back_to_both():
    assert classify_time_of_day(_product(category="gadget")) == ["am", "pm"]
    assert classify_time_of_day({}) == ["am", "pm"]


def test_run_block_label():
    assert run_block({"product": _product(category="mask")}) == {"slots": ["pm"], "label": "PM"}


def test_plain_string_actives():
    assert classify_time_of_day({"category": "cleanser", "active_ingredients": ["Retinol"]}) == ["pm"]


def test_logs_which_layer_decided(caplog):
    caplog.set_level(logging.DEBUG, logger="logic_blocks.time_of_day_block")
    classify_time_of_day(_product(id=9, name="Wash", description=""))
    assert "category default for 'cleanser'" in caplog.text
