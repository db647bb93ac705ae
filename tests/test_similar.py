import copy

from logic_blocks.similar_block import run_block, score_similar_products

REFERENCE = {
    "id": 1,
    "name": "Barrier Serum",
    "category": "serum",
    "concerns": ["Dryness", "Redness"],
    "key_ingredients": ["Squalane", "Ceramides"],
    "skin_types": ["dry"],
    "rating": 4.0,
}


def _product(pid, **fields):
    base = {"id": pid, "name": f"P{pid}", "category": "toner", "concerns": [], "key_ingredients": [],
            "skin_types": [], "rating": 0.0, "preferences": {}}
    base.update(fields)
    return base


def test_scenario_score_75():
    candidate = _product(2, category="serum", concerns=["dryness", "redness"],
                         key_ingredients=["squalane", "Panthenol"], skin_types=["Oily"])
    out = score_similar_products(REFERENCE, [REFERENCE, candidate], ["sensitivity"], "oily", {})
    assert len(out) == 1
    # category 20 + 2 shared concerns 20 + "redness" matches sensitivity 12 + skin 15 + squalane 8
    assert out[0]["match_score"] == 75
    assert out[0]["match_reasons"] == ["Same category: serum", "Addresses: dryness, redness", "Matches your concerns"]


def test_reference_is_excluded_and_zero_scores_dropped():
    nothing = _product(3)
    out = score_similar_products(REFERENCE, [REFERENCE, nothing], [], None, {})
    assert out == []


def test_rating_bonuses_are_exclusive():
    top = _product(4, rating=4.9)
    high = _product(5, rating=4.6)
    out = score_similar_products(REFERENCE, [high, top], [], None, {})
    assert [p["id"] for p in out] == [4, 5]
    assert out[0]["match_score"] == 10
    assert out[0]["match_reasons"] == ["Highly rated"]
    assert out[1]["match_score"] == 5
    assert out[1]["match_reasons"] == []


def test_beneficial_ingredients_and_preferences_score_without_reasons():
    candidate = _product(6, key_ingredients=["Salicylic Acid", "Zinc"], preferences={"vegan": True, "crueltyFree": True})
    out = score_similar_products(REFERENCE, [candidate], ["acne"], None, {"vegan": True, "crueltyFree": True,
                                                                        "fragranceFree": True})
    # 2 beneficial ingredients x6 + 2 shared preferences x6
    assert out[0]["match_score"] == 24
    assert out[0]["match_reasons"] == []


def test_inactive_preferences_ignored():
    candidate = _product(7, preferences={"vegan": True})
    assert score_similar_products(REFERENCE, [candidate], [], None, {"vegan": False}) == []


def test_ties_keep_catalog_order_and_limit():
    catalog = [_product(i, rating=4.9) for i in range(10, 16)]
    out = score_similar_products(REFERENCE, catalog, [], None, {}, limit=4)
    assert [p["id"] for p in out] == [10, 11, 12, 13]


def test_catalog_not_mutated_and_idempotent():
    catalog = [REFERENCE, _product(8, category="serum", rating=4.8)]
    snapshot = copy.deepcopy(catalog)
    first = score_similar_products(REFERENCE, catalog, ["dryness"], "dry", {})
    second = score_similar_products(REFERENCE, catalog, ["dryness"], "dry", {})
    assert first == second
    assert catalog == snapshot
    assert "match_score" not in catalog[1]


def test_run_block_reads_user_from_context():
    candidate = _product(9, skin_types=["all"])
    out = run_block({"product": REFERENCE, "catalog": [candidate], "user": {"skin_type": "combination"}})
    assert out["count"] == 1
    assert out["products"][0]["match_score"] == 15


def test_non_numeric_rating_scores_as_unrated():
    ref = {"id": 1, "category": "serum"}
    out = score_similar_products(ref, [{"id": 2, "category": "serum", "rating": "n/a"}], [], None)
    assert out[0]["match_score"] == 20
    assert out[0]["match_reasons"] == ["Same category: serum"]
