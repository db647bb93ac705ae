from logic_blocks.matching import (
    matches_concern,
    matches_ingredient,
    product_matches_user_concerns,
    skin_type_matches,
)
from logic_blocks.synonyms import get_concern_variants, get_recommended_ingredients, normalize_user_concern


def test_concern_synonym_match():
    assert matches_concern("breakouts", ["acne"]) is True
    assert matches_concern("breakouts", ["aging"]) is False


def test_concern_match_is_case_insensitive():
    assert matches_concern("Fine Lines", ["AGING"]) is True
    assert matches_concern("acne", ["Acne"]) is True


def test_concern_match_is_exact_not_substring():
    # "acne scars" is neither "acne" nor a listed variant
    assert matches_concern("acne scars", ["acne"]) is False
    assert matches_concern("dry", ["dryness"]) is False


def test_unknown_user_concern_only_matches_itself():
    assert matches_concern("freckles", ["freckles"]) is True
    assert matches_concern("spots", ["freckles"]) is False


def test_empty_user_concerns_never_match():
    assert matches_concern("acne", []) is False
    assert matches_concern("acne", None) is False


def test_product_matches_any_concern():
    assert product_matches_user_concerns(["hydration", "pimples"], ["acne"]) is True
    assert product_matches_user_concerns(["hydration"], ["acne", "oiliness"]) is False
    assert product_matches_user_concerns([], ["acne"]) is False
    assert product_matches_user_concerns(["acne"], []) is False


def test_ingredient_bidirectional_substring():
    assert matches_ingredient("Niacinamide 10%", ["acne"]) is True
    assert matches_ingredient("zinc", ["sun protection"]) is True  # fragment "zinc oxide" contains it
    assert matches_ingredient("Retinol", ["dryness"]) is False


def test_ingredient_uses_raw_concern_key():
    # ingredient lookup does not go through concern synonyms
    assert matches_ingredient("salicylic acid", ["breakouts"]) is False
    assert matches_ingredient("salicylic acid", ["ACNE"]) is True


def test_skin_type_matches_all():
    assert skin_type_matches(["All"], "oily") is True
    assert skin_type_matches(["Dry", "Normal"], "dry") is True
    assert skin_type_matches(["Dry"], "oily") is False
    assert skin_type_matches(["Dry"], None) is False


def test_synonym_lookups():
    assert get_concern_variants("ACNE")[0] == "acne"
    assert get_concern_variants("unknown") == ()
    assert "retinol" in get_recommended_ingredients("aging")
    assert get_recommended_ingredients("unknown") == ()


def test_normalize_survey_labels():
    assert normalize_user_concern("Acne Prone") == "acne"
    assert normalize_user_concern("  Signs of Aging ") == "aging"
    assert normalize_user_concern("Eczema") == "sensitivity"
    assert normalize_user_concern("Freckles") == "freckles"
