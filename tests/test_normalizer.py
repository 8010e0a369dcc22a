import itertools

import pytest

from receipt_categorizer.classifiers.normalizer import ResultNormalizer
from receipt_categorizer.domain.taxonomy import TAXONOMY
from receipt_categorizer.models import ClassificationResult


@pytest.fixture
def normalizer() -> ResultNormalizer:
    return ResultNormalizer(TAXONOMY)


def _normalize(normalizer: ResultNormalizer, category: str | None, subcategory: str | None) -> tuple[str, str, str]:
    assignment = normalizer.normalize(
        ClassificationResult(category_id=category, subcategory_id=subcategory)
    )
    return assignment.category_id, assignment.subcategory_id, assignment.subcategory_name


def test_exact_ids_are_kept(normalizer: ResultNormalizer) -> None:
    assert _normalize(normalizer, "vehicle", "vehicle:parking") == ("vehicle", "vehicle:parking", "Parking")


def test_display_name_resolves_to_id(normalizer: ResultNormalizer) -> None:
    assert _normalize(normalizer, "foodAndDrinks", "Groceries") == (
        "foodAndDrinks",
        "foodAndDrinks:groceries",
        "Groceries",
    )


def test_category_name_and_slug(normalizer: ResultNormalizer) -> None:
    assert _normalize(normalizer, "food & drinks", "groceries")[:2] == (
        "foodAndDrinks",
        "foodAndDrinks:groceries",
    )


def test_cross_category_subcategory_is_rejected(normalizer: ResultNormalizer) -> None:
    category, subcategory, _ = _normalize(normalizer, "foodAndDrinks", "shopping:kids")

    assert category == "foodAndDrinks"
    assert subcategory == TAXONOMY.primary_subcategory_of("foodAndDrinks")


def test_cross_category_under_default_category_uses_default(normalizer: ResultNormalizer) -> None:
    assert _normalize(normalizer, "others", "shopping:kids")[:2] == ("others", "others:missing")


def test_missing_subcategory_uses_primary(normalizer: ResultNormalizer) -> None:
    assert _normalize(normalizer, "vehicle", None) == ("vehicle", "vehicle:fuel", "Fuel")


def test_unknown_category_uses_default(normalizer: ResultNormalizer) -> None:
    assert _normalize(normalizer, "groceries-ish", "Groceries") == ("others", "others:missing", "Missing")
    assert _normalize(normalizer, None, None) == ("others", "others:missing", "Missing")


def test_shared_slug_resolves_within_category(normalizer: ResultNormalizer) -> None:
    assert _normalize(normalizer, "income", "child-support")[:2] == ("income", "income:child-support")


def test_name_matching_disabled_accepts_only_ids() -> None:
    strict = ResultNormalizer(TAXONOMY, name_matching=False)

    assert _normalize(strict, "foodAndDrinks", "Groceries")[:2] == ("foodAndDrinks", "foodAndDrinks:bar-cafe")
    assert _normalize(strict, "Food & Drinks", "foodAndDrinks:groceries")[:2] == ("others", "others:missing")
    assert _normalize(strict, "shopping", "shopping:kids")[:2] == ("shopping", "shopping:kids")


def test_any_input_yields_a_valid_pair(normalizer: ResultNormalizer) -> None:
    categories = [None, "", "shopping", "SHOPPING", "Income", "bogus", "others:missing"]
    subcategories = [None, "kids", "shopping:kids", "income:sale", "Missing", "???", "foodAndDrinks"]

    for category, subcategory in itertools.product(categories, subcategories):
        category_id, subcategory_id, name = _normalize(normalizer, category, subcategory)
        assert TAXONOMY.is_valid_category(category_id)
        assert TAXONOMY.parent_of(subcategory_id) == category_id
        assert name == TAXONOMY.subcategory_name(subcategory_id)
