import pytest

from receipt_categorizer.classifiers.fallback import FallbackEngine, KeywordRule
from receipt_categorizer.domain.taxonomy import DEFAULT_CATEGORY_ID, DEFAULT_SUBCATEGORY_ID


@pytest.fixture
def engine() -> FallbackEngine:
    return FallbackEngine()


def test_wall_charger_is_electronics(engine: FallbackEngine) -> None:
    record = engine.apply({"description": "Wall Charger 745883793740", "payee": "Walmart"})

    assert record["category"] == "shopping"
    assert record["subcategoryId"] == "shopping:electronics-accessories"
    assert record["subcategory"] == "Electronics, accessories"


def test_toothpaste_is_drug_store(engine: FallbackEngine) -> None:
    record = engine.apply({"description": "Toothpaste", "payee": "DOLLARAMA"})

    assert record["category"] == "shopping"
    assert record["subcategoryId"] == "shopping:drug-store-chemist"


def test_no_text_uses_defaults(engine: FallbackEngine) -> None:
    record = engine.apply({"amount": 4.2})

    assert record["category"] == DEFAULT_CATEGORY_ID
    assert record["subcategoryId"] == DEFAULT_SUBCATEGORY_ID
    assert record["subcategory"] == "Missing"


def test_unmatched_text_uses_defaults(engine: FallbackEngine) -> None:
    assignment = engine.assign({"description": "SC 3PK ODOUR 096506690030"})

    assert assignment.source == "default"
    assert assignment.subcategory_id == DEFAULT_SUBCATEGORY_ID


def test_description_outranks_payee(engine: FallbackEngine) -> None:
    assert engine.assign({"description": "Toothpaste", "payee": "USB World"}).subcategory_id == (
        "shopping:drug-store-chemist"
    )
    assert engine.assign({"note": "body lotion", "payee": "USB World"}).subcategory_id == (
        "shopping:health-beauty"
    )
    assert engine.assign({"description": None, "payee": "USB World"}).subcategory_id == (
        "shopping:electronics-accessories"
    )


@pytest.mark.parametrize(
    "record",
    [
        {"description": "", "payee": "USB World"},
        {"description": "  ", "note": "body lotion"},
    ],
)
def test_blank_description_is_not_skipped(engine: FallbackEngine, record: dict) -> None:
    assignment = engine.assign(record)

    assert assignment.source == "default"
    assert assignment.category_id == DEFAULT_CATEGORY_ID
    assert assignment.subcategory_id == DEFAULT_SUBCATEGORY_ID


def test_first_matching_rule_wins(engine: FallbackEngine) -> None:
    assignment = engine.assign({"description": "Dish soap"})

    assert assignment.source == "heuristic"
    assert assignment.subcategory_id == "shopping:health-beauty"


def test_heuristics_can_be_disabled() -> None:
    engine = FallbackEngine(heuristics_enabled=False)

    assignment = engine.assign({"description": "Wall Charger"})

    assert assignment.source == "default"
    assert assignment.category_id == DEFAULT_CATEGORY_ID


def test_fields_are_preserved(engine: FallbackEngine) -> None:
    original = {"description": "Toothpaste", "sku": "X-1", "category": "stale"}

    record = engine.apply(original)

    assert record["sku"] == "X-1"
    assert record["category"] == "shopping"
    assert original == {"description": "Toothpaste", "sku": "X-1", "category": "stale"}


def test_rules_must_target_the_taxonomy() -> None:
    with pytest.raises(ValueError):
        FallbackEngine(rules=(KeywordRule(("milk",), "shopping", "foodAndDrinks:groceries"),))
