import json
from datetime import date

from receipt_categorizer.classifiers.prompts import build_prompt
from receipt_categorizer.domain.taxonomy import TAXONOMY


def _input_records(prompt: str) -> list[dict]:
    return json.loads(prompt.split("Input records:\n\n", 1)[1])


def test_prompt_projects_aliases() -> None:
    records = [
        {"total": 12.5, "vendor": "Walmart", "description": "Toothpaste", "date": "2024-01-01", "sku": "X1"},
        {"amount": 3, "total": 9, "payee": "Cafe", "note": "Latte", "labels": ["work"], "category": "foodAndDrinks"},
    ]

    projected = _input_records(build_prompt(records))

    assert projected == [
        {
            "index": 0,
            "amount": 12.5,
            "currency": None,
            "payee": "Walmart",
            "note": "Toothpaste",
            "labels": None,
            "occurredAt": "2024-01-01",
            "existingCategory": None,
            "existingSubcategory": None,
        },
        {
            "index": 1,
            "amount": 3,
            "currency": None,
            "payee": "Cafe",
            "note": "Latte",
            "labels": ["work"],
            "occurredAt": None,
            "existingCategory": "foodAndDrinks",
            "existingSubcategory": None,
        },
    ]


def test_prompt_contains_taxonomy_and_rules() -> None:
    prompt = build_prompt([{"description": "a"}, {"description": "b"}])

    assert TAXONOMY.reference_text() in prompt
    assert "exactly 2 items" in prompt
    assert "others and others:missing" in prompt
    assert "Do not include any text outside the array" in prompt


def test_prompt_is_deterministic() -> None:
    records = [{"description": "Wall Charger", "occurredAt": date(2024, 5, 1)}]

    first = build_prompt(records)

    assert first == build_prompt(records)
    assert _input_records(first)[0]["occurredAt"] == "2024-05-01"
