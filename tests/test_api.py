from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from receipt_categorizer.app import create_app


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch) -> Generator[TestClient, None, None]:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    with TestClient(create_app()) as test_client:
        yield test_client


def test_health(client: TestClient) -> None:
    for path in ("/health", "/api/health"):
        response = client.get(path)
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        assert client.head(path).status_code == 204


def test_categorize_without_credential(client: TestClient) -> None:
    payload = {
        "records": [
            {"description": "Wall Charger 745883793740", "payee": "Walmart", "lineNo": 1},
            {"description": "Toothpaste", "payee": "DOLLARAMA"},
            {"total": 5},
        ]
    }

    response = client.post("/api/receipt/categorize", json=payload)

    assert response.status_code == 200
    records = response.json()["records"]
    assert [(r["category"], r["subcategoryId"]) for r in records] == [
        ("shopping", "shopping:electronics-accessories"),
        ("shopping", "shopping:drug-store-chemist"),
        ("others", "others:missing"),
    ]
    assert records[0]["lineNo"] == 1
    assert records[2]["subcategory"] == "Missing"


def test_categorize_alias_path(client: TestClient) -> None:
    response = client.post("/receipt/categorize", json={"records": []})

    assert response.status_code == 200
    assert response.json() == {"records": []}


def test_categorize_rejects_malformed_body(client: TestClient) -> None:
    response = client.post("/api/receipt/categorize", json={"items": []})

    assert response.status_code == 422


def test_categories(client: TestClient) -> None:
    response = client.get("/api/categories")

    assert response.status_code == 200
    data = response.json()
    assert data["defaultCategoryId"] == "others"
    assert [c["id"] for c in data["categories"]][:2] == ["foodAndDrinks", "shopping"]


def test_service_not_initialized() -> None:
    client = TestClient(create_app())

    response = client.post("/api/receipt/categorize", json={"records": []})

    assert response.status_code == 500
