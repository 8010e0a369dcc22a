from collections.abc import Mapping
from typing import Any

# Logical field -> accepted record keys, first non-null wins.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "amount": ("amount", "total"),
    "currency": ("currency",),
    "payee": ("payee", "vendor"),
    "note": ("note", "description"),
    "labels": ("labels",),
    "occurredAt": ("occurredAt", "date"),
    "existingCategory": ("category",),
    "existingSubcategory": ("subcategoryId",),
}

# Text scanned by the keyword heuristic, in priority order.
HEURISTIC_TEXT_FIELDS: tuple[str, ...] = ("description", "note", "payee")


def first_present(record: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def resolve_field(record: Mapping[str, Any], field: str) -> Any:
    return first_present(record, FIELD_ALIASES[field])


def project_record(index: int, record: Mapping[str, Any]) -> dict[str, Any]:
    projected: dict[str, Any] = {"index": index}
    for field in FIELD_ALIASES:
        projected[field] = resolve_field(record, field)
    return projected


def heuristic_text(record: Mapping[str, Any]) -> str:
    # A present but blank description still wins over note and payee.
    value = first_present(record, HEURISTIC_TEXT_FIELDS)
    if value is None:
        return ""
    return str(value).strip().lower()
