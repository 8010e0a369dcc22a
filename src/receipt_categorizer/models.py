from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

ReceiptRecord = dict[str, Any]
CategoryType = Literal["income", "expense"]
AssignmentSource = Literal["classifier", "heuristic", "default"]

UNKNOWN_SUBCATEGORY_NAME = "Unknown"

_CATEGORY_KEYS = ("categoryId", "category", "category_id")
_SUBCATEGORY_KEYS = ("subcategoryId", "subcategory", "subcategory_id")


class CategoryDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    color: str
    icon: str
    type: CategoryType


class SubcategoryDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    parent_id: str
    name: str
    icon: str

    @property
    def slug(self) -> str:
        return self.id.rsplit(":", 1)[-1]


def _first_text(item: Mapping[str, Any], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = item.get(key)
        if value is None:
            continue
        text = str(value).strip()
        return text or None
    return None


class ClassificationResult(BaseModel):
    """Untrusted per-record reply from the classifier."""

    category_id: str | None = None
    subcategory_id: str | None = None

    @classmethod
    def from_payload(cls, item: Any) -> "ClassificationResult":
        if not isinstance(item, Mapping):
            return cls()
        return cls(
            category_id=_first_text(item, _CATEGORY_KEYS),
            subcategory_id=_first_text(item, _SUBCATEGORY_KEYS),
        )


class CategoryAssignment(BaseModel):
    model_config = ConfigDict(frozen=True)

    category_id: str
    subcategory_id: str
    subcategory_name: str
    source: AssignmentSource

    def apply_to(self, record: Mapping[str, Any]) -> ReceiptRecord:
        return {
            **record,
            "category": self.category_id,
            "subcategoryId": self.subcategory_id,
            "subcategory": self.subcategory_name,
        }
