from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from receipt_categorizer.domain.records import heuristic_text
from receipt_categorizer.domain.taxonomy import TAXONOMY, Taxonomy
from receipt_categorizer.logger import get_logger
from receipt_categorizer.models import (
    UNKNOWN_SUBCATEGORY_NAME,
    AssignmentSource,
    CategoryAssignment,
    ReceiptRecord,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class KeywordRule:
    keywords: tuple[str, ...]
    category_id: str
    subcategory_id: str

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


# First matching rule wins.
DEFAULT_KEYWORD_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(("charger", "usb", "cable", "wall charger"), "shopping", "shopping:electronics-accessories"),
    KeywordRule(("toothpaste", "tooth brush", "toothbrush", "tooth"), "shopping", "shopping:drug-store-chemist"),
    KeywordRule(("lotion", "soap", "shampoo", "body lotion", "bath"), "shopping", "shopping:health-beauty"),
    KeywordRule(("pan", "saute", "skillet", "bake", "cook"), "shopping", "shopping:home-green"),
    KeywordRule(("plate", "spoon", "fork", "utensil", "spoons"), "shopping", "shopping:home-green"),
    KeywordRule(("paper towel", "paper towels", "towel"), "shopping", "shopping:home-green"),
    KeywordRule(("detergent", "dishwashing", "vim", "soap"), "shopping", "shopping:home-green"),
)


class FallbackEngine:
    """Local classification used whenever the classifier result is unavailable."""

    def __init__(
        self,
        taxonomy: Taxonomy = TAXONOMY,
        rules: Sequence[KeywordRule] = DEFAULT_KEYWORD_RULES,
        heuristics_enabled: bool = True,
    ):
        for rule in rules:
            if taxonomy.parent_of(rule.subcategory_id) != rule.category_id:
                raise ValueError(
                    f"Keyword rule target {rule.category_id}/{rule.subcategory_id} is not in the taxonomy."
                )
        self.taxonomy = taxonomy
        self.rules = tuple(rules)
        self.heuristics_enabled = heuristics_enabled

    def match(self, record: Mapping[str, Any]) -> CategoryAssignment | None:
        if not self.heuristics_enabled:
            return None
        text = heuristic_text(record)
        if not text:
            return None
        for rule in self.rules:
            if rule.matches(text):
                return self._assignment(rule.category_id, rule.subcategory_id, "heuristic")
        return None

    def assign(self, record: Mapping[str, Any]) -> CategoryAssignment:
        assignment = self.match(record)
        if assignment is not None:
            return assignment
        return self._assignment(
            self.taxonomy.default_category_id,
            self.taxonomy.default_subcategory_id,
            "default",
        )

    def apply(self, record: Mapping[str, Any]) -> ReceiptRecord:
        return self.assign(record).apply_to(record)

    def apply_all(self, records: Sequence[Mapping[str, Any]]) -> list[ReceiptRecord]:
        enriched = [self.apply(record) for record in records]
        logger.debug("[FALLBACK] Assigned local categories to %d records.", len(enriched))
        return enriched

    def _assignment(
        self, category_id: str, subcategory_id: str, source: AssignmentSource
    ) -> CategoryAssignment:
        return CategoryAssignment(
            category_id=category_id,
            subcategory_id=subcategory_id,
            subcategory_name=self.taxonomy.subcategory_name(subcategory_id) or UNKNOWN_SUBCATEGORY_NAME,
            source=source,
        )
