from receipt_categorizer.domain.taxonomy import TAXONOMY, Taxonomy
from receipt_categorizer.models import (
    UNKNOWN_SUBCATEGORY_NAME,
    CategoryAssignment,
    ClassificationResult,
)


class ResultNormalizer:
    """
    Maps untrusted classifier output onto a valid (category, subcategory) pair.

    With `name_matching` disabled only exact ids are accepted; anything else
    goes straight to the defaults.
    """

    def __init__(self, taxonomy: Taxonomy = TAXONOMY, name_matching: bool = True):
        self.taxonomy = taxonomy
        self.name_matching = name_matching

    def normalize_category(self, value: str | None) -> str:
        if not value:
            return self.taxonomy.default_category_id
        if self.taxonomy.is_valid_category(value):
            return value
        if self.name_matching:
            mapped = self.taxonomy.resolve_category(value)
            if mapped:
                return mapped
        return self.taxonomy.default_category_id

    def normalize_subcategory(self, value: str | None, category_id: str) -> str:
        if not value:
            return self.taxonomy.primary_subcategory_of(category_id)

        parent_id = self.taxonomy.parent_of(value)
        if parent_id == category_id:
            return value

        # A valid id under another category is never kept, but its name or slug
        # may still name a subcategory of the resolved category.
        if self.name_matching:
            mapped = self.taxonomy.resolve_subcategory(value, category_id)
            if mapped and self.taxonomy.parent_of(mapped) == category_id:
                return mapped

        return self._unmatched_subcategory(category_id)

    def _unmatched_subcategory(self, category_id: str) -> str:
        default_id = self.taxonomy.default_subcategory_id
        if self.taxonomy.parent_of(default_id) == category_id:
            return default_id
        return self.taxonomy.primary_subcategory_of(category_id)

    def normalize(self, result: ClassificationResult) -> CategoryAssignment:
        category_id = self.normalize_category(result.category_id)
        subcategory_id = self.normalize_subcategory(result.subcategory_id, category_id)
        if self.taxonomy.parent_of(subcategory_id) != category_id:
            # Only reachable for a category declared without subcategories.
            category_id = self.taxonomy.default_category_id
            subcategory_id = self.taxonomy.default_subcategory_id
        return CategoryAssignment(
            category_id=category_id,
            subcategory_id=subcategory_id,
            subcategory_name=self.taxonomy.subcategory_name(subcategory_id) or UNKNOWN_SUBCATEGORY_NAME,
            source="classifier",
        )
