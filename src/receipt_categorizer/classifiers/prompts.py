import json
from collections.abc import Mapping, Sequence
from typing import Any

from receipt_categorizer.domain.records import project_record
from receipt_categorizer.domain.taxonomy import TAXONOMY, Taxonomy

REPLY_EXAMPLE = '[{"categoryId":"foodAndDrinks","subcategoryId":"foodAndDrinks:groceries"}, ...]'


def build_prompt(records: Sequence[Mapping[str, Any]], taxonomy: Taxonomy = TAXONOMY) -> str:
    formatted_records = [project_record(index, record) for index, record in enumerate(records)]
    count = len(formatted_records)

    return "\n\n".join([
        "You categorize receipt line items into the known categories.",
        taxonomy.reference_text(),
        "Rules:",
        "IMPORTANT: Only return a valid JSON array. Do not include any text outside the array.",
        f"1. Always return a JSON array with exactly {count} items, one per input record, in the same order.",
        "2. Use the exact category and subcategory ids listed above.",
        f"3. If nothing matches, use {taxonomy.default_category_id} and {taxonomy.default_subcategory_id}.",
        "4. Match by payee, description, and amount when possible.",
        f"Respond with: {REPLY_EXAMPLE}.",
        "Input records:",
        json.dumps(formatted_records, indent=2, ensure_ascii=False, default=str),
    ])
