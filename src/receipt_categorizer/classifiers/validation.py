import json
from collections.abc import Mapping
from typing import Any

from receipt_categorizer.logger import get_logger
from receipt_categorizer.models import ClassificationResult

logger = get_logger(__name__)

PREVIEW_LIMIT = 1024


class ResponseValidationError(ValueError):
    pass


def extract_response_text(payload: Any) -> str | None:
    """Join the text parts of the first candidate; None when there is no text."""
    if not isinstance(payload, Mapping):
        return None
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    candidate = candidates[0]
    if not isinstance(candidate, Mapping):
        return None
    content = candidate.get("content")
    if not isinstance(content, Mapping):
        return None
    parts = content.get("parts")
    if not isinstance(parts, list):
        return None

    texts: list[str] = []
    for part in parts:
        if not isinstance(part, Mapping):
            continue
        text = part.get("text")
        if isinstance(text, str) and text:
            texts.append(text)

    joined = "\n".join(texts).strip()
    return joined or None


def parse_classifications(payload: Any, expected_count: int) -> list[ClassificationResult]:
    text = extract_response_text(payload)
    if text is None:
        raise ResponseValidationError("Classifier reply contains no text.")
    logger.debug("[VALIDATE] Extracted text (truncated): %s", text[:PREVIEW_LIMIT])

    try:
        structured = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("[VALIDATE] Raw reply text (truncated): %s", text[:PREVIEW_LIMIT])
        raise ResponseValidationError(f"Classifier reply is not valid JSON: {exc}") from exc

    if not isinstance(structured, list):
        raise ResponseValidationError(
            f"Expected a JSON array, got {type(structured).__name__}."
        )
    if len(structured) != expected_count:
        raise ResponseValidationError(
            f"Expected {expected_count} items, got {len(structured)}."
        )

    return [ClassificationResult.from_payload(item) for item in structured]
