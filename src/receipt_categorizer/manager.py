from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from receipt_categorizer.classifiers.base import Classifier, RetryPolicy
from receipt_categorizer.classifiers.fallback import FallbackEngine
from receipt_categorizer.classifiers.gemini import GeminiClient
from receipt_categorizer.classifiers.normalizer import ResultNormalizer
from receipt_categorizer.classifiers.prompts import build_prompt
from receipt_categorizer.classifiers.validation import (
    ResponseValidationError,
    parse_classifications,
)
from receipt_categorizer.core.settings import ClassifierSettings
from receipt_categorizer.domain.taxonomy import TAXONOMY, Taxonomy
from receipt_categorizer.logger import get_logger
from receipt_categorizer.models import ReceiptRecord

logger = get_logger(__name__)


@dataclass
class PipelineContext:
    """Advisory logging state owned by one service instance."""

    missing_credential_warned: bool = False


class CategorizerService:
    def __init__(
        self,
        settings: ClassifierSettings | None = None,
        *,
        taxonomy: Taxonomy = TAXONOMY,
        classifier: Classifier | None = None,
        context: PipelineContext | None = None,
    ):
        self.settings = settings or ClassifierSettings.from_env()
        self.taxonomy = taxonomy
        self.context = context or PipelineContext()
        self.normalizer = ResultNormalizer(taxonomy, name_matching=self.settings.name_matching)
        self.fallback = FallbackEngine(taxonomy, heuristics_enabled=self.settings.keyword_heuristics)

        if classifier is None and self.settings.api_key:
            classifier = GeminiClient(
                api_key=self.settings.api_key,
                model=self.settings.model,
                base_url=self.settings.base_url,
                temperature=self.settings.temperature,
                retry=RetryPolicy(
                    max_attempts=self.settings.max_attempts,
                    backoff=self.settings.backoff,
                    deadline=self.settings.timeout,
                ),
            )
        self.classifier = classifier

        if self.classifier:
            logger.info(
                "Gemini classifier enabled: model=%s, max_attempts=%s, timeout=%s",
                self.settings.model,
                self.settings.max_attempts,
                self.settings.timeout or "none",
            )
        else:
            logger.info("Gemini classifier disabled; local fallback only.")

    async def categorize_records(self, records: Sequence[Mapping[str, Any]]) -> list[ReceiptRecord]:
        """
        Enrich every record with `category`, `subcategoryId` and `subcategory`.

        The batch is classified atomically: either every record comes from the
        classifier (normalized against the taxonomy) or every record comes from
        the fallback engine. Never raises.
        """
        if not records:
            return []

        if self.classifier is None:
            if not self.context.missing_credential_warned:
                logger.warning("GEMINI_API_KEY is not set; falling back to local category defaults.")
                self.context.missing_credential_warned = True
            return self.fallback.apply_all(records)

        try:
            logger.info("[CATEGORIZE] Classifying %d records.", len(records))
            prompt = build_prompt(records, self.taxonomy)
            payload = await self.classifier.generate(prompt)
            if payload is None:
                logger.warning("[CATEGORIZE] Classifier unavailable; using fallback for %d records.", len(records))
                return self.fallback.apply_all(records)

            results = parse_classifications(payload, len(records))
            return [
                self.normalizer.normalize(result).apply_to(record)
                for record, result in zip(records, results)
            ]
        except ResponseValidationError as exc:
            logger.warning("[CATEGORIZE] Rejected classifier reply: %s", exc)
        except Exception:
            logger.exception("[CATEGORIZE] Categorization failed.")
        return self.fallback.apply_all(records)

    async def aclose(self) -> None:
        if self.classifier:
            await self.classifier.aclose()
