import asyncio
from typing import Any
from urllib.parse import quote

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from receipt_categorizer.core.settings import (
    DEFAULT_GEMINI_BASE_URL,
    DEFAULT_GEMINI_MODEL,
    DEFAULT_TEMPERATURE,
)
from receipt_categorizer.logger import get_logger

from .base import Classifier, RetryPolicy

logger = get_logger(__name__)

MODEL_PREFIX = "models/"
RESPONSE_MIME_TYPE = "application/json"
PREVIEW_LIMIT = 512


def qualify_model(model: str) -> str:
    model = model.strip()
    return model if model.startswith(MODEL_PREFIX) else f"{MODEL_PREFIX}{model}"


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return False


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "[GEMINI] Attempt %s failed (%s); retrying.",
        retry_state.attempt_number,
        exc,
    )


class GeminiClient(Classifier):
    """
    Client for the Gemini `generateContent` endpoint.

    One call to `generate` is one logical request (plus any retries allowed by
    the policy). Failures never propagate: they are logged and reported as None.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_GEMINI_MODEL,
        base_url: str = DEFAULT_GEMINI_BASE_URL,
        temperature: float = DEFAULT_TEMPERATURE,
        retry: RetryPolicy | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.model = qualify_model(model)
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.retry = retry or RetryPolicy()
        self.headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "x-goog-api-key": api_key,
        }
        self._client = client
        self._client_lock = asyncio.Lock()

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/{quote(self.model, safe='/')}:generateContent"

    def build_request_body(self, prompt: str) -> dict[str, Any]:
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": prompt}],
                },
            ],
            "generationConfig": {
                "temperature": self.temperature,
                "responseMimeType": RESPONSE_MIME_TYPE,
            },
        }

    async def aclose(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _get_client(self) -> httpx.AsyncClient:
        client = self._client
        if client is not None and not client.is_closed:
            return client

        async with self._client_lock:
            client = self._client
            if client is None or client.is_closed:
                # Deadlines come from the retry policy, not the transport.
                client = httpx.AsyncClient(timeout=None)
                self._client = client
            return client

    async def generate(self, prompt: str) -> dict[str, Any] | None:
        logger.info("[GEMINI] Calling %s (key hidden).", self.endpoint)
        try:
            if self.retry.deadline:
                return await asyncio.wait_for(self._generate_with_retry(prompt), self.retry.deadline)
            return await self._generate_with_retry(prompt)
        except asyncio.TimeoutError:
            logger.warning("[GEMINI] No reply within %.2f s.", self.retry.deadline)
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "[GEMINI] Non-success status %s: %s",
                exc.response.status_code,
                exc.response.text[:PREVIEW_LIMIT],
            )
        except Exception as exc:
            logger.error("[GEMINI] Request failed: %s", exc)
        return None

    async def _generate_with_retry(self, prompt: str) -> dict[str, Any]:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.retry.max_attempts),
            wait=wait_exponential(multiplier=self.retry.backoff, max=self.retry.max_backoff),
            retry=retry_if_exception(_is_retryable),
            before_sleep=_log_retry,
            reraise=True,
        )
        payload: dict[str, Any] = {}
        async for attempt in retrying:
            with attempt:
                payload = await self._post(prompt)
        return payload

    async def _post(self, prompt: str) -> dict[str, Any]:
        client = await self._get_client()
        response = await client.post(
            self.endpoint,
            headers=self.headers,
            json=self.build_request_body(prompt),
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError(f"Unexpected reply body type: {type(payload).__name__}")
        return payload
