from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 1
    backoff: float = 1.0
    max_backoff: float = 30.0
    deadline: float | None = None


class Classifier(ABC):
    @abstractmethod
    async def generate(self, prompt: str) -> dict[str, Any] | None:
        """Send one prompt; return the raw reply body, or None when the call failed."""
        pass

    async def aclose(self) -> None:
        return None
