from typing import Any

from pydantic import BaseModel


class CategorizeRequest(BaseModel):
    records: list[dict[str, Any]]


class CategorizeResponse(BaseModel):
    records: list[dict[str, Any]]
