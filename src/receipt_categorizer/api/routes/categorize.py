from typing import Annotated, Any

from fastapi import APIRouter, Depends

from receipt_categorizer.api.dependencies import get_service
from receipt_categorizer.api.schemas import CategorizeRequest, CategorizeResponse
from receipt_categorizer.logger import get_logger
from receipt_categorizer.manager import CategorizerService

logger = get_logger(__name__)

router = APIRouter()


@router.post("/api/receipt/categorize", response_model=CategorizeResponse)
@router.post("/receipt/categorize", response_model=CategorizeResponse, include_in_schema=False)
async def categorize_records(
    req: CategorizeRequest,
    service: Annotated[CategorizerService, Depends(get_service)],
) -> CategorizeResponse:
    logger.debug("[API] Categorize request with %d records.", len(req.records))
    records = await service.categorize_records(req.records)
    return CategorizeResponse(records=records)


@router.get("/api/categories")
async def get_categories(
    service: Annotated[CategorizerService, Depends(get_service)],
) -> dict[str, Any]:
    return service.taxonomy.as_dict()
