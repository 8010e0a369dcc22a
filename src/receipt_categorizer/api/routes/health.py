from fastapi import APIRouter, Response

router = APIRouter()


@router.head("/health", include_in_schema=False)
@router.head("/api/health", include_in_schema=False)
async def health_head() -> Response:
    return Response(status_code=204)


@router.get("/health")
@router.get("/api/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
