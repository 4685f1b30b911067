from fastapi import APIRouter

from ..config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health", summary="Simple service health check")
def healthcheck() -> dict[str, str]:
    return {"status": "ok", "service": get_settings().api_title}
