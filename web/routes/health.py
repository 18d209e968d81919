"""
헬스 체크 엔드포인트

GET /health - 실행 모드와 원장 DB 상태
"""

from fastapi import APIRouter, Depends

from core.config.loader import Settings
from web.dependencies import get_app_settings, get_ledger_reader
from web.models.responses import HealthResponse
from web.services.ledger_service import LedgerService

router = APIRouter(tags=["health"])

API_VERSION = "1.0.0"


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Settings = Depends(get_app_settings),
    service: LedgerService = Depends(get_ledger_reader),
) -> HealthResponse:
    """원장 DB를 읽을 수 있으면 ok"""
    stats = await service.ledger_stats()
    return HealthResponse(
        status="ok",
        mode=settings.mode.value,
        version=API_VERSION,
        **stats,
    )
