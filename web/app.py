"""
FastAPI 애플리케이션

라우터 등록, 원장 예외 → HTTP 응답 변환, 앱 설정.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config.loader import get_settings
from core.logging import setup_logging
from core.ledger.errors import (
    AccountNotFoundError,
    DuplicateAccountError,
    DuplicatePostingError,
    InvalidAccountTypeError,
    InvalidEntryError,
    LedgerError,
    StorageFailureError,
    UnbalancedEntryError,
)

# 로깅 설정 (콘솔 + 파일)
setup_logging("web")

from web.routes import accounts, health, ledger, postings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리"""
    from adapters.db.sqlite_adapter import SQLiteAdapter
    from core.ledger.schema import init_ledger_schema

    settings = get_settings()

    # 시작 시 - 원장 스키마 자동 초기화
    async with SQLiteAdapter(settings.db_path) as db:
        await init_ledger_schema(db)
    logger.info(f"Web 시작: mode={settings.mode.value}, db={settings.db_path}")

    yield


app = FastAPI(
    title="OpsLedger API",
    description="복식부기 원장 및 잔액 동기화 API",
    version=health.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS 설정 (개발용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =========================================================================
# 원장 예외 처리
# =========================================================================


def _status_for(exc: LedgerError) -> int:
    if isinstance(exc, (InvalidEntryError, InvalidAccountTypeError)):
        return 400
    if isinstance(exc, AccountNotFoundError):
        return 404
    if isinstance(exc, (DuplicateAccountError, DuplicatePostingError)):
        return 409
    return 500


@app.exception_handler(LedgerError)
async def ledger_exception_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """원장 예외를 일관된 JSON 오류 응답으로 변환"""
    status_code = _status_for(exc)
    content: dict = {
        "success": False,
        "error": str(exc),
        "type": type(exc).__name__,
    }

    if isinstance(exc, UnbalancedEntryError):
        content["totalDebit"] = str(exc.total_debit)
        content["totalCredit"] = str(exc.total_credit)
    elif isinstance(exc, AccountNotFoundError):
        content["accountIds"] = exc.account_ids
    elif isinstance(exc, DuplicatePostingError) and exc.entry_id:
        content["journalEntryId"] = exc.entry_id

    if isinstance(exc, StorageFailureError) or status_code >= 500:
        logger.error(f"{request.method} {request.url.path} 실패: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} 거부 ({status_code}): {exc}")

    return JSONResponse(status_code=status_code, content=content)


# =========================================================================
# API 라우터 등록
# =========================================================================

app.include_router(health.router)
app.include_router(ledger.router)
app.include_router(postings.router)
app.include_router(accounts.router)
