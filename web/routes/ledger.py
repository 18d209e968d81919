"""
회계 원장 API 라우트

분개 전기/조회, 잔액 동기화/조회, 정합성 점검, 시산표
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from web.dependencies import get_ledger_reader, get_ledger_writer
from web.models.requests import JournalEntryRequest, SyncBalancesRequest
from web.models.responses import (
    AccountResponse,
    BalanceCheckResponse,
    JournalEntryListResponse,
    PostingResponse,
    SyncBalancesResponse,
    TrialBalanceResponse,
)
from web.services.ledger_service import LedgerService

router = APIRouter(prefix="/api/accounting", tags=["Accounting"])


@router.post("/journal-entries", response_model=PostingResponse)
async def create_journal_entry(
    request: JournalEntryRequest,
    service: LedgerService = Depends(get_ledger_writer),
):
    """분개 전기

    검증 → 원장 추가 → 영향받은 계정 잔액 동기화.

    - 400: 항목 없음, 차변/대변 불일치, 잘못된 항목
    - 404: 미등록 계정 (reject_unknown_accounts 설정 시)
    - 409: 이미 사용된 멱등성 키
    - 500: 저장 실패 (부분 저장 없음)
    """
    return await service.post_journal_entry(
        [line.model_dump() for line in request.entries],
        linked_doc=request.linked_doc,
        description=request.description,
        idempotency_key=request.idempotency_key,
    )


@router.get("/journal-entries", response_model=JournalEntryListResponse)
async def get_journal_entries(
    limit: int | None = Query(default=None, ge=1, le=1000, description="조회 개수"),
    service: LedgerService = Depends(get_ledger_reader),
):
    """최근 분개 목록 (created_at 내림차순)"""
    return await service.list_journal_entries(limit)


@router.post("/sync-balances", response_model=SyncBalancesResponse)
async def sync_balances(
    request: SyncBalancesRequest,
    service: LedgerService = Depends(get_ledger_writer),
):
    """잔액 동기화

    accountIds와 syncAll 중 정확히 하나만 지정.
    계정별 실패는 errors에 기록되고 나머지 계정은 계속 처리.
    """
    has_ids = request.account_ids is not None
    has_all = request.sync_all is not None
    if has_ids == has_all:
        raise HTTPException(
            status_code=400,
            detail="Either accountIds or syncAll must be provided",
        )
    if has_all and not request.sync_all:
        raise HTTPException(status_code=400, detail="syncAll must be true")

    return await service.sync_balances(
        account_ids=request.account_ids,
        sync_all=bool(request.sync_all),
    )


@router.get("/sync-balances", response_model=list[AccountResponse])
@router.get("/balances", response_model=list[AccountResponse])
async def get_balances(
    service: LedgerService = Depends(get_ledger_reader),
):
    """계정과목 전체 잔액 (캐시 값)"""
    return await service.get_balances()


@router.get("/balance-check", response_model=BalanceCheckResponse)
async def check_balances(
    service: LedgerService = Depends(get_ledger_reader),
):
    """캐시 잔액과 원장 재계산 값 비교 (쓰기 없음)"""
    return await service.check_balances()


@router.get("/trial-balance", response_model=TrialBalanceResponse)
async def get_trial_balance(
    service: LedgerService = Depends(get_ledger_reader),
):
    """원장 기준 시산표"""
    return await service.get_trial_balance()
