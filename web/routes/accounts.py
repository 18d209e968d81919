"""
계정과목 API 라우트

계정 목록/생성, 기본 계정과목 초기화, 잔액 조정
"""

from fastapi import APIRouter, Depends, HTTPException, Path

from web.dependencies import get_ledger_reader, get_ledger_writer
from web.models.requests import (
    AccountCreateRequest,
    AdjustBalanceRequest,
    InitializeChartRequest,
)
from web.models.responses import AccountResponse, ChartInitResponse, PostingResponse
from web.services.ledger_service import LedgerService

router = APIRouter(prefix="/api/chart-of-accounts", tags=["Chart of Accounts"])


@router.get("", response_model=list[AccountResponse])
async def get_accounts(
    service: LedgerService = Depends(get_ledger_reader),
):
    """계정과목 목록 (account_id 순)"""
    return await service.get_balances()


@router.post("", response_model=AccountResponse, status_code=201)
async def create_account(
    request: AccountCreateRequest,
    service: LedgerService = Depends(get_ledger_writer),
):
    """계정 생성

    - 400: 지원하지 않는 계정 유형
    - 409: 이미 존재하는 계정 ID
    """
    try:
        return await service.create_account(
            account_id=request.id,
            name=request.name,
            account_type=request.type,
            parent_id=request.parent_id,
            description=request.description,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.post("/initialize", response_model=ChartInitResponse)
async def initialize_chart(
    request: InitializeChartRequest | None = None,
    service: LedgerService = Depends(get_ledger_writer),
):
    """기본 계정과목 초기화

    계정이 하나라도 있으면 아무것도 하지 않음.
    기초 현금은 CASH / OPENING_BALANCE_EQUITY 분개로 기록.
    """
    opening_cash = request.opening_cash if request else None
    return await service.initialize_chart(opening_cash)


@router.post("/{account_id}/adjust-balance", response_model=PostingResponse)
async def adjust_balance(
    request: AdjustBalanceRequest,
    account_id: str = Path(..., description="계정 ID"),
    service: LedgerService = Depends(get_ledger_writer),
):
    """잔액 조정

    캐시 잔액을 직접 덮어쓰지 않고 차액만큼
    BALANCE_ADJUSTMENTS 상대 분개를 전기.
    """
    return await service.adjust_balance(account_id, request.new_balance, request.description)
