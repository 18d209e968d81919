"""
업무 문서 전기 API 라우트

비용, 차입, 송장, 입금, 반품, 작업지시 자재 출고/완료를
균형 잡힌 분개로 변환하여 전기
"""

from fastapi import APIRouter, Depends, Path

from core.ledger.errors import format_amount
from web.dependencies import get_ledger_writer
from web.models.requests import (
    CompleteWorkOrderRequest,
    ExpenseRequest,
    InvoiceRequest,
    IssueMaterialsRequest,
    LoanRequest,
    PaymentRequest,
    ReturnRequest,
)
from web.models.responses import PostingResponse
from web.services.ledger_service import LedgerService

router = APIRouter(prefix="/api/accounting", tags=["Postings"])


@router.post("/expenses", response_model=PostingResponse)
async def record_expense(
    request: ExpenseRequest,
    service: LedgerService = Depends(get_ledger_writer),
):
    """비용 기록 (비용 계정 / CASH 또는 ACCOUNTS_PAYABLE)"""
    draft = service.builder.expense(
        request.amount,
        request.expense_account,
        request.payment_method,
        request.description,
    )
    return await service.post_draft(
        draft, f"Expense of {format_amount(request.amount)} recorded successfully"
    )


@router.post("/loans", response_model=PostingResponse)
async def record_loan(
    request: LoanRequest,
    service: LedgerService = Depends(get_ledger_writer),
):
    """차입 기록 (CASH / LONG_TERM_DEBT 또는 SHORT_TERM_DEBT)"""
    draft = service.builder.loan(
        request.amount,
        request.lender_name,
        request.loan_type,
        request.description,
    )
    return await service.post_draft(
        draft, f"Loan of {format_amount(request.amount)} recorded successfully"
    )


@router.post("/invoices", response_model=PostingResponse)
async def post_invoice(
    request: InvoiceRequest,
    service: LedgerService = Depends(get_ledger_writer),
):
    """송장 전기 (AR / REVENUE), 같은 송장은 한 번만"""
    draft = service.builder.invoice(request.invoice_id, request.total_amount)
    return await service.post_draft(draft, f"Invoice {request.invoice_id} posted")


@router.post("/payments", response_model=PostingResponse)
async def post_payment(
    request: PaymentRequest,
    service: LedgerService = Depends(get_ledger_writer),
):
    """입금 전기 (CASH / AR), 같은 입금은 한 번만"""
    draft = service.builder.payment(request.payment_id, request.amount)
    return await service.post_draft(draft, f"Payment {request.payment_id} posted")


@router.post("/returns", response_model=PostingResponse)
async def post_return(
    request: ReturnRequest,
    service: LedgerService = Depends(get_ledger_writer),
):
    """반품 전기 (RETURNS / AR)"""
    draft = service.builder.sales_return(request.return_id, request.amount)
    return await service.post_draft(draft, f"Return {request.return_id} posted")


@router.post("/work-orders/{work_order_id}/issue-materials", response_model=PostingResponse)
async def issue_materials(
    request: IssueMaterialsRequest,
    work_order_id: str = Path(..., description="작업지시 ID"),
    service: LedgerService = Depends(get_ledger_writer),
):
    """작업지시 자재 출고 (INVENTORY_WIP / INVENTORY_RAW)"""
    total_cost = service.work_order_cost(
        [m.model_dump() for m in request.materials],
        None,
        request.total_cost,
    )
    draft = service.builder.material_issue(work_order_id, total_cost, request.design_id)
    return await service.post_draft(
        draft, f"Materials issued successfully for work order {work_order_id}"
    )


@router.post("/work-orders/{work_order_id}/complete", response_model=PostingResponse)
async def complete_work_order(
    request: CompleteWorkOrderRequest,
    work_order_id: str = Path(..., description="작업지시 ID"),
    service: LedgerService = Depends(get_ledger_writer),
):
    """작업지시 완료 (INVENTORY_FG / INVENTORY_WIP)"""
    total_cost = service.work_order_cost(
        [m.model_dump() for m in request.materials],
        request.overhead_cost,
        request.total_cost,
    )
    draft = service.builder.work_order_completion(work_order_id, total_cost)
    return await service.post_draft(
        draft, f"Work order {work_order_id} completed"
    )
