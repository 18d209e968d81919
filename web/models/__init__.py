"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    AccountCreateRequest,
    AdjustBalanceRequest,
    CompleteWorkOrderRequest,
    ExpenseRequest,
    InitializeChartRequest,
    InvoiceRequest,
    IssueMaterialsRequest,
    JournalEntryRequest,
    JournalLineRequest,
    LoanRequest,
    MaterialUsageRequest,
    PaymentRequest,
    ReturnRequest,
    SyncBalancesRequest,
)
from web.models.responses import (
    AccountResponse,
    BalanceCheckResponse,
    BalanceDriftResponse,
    ChartInitResponse,
    HealthResponse,
    JournalEntryListResponse,
    JournalEntryResponse,
    JournalLineResponse,
    PostingResponse,
    SyncBalancesResponse,
    TrialBalanceResponse,
    TrialBalanceRowResponse,
)

__all__ = [
    # Requests
    "JournalLineRequest",
    "JournalEntryRequest",
    "SyncBalancesRequest",
    "AccountCreateRequest",
    "InitializeChartRequest",
    "AdjustBalanceRequest",
    "ExpenseRequest",
    "LoanRequest",
    "InvoiceRequest",
    "PaymentRequest",
    "ReturnRequest",
    "MaterialUsageRequest",
    "IssueMaterialsRequest",
    "CompleteWorkOrderRequest",
    # Responses
    "HealthResponse",
    "JournalLineResponse",
    "JournalEntryResponse",
    "JournalEntryListResponse",
    "PostingResponse",
    "SyncBalancesResponse",
    "AccountResponse",
    "BalanceDriftResponse",
    "BalanceCheckResponse",
    "TrialBalanceRowResponse",
    "TrialBalanceResponse",
    "ChartInitResponse",
]
