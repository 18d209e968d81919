"""
요청 스키마 (Pydantic)

Web API 요청 데이터 검증.
금액은 Decimal로 받아 float 오차 없이 원장까지 전달.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    """camelCase 키와 snake_case 키를 모두 허용"""

    model_config = ConfigDict(populate_by_name=True)


class JournalLineRequest(_CamelModel):
    """분개 항목 요청 (debit/credit 중 하나만 0이 아니어야 함)"""

    account_id: str = Field(..., min_length=1, description="계정 ID")
    debit: Decimal | None = Field(default=None, description="차변 금액")
    credit: Decimal | None = Field(default=None, description="대변 금액")
    description: str | None = Field(default=None, description="적요")


class JournalEntryRequest(_CamelModel):
    """분개 전기 요청

    entries가 비어 있으면 400 (Journal entries array is required).
    """

    entries: list[JournalLineRequest] = Field(default_factory=list, description="분개 항목")
    linked_doc: str | None = Field(default=None, alias="linkedDoc", description="원인 문서")
    description: str | None = Field(default=None, description="적요")
    idempotency_key: str | None = Field(
        default=None, alias="idempotencyKey", description="멱등성 키"
    )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "entries": [
                        {"account_id": "CASH", "debit": "1000", "credit": "0"},
                        {"account_id": "REVENUE", "debit": "0", "credit": "1000"},
                    ],
                    "linkedDoc": "INV-1700000000000",
                },
            ]
        },
    )


class SyncBalancesRequest(_CamelModel):
    """잔액 동기화 요청 (accountIds와 syncAll 중 정확히 하나)"""

    account_ids: list[str] | None = Field(default=None, alias="accountIds")
    sync_all: bool | None = Field(default=None, alias="syncAll")


class AccountCreateRequest(_CamelModel):
    """계정 생성 요청"""

    id: str = Field(..., min_length=1, description="계정 ID (예: CASH)")
    name: str = Field(..., min_length=1, description="계정명")
    type: str = Field(..., description="asset | liability | equity | revenue | expense")
    parent_id: str | None = Field(default=None, alias="parentId")
    description: str | None = None


class InitializeChartRequest(_CamelModel):
    """계정과목 초기화 요청"""

    opening_cash: Decimal | None = Field(
        default=None, alias="openingCash", ge=0, description="기초 현금 (None이면 설정값)"
    )


class AdjustBalanceRequest(_CamelModel):
    """잔액 조정 요청 (차액만큼 BALANCE_ADJUSTMENTS와 분개)"""

    new_balance: Decimal = Field(..., alias="newBalance", description="목표 잔액")
    description: str | None = None


class ExpenseRequest(_CamelModel):
    """비용 기록 요청"""

    amount: Decimal = Field(..., description="비용 금액")
    expense_account: str = Field(..., alias="expenseAccount", description="비용 계정")
    payment_method: str | None = Field(
        default=None, alias="paymentMethod", description="cash면 CASH, 그 외 외상"
    )
    description: str | None = None


class LoanRequest(_CamelModel):
    """차입 기록 요청"""

    amount: Decimal = Field(..., description="차입 금액")
    lender_name: str | None = Field(default=None, alias="lenderName")
    loan_type: str | None = Field(
        default=None, alias="loanType", description="long-term | short-term"
    )
    description: str | None = None


class InvoiceRequest(_CamelModel):
    """송장 전기 요청"""

    invoice_id: str = Field(..., min_length=1, alias="invoiceId")
    total_amount: Decimal = Field(..., alias="totalAmount")


class PaymentRequest(_CamelModel):
    """입금 전기 요청"""

    payment_id: str = Field(..., min_length=1, alias="paymentId")
    amount: Decimal


class ReturnRequest(_CamelModel):
    """반품 전기 요청"""

    return_id: str = Field(..., min_length=1, alias="returnId")
    amount: Decimal


class MaterialUsageRequest(_CamelModel):
    """투입 자재"""

    qty: Decimal = Field(..., description="수량")
    unit_cost: Decimal = Field(..., alias="unitCost", description="단가")
    item_id: str | None = Field(default=None, alias="itemId")


class IssueMaterialsRequest(_CamelModel):
    """작업지시 자재 출고 요청

    materials가 있으면 원가를 계산하고, 없으면 totalCost를 사용.
    """

    design_id: str | None = Field(default=None, alias="designId")
    materials: list[MaterialUsageRequest] = Field(default_factory=list)
    total_cost: Decimal | None = Field(default=None, alias="totalCost")


class CompleteWorkOrderRequest(_CamelModel):
    """작업지시 완료 요청 (원가 = 자재 원가 + 간접비, 또는 totalCost)"""

    materials: list[MaterialUsageRequest] = Field(default_factory=list)
    overhead_cost: Decimal | None = Field(default=None, alias="overheadCost")
    total_cost: Decimal | None = Field(default=None, alias="totalCost")
