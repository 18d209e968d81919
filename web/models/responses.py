"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화.
Decimal 금액은 JSON 문자열로 직렬화됨.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    mode: str = Field(..., description="실행 모드 (production/development)")
    model_config = ConfigDict(populate_by_name=True)

    version: str = Field(..., description="API 버전")
    accounts: int = Field(..., description="등록된 계정 수")
    journal_entries: int = Field(..., alias="journalEntries", description="저장된 분개 수")


class JournalLineResponse(BaseModel):
    """분개 항목 응답"""

    account_id: str
    debit: Decimal
    credit: Decimal
    description: str | None = None


class JournalEntryResponse(BaseModel):
    """분개 응답"""

    id: str
    date: str
    entries: list[JournalLineResponse]
    linked_doc: str | None = None
    description: str | None = None
    created_at: str


class JournalEntryListResponse(BaseModel):
    """분개 목록 응답 (created_at 내림차순)"""

    entries: list[JournalEntryResponse]
    count: int


class PostingResponse(BaseModel):
    """전기 응답

    errors에는 전기 후 잔액 동기화에 실패한 계정만 포함 (분개는 저장됨).
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    journal_entry_id: str = Field(..., alias="journalEntryId")
    entries: list[JournalLineResponse]
    linked_doc: str | None = Field(default=None, alias="linkedDoc")
    balances: dict[str, Decimal] = Field(default_factory=dict)
    errors: dict[str, str] = Field(default_factory=dict)
    message: str | None = None


class SyncBalancesResponse(BaseModel):
    """잔액 동기화 응답"""

    success: bool
    results: dict[str, Decimal]
    errors: dict[str, str] = Field(default_factory=dict)


class AccountResponse(BaseModel):
    """계정 응답"""

    id: str
    name: str
    type: str
    balance: Decimal
    parent_id: str | None = None
    last_updated: str | None = None


class BalanceDriftResponse(BaseModel):
    """잔액 불일치 항목"""

    account_id: str
    cached: Decimal
    computed: Decimal
    difference: Decimal


class BalanceCheckResponse(BaseModel):
    """잔액 정합성 점검 응답"""

    consistent: bool
    drifts: list[BalanceDriftResponse]


class TrialBalanceRowResponse(BaseModel):
    """시산표 행"""

    account_id: str
    name: str | None = None
    type: str | None = None
    total_debit: Decimal
    total_credit: Decimal
    balance: Decimal | None = None


class TrialBalanceResponse(BaseModel):
    """시산표 응답"""

    rows: list[TrialBalanceRowResponse]
    total_debit: Decimal
    total_credit: Decimal
    balanced: bool


class ChartInitResponse(BaseModel):
    """계정과목 초기화 응답"""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    initialized: bool
    accounts_created: int = Field(..., alias="accountsCreated")
    journal_entry_id: str | None = Field(default=None, alias="journalEntryId")
    message: str
