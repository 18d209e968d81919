"""
복식부기 (Double-Entry Bookkeeping) 원장

분개 원장(append-only)을 유일한 원천으로 두고
계정 잔액은 원장에서 언제든 재구성하는 캐시로 관리.

사용 예시:
```python
from core.ledger import (
    AccountRegistry,
    JournalEntryBuilder,
    JournalLine,
    JournalStore,
    PostingOrchestrator,
)

registry = AccountRegistry(db)
journal = JournalStore(db)
orchestrator = PostingOrchestrator(registry, journal)

# 직접 분개
result = await orchestrator.post(
    [
        JournalLine.debit_line("CASH", "1000"),
        JournalLine.credit_line("REVENUE", "1000"),
    ],
    linked_doc="INV-1",
)

# 업무 문서에서 분개 생성
draft = JournalEntryBuilder().payment("PAY-1", "250")
await orchestrator.post_draft(draft)

# 전체 잔액 재구성
await orchestrator.synchronizer.sync_all()
```
"""

from core.ledger.account import Account, parse_account_type
from core.ledger.chart import ChartInitResult, default_accounts, initialize_chart_of_accounts
from core.ledger.entry_builder import (
    JournalEntry,
    JournalEntryBuilder,
    JournalLine,
    MaterialUsage,
    PostingDraft,
    compute_work_order_cost,
    to_amount,
)
from core.ledger.errors import (
    AccountNotFoundError,
    DuplicateAccountError,
    DuplicatePostingError,
    EmptyEntryError,
    InvalidAccountTypeError,
    InvalidEntryError,
    InvalidJournalLineError,
    LedgerError,
    StorageFailureError,
    UnbalancedEntryError,
)
from core.ledger.posting import PostingOrchestrator, PostingResult
from core.ledger.registry import AccountRegistry
from core.ledger.schema import init_ledger_schema
from core.ledger.store import JournalStore
from core.ledger.synchronizer import (
    BalanceDrift,
    BalanceSynchronizer,
    SyncResult,
    TrialBalance,
    TrialBalanceRow,
)
from core.ledger.types import (
    DEFAULT_CHART_OF_ACCOUNTS,
    AccountType,
    JournalSide,
    normal_side,
    signed_amount,
)
from core.ledger.validator import LedgerValidator, ValidationResult

__all__ = [
    # 저장소
    "AccountRegistry",
    "JournalStore",
    "init_ledger_schema",
    # 핵심 클래스
    "LedgerValidator",
    "BalanceSynchronizer",
    "PostingOrchestrator",
    "JournalEntryBuilder",
    # 모델
    "Account",
    "JournalEntry",
    "JournalLine",
    "PostingDraft",
    "MaterialUsage",
    "PostingResult",
    "SyncResult",
    "BalanceDrift",
    "TrialBalance",
    "TrialBalanceRow",
    "ValidationResult",
    "ChartInitResult",
    # Enum
    "AccountType",
    "JournalSide",
    # 함수
    "parse_account_type",
    "normal_side",
    "signed_amount",
    "to_amount",
    "compute_work_order_cost",
    "default_accounts",
    "initialize_chart_of_accounts",
    # 상수
    "DEFAULT_CHART_OF_ACCOUNTS",
    # 예외
    "LedgerError",
    "InvalidEntryError",
    "UnbalancedEntryError",
    "InvalidJournalLineError",
    "EmptyEntryError",
    "AccountNotFoundError",
    "DuplicateAccountError",
    "InvalidAccountTypeError",
    "StorageFailureError",
    "DuplicatePostingError",
]
