"""
Mock 원장 저장소

테스트용 인메모리 계정과목/분개 저장소.
IAccountRegistry, IJournalStore Protocol 준수.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import AsyncIterator, Iterable

from core.ledger.account import Account, parse_account_type
from core.ledger.entry_builder import JournalEntry, JournalLine
from core.ledger.errors import (
    AccountNotFoundError,
    DuplicateAccountError,
    DuplicatePostingError,
    StorageFailureError,
)
from core.utils.timezone import now_utc


@dataclass
class MockLedgerState:
    """Mock 상태 (메모리 내 저장)"""

    # 계정 (account_id -> Account)
    accounts: dict[str, Account] = field(default_factory=dict)

    # 분개 (append 순서)
    entries: list[JournalEntry] = field(default_factory=list)

    # 시뮬레이션 옵션
    should_fail_next_append: bool = False
    failing_scan_accounts: set[str] = field(default_factory=set)
    failing_balance_accounts: set[str] = field(default_factory=set)

    # 호출 기록
    set_balance_calls: list[tuple[str, Decimal]] = field(default_factory=list)
    transactions_entered: int = 0


class InMemoryAccountRegistry:
    """Mock 계정과목 저장소

    사용 예시:
    ```python
    registry = InMemoryAccountRegistry()
    await registry.create(Account.new("CASH", "Cash", "asset"))
    ```
    """

    def __init__(self, state: MockLedgerState | None = None):
        self.state = state or MockLedgerState()

    async def get(self, account_id: str) -> Account | None:
        return self.state.accounts.get(account_id)

    async def list(self) -> list[Account]:
        return [self.state.accounts[k] for k in sorted(self.state.accounts)]

    async def create(self, account: Account) -> Account:
        account_type = parse_account_type(account.account_type)
        if account.account_id in self.state.accounts:
            raise DuplicateAccountError(account.account_id)

        created = replace(
            account,
            account_type=account_type,
            balance=Decimal("0"),
            last_updated=None,
        )
        self.state.accounts[account.account_id] = created
        return created

    async def ensure(self, accounts: Iterable[Account]) -> int:
        created = 0
        for account in accounts:
            if account.account_id not in self.state.accounts:
                await self.create(account)
                created += 1
        return created

    async def missing(self, account_ids: Iterable[str]) -> list[str]:
        return [
            account_id
            for account_id in dict.fromkeys(account_ids)
            if account_id not in self.state.accounts
        ]

    async def set_balance(
        self,
        account_id: str,
        value: Decimal,
        timestamp: datetime | None = None,
    ) -> None:
        account = self.state.accounts.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        if account_id in self.state.failing_balance_accounts:
            raise StorageFailureError(f"Mock balance update failure: {account_id}")

        self.state.set_balance_calls.append((account_id, value))
        self.state.accounts[account_id] = account.with_balance(value, timestamp or now_utc())

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """단일 이벤트 루프 안에서는 별도 잠금 불필요"""
        self.state.transactions_entered += 1
        yield

    # =====================================
    # 테스트 헬퍼
    # =====================================

    def force_balance(self, account_id: str, value: Decimal) -> None:
        """원장과 무관하게 캐시 잔액을 강제로 변경 (드리프트 시뮬레이션)"""
        account = self.state.accounts[account_id]
        self.state.accounts[account_id] = replace(account, balance=Decimal(value))


class InMemoryJournalStore:
    """Mock 분개 저장소 (append-only)

    사용 예시:
    ```python
    journal = InMemoryJournalStore()

    # 다음 append 실패 시뮬레이션
    journal.state.should_fail_next_append = True
    ```
    """

    def __init__(self, state: MockLedgerState | None = None):
        self.state = state or MockLedgerState()

    async def append(self, entry: JournalEntry) -> str:
        if self.state.should_fail_next_append:
            self.state.should_fail_next_append = False
            raise StorageFailureError("Mock append failure")

        if entry.idempotency_key:
            existing = await self.find_by_idempotency_key(entry.idempotency_key)
            if existing is not None:
                raise DuplicatePostingError(entry.idempotency_key, existing)

        self.state.entries.append(entry)
        return entry.entry_id

    async def all(self) -> AsyncIterator[JournalEntry]:
        for entry in sorted(self.state.entries, key=lambda e: e.created_at):
            yield entry

    async def lines_for(self, account_id: str) -> AsyncIterator[JournalLine]:
        if account_id in self.state.failing_scan_accounts:
            raise StorageFailureError(f"Mock scan failure: {account_id}")

        for entry in list(self.state.entries):
            for line in entry.lines:
                if line.account_id == account_id:
                    yield line

    async def get(self, entry_id: str) -> JournalEntry | None:
        for entry in self.state.entries:
            if entry.entry_id == entry_id:
                return entry
        return None

    async def recent(self, limit: int = 100) -> list[JournalEntry]:
        ordered = sorted(self.state.entries, key=lambda e: e.created_at, reverse=True)
        return ordered[:limit]

    async def find_by_idempotency_key(self, key: str) -> str | None:
        for entry in self.state.entries:
            if entry.idempotency_key == key:
                return entry.entry_id
        return None

    async def count(self) -> int:
        return len(self.state.entries)
