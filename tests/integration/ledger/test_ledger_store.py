"""SQLite 원장 저장소 통합 테스트

JournalStore, AccountRegistry를 실제 SQLite 파일로 검증하고
PostingOrchestrator/BalanceSynchronizer와 함께 전체 흐름 확인.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

import asyncio

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.ledger.account import Account
from core.ledger.chart import default_accounts, initialize_chart_of_accounts
from core.ledger.entry_builder import JournalEntry, JournalEntryBuilder, JournalLine
from core.ledger.errors import (
    AccountNotFoundError,
    DuplicateAccountError,
    DuplicatePostingError,
    UnbalancedEntryError,
)
from core.ledger.posting import PostingOrchestrator
from core.ledger.registry import AccountRegistry
from core.ledger.schema import init_ledger_schema
from core.ledger.store import JournalStore
from core.ledger.synchronizer import BalanceSynchronizer

TS = datetime(2026, 10, 18, 9, 0, 0, tzinfo=timezone.utc)

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def db(tmp_path: Path) -> SQLiteAdapter:
    """원장 스키마가 초기화된 임시 DB"""
    adapter = SQLiteAdapter(tmp_path / "test_ledger.db")
    await adapter.connect()
    await init_ledger_schema(adapter)
    yield adapter
    await adapter.close()


@pytest_asyncio.fixture
async def registry(db: SQLiteAdapter) -> AccountRegistry:
    registry = AccountRegistry(db)
    await registry.ensure(default_accounts())
    return registry


@pytest.fixture
def journal(db: SQLiteAdapter) -> JournalStore:
    return JournalStore(db)


@pytest.fixture
def orchestrator(registry: AccountRegistry, journal: JournalStore, clock) -> PostingOrchestrator:
    return PostingOrchestrator(registry, journal, clock=clock)


def make_entry(entry_id: str, minutes: int = 0, key: str | None = None) -> JournalEntry:
    ts = TS + timedelta(minutes=minutes)
    return JournalEntry(
        entry_id=entry_id,
        date=ts,
        created_at=ts,
        lines=(
            JournalLine.debit_line("CASH", "100.25", "cash in"),
            JournalLine.credit_line("REVENUE", "100.25", "sale"),
        ),
        linked_doc=f"DOC-{entry_id}",
        description="integration",
        idempotency_key=key,
    )


class TestJournalStore:
    """JournalStore 테스트"""

    @pytest.mark.asyncio
    async def test_append_and_get_round_trip(self, journal: JournalStore) -> None:
        """저장 후 조회 시 금액/순서/시각 보존"""
        original = make_entry("je-1")

        await journal.append(original)
        loaded = await journal.get("je-1")

        assert loaded == original
        assert loaded.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_get_missing(self, journal: JournalStore) -> None:
        assert await journal.get("nope") is None

    @pytest.mark.asyncio
    async def test_all_ordered_by_created_at(self, journal: JournalStore) -> None:
        await journal.append(make_entry("late", minutes=10))
        await journal.append(make_entry("early", minutes=1))
        await journal.append(make_entry("middle", minutes=5))

        ids = [entry.entry_id async for entry in journal.all()]

        assert ids == ["early", "middle", "late"]

    @pytest.mark.asyncio
    async def test_all_empty(self, journal: JournalStore) -> None:
        assert [entry async for entry in journal.all()] == []

    @pytest.mark.asyncio
    async def test_recent_limit(self, journal: JournalStore) -> None:
        for i in range(5):
            await journal.append(make_entry(f"je-{i}", minutes=i))

        recent = await journal.recent(limit=2)

        assert [e.entry_id for e in recent] == ["je-4", "je-3"]
        assert len(recent[0].lines) == 2

    @pytest.mark.asyncio
    async def test_lines_for(self, journal: JournalStore) -> None:
        await journal.append(make_entry("je-1"))
        await journal.append(make_entry("je-2", minutes=1))

        lines = [line async for line in journal.lines_for("REVENUE")]

        assert [line.credit for line in lines] == [Decimal("100.25")] * 2

    @pytest.mark.asyncio
    async def test_duplicate_idempotency_key(self, journal: JournalStore) -> None:
        """DB UNIQUE 제약으로 중복 키 거부, 기존 분개는 그대로"""
        await journal.append(make_entry("je-1", key="invoice:INV-1"))

        with pytest.raises(DuplicatePostingError) as exc_info:
            await journal.append(make_entry("je-2", minutes=1, key="invoice:INV-1"))

        assert exc_info.value.entry_id == "je-1"
        assert await journal.count() == 1
        assert await journal.get("je-2") is None

    @pytest.mark.asyncio
    async def test_failed_append_leaves_no_lines(
        self,
        db: SQLiteAdapter,
        journal: JournalStore,
    ) -> None:
        """헤더 저장 실패 시 항목도 남지 않음"""
        await journal.append(make_entry("je-1", key="k1"))

        with pytest.raises(DuplicatePostingError):
            await journal.append(make_entry("je-2", key="k1"))

        row = await db.fetchone("SELECT COUNT(*) FROM journal_line WHERE entry_id = 'je-2'")
        assert row[0] == 0


class TestAccountRegistry:
    """AccountRegistry 테스트"""

    @pytest.mark.asyncio
    async def test_list_sorted(self, registry: AccountRegistry) -> None:
        ids = [a.account_id for a in await registry.list()]

        assert ids == sorted(ids)
        assert "CASH" in ids

    @pytest.mark.asyncio
    async def test_create_and_duplicate(self, registry: AccountRegistry) -> None:
        created = await registry.create(
            Account.new("PETTY_CASH", "Petty Cash", "asset", parent_id="CASH")
        )

        assert created.balance == Decimal("0")
        assert (await registry.get("PETTY_CASH")).parent_id == "CASH"
        with pytest.raises(DuplicateAccountError):
            await registry.create(Account.new("PETTY_CASH", "Again", "asset"))

    @pytest.mark.asyncio
    async def test_ensure_skips_existing(self, registry: AccountRegistry) -> None:
        assert await registry.ensure(default_accounts()) == 0

    @pytest.mark.asyncio
    async def test_missing(self, registry: AccountRegistry) -> None:
        assert await registry.missing(["CASH", "GHOST", "AR"]) == ["GHOST"]

    @pytest.mark.asyncio
    async def test_set_balance(self, registry: AccountRegistry) -> None:
        await registry.set_balance("CASH", Decimal("1234.56"), TS)

        account = await registry.get("CASH")
        assert account.balance == Decimal("1234.56")
        assert account.last_updated == TS

    @pytest.mark.asyncio
    async def test_set_balance_unknown(self, registry: AccountRegistry) -> None:
        with pytest.raises(AccountNotFoundError):
            await registry.set_balance("GHOST", Decimal("1"), TS)


class TestPostingFlow:
    """전기 → 동기화 전체 흐름"""

    @pytest.mark.asyncio
    async def test_post_updates_cached_balances(
        self,
        registry: AccountRegistry,
        orchestrator: PostingOrchestrator,
    ) -> None:
        await orchestrator.post(
            [
                JournalLine.from_amounts("CASH", debit=1000),
                JournalLine.from_amounts("REVENUE", credit=1000),
            ]
        )

        assert (await registry.get("CASH")).balance == Decimal("1000")
        assert (await registry.get("REVENUE")).balance == Decimal("1000")

    @pytest.mark.asyncio
    async def test_rejected_entry_not_stored(
        self,
        journal: JournalStore,
        orchestrator: PostingOrchestrator,
    ) -> None:
        with pytest.raises(UnbalancedEntryError):
            await orchestrator.post(
                [
                    JournalLine.from_amounts("GENERAL_EXPENSES", debit=500),
                    JournalLine.from_amounts("CASH", credit=499),
                ]
            )

        assert await journal.count() == 0

    @pytest.mark.asyncio
    async def test_two_loans_accumulate_liability(
        self,
        registry: AccountRegistry,
        orchestrator: PostingOrchestrator,
        clock,
    ) -> None:
        builder = JournalEntryBuilder(clock=clock)

        await orchestrator.post_draft(builder.loan(2000, "Bank A", "long-term"))
        await orchestrator.post_draft(builder.loan(3000, "Bank B", "long-term"))

        assert (await registry.get("LONG_TERM_DEBT")).balance == Decimal("5000")
        assert (await registry.get("CASH")).balance == Decimal("5000")

    @pytest.mark.asyncio
    async def test_sync_all_repairs_drift_and_trial_balance(
        self,
        db: SQLiteAdapter,
        registry: AccountRegistry,
        journal: JournalStore,
        orchestrator: PostingOrchestrator,
        clock,
    ) -> None:
        builder = JournalEntryBuilder(clock=clock)
        await orchestrator.post_draft(builder.invoice("INV-1", "900"))
        await orchestrator.post_draft(builder.payment("PAY-1", "400"))
        await db.execute("UPDATE account SET balance = '7' WHERE account_id = 'AR'")
        await db.commit()

        synchronizer = BalanceSynchronizer(registry, journal, clock=clock)
        drifts = await synchronizer.check()
        assert [d.account_id for d in drifts] == ["AR"]

        result = await synchronizer.sync_all()

        assert result.ok
        assert (await registry.get("AR")).balance == Decimal("500")
        assert await synchronizer.check() == []
        trial = await synchronizer.trial_balance()
        assert trial.is_balanced
        assert trial.total_debit == Decimal("1300")

    @pytest.mark.asyncio
    async def test_chart_initialization_with_opening_cash(
        self,
        db: SQLiteAdapter,
        clock,
    ) -> None:
        """빈 DB에서 계정과목 초기화 + 기초 현금"""
        registry = AccountRegistry(db)
        orchestrator = PostingOrchestrator(registry, JournalStore(db), clock=clock)

        result = await initialize_chart_of_accounts(registry, orchestrator, "2500")

        assert result.initialized
        assert (await registry.get("CASH")).balance == Decimal("2500")
        assert (await registry.get("OPENING_BALANCE_EQUITY")).balance == Decimal("2500")


class PausingSynchronizer(BalanceSynchronizer):
    """CASH 잔액을 계산한 직후, 저장하기 전에 멈춤"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.computed = asyncio.Event()
        self.resume = asyncio.Event()

    async def compute_balance(self, account: Account) -> Decimal:
        balance = await super().compute_balance(account)
        if account.account_id == "CASH" and not self.computed.is_set():
            self.computed.set()
            await self.resume.wait()
        return balance


class TestConcurrentConnections:
    """같은 DB 파일을 쓰는 두 연결 (Web 요청 + CLI 등)"""

    @pytest.mark.asyncio
    async def test_append_between_compute_and_write_keeps_balance_fresh(
        self,
        tmp_path: Path,
        db: SQLiteAdapter,
        registry: AccountRegistry,
        clock,
    ) -> None:
        """재계산 도중 다른 연결의 전기가 끼어들어도 캐시가 원장과 일치"""
        other_db = SQLiteAdapter(tmp_path / "test_ledger.db")
        await other_db.connect()
        try:
            pausing = PausingSynchronizer(registry, JournalStore(db), clock=clock)
            first = PostingOrchestrator(
                registry, JournalStore(db), synchronizer=pausing, clock=clock
            )
            other_registry = AccountRegistry(other_db)
            second = PostingOrchestrator(other_registry, JournalStore(other_db), clock=clock)

            first_post = asyncio.create_task(
                first.post(
                    [
                        JournalLine.debit_line("CASH", "1000"),
                        JournalLine.credit_line("REVENUE", "1000"),
                    ]
                )
            )
            await asyncio.wait_for(pausing.computed.wait(), timeout=5)

            second_post = asyncio.create_task(
                second.post(
                    [
                        JournalLine.debit_line("CASH", "500"),
                        JournalLine.credit_line("REVENUE", "500"),
                    ]
                )
            )
            await asyncio.sleep(0.05)
            pausing.resume.set()

            await asyncio.wait_for(asyncio.gather(first_post, second_post), timeout=10)

            cash = await other_registry.get("CASH")
            revenue = await other_registry.get("REVENUE")
            assert cash.balance == Decimal("1500")
            assert revenue.balance == Decimal("1500")
            assert await BalanceSynchronizer(registry, JournalStore(db)).check() == []
        finally:
            await other_db.close()
