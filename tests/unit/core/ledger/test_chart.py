"""계정과목 초기화 테스트"""

from decimal import Decimal

import pytest

from adapters.mock.ledger import InMemoryAccountRegistry, InMemoryJournalStore, MockLedgerState
from core.ledger.account import Account
from core.ledger.chart import default_accounts, initialize_chart_of_accounts
from core.ledger.errors import InvalidJournalLineError
from core.ledger.posting import PostingOrchestrator
from core.ledger.types import DEFAULT_CHART_OF_ACCOUNTS


@pytest.fixture
def empty_state() -> MockLedgerState:
    return MockLedgerState()


@pytest.fixture
def empty_registry(empty_state: MockLedgerState) -> InMemoryAccountRegistry:
    return InMemoryAccountRegistry(empty_state)


@pytest.fixture
def orchestrator(empty_state: MockLedgerState, empty_registry, clock) -> PostingOrchestrator:
    return PostingOrchestrator(empty_registry, InMemoryJournalStore(empty_state), clock=clock)


class TestDefaultAccounts:
    def test_matches_chart(self) -> None:
        accounts = default_accounts()

        assert len(accounts) == len(DEFAULT_CHART_OF_ACCOUNTS)
        assert all(a.balance == Decimal("0") for a in accounts)


class TestInitializeChartOfAccounts:
    """initialize_chart_of_accounts 테스트"""

    @pytest.mark.asyncio
    async def test_creates_default_chart(
        self,
        empty_state: MockLedgerState,
        empty_registry: InMemoryAccountRegistry,
        orchestrator: PostingOrchestrator,
    ) -> None:
        result = await initialize_chart_of_accounts(empty_registry, orchestrator)

        assert result.initialized is True
        assert result.accounts_created == len(DEFAULT_CHART_OF_ACCOUNTS)
        assert result.opening_entry is None
        assert empty_state.entries == []

    @pytest.mark.asyncio
    async def test_opening_cash_posted_as_entry(
        self,
        empty_state: MockLedgerState,
        empty_registry: InMemoryAccountRegistry,
        orchestrator: PostingOrchestrator,
    ) -> None:
        """기초 현금은 분개로 기록 (잔액 직접 쓰기 없음)"""
        result = await initialize_chart_of_accounts(empty_registry, orchestrator, "10000")

        assert result.opening_entry is not None
        assert len(empty_state.entries) == 1
        assert (await empty_registry.get("CASH")).balance == Decimal("10000")
        assert (await empty_registry.get("OPENING_BALANCE_EQUITY")).balance == Decimal("10000")
        assert result.opening_entry.entry.idempotency_key == "opening:CASH"

    @pytest.mark.asyncio
    async def test_negative_opening_cash_creates_nothing(
        self,
        empty_state: MockLedgerState,
        empty_registry: InMemoryAccountRegistry,
        orchestrator: PostingOrchestrator,
    ) -> None:
        with pytest.raises(InvalidJournalLineError, match="negative"):
            await initialize_chart_of_accounts(empty_registry, orchestrator, "-100")

        assert empty_state.accounts == {}
        assert empty_state.entries == []

    @pytest.mark.asyncio
    async def test_noop_when_accounts_exist(
        self,
        empty_state: MockLedgerState,
        empty_registry: InMemoryAccountRegistry,
        orchestrator: PostingOrchestrator,
    ) -> None:
        await empty_registry.create(Account.new("CASH", "Cash", "asset"))

        result = await initialize_chart_of_accounts(empty_registry, orchestrator, 500)

        assert result.initialized is False
        assert result.accounts_created == 0
        assert len(empty_state.accounts) == 1
        assert empty_state.entries == []

    @pytest.mark.asyncio
    async def test_second_run_is_noop(
        self,
        empty_registry: InMemoryAccountRegistry,
        orchestrator: PostingOrchestrator,
    ) -> None:
        await initialize_chart_of_accounts(empty_registry, orchestrator, 100)

        second = await initialize_chart_of_accounts(empty_registry, orchestrator, 100)

        assert second.initialized is False
        assert (await empty_registry.get("CASH")).balance == Decimal("100")
