"""
계정과목 초기화

기본 계정과목 생성과 기초 현금 전기
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.ledger.account import Account
from core.ledger.entry_builder import JournalEntryBuilder, to_amount
from core.ledger.errors import InvalidJournalLineError
from core.ledger.types import DEFAULT_CHART_OF_ACCOUNTS

if TYPE_CHECKING:
    from adapters.interfaces import IAccountRegistry
    from core.ledger.posting import PostingOrchestrator, PostingResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartInitResult:
    """계정과목 초기화 결과"""

    initialized: bool
    accounts_created: int
    opening_entry: PostingResult | None = None


def default_accounts() -> list[Account]:
    """기본 계정과목을 Account 목록으로 변환"""
    return [
        Account.new(account_id, name, account_type)
        for account_id, account_type, name in DEFAULT_CHART_OF_ACCOUNTS
    ]


async def initialize_chart_of_accounts(
    registry: IAccountRegistry,
    orchestrator: PostingOrchestrator,
    opening_cash: Any = 0,
) -> ChartInitResult:
    """기본 계정과목 초기화

    계정이 하나라도 있으면 아무것도 하지 않음.
    기초 현금은 잔액을 직접 쓰지 않고 CASH / OPENING_BALANCE_EQUITY 분개로 기록.

    Args:
        registry: 계정과목 저장소
        orchestrator: 기초 현금 전기용
        opening_cash: 기초 현금 (0이면 전기 생략)

    Returns:
        ChartInitResult

    Raises:
        InvalidJournalLineError: 기초 현금이 음수 (아무것도 생성하지 않음)
    """
    amount = to_amount(opening_cash, "opening_cash")
    if amount < 0:
        raise InvalidJournalLineError(f"opening_cash must not be negative: {amount}")

    if await registry.list():
        logger.info("계정과목이 이미 존재하여 초기화 생략")
        return ChartInitResult(initialized=False, accounts_created=0)

    created = await registry.ensure(default_accounts())
    logger.info(f"기본 계정과목 생성: {created}개")

    opening_entry = None
    if amount > Decimal("0"):
        draft = JournalEntryBuilder(clock=orchestrator.clock).opening_balance(
            JournalEntryBuilder.CASH, "asset", amount
        )
        opening_entry = await orchestrator.post_draft(draft)
        logger.info(f"기초 현금 전기: {amount} ({opening_entry.entry_id})")

    return ChartInitResult(
        initialized=True,
        accounts_created=created,
        opening_entry=opening_entry,
    )
