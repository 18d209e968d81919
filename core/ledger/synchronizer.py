"""
잔액 동기화기 (BalanceSynchronizer)

분개 원장 전체를 다시 접어서(fold) 계정 캐시 잔액을 재계산.
증분 반영이 아닌 전체 재구성이므로 몇 번을 실행해도 결과가 같음.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, Iterable

from core.constants import Defaults
from core.ledger.errors import AccountNotFoundError, LedgerError
from core.ledger.types import AccountType, signed_amount
from core.utils.timezone import now_utc

if TYPE_CHECKING:
    from adapters.interfaces import IAccountRegistry, IJournalStore
    from core.ledger.account import Account

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """배치 동기화 결과

    실패한 계정은 results에 0으로 기록되고 errors에 사유가 남음.
    """

    results: dict[str, Decimal] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {"results": dict(self.results), "errors": dict(self.errors)}


@dataclass(frozen=True)
class BalanceDrift:
    """캐시 잔액과 원장 재계산 값의 불일치"""

    account_id: str
    cached: Decimal
    computed: Decimal

    @property
    def difference(self) -> Decimal:
        return self.computed - self.cached


@dataclass(frozen=True)
class TrialBalanceRow:
    """시산표 한 줄 (계정별 차변/대변 합계)"""

    account_id: str
    name: str | None
    account_type: AccountType | None
    total_debit: Decimal
    total_credit: Decimal

    @property
    def balance(self) -> Decimal | None:
        """부호 규칙을 적용한 잔액 (계정과목에 없으면 None)"""
        if self.account_type is None:
            return None
        return signed_amount(self.account_type, self.total_debit, self.total_credit)


@dataclass
class TrialBalance:
    """시산표"""

    rows: list[TrialBalanceRow]
    total_debit: Decimal
    total_credit: Decimal
    tolerance: Decimal

    @property
    def is_balanced(self) -> bool:
        return abs(self.total_debit - self.total_credit) <= self.tolerance


class AccountLockRegistry:
    """계정별 asyncio.Lock 모음

    프로세스 안의 모든 BalanceSynchronizer가 하나를 공유해야 같은 계정의
    재계산이 요청 간에도 직렬화됨.
    asyncio.Lock은 이벤트 루프에 묶이므로 루프가 바뀌면 새로 생성.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._loop: asyncio.AbstractEventLoop | None = None

    def lock_for(self, account_id: str) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        if loop is not self._loop:
            self._loop = loop
            self._locks = {}
        return self._locks.setdefault(account_id, asyncio.Lock())


class BalanceSynchronizer:
    """잔액 동기화기

    계정 잔액 = 해당 계정의 모든 분개 항목을 계정 유형의 부호 규칙으로 합산한 값.
    AccountRegistry.set_balance를 호출하는 유일한 컴포넌트.

    배치(sync_many/sync_all)는 계정 단위로 실패를 흡수.
    한 계정이 실패해도 0으로 기록하고 다음 계정을 계속 처리.

    사용 예시:
    ```python
    synchronizer = BalanceSynchronizer(registry, journal)
    result = await synchronizer.sync_many(["CASH", "REVENUE"])
    print(result.results["CASH"])
    ```

    Args:
        registry: 계정과목 저장소
        journal: 분개 저장소
        clock: 현재 시각 함수 (last_updated 기록용)
        tolerance: 시산표 균형 허용 오차
        locks: 계정별 잠금 (None이면 이 인스턴스 전용)
    """

    def __init__(
        self,
        registry: IAccountRegistry,
        journal: IJournalStore,
        clock: Callable[[], datetime] = now_utc,
        tolerance: Decimal = Defaults.BALANCE_TOLERANCE,
        locks: AccountLockRegistry | None = None,
    ):
        self.registry = registry
        self.journal = journal
        self.clock = clock
        self.tolerance = tolerance

        # 마지막으로 처리한 계정 (sync_all 재개용)
        self.last_synced_account_id: str | None = None

        self.locks = locks or AccountLockRegistry()

    async def compute_balance(self, account: Account) -> Decimal:
        """원장에서 계정 잔액 계산 (쓰기 없음)"""
        balance = Decimal("0")
        async for line in self.journal.lines_for(account.account_id):
            balance += signed_amount(account.account_type, line.debit, line.credit)
        return balance

    # =====================================
    # 동기화
    # =====================================

    async def sync_one(self, account_id: str) -> Decimal:
        """계정 하나의 잔액 재계산 및 저장

        Args:
            account_id: 계정 ID

        Returns:
            계산된 잔액

        Raises:
            AccountNotFoundError: 계정과목에 없는 계정
            StorageFailureError: 원장 조회/잔액 저장 실패
        """
        # 조회 → 합산 → 저장을 하나의 쓰기 트랜잭션 안에서 수행.
        # 그 사이 다른 연결의 append는 커밋 이후로 밀림.
        async with self.locks.lock_for(account_id), self.registry.transaction():
            account = await self.registry.get(account_id)
            if account is None:
                raise AccountNotFoundError(account_id)

            balance = await self.compute_balance(account)
            await self.registry.set_balance(account_id, balance, self.clock())

        logger.debug(f"잔액 동기화: {account_id} = {balance}")
        return balance

    async def sync_many(self, account_ids: Iterable[str]) -> SyncResult:
        """여러 계정 동기화 (계정별 실패 허용)

        Args:
            account_ids: 계정 ID 목록 (중복은 한 번만 처리)

        Returns:
            SyncResult
        """
        ids = list(dict.fromkeys(account_ids))
        result = SyncResult()
        for account_id in ids:
            await self._sync_into(result, account_id)

        self._log_summary("sync_many", result)
        return result

    async def sync_all(self, start_after: str | None = None) -> SyncResult:
        """계정과목 전체 동기화 (account_id 순)

        계정마다 계산 즉시 저장하므로 중간에 취소되어도
        last_synced_account_id를 start_after로 넘겨 이어서 실행 가능.

        Args:
            start_after: 이 ID 이후 계정부터 처리 (None이면 처음부터)

        Returns:
            SyncResult
        """
        accounts = await self.registry.list()
        self.last_synced_account_id = start_after

        result = SyncResult()
        for account in accounts:
            if start_after is not None and account.account_id <= start_after:
                continue
            await self._sync_into(result, account.account_id)
            self.last_synced_account_id = account.account_id

        self._log_summary("sync_all", result)
        return result

    async def _sync_into(self, result: SyncResult, account_id: str) -> None:
        try:
            result.results[account_id] = await self.sync_one(account_id)
        except AccountNotFoundError as e:
            logger.warning(f"잔액 동기화 건너뜀: {e}")
            result.results[account_id] = Decimal("0")
            result.errors[account_id] = str(e)
        except LedgerError as e:
            logger.error(f"잔액 동기화 실패: {account_id} - {e}")
            result.results[account_id] = Decimal("0")
            result.errors[account_id] = str(e)

    def _log_summary(self, operation: str, result: SyncResult) -> None:
        if result.errors:
            logger.info(
                f"{operation} 완료: {len(result.results)}개 계정, "
                f"실패 {len(result.errors)}개 ({', '.join(result.errors)})"
            )
        else:
            logger.info(f"{operation} 완료: {len(result.results)}개 계정")

    # =====================================
    # 정합성 점검 (읽기 전용)
    # =====================================

    async def check(self, account_ids: Iterable[str] | None = None) -> list[BalanceDrift]:
        """캐시 잔액과 원장 재계산 값 비교

        Args:
            account_ids: 점검할 계정 (None이면 전체)

        Returns:
            불일치 계정 목록 (일치하면 빈 리스트)
        """
        if account_ids is None:
            accounts = await self.registry.list()
        else:
            accounts = []
            for account_id in dict.fromkeys(account_ids):
                account = await self.registry.get(account_id)
                if account is None:
                    logger.warning(f"잔액 점검 건너뜀: 계정 없음 {account_id}")
                    continue
                accounts.append(account)

        drifts: list[BalanceDrift] = []
        for account in accounts:
            computed = await self.compute_balance(account)
            if computed != account.balance:
                drifts.append(
                    BalanceDrift(
                        account_id=account.account_id,
                        cached=account.balance,
                        computed=computed,
                    )
                )

        if drifts:
            logger.warning(
                f"잔액 불일치 감지: {len(drifts)}개 계정 "
                f"({', '.join(d.account_id for d in drifts)})"
            )
        return drifts

    async def trial_balance(self) -> TrialBalance:
        """원장 기준 시산표

        계정과목에 없는 계정의 항목도 포함 (account_type=None).
        """
        debits: dict[str, Decimal] = {}
        credits: dict[str, Decimal] = {}
        async for entry in self.journal.all():
            for line in entry.lines:
                debits[line.account_id] = debits.get(line.account_id, Decimal("0")) + line.debit
                credits[line.account_id] = credits.get(line.account_id, Decimal("0")) + line.credit

        known = {account.account_id: account for account in await self.registry.list()}
        rows = []
        for account_id in sorted(set(known) | set(debits)):
            account = known.get(account_id)
            rows.append(
                TrialBalanceRow(
                    account_id=account_id,
                    name=account.name if account else None,
                    account_type=account.account_type if account else None,
                    total_debit=debits.get(account_id, Decimal("0")),
                    total_credit=credits.get(account_id, Decimal("0")),
                )
            )

        return TrialBalance(
            rows=rows,
            total_debit=sum(debits.values(), Decimal("0")),
            total_credit=sum(credits.values(), Decimal("0")),
            tolerance=self.tolerance,
        )
