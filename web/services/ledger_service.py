"""
원장 서비스

Web 요청을 원장 코어(PostingOrchestrator, BalanceSynchronizer)에 연결하고
결과를 응답용 dict로 변환
"""

import logging
from decimal import Decimal
from typing import Any, Iterable

from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.interfaces import IAccountRegistry, IJournalStore
from core.config.loader import LedgerConfig
from core.ledger.account import Account
from core.ledger.chart import initialize_chart_of_accounts
from core.ledger.entry_builder import (
    JournalEntryBuilder,
    JournalLine,
    MaterialUsage,
    PostingDraft,
    compute_work_order_cost,
)
from core.ledger.errors import AccountNotFoundError, InvalidJournalLineError
from core.ledger.posting import PostingOrchestrator, PostingResult
from core.ledger.registry import AccountRegistry
from core.ledger.store import JournalStore
from core.ledger.synchronizer import AccountLockRegistry, BalanceSynchronizer
from core.ledger.validator import LedgerValidator

logger = logging.getLogger(__name__)


def _posting_to_dict(result: PostingResult, message: str | None = None) -> dict[str, Any]:
    return {
        "success": True,
        "journalEntryId": result.entry_id,
        "entries": [line.to_dict() for line in result.entry.lines],
        "linkedDoc": result.entry.linked_doc,
        "balances": result.balances.results,
        "errors": result.balances.errors,
        "message": message,
    }


class LedgerService:
    """원장 서비스

    Args:
        registry: 계정과목 저장소
        journal: 분개 저장소
        config: Ledger 설정
        locks: 계정별 잠금 (Web에서는 프로세스 전역 인스턴스를 공유)
    """

    def __init__(
        self,
        registry: IAccountRegistry,
        journal: IJournalStore,
        config: LedgerConfig,
        locks: AccountLockRegistry | None = None,
    ):
        self.registry = registry
        self.journal = journal
        self.config = config
        self.synchronizer = BalanceSynchronizer(
            registry, journal, tolerance=config.balance_tolerance, locks=locks
        )
        self.orchestrator = PostingOrchestrator(
            registry,
            journal,
            synchronizer=self.synchronizer,
            validator=LedgerValidator(config.balance_tolerance),
            reject_unknown_accounts=config.reject_unknown_accounts,
        )
        self.builder = JournalEntryBuilder()

    @classmethod
    def for_db(
        cls,
        db: SQLiteAdapter,
        config: LedgerConfig,
        locks: AccountLockRegistry | None = None,
    ) -> "LedgerService":
        """SQLite 저장소 기반 서비스 생성"""
        return cls(AccountRegistry(db), JournalStore(db), config, locks)

    # =====================================
    # 분개
    # =====================================

    async def post_journal_entry(
        self,
        lines: Iterable[dict[str, Any]],
        linked_doc: str | None = None,
        description: str | None = None,
        idempotency_key: str | None = None,
    ) -> dict[str, Any]:
        """debit/credit 쌍 형태의 항목을 분개로 전기"""
        journal_lines = [
            JournalLine.from_amounts(
                account_id=line["account_id"],
                debit=line.get("debit"),
                credit=line.get("credit"),
                description=line.get("description"),
            )
            for line in lines
        ]
        result = await self.orchestrator.post(
            journal_lines,
            linked_doc=linked_doc,
            description=description,
            idempotency_key=idempotency_key,
        )
        return _posting_to_dict(result)

    async def post_draft(self, draft: PostingDraft, message: str | None = None) -> dict[str, Any]:
        """업무 문서 분개 초안 전기"""
        result = await self.orchestrator.post_draft(draft)
        return _posting_to_dict(result, message)

    async def list_journal_entries(self, limit: int | None = None) -> dict[str, Any]:
        """최근 분개 목록"""
        entries = await self.journal.recent(limit or self.config.journal_list_limit)
        return {
            "entries": [entry.to_dict() for entry in entries],
            "count": len(entries),
        }

    # =====================================
    # 잔액
    # =====================================

    async def sync_balances(
        self,
        account_ids: list[str] | None = None,
        sync_all: bool = False,
    ) -> dict[str, Any]:
        """잔액 동기화 (계정 목록 또는 전체)"""
        if sync_all:
            result = await self.synchronizer.sync_all()
        else:
            result = await self.synchronizer.sync_many(account_ids or [])
        return {"success": result.ok, **result.to_dict()}

    async def ledger_stats(self) -> dict[str, int]:
        """계정 수, 분개 수"""
        return {
            "accounts": len(await self.registry.list()),
            "journal_entries": await self.journal.count(),
        }

    async def get_balances(self) -> list[dict[str, Any]]:
        """계정과목 전체 잔액 (캐시 값)"""
        return [account.to_dict() for account in await self.registry.list()]

    async def check_balances(self) -> dict[str, Any]:
        """캐시 잔액과 원장 재계산 값 비교 (읽기 전용)"""
        drifts = await self.synchronizer.check()
        return {
            "consistent": not drifts,
            "drifts": [
                {
                    "account_id": d.account_id,
                    "cached": d.cached,
                    "computed": d.computed,
                    "difference": d.difference,
                }
                for d in drifts
            ],
        }

    async def get_trial_balance(self) -> dict[str, Any]:
        """원장 기준 시산표"""
        trial = await self.synchronizer.trial_balance()
        return {
            "rows": [
                {
                    "account_id": row.account_id,
                    "name": row.name,
                    "type": row.account_type.value if row.account_type else None,
                    "total_debit": row.total_debit,
                    "total_credit": row.total_credit,
                    "balance": row.balance,
                }
                for row in trial.rows
            ],
            "total_debit": trial.total_debit,
            "total_credit": trial.total_credit,
            "balanced": trial.is_balanced,
        }

    # =====================================
    # 계정과목
    # =====================================

    async def create_account(
        self,
        account_id: str,
        name: str,
        account_type: str,
        parent_id: str | None = None,
        description: str | None = None,
    ) -> dict[str, Any]:
        """계정 생성"""
        account = Account.new(account_id, name, account_type, parent_id, description)
        created = await self.registry.create(account)
        return created.to_dict()

    async def initialize_chart(self, opening_cash: Decimal | None = None) -> dict[str, Any]:
        """기본 계정과목 초기화"""
        amount = self.config.opening_cash if opening_cash is None else opening_cash
        result = await initialize_chart_of_accounts(self.registry, self.orchestrator, amount)

        if not result.initialized:
            message = "Chart of accounts already initialized"
        else:
            message = f"Chart of accounts initialized with {result.accounts_created} accounts"

        return {
            "success": True,
            "initialized": result.initialized,
            "accountsCreated": result.accounts_created,
            "journalEntryId": result.opening_entry.entry_id if result.opening_entry else None,
            "message": message,
        }

    async def adjust_balance(
        self,
        account_id: str,
        new_balance: Decimal,
        description: str | None = None,
    ) -> dict[str, Any]:
        """잔액 조정 분개 전기

        Raises:
            AccountNotFoundError: 계정이 없는 경우
        """
        account = await self.registry.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)

        # 캐시가 오래되었을 수 있으므로 원장 기준 잔액과 비교
        current = await self.synchronizer.compute_balance(account)
        draft = self.builder.balance_adjustment(
            account_id,
            account.account_type,
            current,
            new_balance,
            description,
        )
        return await self.post_draft(
            draft, f"Balance of {account_id} adjusted to {new_balance}"
        )

    # =====================================
    # 생산
    # =====================================

    @staticmethod
    def work_order_cost(
        materials: list[dict[str, Any]],
        overhead_cost: Decimal | None,
        total_cost: Decimal | None,
    ) -> Decimal:
        """작업지시 원가 결정 (자재 목록 우선, 없으면 totalCost)"""
        if materials:
            usages = [
                MaterialUsage(qty=m["qty"], unit_cost=m["unit_cost"], item_id=m.get("item_id"))
                for m in materials
            ]
            return compute_work_order_cost(usages, overhead_cost or 0)
        if total_cost is None:
            raise InvalidJournalLineError("Materials or total cost is required")
        return total_cost
