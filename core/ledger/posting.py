"""
전기 오케스트레이터 (PostingOrchestrator)

외부 호출자가 자금 이동을 기록하는 유일한 진입점.
검증 → 원장 추가 → 영향받은 계정 잔액 동기화 순서로 처리.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Iterable

from core.ledger.entry_builder import JournalEntry, JournalLine, PostingDraft
from core.ledger.errors import (
    AccountNotFoundError,
    DuplicatePostingError,
    InvalidEntryError,
    InvalidJournalLineError,
)
from core.ledger.synchronizer import BalanceSynchronizer, SyncResult
from core.ledger.validator import LedgerValidator
from core.utils.idempotency import validate_idempotency_key
from core.utils.timezone import now_utc, to_timestamp_ms

if TYPE_CHECKING:
    from adapters.interfaces import IAccountRegistry, IJournalStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostingResult:
    """전기 결과

    entry는 항상 저장된 상태. balances.errors가 있으면
    해당 계정 잔액만 갱신에 실패한 것이며 sync_all로 복구 가능.
    """

    entry_id: str
    entry: JournalEntry
    balances: SyncResult


class PostingOrchestrator:
    """전기 오케스트레이터

    1. LedgerValidator.check (실패 시 쓰기 없음)
    2. 멱등성 키 중복 확인 (실패 시 쓰기 없음)
    3. 미등록 계정 확인 (reject_unknown_accounts=True 인 경우만)
    4. JournalStore.append (원자적)
    5. BalanceSynchronizer.sync_many(영향받은 계정)

    5단계가 일부 실패해도 분개는 이미 저장된 상태로 남음.

    Args:
        registry: 계정과목 저장소
        journal: 분개 저장소
        synchronizer: 잔액 동기화기 (None이면 registry/journal로 생성)
        validator: 분개 검증기 (None이면 기본 허용 오차)
        reject_unknown_accounts: 계정과목에 없는 계정 참조 시 전기 거부
        clock: 현재 시각 함수
    """

    def __init__(
        self,
        registry: IAccountRegistry,
        journal: IJournalStore,
        synchronizer: BalanceSynchronizer | None = None,
        validator: LedgerValidator | None = None,
        reject_unknown_accounts: bool = False,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.registry = registry
        self.journal = journal
        self.synchronizer = synchronizer or BalanceSynchronizer(registry, journal, clock=clock)
        self.validator = validator or LedgerValidator()
        self.reject_unknown_accounts = reject_unknown_accounts
        self.clock = clock

    async def post(
        self,
        lines: Iterable[JournalLine],
        linked_doc: str | None = None,
        description: str | None = None,
        idempotency_key: str | None = None,
    ) -> PostingResult:
        """분개 전기

        Args:
            lines: 분개 항목
            linked_doc: 원인 업무 문서 참조 (None이면 ENTRY_<ms>)
            description: 적요
            idempotency_key: 호출자 멱등성 키

        Returns:
            PostingResult

        Raises:
            EmptyEntryError: 항목 없음
            UnbalancedEntryError: 차변 합계 ≠ 대변 합계
            InvalidEntryError: 멱등성 키 형식 오류
            DuplicatePostingError: 이미 전기된 멱등성 키
            AccountNotFoundError: 미등록 계정 (엄격 모드)
            StorageFailureError: 원장 저장 실패 (부분 저장 없음)
        """
        lines = list(lines)
        for line in lines:
            if not isinstance(line, JournalLine):
                raise InvalidJournalLineError(f"Invalid journal line: {line!r}")

        try:
            self.validator.check(lines)
        except InvalidEntryError as e:
            logger.warning(f"분개 거부: {e}")
            raise

        if idempotency_key is not None:
            if not validate_idempotency_key(idempotency_key):
                raise InvalidEntryError(f"Invalid idempotency key: {idempotency_key!r}")
            existing = await self.journal.find_by_idempotency_key(idempotency_key)
            if existing is not None:
                logger.info(f"중복 전기 거부: {idempotency_key} (기존 {existing})")
                raise DuplicatePostingError(idempotency_key, existing)

        if self.reject_unknown_accounts:
            missing = await self.registry.missing(line.account_id for line in lines)
            if missing:
                logger.warning(f"미등록 계정 참조로 분개 거부: {', '.join(missing)}")
                raise AccountNotFoundError(missing)

        now = self.clock()
        entry = JournalEntry(
            entry_id=str(uuid.uuid4()),
            date=now,
            created_at=now,
            lines=tuple(lines),
            linked_doc=linked_doc or f"ENTRY_{to_timestamp_ms(now)}",
            description=description,
            idempotency_key=idempotency_key,
        )

        entry_id = await self.journal.append(entry)
        logger.info(
            f"분개 전기: {entry_id} linked_doc={entry.linked_doc} "
            f"amount={entry.total_debit} accounts={','.join(entry.account_ids)}"
        )

        balances = await self.synchronizer.sync_many(entry.account_ids)
        if balances.errors:
            logger.warning(
                f"전기 후 잔액 동기화 일부 실패: {entry_id} ({', '.join(balances.errors)})"
            )

        return PostingResult(entry_id=entry_id, entry=entry, balances=balances)

    async def post_draft(self, draft: PostingDraft) -> PostingResult:
        """JournalEntryBuilder가 만든 초안 전기"""
        return await self.post(**draft.as_post_kwargs())
