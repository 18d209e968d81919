"""
저장소 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
SQLite 구현체(core.ledger)와 인메모리 구현체(adapters.mock)가 이 Protocol을 준수.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import AsyncContextManager, AsyncIterator, Iterable, Protocol, runtime_checkable

from core.ledger.account import Account
from core.ledger.entry_builder import JournalEntry, JournalLine


@runtime_checkable
class IAccountRegistry(Protocol):
    """계정과목 저장소 인터페이스
    
    계정 ID → {name, type, balance, last_updated} 조회.
    balance 쓰기(set_balance)는 BalanceSynchronizer 전용.
    """
    
    async def get(self, account_id: str) -> Account | None:
        """계정 조회
        
        Returns:
            계정 또는 None (없음)
        """
        ...
    
    async def list(self) -> list[Account]:
        """전체 계정 목록 (account_id 순)"""
        ...
    
    async def create(self, account: Account) -> Account:
        """계정 생성
        
        Raises:
            DuplicateAccountError: 같은 ID가 이미 존재
            InvalidAccountTypeError: 지원하지 않는 계정 유형
        """
        ...
    
    async def ensure(self, accounts: Iterable[Account]) -> int:
        """없는 계정만 생성
        
        Returns:
            새로 생성된 계정 수
        """
        ...
    
    async def missing(self, account_ids: Iterable[str]) -> list[str]:
        """계정과목에 없는 ID 목록 (입력 순서 유지)"""
        ...
    
    async def set_balance(
        self,
        account_id: str,
        value: Decimal,
        timestamp: datetime,
    ) -> None:
        """캐시 잔액 갱신 (BalanceSynchronizer 전용)
        
        Raises:
            AccountNotFoundError: 계정이 없는 경우
        """
        ...

    def transaction(self) -> AsyncContextManager[None]:
        """잔액 재계산용 쓰기 범위

        진입 시점부터 종료까지 다른 쓰기(분개 추가 포함)와 직렬화됨.
        """
        ...

@runtime_checkable
class IJournalStore(Protocol):
    """분개 저장소 인터페이스 (append-only)
    
    모든 재무 이력의 유일한 원천.
    수정/삭제 연산 없음. 정정은 반대 분개로 처리.
    """
    
    async def append(self, entry: JournalEntry) -> str:
        """분개 추가 (원자적)
        
        검증이 끝난 분개만 전달되어야 함.
        
        Returns:
            저장된 entry_id
            
        Raises:
            DuplicatePostingError: 멱등성 키 중복
            StorageFailureError: 저장 실패 (부분 저장 없음)
        """
        ...
    
    def all(self) -> AsyncIterator[JournalEntry]:
        """전체 분개 지연 조회 (created_at 오름차순)"""
        ...
    
    def lines_for(self, account_id: str) -> AsyncIterator[JournalLine]:
        """특정 계정의 분개 항목 지연 조회"""
        ...
    
    async def get(self, entry_id: str) -> JournalEntry | None:
        """분개 단건 조회"""
        ...
    
    async def recent(self, limit: int = 100) -> list[JournalEntry]:
        """최근 분개 목록 (created_at 내림차순)"""
        ...
    
    async def find_by_idempotency_key(self, key: str) -> str | None:
        """멱등성 키로 기존 entry_id 조회"""
        ...
    
    async def count(self) -> int:
        """저장된 분개 수"""
        ...
