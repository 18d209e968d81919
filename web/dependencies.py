"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
"""

from typing import AsyncGenerator

from fastapi import Depends

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings, get_settings
from core.ledger.synchronizer import AccountLockRegistry
from web.services.ledger_service import LedgerService

# 요청마다 LedgerService를 새로 만들어도 계정별 잠금은 프로세스 전체에서 공유
_account_locks = AccountLockRegistry()


def get_account_locks() -> AccountLockRegistry:
    """프로세스 전역 계정별 잠금"""
    return _account_locks


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


async def get_db() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (읽기 전용)

    잔액/분개 조회 등 읽기 요청에 사용.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=True) as db:
        yield db


async def get_db_write() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (쓰기 가능)

    전기, 잔액 동기화, 계정 생성 시 사용.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=False) as db:
        yield db


def get_ledger_reader(
    db: SQLiteAdapter = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    locks: AccountLockRegistry = Depends(get_account_locks),
) -> LedgerService:
    """조회용 원장 서비스"""
    return LedgerService.for_db(db, settings.ledger, locks)


def get_ledger_writer(
    db: SQLiteAdapter = Depends(get_db_write),
    settings: Settings = Depends(get_app_settings),
    locks: AccountLockRegistry = Depends(get_account_locks),
) -> LedgerService:
    """쓰기용 원장 서비스"""
    return LedgerService.for_db(db, settings.ledger, locks)
