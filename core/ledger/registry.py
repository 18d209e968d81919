"""
계정과목 저장소 (AccountRegistry)

account 테이블 기반 계정 조회/생성 및 캐시 잔액 갱신
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncIterator, Iterable

import aiosqlite

from core.ledger.account import Account, parse_account_type
from core.ledger.errors import (
    AccountNotFoundError,
    DuplicateAccountError,
    StorageFailureError,
)
from core.utils.timezone import ensure_utc, now_utc, parse_iso

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


_ACCOUNT_COLUMNS = (
    "account_id, name, account_type, balance, parent_id, last_updated, description"
)


def _row_to_account(row: tuple[Any, ...]) -> Account:
    return Account(
        account_id=row[0],
        name=row[1],
        account_type=parse_account_type(row[2]),
        balance=Decimal(row[3]) if row[3] is not None else Decimal("0"),
        parent_id=row[4],
        last_updated=parse_iso(row[5]) if row[5] else None,
        description=row[6],
    )


class AccountRegistry:
    """계정과목 저장소

    IAccountRegistry Protocol의 SQLite 구현.
    account_type은 생성 시 고정되며 balance는 set_balance로만 변경.

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def get(self, account_id: str) -> Account | None:
        """계정 조회

        Args:
            account_id: 계정 ID

        Returns:
            계정 (없으면 None)
        """
        try:
            row = await self.db.fetchone(
                f"SELECT {_ACCOUNT_COLUMNS} FROM account WHERE account_id = ?",
                (account_id,),
            )
        except aiosqlite.Error as e:
            raise StorageFailureError(f"Failed to read account {account_id}: {e}") from e

        return _row_to_account(row) if row else None

    async def list(self) -> list[Account]:
        """전체 계정 목록 (account_id 순)"""
        try:
            rows = await self.db.fetchall(
                f"SELECT {_ACCOUNT_COLUMNS} FROM account ORDER BY account_id"
            )
        except aiosqlite.Error as e:
            raise StorageFailureError(f"Failed to list accounts: {e}") from e

        return [_row_to_account(row) for row in rows]

    async def create(self, account: Account) -> Account:
        """계정 생성

        Args:
            account: 생성할 계정 (잔액은 항상 0으로 시작)

        Returns:
            생성된 계정

        Raises:
            DuplicateAccountError: 같은 ID가 이미 존재
            InvalidAccountTypeError: 지원하지 않는 계정 유형
        """
        account_type = parse_account_type(account.account_type)

        if await self.get(account.account_id) is not None:
            raise DuplicateAccountError(account.account_id)

        try:
            async with self.db.transaction():
                await self.db.execute(
                    """
                    INSERT INTO account (
                        account_id, name, account_type, balance, parent_id, description
                    ) VALUES (?, ?, ?, '0', ?, ?)
                    """,
                    (
                        account.account_id,
                        account.name,
                        account_type.value,
                        account.parent_id,
                        account.description,
                    ),
                )
        except aiosqlite.IntegrityError as e:
            # 동시 생성 경합
            raise DuplicateAccountError(account.account_id) from e
        except aiosqlite.Error as e:
            raise StorageFailureError(f"Failed to create account {account.account_id}: {e}") from e

        logger.info(f"계정 생성: {account.account_id} ({account_type.value})")
        return Account(
            account_id=account.account_id,
            name=account.name,
            account_type=account_type,
            parent_id=account.parent_id,
            description=account.description,
        )

    async def ensure(self, accounts: Iterable[Account]) -> int:
        """없는 계정만 생성 (INSERT OR IGNORE)

        Args:
            accounts: 생성할 계정 목록

        Returns:
            새로 생성된 계정 수
        """
        rows = [
            (
                account.account_id,
                account.name,
                parse_account_type(account.account_type).value,
                account.parent_id,
                account.description,
            )
            for account in accounts
        ]
        if not rows:
            return 0

        try:
            async with self.db.transaction():
                before = await self._count()
                await self.db.executemany(
                    """
                    INSERT OR IGNORE INTO account (
                        account_id, name, account_type, balance, parent_id, description
                    ) VALUES (?, ?, ?, '0', ?, ?)
                    """,
                    rows,
                )
                after = await self._count()
        except aiosqlite.Error as e:
            raise StorageFailureError(f"Failed to ensure accounts: {e}") from e

        return after - before

    async def missing(self, account_ids: Iterable[str]) -> list[str]:
        """계정과목에 없는 ID 목록 (중복 제거, 입력 순서 유지)"""
        ids = list(dict.fromkeys(account_ids))
        if not ids:
            return []

        placeholders = ", ".join("?" for _ in ids)
        try:
            rows = await self.db.fetchall(
                f"SELECT account_id FROM account WHERE account_id IN ({placeholders})",
                tuple(ids),
            )
        except aiosqlite.Error as e:
            raise StorageFailureError(f"Failed to look up accounts: {e}") from e

        existing = {row[0] for row in rows}
        return [account_id for account_id in ids if account_id not in existing]

    async def set_balance(
        self,
        account_id: str,
        value: Decimal,
        timestamp: datetime | None = None,
    ) -> None:
        """캐시 잔액 갱신 (BalanceSynchronizer 전용)

        Args:
            account_id: 계정 ID
            value: 새 잔액
            timestamp: 동기화 시각 (None이면 현재 시각)

        Raises:
            AccountNotFoundError: 계정이 없는 경우
        """
        ts = ensure_utc(timestamp or now_utc())
        try:
            async with self.db.transaction():
                cursor = await self.db.execute(
                    """
                    UPDATE account
                    SET balance = ?, last_updated = ?
                    WHERE account_id = ?
                    """,
                    (str(value), ts.isoformat(timespec="microseconds"), account_id),
                )
                updated = cursor.rowcount
        except aiosqlite.Error as e:
            raise StorageFailureError(f"Failed to update balance of {account_id}: {e}") from e

        if updated == 0:
            raise AccountNotFoundError(account_id)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """잔액 재계산용 쓰기 트랜잭션 (BEGIN IMMEDIATE)

        범위 안의 조회와 set_balance가 같은 트랜잭션에 합류하므로
        다른 연결의 분개 추가는 커밋 이후로 직렬화됨.
        """
        try:
            async with self.db.transaction():
                yield
        except aiosqlite.Error as e:
            raise StorageFailureError(f"Balance transaction failed: {e}") from e

    async def _count(self) -> int:
        row = await self.db.fetchone("SELECT COUNT(*) FROM account")
        return row[0] if row else 0
