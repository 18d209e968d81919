"""
복식부기 스키마 초기화

Web/CLI 시작 시 자동으로 원장 테이블과 인덱스 생성.
CREATE IF NOT EXISTS 패턴으로 여러 번 호출해도 안전하게 동작.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


async def init_ledger_schema(db: "SQLiteAdapter") -> None:
    """원장 스키마 초기화 (테이블 + 인덱스)

    계정과목 데이터는 넣지 않음. 기본 계정과목은
    initialize_chart_of_accounts()로 명시적으로 생성.

    Args:
        db: SQLiteAdapter 인스턴스
    """
    await _create_ledger_tables(db)
    await _create_ledger_indexes(db)
    await db.commit()
    logger.info("원장 스키마 초기화 완료")


async def _create_ledger_tables(db: "SQLiteAdapter") -> None:
    """원장 테이블 생성"""

    # account 테이블 (balance는 캐시)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS account (
            account_id       TEXT PRIMARY KEY,
            name             TEXT NOT NULL,
            account_type     TEXT NOT NULL,
            parent_id        TEXT,
            balance          TEXT NOT NULL DEFAULT '0',
            last_updated     TEXT,
            description      TEXT,
            created_at       TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # journal_entry 테이블 (append-only)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS journal_entry (
            seq              INTEGER PRIMARY KEY AUTOINCREMENT,
            entry_id         TEXT NOT NULL UNIQUE,
            date             TEXT NOT NULL,
            created_at       TEXT NOT NULL,
            linked_doc       TEXT,
            description      TEXT,
            idempotency_key  TEXT UNIQUE
        )
    """)

    # journal_line 테이블
    # account_id는 account를 참조하지 않음 (계정과목 밖의 계정도 기록 가능)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS journal_line (
            line_id          INTEGER PRIMARY KEY AUTOINCREMENT,
            entry_id         TEXT NOT NULL,
            account_id       TEXT NOT NULL,
            debit            TEXT NOT NULL DEFAULT '0',
            credit           TEXT NOT NULL DEFAULT '0',
            description      TEXT,
            line_order       INTEGER NOT NULL DEFAULT 0,
            FOREIGN KEY (entry_id) REFERENCES journal_entry(entry_id)
        )
    """)


async def _create_ledger_indexes(db: "SQLiteAdapter") -> None:
    """원장 인덱스 생성"""
    await db.execute(
        "CREATE INDEX IF NOT EXISTS idx_journal_line_account ON journal_line(account_id)"
    )
    await db.execute(
        "CREATE INDEX IF NOT EXISTS idx_journal_line_entry ON journal_line(entry_id)"
    )
    await db.execute(
        "CREATE INDEX IF NOT EXISTS idx_journal_entry_created ON journal_entry(created_at)"
    )
    await db.execute(
        "CREATE INDEX IF NOT EXISTS idx_account_type ON account(account_type)"
    )
