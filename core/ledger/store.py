"""
분개 저장소 (JournalStore)

복식부기 분개를 append-only로 저장하고 조회.
모든 재무 이력의 유일한 원천이며 계정 잔액은 여기서 재계산됨.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, AsyncIterator

import aiosqlite

from core.ledger.entry_builder import JournalEntry, JournalLine
from core.ledger.errors import DuplicatePostingError, StorageFailureError
from core.utils.timezone import ensure_utc, parse_iso

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


_ENTRY_COLUMNS = (
    "e.entry_id, e.date, e.created_at, e.linked_doc, e.description, e.idempotency_key"
)
_LINE_COLUMNS = "l.account_id, l.debit, l.credit, l.description"


def _row_to_line(row: tuple[Any, ...]) -> JournalLine:
    return JournalLine.from_amounts(
        account_id=row[0],
        debit=row[1],
        credit=row[2],
        description=row[3],
    )


def _build_entry(header: tuple[Any, ...], lines: list[JournalLine]) -> JournalEntry:
    return JournalEntry(
        entry_id=header[0],
        date=parse_iso(header[1]),
        created_at=parse_iso(header[2]),
        lines=tuple(lines),
        linked_doc=header[3],
        description=header[4],
        idempotency_key=header[5],
    )


def _ts(value: Any) -> str:
    return ensure_utc(value).isoformat(timespec="microseconds")


class JournalStore:
    """분개 저장소

    IJournalStore Protocol의 SQLite 구현.
    수정/삭제 연산 없음. 정정은 반대 분개로 처리.

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def append(self, entry: JournalEntry) -> str:
        """분개 저장

        트랜잭션 내에서 journal_entry + journal_line 저장.
        실패 시 롤백되어 일부 항목만 남는 일이 없음.

        Args:
            entry: 검증이 끝난 분개

        Returns:
            저장된 entry_id

        Raises:
            DuplicatePostingError: 멱등성 키 중복
            StorageFailureError: 저장 실패
        """
        line_rows = [
            (
                entry.entry_id,
                line.account_id,
                str(line.debit),
                str(line.credit),
                line.description,
                i,
            )
            for i, line in enumerate(entry.lines)
        ]

        try:
            async with self.db.transaction():
                await self.db.execute(
                    """
                    INSERT INTO journal_entry (
                        entry_id, date, created_at, linked_doc, description, idempotency_key
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        entry.entry_id,
                        _ts(entry.date),
                        _ts(entry.created_at),
                        entry.linked_doc,
                        entry.description,
                        entry.idempotency_key,
                    ),
                )
                await self.db.executemany(
                    """
                    INSERT INTO journal_line (
                        entry_id, account_id, debit, credit, description, line_order
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    line_rows,
                )
        except aiosqlite.IntegrityError as e:
            if entry.idempotency_key and "idempotency_key" in str(e):
                existing = await self.find_by_idempotency_key(entry.idempotency_key)
                raise DuplicatePostingError(entry.idempotency_key, existing) from e
            raise StorageFailureError(f"Failed to append entry {entry.entry_id}: {e}") from e
        except aiosqlite.Error as e:
            raise StorageFailureError(f"Failed to append entry {entry.entry_id}: {e}") from e

        logger.debug(f"분개 저장: {entry.entry_id} ({len(entry.lines)} lines)")
        return entry.entry_id

    async def all(self) -> AsyncIterator[JournalEntry]:
        """전체 분개 지연 조회 (created_at 오름차순, 동일 시각은 저장 순서)

        단일 SELECT로 읽으므로 조회 중 추가된 분개는 보이지 않음.
        """
        header: tuple[Any, ...] | None = None
        lines: list[JournalLine] = []

        try:
            async for row in self.db.iterate(
                f"""
                SELECT {_ENTRY_COLUMNS}, {_LINE_COLUMNS}
                FROM journal_entry e
                JOIN journal_line l ON l.entry_id = e.entry_id
                ORDER BY e.created_at, e.seq, l.line_order
                """
            ):
                if header is not None and header[0] != row[0]:
                    yield _build_entry(header, lines)
                    lines = []
                header = row[:6]
                lines.append(_row_to_line(row[6:]))
        except aiosqlite.Error as e:
            raise StorageFailureError(f"Failed to scan journal: {e}") from e

        if header is not None:
            yield _build_entry(header, lines)

    async def lines_for(self, account_id: str) -> AsyncIterator[JournalLine]:
        """특정 계정의 분개 항목 지연 조회 (account_id 인덱스 사용)"""
        try:
            async for row in self.db.iterate(
                f"""
                SELECT {_LINE_COLUMNS}
                FROM journal_line l
                WHERE l.account_id = ?
                ORDER BY l.line_id
                """,
                (account_id,),
            ):
                yield _row_to_line(row)
        except aiosqlite.Error as e:
            raise StorageFailureError(f"Failed to scan lines of {account_id}: {e}") from e

    async def get(self, entry_id: str) -> JournalEntry | None:
        """분개 단건 조회"""
        entries = await self._load(
            f"SELECT {_ENTRY_COLUMNS} FROM journal_entry e WHERE e.entry_id = ?",
            (entry_id,),
        )
        return entries[0] if entries else None

    async def recent(self, limit: int = 100) -> list[JournalEntry]:
        """최근 분개 목록 (created_at 내림차순)"""
        return await self._load(
            f"""
            SELECT {_ENTRY_COLUMNS}
            FROM journal_entry e
            ORDER BY e.created_at DESC, e.seq DESC
            LIMIT ?
            """,
            (limit,),
        )

    async def find_by_idempotency_key(self, key: str) -> str | None:
        """멱등성 키로 기존 entry_id 조회"""
        try:
            row = await self.db.fetchone(
                "SELECT entry_id FROM journal_entry WHERE idempotency_key = ?",
                (key,),
            )
        except aiosqlite.Error as e:
            raise StorageFailureError(f"Failed to look up idempotency key: {e}") from e
        return row[0] if row else None

    async def count(self) -> int:
        """저장된 분개 수"""
        try:
            row = await self.db.fetchone("SELECT COUNT(*) FROM journal_entry")
        except aiosqlite.Error as e:
            raise StorageFailureError(f"Failed to count entries: {e}") from e
        return row[0] if row else 0

    async def _load(
        self,
        header_sql: str,
        parameters: tuple[Any, ...],
    ) -> list[JournalEntry]:
        """헤더 조회 후 항목을 한 번에 읽어 분개로 조립 (헤더 순서 유지)"""
        try:
            headers = await self.db.fetchall(header_sql, parameters)
            if not headers:
                return []

            entry_ids = [h[0] for h in headers]
            placeholders = ", ".join("?" for _ in entry_ids)
            rows = await self.db.fetchall(
                f"""
                SELECT l.entry_id, {_LINE_COLUMNS}
                FROM journal_line l
                WHERE l.entry_id IN ({placeholders})
                ORDER BY l.entry_id, l.line_order
                """,
                tuple(entry_ids),
            )
        except aiosqlite.Error as e:
            raise StorageFailureError(f"Failed to load entries: {e}") from e

        lines_by_entry: dict[str, list[JournalLine]] = {}
        for row in rows:
            lines_by_entry.setdefault(row[0], []).append(_row_to_line(row[1:]))

        return [_build_entry(h, lines_by_entry.get(h[0], [])) for h in headers]
