"""
SQLite 어댑터

원장 DB 연결 관리 (WAL 모드).
Web 요청과 운영 CLI(잔액 동기화 등)가 같은 파일을 동시에 사용.

- 쓰기 트랜잭션은 BEGIN IMMEDIATE로 시작하여 프로세스 간 쓰기를 직렬화
- 읽기 전용 연결은 DB 파일이 없으면 생성하지 않고 실패

주의: SQLite alias로 time, count 사용 금지 (예약어)
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

from core.constants import Paths
from core.types import RunMode

logger = logging.getLogger(__name__)

# 다른 연결이 쓰기 잠금을 잡고 있을 때 대기 시간 (ms)
BUSY_TIMEOUT_MS = 30000


def get_db_path(mode: RunMode | str) -> Path:
    """실행 모드별 기본 DB 경로

    Args:
        mode: RunMode 또는 "production"/"development" (대소문자 무관)

    Raises:
        ValueError: 알 수 없는 모드
    """
    mode = RunMode(mode.lower()) if isinstance(mode, str) else mode
    return Paths.PROD_DB if mode == RunMode.PRODUCTION else Paths.DEV_DB


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성

    쓰기 연결은 상위 디렉토리를 만들고 WAL 모드로 전환.
    읽기 전용 연결은 journal_mode를 바꿀 수 없으므로 PRAGMA 설정만 적용.

    Raises:
        FileNotFoundError: 읽기 전용인데 DB 파일이 없는 경우
    """
    path = Path(db_path)

    if readonly:
        if not path.exists():
            raise FileNotFoundError(f"원장 DB 파일이 없습니다: {path}")
        conn = await aiosqlite.connect(f"file:{path.as_posix()}?mode=ro", uri=True)
    else:
        path.parent.mkdir(parents=True, exist_ok=True)
        conn = await aiosqlite.connect(str(path))
        await conn.execute("PRAGMA journal_mode=WAL")

    await conn.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS}")
    await conn.execute("PRAGMA foreign_keys=ON")

    logger.debug(f"SQLite 연결: {path} (readonly={readonly})")
    return conn


class SQLiteAdapter:
    """원장 DB 어댑터

    AccountRegistry, JournalStore가 공유하는 단일 연결 래퍼.

    사용 예시:
    ```python
    async with SQLiteAdapter(db_path) as db:
        async with db.transaction():
            await db.execute("INSERT INTO journal_entry ...")
            await db.executemany("INSERT INTO journal_line ...", rows)
    ```

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부 (Web 조회용)
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    def _require(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Not connected to database")
        return self._conn

    async def connect(self) -> None:
        if self._conn is None:
            self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.debug(f"SQLite 연결 종료: {self.db_path}")

    # -------------------------------------------------------------------------
    # 실행 / 조회
    # -------------------------------------------------------------------------

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        return await self._require().execute(sql, parameters or ())

    async def executemany(
        self,
        sql: str,
        parameters: list[tuple[Any, ...]],
    ) -> aiosqlite.Cursor:
        return await self._require().executemany(sql, parameters)

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> tuple[Any, ...] | None:
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchall()

    async def iterate(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> AsyncIterator[tuple[Any, ...]]:
        """커서에서 한 행씩 반환

        원장 전체 스캔처럼 결과가 큰 조회에서 메모리에 모두 올리지 않음.
        """
        cursor = await self.execute(sql, parameters)
        try:
            async for row in cursor:
                yield row
        finally:
            await cursor.close()

    # -------------------------------------------------------------------------
    # 트랜잭션
    # -------------------------------------------------------------------------

    async def commit(self) -> None:
        if self._conn is not None:
            await self._conn.commit()

    async def rollback(self) -> None:
        if self._conn is not None:
            await self._conn.rollback()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """쓰기 트랜잭션

        시작 시 쓰기 잠금을 잡고(BEGIN IMMEDIATE), 블록이 끝나면 커밋.
        예외(취소 포함)가 나면 블록 안의 모든 쓰기를 롤백.
        이미 열린 트랜잭션 안에서 호출되면 그 트랜잭션에 합류.
        """
        conn = self._require()
        if conn.in_transaction:
            yield conn
            return

        await conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
            await conn.commit()
        except BaseException:
            await conn.rollback()
            raise

    # -------------------------------------------------------------------------
    # 스키마 조회
    # -------------------------------------------------------------------------

    async def _schema_object_exists(self, kind: str, name: str) -> bool:
        row = await self.fetchone(
            "SELECT 1 FROM sqlite_master WHERE type = ? AND name = ?",
            (kind, name),
        )
        return row is not None

    async def table_exists(self, table_name: str) -> bool:
        return await self._schema_object_exists("table", table_name)

    async def index_exists(self, index_name: str) -> bool:
        return await self._schema_object_exists("index", index_name)

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
