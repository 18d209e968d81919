"""
원장 운영 CLI

주기적 정합성 작업(cron 등)이 호출하는 진입점.

사용법:
    python -m scripts.ledger_cli init [--opening-cash 10000]
    python -m scripts.ledger_cli sync [--accounts CASH AR] [--start-after AR]
    python -m scripts.ledger_cli check [--accounts CASH]

종료 코드:
    0: 성공 (check는 불일치 없음)
    1: 일부 계정 동기화 실패 또는 잔액 불일치 발견
    2: 원장 오류 (잘못된 입력, 저장 실패 등)
"""

import argparse
import asyncio
import logging
import sys
from decimal import Decimal
from pathlib import Path

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import get_settings
from core.ledger.errors import LedgerError
from core.ledger.schema import init_ledger_schema
from core.logging import setup_logging
from web.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


async def cmd_init(service: LedgerService, opening_cash: Decimal | None) -> int:
    """기본 계정과목 초기화"""
    result = await service.initialize_chart(opening_cash)
    print(result["message"])
    if result["journalEntryId"]:
        print(f"Opening entry: {result['journalEntryId']}")
    return 0


async def cmd_sync(
    service: LedgerService,
    account_ids: list[str] | None,
    start_after: str | None,
) -> int:
    """잔액 동기화 (계정 지정 또는 전체)"""
    if account_ids:
        result = await service.synchronizer.sync_many(account_ids)
    else:
        try:
            result = await service.synchronizer.sync_all(start_after=start_after)
        except asyncio.CancelledError:
            logger.warning(
                f"sync_all 중단: 마지막 완료 계정 "
                f"{service.synchronizer.last_synced_account_id}"
            )
            raise

    for account_id, balance in result.results.items():
        marker = " (error)" if account_id in result.errors else ""
        print(f"{account_id:<28} {balance:>16}{marker}")
    for account_id, error in result.errors.items():
        print(f"! {account_id}: {error}")

    return 0 if result.ok else 1


async def cmd_check(service: LedgerService, account_ids: list[str] | None) -> int:
    """캐시 잔액 정합성 점검 (쓰기 없음)"""
    drifts = await service.synchronizer.check(account_ids)
    if not drifts:
        print("All balances match the journal")
        return 0

    for drift in drifts:
        print(
            f"{drift.account_id:<28} cached={drift.cached} "
            f"computed={drift.computed} diff={drift.difference}"
        )
    return 1


async def run(args: argparse.Namespace) -> int:
    settings = get_settings(args.settings)

    async with SQLiteAdapter(settings.db_path) as db:
        await init_ledger_schema(db)
        service = LedgerService.for_db(db, settings.ledger)

        if args.command == "init":
            return await cmd_init(service, args.opening_cash)
        if args.command == "sync":
            return await cmd_sync(service, args.accounts, args.start_after)
        return await cmd_check(service, args.accounts)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ledger_cli",
        description="원장 초기화, 잔액 동기화, 정합성 점검",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="settings.yaml 경로 (기본: config/settings.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="기본 계정과목 초기화")
    init_parser.add_argument(
        "--opening-cash",
        type=Decimal,
        default=None,
        help="기초 현금 (기본: settings의 ledger.opening_cash)",
    )

    sync_parser = subparsers.add_parser("sync", help="원장에서 잔액 재계산")
    sync_parser.add_argument("--accounts", nargs="+", default=None, help="대상 계정 ID")
    sync_parser.add_argument(
        "--start-after",
        default=None,
        help="전체 동기화 재개 위치 (이 ID 이후 계정부터)",
    )

    check_parser = subparsers.add_parser("check", help="캐시 잔액과 원장 비교")
    check_parser.add_argument("--accounts", nargs="+", default=None, help="대상 계정 ID")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("cli")
    try:
        return asyncio.run(run(args))
    except LedgerError as e:
        logger.error(f"{args.command} 실패: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
