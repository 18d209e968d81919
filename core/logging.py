"""
로깅 설정 유틸리티

Web과 운영 CLI가 공유하는 로깅 설정.
- 콘솔: Web은 stdout, CLI는 stderr (CLI stdout은 결과 출력 전용)
- 프로세스 로그: logs/<process>/<process>.log (daily rotation)
- 원장 로그: logs/<process>/ledger.log, core.ledger 로거만 기록
  (전기, 거부, 잔액 동기화 실패 추적용)

사용법:
    from core.logging import setup_logging
    setup_logging("web")
    setup_logging("cli")
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.constants import Defaults, Paths

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 7  # 일 단위
LEDGER_LOGGER = "core.ledger"

# 레벨을 WARNING으로 낮출 로거
NOISY_LOGGERS = [
    "aiosqlite",      # 쿼리마다 executing/completed 로그
    "httpcore",
    "httpx",
    "asyncio",
    "uvicorn.access",
]

_PROCESS_LOG_DIRS = {
    "web": Paths.WEB_LOGS_DIR,
    "cli": Paths.CLI_LOGS_DIR,
}


def _daily_file_handler(
    path: Path,
    level: int | str,
    formatter: logging.Formatter,
) -> TimedRotatingFileHandler:
    handler = TimedRotatingFileHandler(
        filename=path,
        when="midnight",
        interval=1,
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.suffix = "%Y-%m-%d"  # ledger.log.2026-10-18
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    process_name: str,
    console_level: int | str = Defaults.LOG_LEVEL,
    file_level: int | str = logging.INFO,
    log_dir: Path | None = None,
) -> logging.Logger:
    """로깅 설정 초기화

    여러 번 호출해도 핸들러가 중복되지 않음 (루트 핸들러 교체).

    Args:
        process_name: "web" 또는 "cli"
        console_level: 콘솔 로그 레벨
        file_level: 파일 로그 레벨
        log_dir: 로그 디렉토리 (None이면 프로세스별 기본 경로)

    Returns:
        루트 Logger
    """
    log_dir = log_dir or _PROCESS_LOG_DIRS.get(process_name, Paths.LOGS_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # 핸들러에서 필터링
    for handler in root_logger.handlers:
        handler.close()  # 이전 로그 파일 핸들 반환
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr if process_name == "cli" else sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    process_log = log_dir / f"{process_name}.log"
    root_logger.addHandler(_daily_file_handler(process_log, file_level, formatter))

    ledger_handler = _daily_file_handler(log_dir / "ledger.log", logging.INFO, formatter)
    ledger_handler.addFilter(logging.Filter(LEDGER_LOGGER))
    root_logger.addHandler(ledger_handler)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.info(f"로깅 초기화 완료: {process_name} ({process_log})")
    return root_logger
