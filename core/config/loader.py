"""
설정 로더

settings.yaml 로드 및 Ledger/Web 설정 생성
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from core.constants import Defaults, Paths
from core.types import RunMode


@dataclass(frozen=True)
class LedgerConfig:
    """Ledger 동작 설정

    불변 데이터 구조로 설정 변경 방지
    """

    balance_tolerance: Decimal = Defaults.BALANCE_TOLERANCE
    journal_list_limit: int = Defaults.JOURNAL_LIST_LIMIT
    reject_unknown_accounts: bool = Defaults.REJECT_UNKNOWN_ACCOUNTS
    opening_cash: Decimal = Defaults.OPENING_CASH


@dataclass(frozen=True)
class WebConfig:
    """Web 서버 설정"""

    host: str = Defaults.WEB_HOST
    port: int = Defaults.WEB_PORT


@dataclass(frozen=True)
class AppConfig:
    """애플리케이션 설정 (settings.yaml에서 로드)"""

    mode: RunMode
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    web: WebConfig = field(default_factory=WebConfig)
    db_path_override: Path | None = None


class SettingsLoadError(Exception):
    """Settings 로드 실패 예외"""

    pass


def _to_decimal(value: Any, key: str) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise SettingsLoadError(f"'{key}' 값이 숫자가 아닙니다: {value!r}") from e


def _parse_ledger(data: dict[str, Any]) -> LedgerConfig:
    tolerance = _to_decimal(
        data.get("balance_tolerance", Defaults.BALANCE_TOLERANCE),
        "ledger.balance_tolerance",
    )
    if tolerance < 0:
        raise SettingsLoadError("ledger.balance_tolerance는 0 이상이어야 합니다")

    opening_cash = _to_decimal(
        data.get("opening_cash", Defaults.OPENING_CASH),
        "ledger.opening_cash",
    )
    if opening_cash < 0:
        raise SettingsLoadError("ledger.opening_cash는 0 이상이어야 합니다")

    limit = int(data.get("journal_list_limit", Defaults.JOURNAL_LIST_LIMIT))
    if limit <= 0:
        raise SettingsLoadError("ledger.journal_list_limit는 1 이상이어야 합니다")

    return LedgerConfig(
        balance_tolerance=tolerance,
        journal_list_limit=limit,
        reject_unknown_accounts=bool(
            data.get("reject_unknown_accounts", Defaults.REJECT_UNKNOWN_ACCOUNTS)
        ),
        opening_cash=opening_cash,
    )


def load_config(path: Path | None = None) -> AppConfig:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppConfig 인스턴스

    Raises:
        SettingsLoadError: 파일이 없거나 형식이 잘못된 경우
        ValueError: 유효하지 않은 mode인 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        raise SettingsLoadError(f"settings.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        raise SettingsLoadError("settings.yaml이 비어 있습니다")

    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    # mode 검증
    mode_str = data.get("mode")
    if mode_str is None:
        raise SettingsLoadError("settings.yaml에 'mode' 필드가 없습니다")

    try:
        mode = RunMode(mode_str)
    except ValueError as e:
        valid_modes = [m.value for m in RunMode]
        raise ValueError(
            f"유효하지 않은 mode입니다: '{mode_str}'. "
            f"유효한 값: {valid_modes}"
        ) from e

    ledger = _parse_ledger(data.get("ledger") or {})

    web_data = data.get("web") or {}
    web = WebConfig(
        host=str(web_data.get("host", Defaults.WEB_HOST)),
        port=int(web_data.get("port", Defaults.WEB_PORT)),
    )

    db_path = data.get("db_path")

    return AppConfig(
        mode=mode,
        ledger=ledger,
        web=web,
        db_path_override=Path(db_path) if db_path else None,
    )


def get_db_path(config: AppConfig) -> Path:
    """모드에 따른 DB 경로 반환

    settings.yaml에 db_path가 지정되어 있으면 그 경로를 우선 사용.

    Args:
        config: AppConfig 인스턴스

    Returns:
        DB 파일 경로 (Path 타입)
    """
    if config.db_path_override is not None:
        return config.db_path_override
    if config.mode == RunMode.PRODUCTION:
        return Paths.PROD_DB
    return Paths.DEV_DB


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: AppConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            self._config = load_config(settings_path)

    @property
    def mode(self) -> RunMode:
        """현재 실행 모드"""
        assert self._config is not None
        return self._config.mode

    @property
    def ledger(self) -> LedgerConfig:
        """Ledger 설정"""
        assert self._config is not None
        return self._config.ledger

    @property
    def web(self) -> WebConfig:
        """Web 서버 설정"""
        assert self._config is not None
        return self._config.web

    @property
    def db_path(self) -> Path:
        """현재 모드의 DB 경로"""
        assert self._config is not None
        return get_db_path(self._config)

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
