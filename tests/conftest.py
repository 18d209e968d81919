"""
pytest 공통 fixture 정의

설정 파일, 고정 시계, 인메모리 원장 저장소
"""

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from adapters.mock.ledger import InMemoryAccountRegistry, InMemoryJournalStore, MockLedgerState
from core.config.loader import Settings
from core.ledger.account import Account
from core.ledger.types import DEFAULT_CHART_OF_ACCOUNTS


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성 (development, 임시 DB)"""
    settings_content = f"""# 테스트용 settings.yaml
mode: development
db_path: "{(temp_dir / 'ledger_test.db').as_posix()}"

ledger:
  balance_tolerance: "0.01"
  journal_list_limit: 50
  reject_unknown_accounts: false
  opening_cash: "0"

web:
  host: 127.0.0.1
  port: 8123
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture
def temp_settings_file_production(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성 (production, 선택 섹션 생략)"""
    settings_path = temp_dir / "settings_prod.yaml"
    settings_path.write_text("mode: production\n", encoding="utf-8")
    return settings_path


@pytest.fixture
def temp_settings_file_invalid_mode(temp_dir: Path) -> Path:
    """잘못된 모드의 settings.yaml 파일 생성"""
    settings_path = temp_dir / "settings_invalid.yaml"
    settings_path.write_text("mode: testnet\n", encoding="utf-8")
    return settings_path


@pytest.fixture
def reset_settings():
    """Settings 싱글턴 초기화 (테스트 전후)"""
    Settings.reset()
    yield
    Settings.reset()


class FakeClock:
    """호출할 때마다 1초씩 증가하는 고정 시계"""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2026, 10, 18, 9, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(seconds=1)
        return value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ledger_state() -> MockLedgerState:
    """기본 계정과목이 들어 있는 인메모리 상태"""
    state = MockLedgerState()
    for account_id, account_type, name in DEFAULT_CHART_OF_ACCOUNTS:
        state.accounts[account_id] = Account.new(account_id, name, account_type)
    return state


@pytest.fixture
def registry(ledger_state: MockLedgerState) -> InMemoryAccountRegistry:
    return InMemoryAccountRegistry(ledger_state)


@pytest.fixture
def journal(ledger_state: MockLedgerState) -> InMemoryJournalStore:
    return InMemoryJournalStore(ledger_state)
