"""
Protocol 인터페이스 테스트

SQLite 구현체와 인메모리 구현체가 저장소 Protocol을 준수하는지 확인.
"""

import importlib
from pathlib import Path

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.interfaces import IAccountRegistry, IJournalStore
from adapters.mock.ledger import InMemoryAccountRegistry, InMemoryJournalStore
from core.ledger.registry import AccountRegistry
from core.ledger.store import JournalStore


class TestModuleImports:
    """메서드 이름이 내장 타입(list 등)과 겹쳐도 주석 평가 없이 import 가능"""

    @pytest.mark.parametrize(
        "module_name",
        ["adapters.interfaces", "adapters.mock.ledger", "web.services.ledger_service", "web.app"],
    )
    def test_importable(self, module_name: str) -> None:
        assert importlib.import_module(module_name).__name__ == module_name

    def test_annotations_are_deferred(self) -> None:
        assert IAccountRegistry.missing.__annotations__["return"] == "list[str]"
        assert InMemoryAccountRegistry.missing.__annotations__["return"] == "list[str]"


class TestIAccountRegistry:
    """IAccountRegistry Protocol 테스트"""

    def test_in_memory_implements_protocol(self) -> None:
        assert isinstance(InMemoryAccountRegistry(), IAccountRegistry)

    def test_sqlite_implements_protocol(self, tmp_path: Path) -> None:
        assert isinstance(AccountRegistry(SQLiteAdapter(tmp_path / "x.db")), IAccountRegistry)

    @pytest.mark.parametrize(
        "method_name", ["get", "list", "create", "ensure", "missing", "set_balance", "transaction"]
    )
    def test_required_methods(self, method_name: str) -> None:
        assert callable(getattr(InMemoryAccountRegistry(), method_name))


class TestIJournalStore:
    """IJournalStore Protocol 테스트"""

    def test_in_memory_implements_protocol(self) -> None:
        assert isinstance(InMemoryJournalStore(), IJournalStore)

    def test_sqlite_implements_protocol(self, tmp_path: Path) -> None:
        assert isinstance(JournalStore(SQLiteAdapter(tmp_path / "x.db")), IJournalStore)

    def test_no_mutation_methods(self) -> None:
        """append-only: 수정/삭제 연산 없음"""
        for store in (InMemoryJournalStore(), JournalStore(SQLiteAdapter(":memory:"))):
            assert not hasattr(store, "update")
            assert not hasattr(store, "delete")
