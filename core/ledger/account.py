"""
계정 모델

계정과목(chart of accounts)의 한 항목.
balance는 원장에서 언제든 재계산 가능한 캐시 값.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Any

from core.ledger.errors import InvalidAccountTypeError
from core.ledger.types import AccountType


def parse_account_type(value: AccountType | str) -> AccountType:
    """계정 유형 문자열을 AccountType으로 변환

    Raises:
        InvalidAccountTypeError: 5대 계정 유형이 아닌 경우
    """
    if isinstance(value, AccountType):
        return value
    try:
        return AccountType(str(value).lower())
    except ValueError as e:
        raise InvalidAccountTypeError(value) from e


@dataclass(frozen=True)
class Account:
    """계정

    account_id와 account_type은 생성 후 변경 불가.
    balance/last_updated는 BalanceSynchronizer만 갱신.
    """

    account_id: str
    name: str
    account_type: AccountType
    balance: Decimal = Decimal("0")
    parent_id: str | None = None
    last_updated: datetime | None = None
    description: str | None = None

    @classmethod
    def new(
        cls,
        account_id: str,
        name: str,
        account_type: AccountType | str,
        parent_id: str | None = None,
        description: str | None = None,
    ) -> Account:
        """새 계정 생성 (잔액 0)

        Raises:
            InvalidAccountTypeError: 지원하지 않는 계정 유형
            ValueError: account_id가 비어 있는 경우
        """
        if not account_id or not account_id.strip():
            raise ValueError("account_id는 비어 있을 수 없습니다")
        return cls(
            account_id=account_id,
            name=name or account_id,
            account_type=parse_account_type(account_type),
            parent_id=parent_id,
            description=description,
        )

    def with_balance(self, balance: Decimal, ts: datetime) -> Account:
        return replace(self, balance=balance, last_updated=ts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.account_id,
            "name": self.name,
            "type": self.account_type.value,
            "balance": self.balance,
            "parent_id": self.parent_id,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
        }
