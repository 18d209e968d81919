"""
Ledger 예외 정의

검증 오류(InvalidEntryError 계열)는 어떤 쓰기도 일어나기 전에 발생.
StorageFailureError는 저장소 I/O 실패를 감싸서 상위로 전파.
"""

from decimal import Decimal
from typing import Iterable


class LedgerError(Exception):
    """Ledger 예외 최상위 클래스"""

    pass


# =====================================
# 분개 검증 오류 (쓰기 전 거부)
# =====================================


class InvalidEntryError(LedgerError):
    """분개 검증 실패"""

    pass


class UnbalancedEntryError(InvalidEntryError):
    """차변 합계와 대변 합계 불일치

    Attributes:
        total_debit: 차변 합계
        total_credit: 대변 합계
    """

    def __init__(self, total_debit: Decimal, total_credit: Decimal):
        self.total_debit = total_debit
        self.total_credit = total_credit
        super().__init__(
            f"Debits ({format_amount(total_debit)}) do not equal "
            f"Credits ({format_amount(total_credit)})"
        )


class InvalidJournalLineError(InvalidEntryError):
    """분개 항목 형식 오류 (음수, 차변/대변 동시 기재 등)"""

    pass


class EmptyEntryError(InvalidEntryError):
    """분개 항목이 없음"""

    def __init__(self) -> None:
        super().__init__("Journal entries array is required")


# =====================================
# 계정 오류
# =====================================


class AccountNotFoundError(LedgerError):
    """계정과목에 없는 계정 참조

    Attributes:
        account_ids: 찾을 수 없는 계정 ID 목록
    """

    def __init__(self, account_ids: str | Iterable[str]):
        if isinstance(account_ids, str):
            account_ids = [account_ids]
        self.account_ids: list[str] = list(account_ids)
        super().__init__(f"Account not found: {', '.join(self.account_ids)}")


class DuplicateAccountError(LedgerError):
    """이미 존재하는 계정 ID로 생성 시도"""

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account already exists: {account_id}")


class InvalidAccountTypeError(LedgerError):
    """지원하지 않는 계정 유형"""

    def __init__(self, account_type: object):
        self.account_type = account_type
        super().__init__(
            f"Invalid account type: {account_type!r}. "
            "Valid types: asset, liability, equity, revenue, expense"
        )


# =====================================
# 저장소 / 멱등성 오류
# =====================================


class StorageFailureError(LedgerError):
    """저장소 I/O 실패 (append/scan/update)"""

    pass


class DuplicatePostingError(LedgerError):
    """이미 사용된 멱등성 키로 재전기 시도

    Attributes:
        idempotency_key: 중복된 키
        entry_id: 기존 분개 ID (알 수 있는 경우)
    """

    def __init__(self, idempotency_key: str, entry_id: str | None = None):
        self.idempotency_key = idempotency_key
        self.entry_id = entry_id
        message = f"Posting already recorded for idempotency key: {idempotency_key}"
        if entry_id:
            message += f" (entry {entry_id})"
        super().__init__(message)


def format_amount(value: Decimal) -> str:
    """금액을 지수 표기 없이 불필요한 0을 제거한 문자열로 변환

    Example:
        >>> format_amount(Decimal("500.00"))
        '500'
        >>> format_amount(Decimal("499.50"))
        '499.5'
    """
    if value == 0:
        return "0"
    return format(value.normalize(), "f")
