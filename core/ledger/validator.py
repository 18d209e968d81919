"""
분개 검증기

전기 전에 분개 항목 집합의 차변/대변 균형만 검사.
계정 존재 여부와 항목별 차변/대변 배타성은 검사하지 않음 (호출자 책임).
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from core.constants import Defaults
from core.ledger.entry_builder import JournalLine
from core.ledger.errors import EmptyEntryError, UnbalancedEntryError


@dataclass(frozen=True)
class ValidationResult:
    """검증 결과"""

    ok: bool
    total_debit: Decimal
    total_credit: Decimal
    error: str | None = None


class LedgerValidator:
    """차변/대변 균형 검증기 (상태 없음)

    허용 오차는 통화 단위 절대값. 부동소수점 반올림을 흡수하기 위한 값이며
    업무 규칙이 아님.

    Args:
        tolerance: 허용 오차 (기본 0.01)
    """

    def __init__(self, tolerance: Decimal = Defaults.BALANCE_TOLERANCE):
        self.tolerance = Decimal(tolerance)

    def validate(self, lines: Iterable[JournalLine]) -> ValidationResult:
        """균형 검사

        Returns:
            ok=True 이거나, ok=False와 "Debits (X) do not equal Credits (Y)" 오류
        """
        total_debit = Decimal("0")
        total_credit = Decimal("0")
        for line in lines:
            total_debit += line.debit
            total_credit += line.credit

        if abs(total_debit - total_credit) > self.tolerance:
            return ValidationResult(
                ok=False,
                total_debit=total_debit,
                total_credit=total_credit,
                error=str(UnbalancedEntryError(total_debit, total_credit)),
            )

        return ValidationResult(ok=True, total_debit=total_debit, total_credit=total_credit)

    def check(self, lines: Iterable[JournalLine]) -> ValidationResult:
        """균형 검사 (실패 시 예외)

        Raises:
            EmptyEntryError: 항목이 없는 경우
            UnbalancedEntryError: 차변 합계 ≠ 대변 합계
        """
        lines = list(lines)
        if not lines:
            raise EmptyEntryError()

        result = self.validate(lines)
        if not result.ok:
            raise UnbalancedEntryError(result.total_debit, result.total_credit)
        return result
