"""
분개 생성기

업무 문서(비용, 차입, 송장, 입금, 자재 출고, 작업지시 완료, 반품)를
균형 잡힌 복식부기 분개 초안으로 변환
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable

from core.ledger.errors import InvalidEntryError, InvalidJournalLineError, format_amount
from core.ledger.types import (
    AccountType,
    JournalSide,
    normal_side,
    opposite_side,
)
from core.utils.idempotency import make_posting_key
from core.utils.timezone import now_utc, to_timestamp_ms

logger = logging.getLogger(__name__)


def to_amount(value: Any, label: str = "amount") -> Decimal:
    """입력값을 Decimal 금액으로 변환

    float는 문자열을 거쳐 변환하여 이진 표현 오차를 피함.
    None은 0으로 취급.

    Raises:
        InvalidJournalLineError: 숫자로 변환할 수 없는 경우
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except InvalidOperation as e:
            raise InvalidJournalLineError(f"Invalid {label}: {value!r}") from e
    if not amount.is_finite():
        raise InvalidJournalLineError(f"Invalid {label}: {value!r}")
    return amount


@dataclass(frozen=True)
class JournalLine:
    """분개 항목

    차변 또는 대변 중 정확히 한쪽에만 양수 금액을 가짐.
    외부 입력(debit/credit 쌍)은 from_amounts()로 생성.

    예: 비용 500 현금 지급
        - JournalLine("GENERAL_EXPENSES", DEBIT, 500)
        - JournalLine("CASH", CREDIT, 500)
    """

    account_id: str
    side: JournalSide
    amount: Decimal
    description: str = ""

    def __post_init__(self) -> None:
        if not self.account_id:
            raise InvalidJournalLineError("account_id is required")
        try:
            object.__setattr__(self, "side", JournalSide(self.side))
        except ValueError as e:
            raise InvalidJournalLineError(f"Invalid side: {self.side!r}") from e
        amount = to_amount(self.amount)
        if amount <= 0:
            raise InvalidJournalLineError(
                f"Line amount must be positive: {self.account_id} {format_amount(amount)}"
            )
        object.__setattr__(self, "amount", amount)

    @classmethod
    def from_amounts(
        cls,
        account_id: str,
        debit: Any = 0,
        credit: Any = 0,
        description: str | None = None,
    ) -> JournalLine:
        """debit/credit 쌍에서 분개 항목 생성

        Args:
            account_id: 계정 ID
            debit: 차변 금액 (0 이상)
            credit: 대변 금액 (0 이상)
            description: 적요

        Raises:
            InvalidJournalLineError: 음수이거나, 양쪽 모두 0 또는 양쪽 모두 0이 아닌 경우
        """
        debit_amount = to_amount(debit, "debit")
        credit_amount = to_amount(credit, "credit")

        if debit_amount < 0 or credit_amount < 0:
            raise InvalidJournalLineError(
                f"Debit and credit must not be negative: {account_id}"
            )
        if debit_amount > 0 and credit_amount > 0:
            raise InvalidJournalLineError(
                f"Line must have either a debit or a credit, not both: {account_id}"
            )
        if debit_amount == 0 and credit_amount == 0:
            raise InvalidJournalLineError(
                f"Line must have a non-zero debit or credit: {account_id}"
            )

        if debit_amount > 0:
            return cls(account_id, JournalSide.DEBIT, debit_amount, description or "")
        return cls(account_id, JournalSide.CREDIT, credit_amount, description or "")

    @classmethod
    def debit_line(cls, account_id: str, amount: Any, description: str = "") -> JournalLine:
        """차변 항목 생성"""
        return cls(account_id, JournalSide.DEBIT, to_amount(amount), description)

    @classmethod
    def credit_line(cls, account_id: str, amount: Any, description: str = "") -> JournalLine:
        """대변 항목 생성"""
        return cls(account_id, JournalSide.CREDIT, to_amount(amount), description)

    @property
    def debit(self) -> Decimal:
        return self.amount if self.side == JournalSide.DEBIT else Decimal("0")

    @property
    def credit(self) -> Decimal:
        return self.amount if self.side == JournalSide.CREDIT else Decimal("0")

    def to_dict(self) -> dict[str, Any]:
        return {
            "account_id": self.account_id,
            "debit": self.debit,
            "credit": self.credit,
            "description": self.description,
        }


@dataclass(frozen=True)
class JournalEntry:
    """분개

    하나의 거래에 대한 복식부기 기록. 저장 후 변경 불가.
    차변 합계 = 대변 합계 (균형, 생성 시점에 검증)
    """

    entry_id: str
    date: datetime
    created_at: datetime
    lines: tuple[JournalLine, ...]
    linked_doc: str | None = None
    description: str | None = None
    idempotency_key: str | None = None

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit for line in self.lines), Decimal("0"))

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit for line in self.lines), Decimal("0"))

    @property
    def account_ids(self) -> list[str]:
        """분개에 포함된 계정 ID (중복 제거, 순서 유지)"""
        return list(dict.fromkeys(line.account_id for line in self.lines))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.entry_id,
            "date": self.date.isoformat(),
            "entries": [line.to_dict() for line in self.lines],
            "linked_doc": self.linked_doc,
            "description": self.description,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class PostingDraft:
    """전기 전 분개 초안

    PostingOrchestrator.post()에 그대로 전달할 수 있는 형태.
    """

    lines: tuple[JournalLine, ...]
    linked_doc: str
    description: str | None = None
    idempotency_key: str | None = None

    def as_post_kwargs(self) -> dict[str, Any]:
        return {
            "lines": list(self.lines),
            "linked_doc": self.linked_doc,
            "description": self.description,
            "idempotency_key": self.idempotency_key,
        }


@dataclass(frozen=True)
class MaterialUsage:
    """작업지시에 투입된 자재 (원가 계산용)"""

    qty: Decimal
    unit_cost: Decimal
    item_id: str | None = None

    @property
    def total_cost(self) -> Decimal:
        return self.qty * self.unit_cost


def compute_work_order_cost(
    materials: Iterable[MaterialUsage],
    overhead_cost: Any = 0,
) -> Decimal:
    """작업지시 원가 = 자재 원가 합계 + 간접비"""
    total = sum((m.total_cost for m in materials), Decimal("0"))
    return total + to_amount(overhead_cost, "overhead_cost")


class JournalEntryBuilder:
    """업무 문서를 분개 초안으로 변환

    모든 메서드는 균형 잡힌 2줄 분개를 반환하며 금액이 0 이하이면 거부.
    Ledger 코어 외부의 협력자로, 결과는 PostingOrchestrator로 전기.
    """

    CASH = "CASH"
    ACCOUNTS_PAYABLE = "ACCOUNTS_PAYABLE"
    ACCOUNTS_RECEIVABLE = "AR"
    REVENUE = "REVENUE"
    SHORT_TERM_DEBT = "SHORT_TERM_DEBT"
    LONG_TERM_DEBT = "LONG_TERM_DEBT"
    INVENTORY_RAW = "INVENTORY_RAW"
    INVENTORY_WIP = "INVENTORY_WIP"
    INVENTORY_FG = "INVENTORY_FG"
    RETURNS = "RETURNS"
    OPENING_BALANCE_EQUITY = "OPENING_BALANCE_EQUITY"
    BALANCE_ADJUSTMENTS = "BALANCE_ADJUSTMENTS"

    def __init__(self, clock: Callable[[], datetime] = now_utc):
        """
        Args:
            clock: 현재 시각 함수 (linked_doc 타임스탬프용, 테스트에서 교체)
        """
        self.clock = clock

    def _now_ms(self) -> int:
        return to_timestamp_ms(self.clock())

    @staticmethod
    def _posting_key(kind: str, doc_id: str) -> str:
        try:
            return make_posting_key(kind, doc_id)
        except ValueError as e:
            raise InvalidEntryError(f"Invalid document id for {kind}: {e}") from e

    @staticmethod
    def _positive(value: Any, label: str) -> Decimal:
        amount = to_amount(value, label)
        if amount <= 0:
            raise InvalidJournalLineError(f"Valid {label} is required")
        return amount

    # =====================================
    # 비용 / 차입
    # =====================================

    def expense(
        self,
        amount: Any,
        expense_account: str,
        payment_method: str | None = None,
        description: str | None = None,
    ) -> PostingDraft:
        """비용 발생

        Debit: 비용 계정
        Credit: CASH (현금 지급) 또는 ACCOUNTS_PAYABLE (외상)
        """
        value = self._positive(amount, "expense amount")
        if not expense_account:
            raise InvalidJournalLineError("Expense account is required")

        desc = description or f"Business expense - {format_amount(value)}"
        payment_account = self.CASH if payment_method == "cash" else self.ACCOUNTS_PAYABLE

        return PostingDraft(
            lines=(
                JournalLine.debit_line(expense_account, value, desc),
                JournalLine.credit_line(payment_account, value, f"Payment for {desc}"),
            ),
            linked_doc=f"EXPENSE_{self._now_ms()}",
            description=desc,
        )

    def loan(
        self,
        amount: Any,
        lender_name: str | None = None,
        loan_type: str | None = None,
        description: str | None = None,
    ) -> PostingDraft:
        """차입금 수령

        Debit: CASH
        Credit: LONG_TERM_DEBT ("long-term") 또는 SHORT_TERM_DEBT
        """
        value = self._positive(amount, "loan amount")
        lender = lender_name or "Lender"
        desc = description or f"Loan received from {lender} - {format_amount(value)}"
        liability_account = (
            self.LONG_TERM_DEBT if loan_type == "long-term" else self.SHORT_TERM_DEBT
        )
        lender_tag = re.sub(r"\s+", "_", lender_name) if lender_name else "LENDER"

        return PostingDraft(
            lines=(
                JournalLine.debit_line(self.CASH, value, desc),
                JournalLine.credit_line(
                    liability_account, value, f"Loan payable - {format_amount(value)}"
                ),
            ),
            linked_doc=f"LOAN_{self._now_ms()}_{lender_tag}",
            description=desc,
        )

    # =====================================
    # 매출 / 입금 / 반품
    # =====================================

    def invoice(self, invoice_id: str, total_amount: Any) -> PostingDraft:
        """송장 발행 (외상 매출)

        Debit: AR
        Credit: REVENUE
        """
        value = self._positive(total_amount, "invoice amount")
        return PostingDraft(
            lines=(
                JournalLine.debit_line(self.ACCOUNTS_RECEIVABLE, value, f"Invoice {invoice_id}"),
                JournalLine.credit_line(self.REVENUE, value, f"Sales revenue {invoice_id}"),
            ),
            linked_doc=invoice_id,
            description=f"Invoice {invoice_id}",
            idempotency_key=self._posting_key("invoice", invoice_id),
        )

    def payment(self, payment_id: str, amount: Any) -> PostingDraft:
        """고객 입금 (매출채권 회수)

        Debit: CASH
        Credit: AR
        """
        value = self._positive(amount, "payment amount")
        desc = f"Payment received {payment_id}"
        return PostingDraft(
            lines=(
                JournalLine.debit_line(self.CASH, value, desc),
                JournalLine.credit_line(self.ACCOUNTS_RECEIVABLE, value, desc),
            ),
            linked_doc=payment_id,
            description=desc,
            idempotency_key=self._posting_key("payment", payment_id),
        )

    def sales_return(self, return_id: str, amount: Any) -> PostingDraft:
        """반품 (Credit Memo)

        Debit: RETURNS
        Credit: AR
        """
        value = self._positive(amount, "return amount")
        credit_memo_id = f"CM-{self._now_ms()}"
        return PostingDraft(
            lines=(
                JournalLine.debit_line(self.RETURNS, value, f"Return {return_id}"),
                JournalLine.credit_line(
                    self.ACCOUNTS_RECEIVABLE, value, f"Credit memo {credit_memo_id}"
                ),
            ),
            linked_doc=credit_memo_id,
            description=f"Return {return_id}",
            idempotency_key=self._posting_key("return", return_id),
        )

    # =====================================
    # 생산 (자재 출고 / 작업지시 완료)
    # =====================================

    def material_issue(
        self,
        work_order_id: str,
        total_cost: Any,
        design_id: str | None = None,
    ) -> PostingDraft:
        """작업지시 자재 출고 (원자재 → 재공품)

        Debit: INVENTORY_WIP
        Credit: INVENTORY_RAW
        """
        value = self._positive(total_cost, "material cost")
        wip_desc = f"Materials issued for work order {work_order_id}"
        if design_id:
            wip_desc += f" - Design {design_id}"
        return PostingDraft(
            lines=(
                JournalLine.debit_line(self.INVENTORY_WIP, value, wip_desc),
                JournalLine.credit_line(
                    self.INVENTORY_RAW,
                    value,
                    f"Raw materials issued for work order {work_order_id}",
                ),
            ),
            linked_doc=work_order_id,
            description=wip_desc,
            idempotency_key=self._posting_key("material-issue", work_order_id),
        )

    def work_order_completion(self, work_order_id: str, total_cost: Any) -> PostingDraft:
        """작업지시 완료 (재공품 → 완제품)

        Debit: INVENTORY_FG
        Credit: INVENTORY_WIP
        """
        value = self._positive(total_cost, "work order cost")
        desc = f"Completed work order {work_order_id}"
        return PostingDraft(
            lines=(
                JournalLine.debit_line(self.INVENTORY_FG, value, desc),
                JournalLine.credit_line(self.INVENTORY_WIP, value, desc),
            ),
            linked_doc=work_order_id,
            description=desc,
            idempotency_key=self._posting_key("work-order-complete", work_order_id),
        )

    # =====================================
    # 기초 잔액 / 잔액 조정
    # =====================================

    def opening_balance(
        self,
        account_id: str,
        account_type: AccountType | str,
        amount: Any,
    ) -> PostingDraft:
        """기초 잔액 설정

        대상 계정의 정상 잔액 방향으로 기록하고
        OPENING_BALANCE_EQUITY가 반대편을 받음.
        """
        value = self._positive(amount, "opening balance")
        if account_id == self.OPENING_BALANCE_EQUITY:
            raise InvalidJournalLineError(
                "Opening balance cannot be posted against its own offset account"
            )
        side = normal_side(AccountType(account_type))
        desc = f"Opening balance {account_id}"
        return PostingDraft(
            lines=(
                JournalLine(account_id, side, value, desc),
                JournalLine(self.OPENING_BALANCE_EQUITY, opposite_side(side), value, desc),
            ),
            linked_doc=f"OPENING_{account_id}",
            description=desc,
            idempotency_key=self._posting_key("opening", account_id),
        )

    def balance_adjustment(
        self,
        account_id: str,
        account_type: AccountType | str,
        current_balance: Any,
        target_balance: Any,
        description: str | None = None,
    ) -> PostingDraft:
        """잔액 조정

        캐시 잔액을 직접 덮어쓰지 않고 차이만큼 조정 분개를 기록.
        BALANCE_ADJUSTMENTS가 상대 계정.

        Raises:
            InvalidJournalLineError: 조정할 차이가 없는 경우
        """
        current = to_amount(current_balance, "current balance")
        target = to_amount(target_balance, "target balance")
        difference = target - current
        if difference == 0:
            raise InvalidJournalLineError(
                f"Balance of {account_id} is already {format_amount(target)}"
            )
        if account_id == self.BALANCE_ADJUSTMENTS:
            raise InvalidJournalLineError(
                "Balance adjustment cannot be posted against its own offset account"
            )

        increase_side = normal_side(AccountType(account_type))
        side = increase_side if difference > 0 else opposite_side(increase_side)
        desc = description or (
            f"Balance adjustment: {format_amount(current)} → {format_amount(target)}"
        )
        return PostingDraft(
            lines=(
                JournalLine(account_id, side, abs(difference), desc),
                JournalLine(self.BALANCE_ADJUSTMENTS, opposite_side(side), abs(difference), desc),
            ),
            linked_doc=f"ADJUST_{account_id}_{self._now_ms()}",
            description=desc,
        )
