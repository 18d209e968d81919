"""JournalLine / JournalEntry / JournalEntryBuilder 테스트"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from core.ledger.entry_builder import (
    JournalEntry,
    JournalEntryBuilder,
    JournalLine,
    MaterialUsage,
    PostingDraft,
    compute_work_order_cost,
    to_amount,
)
from core.ledger.errors import InvalidEntryError, InvalidJournalLineError
from core.ledger.types import AccountType, JournalSide
from core.ledger.validator import LedgerValidator

FIXED_NOW = datetime(2026, 10, 18, 9, 0, 0, tzinfo=timezone.utc)
FIXED_MS = int(FIXED_NOW.timestamp() * 1000)


@pytest.fixture
def builder() -> JournalEntryBuilder:
    return JournalEntryBuilder(clock=lambda: FIXED_NOW)


def assert_balanced(draft: PostingDraft) -> None:
    assert LedgerValidator().validate(draft.lines).ok


class TestToAmount:
    """to_amount 함수 테스트"""

    def test_none_is_zero(self) -> None:
        assert to_amount(None) == Decimal("0")

    def test_float_goes_through_str(self) -> None:
        """float 이진 표현 오차 없이 변환"""
        assert to_amount(0.1) == Decimal("0.1")

    def test_string(self) -> None:
        assert to_amount("499.50") == Decimal("499.50")

    @pytest.mark.parametrize("value", ["abc", "NaN", "Infinity"])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(InvalidJournalLineError):
            to_amount(value)


class TestJournalLine:
    """JournalLine 테스트"""

    def test_debit_line(self) -> None:
        line = JournalLine.debit_line("CASH", "1000", "sale")

        assert line.side == JournalSide.DEBIT
        assert line.debit == Decimal("1000")
        assert line.credit == Decimal("0")

    def test_credit_line(self) -> None:
        line = JournalLine.credit_line("REVENUE", 1000)

        assert line.side == JournalSide.CREDIT
        assert line.credit == Decimal("1000")
        assert line.debit == Decimal("0")

    def test_side_string_is_coerced(self) -> None:
        line = JournalLine("CASH", "debit", Decimal("5"))

        assert line.side is JournalSide.DEBIT

    def test_invalid_side(self) -> None:
        with pytest.raises(InvalidJournalLineError):
            JournalLine("CASH", "both", Decimal("5"))

    @pytest.mark.parametrize("amount", ["0", "-1"])
    def test_non_positive_amount(self, amount: str) -> None:
        with pytest.raises(InvalidJournalLineError):
            JournalLine("CASH", JournalSide.DEBIT, Decimal(amount))

    def test_empty_account_id(self) -> None:
        with pytest.raises(InvalidJournalLineError):
            JournalLine("", JournalSide.DEBIT, Decimal("1"))

    def test_immutable(self) -> None:
        line = JournalLine.debit_line("CASH", 1)

        with pytest.raises(AttributeError):
            line.amount = Decimal("2")  # type: ignore

    def test_to_dict_wire_shape(self) -> None:
        line = JournalLine.credit_line("CASH", "499", "refund")

        assert line.to_dict() == {
            "account_id": "CASH",
            "debit": Decimal("0"),
            "credit": Decimal("499"),
            "description": "refund",
        }


class TestJournalLineFromAmounts:
    """debit/credit 쌍 → JournalLine 변환 테스트"""

    def test_debit_only(self) -> None:
        line = JournalLine.from_amounts("GENERAL_EXPENSES", debit=500, credit=0)

        assert line.side == JournalSide.DEBIT
        assert line.amount == Decimal("500")

    def test_credit_only_with_none_debit(self) -> None:
        line = JournalLine.from_amounts("CASH", debit=None, credit="499")

        assert line.side == JournalSide.CREDIT
        assert line.amount == Decimal("499")

    def test_both_sides_rejected(self) -> None:
        with pytest.raises(InvalidJournalLineError) as exc_info:
            JournalLine.from_amounts("CASH", debit=10, credit=10)

        assert "not both" in str(exc_info.value)

    def test_both_zero_rejected(self) -> None:
        with pytest.raises(InvalidJournalLineError):
            JournalLine.from_amounts("CASH", debit=0, credit=0)

    def test_negative_rejected(self) -> None:
        with pytest.raises(InvalidJournalLineError):
            JournalLine.from_amounts("CASH", debit=-5)

    def test_description_defaults_to_empty(self) -> None:
        assert JournalLine.from_amounts("CASH", debit=1).description == ""


class TestJournalEntry:
    """JournalEntry 테스트"""

    @pytest.fixture
    def entry(self) -> JournalEntry:
        return JournalEntry(
            entry_id="je-1",
            date=FIXED_NOW,
            created_at=FIXED_NOW,
            lines=(
                JournalLine.debit_line("CASH", "600"),
                JournalLine.debit_line("CASH", "400"),
                JournalLine.credit_line("REVENUE", "1000"),
            ),
            linked_doc="INV-1",
        )

    def test_totals(self, entry: JournalEntry) -> None:
        assert entry.total_debit == Decimal("1000")
        assert entry.total_credit == Decimal("1000")

    def test_account_ids_distinct_in_order(self, entry: JournalEntry) -> None:
        assert entry.account_ids == ["CASH", "REVENUE"]

    def test_to_dict(self, entry: JournalEntry) -> None:
        data = entry.to_dict()

        assert data["id"] == "je-1"
        assert data["linked_doc"] == "INV-1"
        assert len(data["entries"]) == 3
        assert data["created_at"] == FIXED_NOW.isoformat()


class TestWorkOrderCost:
    """작업지시 원가 계산 테스트"""

    def test_materials_plus_overhead(self) -> None:
        materials = [
            MaterialUsage(qty=Decimal("2"), unit_cost=Decimal("12.50")),
            MaterialUsage(qty=Decimal("3"), unit_cost=Decimal("5"), item_id="THREAD"),
        ]

        assert compute_work_order_cost(materials, "10") == Decimal("50.00")

    def test_no_materials(self) -> None:
        assert compute_work_order_cost([], 0) == Decimal("0")


class TestJournalEntryBuilder:
    """업무 문서 → 분개 초안 테스트"""

    def test_expense_cash(self, builder: JournalEntryBuilder) -> None:
        draft = builder.expense(500, "GENERAL_EXPENSES", "cash")

        assert_balanced(draft)
        assert draft.lines[0].account_id == "GENERAL_EXPENSES"
        assert draft.lines[0].side == JournalSide.DEBIT
        assert draft.lines[1].account_id == "CASH"
        assert draft.linked_doc == f"EXPENSE_{FIXED_MS}"
        assert draft.description == "Business expense - 500"
        assert draft.idempotency_key is None

    def test_expense_on_credit(self, builder: JournalEntryBuilder) -> None:
        """현금 외 결제는 ACCOUNTS_PAYABLE"""
        draft = builder.expense(120, "OPERATING_EXPENSES", "card", "Software")

        assert draft.lines[1].account_id == "ACCOUNTS_PAYABLE"
        assert draft.lines[1].description == "Payment for Software"

    def test_expense_requires_account(self, builder: JournalEntryBuilder) -> None:
        with pytest.raises(InvalidJournalLineError) as exc_info:
            builder.expense(10, "")

        assert str(exc_info.value) == "Expense account is required"

    @pytest.mark.parametrize("amount", [0, -10, None])
    def test_expense_rejects_non_positive(
        self, builder: JournalEntryBuilder, amount: int | None
    ) -> None:
        with pytest.raises(InvalidJournalLineError) as exc_info:
            builder.expense(amount, "GENERAL_EXPENSES")

        assert str(exc_info.value) == "Valid expense amount is required"

    def test_loan_long_term(self, builder: JournalEntryBuilder) -> None:
        draft = builder.loan(5000, "First Bank", "long-term")

        assert_balanced(draft)
        assert draft.lines[0].account_id == "CASH"
        assert draft.lines[1].account_id == "LONG_TERM_DEBT"
        assert draft.lines[1].side == JournalSide.CREDIT
        assert draft.linked_doc == f"LOAN_{FIXED_MS}_First_Bank"

    def test_loan_default_short_term(self, builder: JournalEntryBuilder) -> None:
        draft = builder.loan("2000")

        assert draft.lines[1].account_id == "SHORT_TERM_DEBT"
        assert draft.linked_doc == f"LOAN_{FIXED_MS}_LENDER"

    def test_invoice(self, builder: JournalEntryBuilder) -> None:
        draft = builder.invoice("INV-42", "1250.75")

        assert_balanced(draft)
        assert [line.account_id for line in draft.lines] == ["AR", "REVENUE"]
        assert draft.linked_doc == "INV-42"
        assert draft.idempotency_key == "invoice:INV-42"

    def test_overlong_document_id_rejected(self, builder: JournalEntryBuilder) -> None:
        with pytest.raises(InvalidEntryError, match="invoice"):
            builder.invoice("INV-" + "9" * 300, "10")

        with pytest.raises(InvalidEntryError):
            builder.work_order_completion("WO-" + "1" * 300, "10")

    def test_payment(self, builder: JournalEntryBuilder) -> None:
        draft = builder.payment("PAY-7", 300)

        assert_balanced(draft)
        assert [line.account_id for line in draft.lines] == ["CASH", "AR"]
        assert draft.idempotency_key == "payment:PAY-7"

    def test_sales_return(self, builder: JournalEntryBuilder) -> None:
        draft = builder.sales_return("RET-1", 80)

        assert_balanced(draft)
        assert [line.account_id for line in draft.lines] == ["RETURNS", "AR"]
        assert draft.linked_doc == f"CM-{FIXED_MS}"
        assert draft.idempotency_key == "return:RET-1"

    def test_material_issue(self, builder: JournalEntryBuilder) -> None:
        draft = builder.material_issue("WO-9", "42.50", design_id="D-3")

        assert_balanced(draft)
        assert draft.lines[0].account_id == "INVENTORY_WIP"
        assert draft.lines[1].account_id == "INVENTORY_RAW"
        assert "Design D-3" in draft.description
        assert draft.idempotency_key == "material-issue:WO-9"

    def test_work_order_completion(self, builder: JournalEntryBuilder) -> None:
        draft = builder.work_order_completion("WO-9", 60)

        assert_balanced(draft)
        assert draft.lines[0].account_id == "INVENTORY_FG"
        assert draft.lines[1].account_id == "INVENTORY_WIP"
        assert draft.idempotency_key == "work-order-complete:WO-9"

    def test_opening_balance_asset(self, builder: JournalEntryBuilder) -> None:
        draft = builder.opening_balance("CASH", AccountType.ASSET, 10000)

        assert_balanced(draft)
        assert draft.lines[0].side == JournalSide.DEBIT
        assert draft.lines[1].account_id == "OPENING_BALANCE_EQUITY"
        assert draft.lines[1].side == JournalSide.CREDIT
        assert draft.linked_doc == "OPENING_CASH"
        assert draft.idempotency_key == "opening:CASH"

    def test_opening_balance_liability(self, builder: JournalEntryBuilder) -> None:
        """부채는 대변에 기초 잔액"""
        draft = builder.opening_balance("LONG_TERM_DEBT", "liability", 3000)

        assert draft.lines[0].side == JournalSide.CREDIT
        assert draft.lines[1].side == JournalSide.DEBIT

    def test_opening_balance_rejects_offset_account(
        self, builder: JournalEntryBuilder
    ) -> None:
        with pytest.raises(InvalidJournalLineError):
            builder.opening_balance("OPENING_BALANCE_EQUITY", "equity", 1)

    def test_balance_adjustment_increase(self, builder: JournalEntryBuilder) -> None:
        draft = builder.balance_adjustment("CASH", "asset", "100", "150")

        assert_balanced(draft)
        assert draft.lines[0].side == JournalSide.DEBIT
        assert draft.lines[0].amount == Decimal("50")
        assert draft.lines[1].account_id == "BALANCE_ADJUSTMENTS"
        assert draft.linked_doc == f"ADJUST_CASH_{FIXED_MS}"

    def test_balance_adjustment_decrease_liability(
        self, builder: JournalEntryBuilder
    ) -> None:
        """부채 감소는 차변"""
        draft = builder.balance_adjustment("ACCOUNTS_PAYABLE", "liability", 500, 200)

        assert draft.lines[0].side == JournalSide.DEBIT
        assert draft.lines[0].amount == Decimal("300")
        assert draft.lines[1].side == JournalSide.CREDIT

    def test_balance_adjustment_no_difference(self, builder: JournalEntryBuilder) -> None:
        with pytest.raises(InvalidJournalLineError) as exc_info:
            builder.balance_adjustment("CASH", "asset", "100.00", "100")

        assert "already 100" in str(exc_info.value)

    def test_as_post_kwargs(self, builder: JournalEntryBuilder) -> None:
        kwargs = builder.invoice("INV-1", 10).as_post_kwargs()

        assert set(kwargs) == {"lines", "linked_doc", "description", "idempotency_key"}
        assert isinstance(kwargs["lines"], list)
