"""
복식부기 타입 정의

AccountType, JournalSide 등 Ledger 시스템에서 사용하는 Enum과
계정 유형별 부호 규칙(sign convention) 정의
"""

from decimal import Decimal
from enum import Enum


class AccountType(str, Enum):
    """계정 유형
    
    복식부기의 5대 계정 유형.
    생성 시 고정되며 잔액 계산의 부호 규칙을 결정.
    """
    
    ASSET = "asset"  # 자산 (현금, 매출채권, 재고)
    LIABILITY = "liability"  # 부채 (매입채무, 차입금)
    EQUITY = "equity"  # 자본 (이익잉여금, 기초자본)
    REVENUE = "revenue"  # 수익 (매출)
    EXPENSE = "expense"  # 비용 (매출원가, 일반관리비)


class JournalSide(str, Enum):
    """분개 방향 (차변/대변)"""
    
    DEBIT = "debit"  # 차변 (자산/비용 증가)
    CREDIT = "credit"  # 대변 (부채/자본/수익 증가)


# 계정 유형별 정상 잔액 방향
# asset, expense: +debit -credit
# liability, equity, revenue: +credit -debit
NORMAL_SIDE: dict[AccountType, JournalSide] = {
    AccountType.ASSET: JournalSide.DEBIT,
    AccountType.EXPENSE: JournalSide.DEBIT,
    AccountType.LIABILITY: JournalSide.CREDIT,
    AccountType.EQUITY: JournalSide.CREDIT,
    AccountType.REVENUE: JournalSide.CREDIT,
}


def normal_side(account_type: AccountType) -> JournalSide:
    """계정 유형의 정상 잔액 방향 (증가 방향)"""
    return NORMAL_SIDE[AccountType(account_type)]


def opposite_side(side: JournalSide) -> JournalSide:
    """반대 방향"""
    return JournalSide.CREDIT if side == JournalSide.DEBIT else JournalSide.DEBIT


def signed_amount(
    account_type: AccountType,
    debit: Decimal,
    credit: Decimal,
) -> Decimal:
    """분개 항목 하나가 계정 잔액에 기여하는 값
    
    Args:
        account_type: 계정 유형
        debit: 차변 금액
        credit: 대변 금액
        
    Returns:
        부호 규칙을 적용한 잔액 변화량
    """
    if normal_side(account_type) == JournalSide.DEBIT:
        return debit - credit
    return credit - debit


# 기본 계정과목 (계정과목 초기화에서 사용)
DEFAULT_CHART_OF_ACCOUNTS: list[tuple[str, str, str]] = [
    # (account_id, account_type, name)
    
    # 자산
    ("CASH", "asset", "Cash"),
    ("AR", "asset", "Accounts Receivable"),
    ("INVENTORY_RAW", "asset", "Raw Materials Inventory"),
    ("INVENTORY_WIP", "asset", "Work in Progress"),
    ("INVENTORY_FG", "asset", "Finished Goods Inventory"),
    ("EQUIPMENT", "asset", "Equipment"),
    ("ACCUMULATED_DEPRECIATION", "asset", "Accumulated Depreciation"),
    ("BUILDING", "asset", "Building"),
    
    # 부채
    ("ACCOUNTS_PAYABLE", "liability", "Accounts Payable"),
    ("ACCRUED_EXPENSES", "liability", "Accrued Expenses"),
    ("SHORT_TERM_DEBT", "liability", "Short-term Debt"),
    ("LONG_TERM_DEBT", "liability", "Long-term Debt"),
    ("VAT_PAYABLE", "liability", "VAT Payable"),
    ("WAGES_PAYABLE", "liability", "Wages Payable"),
    
    # 자본
    ("RETAINED_EARNINGS", "equity", "Retained Earnings"),
    ("OPENING_BALANCE_EQUITY", "equity", "Opening Balance Equity"),
    ("BALANCE_ADJUSTMENTS", "equity", "Balance Adjustments"),  # 잔액 조정 상대 계정
    
    # 수익
    ("REVENUE", "revenue", "Sales Revenue"),
    
    # 비용
    ("COGS", "expense", "Cost of Goods Sold"),
    ("RETURNS", "expense", "Returns and Allowances"),
    ("INVENTORY_ADJUSTMENT", "expense", "Inventory Adjustment"),
    ("GENERAL_EXPENSES", "expense", "General Expenses"),
    ("OPERATING_EXPENSES", "expense", "Operating Expenses"),
]
