"""
유틸리티 패키지

멱등성 키 관리, 타임존 처리 등 공통 유틸리티
"""

from core.utils.idempotency import (
    make_posting_key,
    parse_posting_key,
    validate_idempotency_key,
)
from core.utils.timezone import (
    now_utc,
    parse_iso,
    ensure_utc,
    to_timestamp_ms,
)

__all__ = [
    "make_posting_key",
    "parse_posting_key",
    "validate_idempotency_key",
    "now_utc",
    "parse_iso",
    "ensure_utc",
    "to_timestamp_ms",
]
