"""
Idempotency 유틸리티

전기(posting) 멱등성 키 생성 및 파싱 기능 제공
규칙: {kind}:{doc_id}

같은 업무 문서(송장, 입금, 작업지시 등)를 두 번 전기하지 않도록
호출자가 생성한 키를 분개와 함께 저장하고 재제출을 거부.
"""

import re

# 키 구분자
KEY_SEPARATOR: str = ":"

# kind 허용 형식 (소문자, 숫자, 하이픈)
_KIND_PATTERN = re.compile(r"^[a-z][a-z0-9-]*$")

# 멱등성 키 최대 길이
MAX_KEY_LENGTH: int = 200


def make_posting_key(kind: str, doc_id: str) -> str:
    """결정적 전기 멱등성 키 생성

    Args:
        kind: 문서 종류 (invoice, payment, work-order-complete 등)
        doc_id: 업무 문서 ID

    Returns:
        {kind}:{doc_id} 형식의 키

    Example:
        >>> make_posting_key("invoice", "INV-1700000000000")
        'invoice:INV-1700000000000'
    """
    if not kind:
        raise ValueError("kind는 비어 있을 수 없습니다")
    if not _KIND_PATTERN.match(kind):
        raise ValueError(f"kind 형식이 올바르지 않습니다: {kind}")
    if not doc_id:
        raise ValueError("doc_id는 비어 있을 수 없습니다")

    key = f"{kind}{KEY_SEPARATOR}{doc_id}"
    if len(key) > MAX_KEY_LENGTH:
        raise ValueError(f"멱등성 키가 너무 깁니다 ({len(key)} > {MAX_KEY_LENGTH})")
    return key


def parse_posting_key(key: str) -> tuple[str, str] | None:
    """멱등성 키에서 (kind, doc_id) 추출

    Args:
        key: {kind}:{doc_id} 형식의 문자열

    Returns:
        (kind, doc_id) 또는 None (형식 불일치 시)

    Example:
        >>> parse_posting_key("payment:PAY-1")
        ('payment', 'PAY-1')
        >>> parse_posting_key("no-separator")
        None
    """
    if not key or KEY_SEPARATOR not in key:
        return None

    kind, doc_id = key.split(KEY_SEPARATOR, 1)
    if not _KIND_PATTERN.match(kind) or not doc_id:
        return None
    return kind, doc_id


def validate_idempotency_key(key: str) -> bool:
    """외부에서 전달된 멱등성 키 유효성 검사

    호출자가 직접 만든 임의 토큰도 허용하되 공백만 있거나 너무 긴 키는 거부.

    Args:
        key: 검증할 키

    Returns:
        True: 사용 가능한 키
        False: 사용할 수 없는 키
    """
    if not key or not key.strip():
        return False
    return len(key) <= MAX_KEY_LENGTH
