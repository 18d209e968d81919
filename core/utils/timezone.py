"""
타임존 유틸리티

내부 저장: UTC ISO 8601 문자열 원칙 준수를 위한 헬퍼 함수
"""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)
    
    datetime.now(timezone.utc)의 축약형.
    
    Returns:
        현재 UTC 시간 (tzinfo=timezone.utc)
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """naive datetime은 UTC로 간주하고, aware datetime은 UTC로 변환"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso(value: str) -> datetime:
    """DB에 저장된 ISO 8601 문자열을 UTC datetime으로 변환
    
    Args:
        value: ISO 8601 문자열 (예: 2026-10-18T09:00:00+00:00)
        
    Returns:
        UTC datetime
    """
    return ensure_utc(datetime.fromisoformat(value))


def to_timestamp_ms(dt: datetime) -> int:
    """datetime을 밀리초 타임스탬프로 변환
    
    Args:
        dt: datetime 객체 (타임존 포함 권장)
        
    Returns:
        Unix 타임스탬프 (밀리초)
    """
    return int(ensure_utc(dt).timestamp() * 1000)
