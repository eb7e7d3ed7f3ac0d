# fabtrack/utils/dates.py

import math
from datetime import datetime, timedelta, UTC
from typing import Optional, Union

Timestamp = Union[str, datetime, None]

DAY = timedelta(days=1)


def parse_timestamp(value: Timestamp) -> Optional[datetime]:
    """
    ISO 8601 문자열 또는 datetime을 UTC 기준 aware datetime으로 변환합니다.
    값이 없거나 해석할 수 없으면 None을 반환합니다.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None
    # 시간대 정보가 없는 값은 UTC로 간주합니다.
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(UTC)
    return now if now.tzinfo else now.replace(tzinfo=UTC)


def days_ago_label(value: Timestamp, now: Optional[datetime] = None) -> str:
    """
    경과 일수(내림한 정수)를 "Today" / "1 day ago" / "N days ago" 로 표시합니다.
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        return "Unknown"
    days = (_now(now) - parsed) // DAY
    if days <= 0:
        return "Today"
    if days == 1:
        return "1 day ago"
    return f"{days} days ago"


def timeline_label(value: Timestamp, now: Optional[datetime] = None) -> str:
    """
    최근 업데이트 목록용 상대 시간 표시 (일 / 주 / 개월 단위, 올림).
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        return "Unknown"
    days = math.ceil(abs((_now(now) - parsed) / DAY))
    if days == 0:
        return "Today"
    if days == 1:
        return "1 day ago"
    if days < 7:
        return f"{days} days ago"
    if days < 30:
        return f"{math.ceil(days / 7)} weeks ago"
    return f"{math.ceil(days / 30)} months ago"


def format_display_date(value: Timestamp, with_time: bool = False, fallback: str = "—") -> str:
    """표시용 날짜 문자열 (예: 'Jan 05, 2025' / 'Jan 05, 2025, 03:04 PM')."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return fallback
    if with_time:
        return parsed.strftime("%b %d, %Y, %I:%M %p")
    return parsed.strftime("%b %d, %Y")
