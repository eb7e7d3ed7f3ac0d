# fabtrack/utils/export.py

from datetime import date, datetime, UTC
from typing import Any, Mapping, Optional, Sequence

from fastapi import Response


def _cell(value: Any) -> str:
    # 값이 없거나 None인 칸은 "null"/"undefined" 문자열 대신 빈 칸으로 씁니다.
    return "" if value is None else str(value)


def to_csv(rows: Sequence[Mapping[str, Any]]) -> str:
    """
    평평한(flat) 레코드 목록을 CSV 문자열로 변환합니다.

    - 헤더는 첫 번째 레코드의 키 순서를 따릅니다.
    - 모든 셀을 큰따옴표로 감싸며, 셀 안의 따옴표는 이스케이프하지 않습니다.
    - 빈 목록이면 빈 문자열을 반환합니다.
    """
    if not rows:
        return ""
    headers = list(rows[0].keys())
    lines = [",".join(headers)]
    for row in rows:
        lines.append(",".join(f'"{_cell(row.get(header))}"' for header in headers))
    return "\n".join(lines)


def export_filename(base: str, today: Optional[date] = None) -> str:
    """내보내기 파일명: <base>_<YYYY-MM-DD>.csv"""
    today = today or datetime.now(UTC).date()
    return f"{base}_{today.isoformat()}.csv"


def csv_response(rows: Sequence[Mapping[str, Any]], base: str, today: Optional[date] = None) -> Response:
    """
    CSV 다운로드 응답을 생성합니다. (메모리 버퍼 전체를 한 번에 전송)
    """
    filename = export_filename(base, today)
    return Response(
        content=to_csv(rows),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
