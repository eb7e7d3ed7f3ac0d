# fabtrack/domains/activity/services.py

"""
활동 로그의 변경 전/후 값을 사람이 읽을 수 있는 "필드: 이전 → 이후" 형태로 변환하는 모듈입니다.

- format_value: 분류된 값(ChangeValue)을 필드 이름에 맞춰 문자열로 변환
- format_change: 한 필드의 변경을 FormattedChange로 변환 (무의미한 변경은 None)
- parse_changes: 로그 한 건의 metadata.changes / old_value·new_value 해석
"""

import math
import re
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from fabtrack.utils.dates import days_ago_label, format_display_date

from .schemas import ActivityLogEntry, ActivityLogView, FormattedChange
from .values import (
    BoolValue, ChangeValue, EmptyValue, ListValue, NumberValue, RecordValue, TextValue,
    classify_value, js_number, js_string, to_json,
)

NOT_SET = "Not set"
EMPTY_VARIANTS = frozenset({"not set", "not-set", "not assigned", "null", "undefined", ""})
JSON_PREVIEW_LIMIT = 100
TECHNICAL_SECTIONS = "technical_sections"

_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_WORD_START = re.compile(r"\b\w")


def humanize_field(field_name: str) -> str:
    """'tag_number' -> 'Tag Number'"""
    return _WORD_START.sub(lambda m: m.group(0).upper(), field_name.replace("_", " "))


def is_empty_display(text: str) -> bool:
    return text.strip().lower() in EMPTY_VARIANTS


def _is_futile(old: str, new: str) -> bool:
    if old.strip().lower() == new.strip().lower():
        return True
    return is_empty_display(old) and is_empty_display(new)


def _progress_number(value: ChangeValue) -> Optional[float]:
    if isinstance(value, NumberValue):
        number = float(value.value)
    elif isinstance(value, TextValue):
        match = _LEADING_NUMBER.match(value.value)
        if not match:
            return None
        number = float(match.group(0))
    else:
        return None
    return number if math.isfinite(number) else None


def _section_name(section: Any, fallback: Optional[str]) -> Optional[str]:
    if isinstance(section, dict):
        return section.get("name") or section.get("section_name") or fallback
    return fallback


def _format_list(items: List[Any], field: str) -> str:
    if not items:
        return "Empty"
    if "technical" in field:
        names = [_section_name(section, "Unnamed") for section in items]
        count = len(items)
        more = "..." if len(names) > 3 else ""
        return f"{count} section{'s' if count > 1 else ''} ({', '.join(names[:3])}{more})"
    if len(items) <= 3:
        return ", ".join(
            to_json(item) if item is None or isinstance(item, (dict, list, tuple)) else js_string(item)
            for item in items
        )
    return f"{len(items)} items"


def _format_record(fields: Dict[str, Any], field: str) -> str:
    if "technical" in field:
        name = _section_name(fields, None)
        if name:
            return f"Section: {name}"
    text = to_json(fields)
    if len(text) > JSON_PREVIEW_LIMIT:
        return text[:JSON_PREVIEW_LIMIT] + "..."
    return text


def format_value(value: Any, field_name: Optional[str] = None) -> str:
    """
    변경 값을 표시용 문자열로 변환합니다. 우선순위:

    1. 빈 값 -> "Not set"
    2. 필드 이름에 'progress'가 있고 유한한 숫자 -> "<n>%"
    3. 배열 -> "Empty" / 기술 섹션 요약 / 3개 이하 나열 / "<N> items"
    4. 객체 -> 단일 기술 섹션 이름 또는 100자로 자른 JSON
    5. 불리언 -> "Yes" / "No"
    6. 그 외 문자열 (공백뿐이면 "Not set")
    """
    value = classify_value(value)
    field = (field_name or "").lower()

    if isinstance(value, EmptyValue):
        return NOT_SET
    if "progress" in field:
        number = _progress_number(value)
        if number is not None:
            return f"{js_number(number)}%"
    if isinstance(value, ListValue):
        return _format_list(value.items, field)
    if isinstance(value, RecordValue):
        return _format_record(value.fields, field)
    if isinstance(value, BoolValue):
        return "Yes" if value.value else "No"
    if isinstance(value, NumberValue):
        return js_number(value.value)
    if isinstance(value, TextValue):
        return value.value if value.value.strip() else NOT_SET
    raise TypeError(f"Unsupported change value: {value!r}")


def format_change(field_name: str, old_value: Any, new_value: Any) -> Optional[FormattedChange]:
    """
    한 필드의 변경을 표시용으로 변환합니다.
    포맷 결과가 같거나 양쪽 모두 빈 값 계열이면 None(표시할 변경 없음)을 반환합니다.
    """
    old_text = format_value(old_value, field_name)
    new_text = format_value(new_value, field_name)
    if _is_futile(old_text, new_text):
        return None
    return FormattedChange(field=humanize_field(field_name), old=old_text, new=new_text)


def _section_field_changes(old_sections: List[Any], new_sections: List[Any]) -> List[FormattedChange]:
    changes: List[FormattedChange] = []
    for idx, new_section in enumerate(new_sections):
        if not isinstance(new_section, dict):
            continue
        name = _section_name(new_section, None)
        old_section = next(
            (s for s in old_sections if isinstance(s, dict) and _section_name(s, None) == name),
            None,
        )
        if old_section is None or not new_section.get("customFields"):
            continue

        section_label = name or f"Section {idx + 1}"
        old_fields = [f for f in old_section.get("customFields") or [] if isinstance(f, dict)]
        new_fields = [f for f in new_section.get("customFields") or [] if isinstance(f, dict)]
        new_by_name = {f.get("name"): f for f in new_fields}
        old_names = {f.get("name") for f in old_fields}

        for old_field in old_fields:
            new_field = new_by_name.get(old_field.get("name"))
            if new_field is not None and new_field.get("value") != old_field.get("value"):
                changes.append(FormattedChange(
                    field=f"{section_label} - {old_field.get('name')}",
                    old=format_value(old_field.get("value")),
                    new=format_value(new_field.get("value")),
                ))
        for new_field in new_fields:
            if new_field.get("name") not in old_names:
                changes.append(FormattedChange(
                    field=f"{section_label} - {new_field.get('name')}",
                    old=NOT_SET,
                    new=format_value(new_field.get("value")),
                ))
    return changes


def _technical_section_changes(change: Dict[str, Any]) -> List[FormattedChange]:
    old_sections, new_sections = change.get("old"), change.get("new")
    summary = FormattedChange(
        field="Technical Sections",
        old=format_value(old_sections, TECHNICAL_SECTIONS),
        new=format_value(new_sections, TECHNICAL_SECTIONS),
    )
    if not (isinstance(old_sections, list) and isinstance(new_sections, list)):
        return [summary]

    old_names = sorted(n for n in (_section_name(s, None) for s in old_sections) if n)
    new_names = sorted(n for n in (_section_name(s, None) for s in new_sections) if n)
    if old_names != new_names:
        return [summary]
    return _section_field_changes(old_sections, new_sections)


def _is_change_pair(change: Any) -> bool:
    return isinstance(change, dict) and ("old" in change or "new" in change)


def parse_changes(entry: ActivityLogEntry) -> List[FormattedChange]:
    """
    활동 로그 한 건에서 표시할 변경 목록을 만듭니다.

    metadata.changes를 우선 사용하고(technical_sections는 섹션 단위로 해석),
    변경이 없으면 field_name / old_value / new_value로 대체합니다.
    마지막으로 동일하거나 양쪽 모두 빈 값인 항목을 한 번 더 걸러냅니다.
    """
    changes: List[FormattedChange] = []
    raw_changes = (entry.metadata or {}).get("changes")

    if isinstance(raw_changes, dict):
        technical = raw_changes.get(TECHNICAL_SECTIONS)
        if _is_change_pair(technical):
            changes.extend(_technical_section_changes(technical))

        for field, change in raw_changes.items():
            if field == TECHNICAL_SECTIONS or not _is_change_pair(change):
                continue
            formatted = format_change(field, change.get("old"), change.get("new"))
            if formatted is not None:
                changes.append(formatted)

    if not changes and (entry.old_value is not None or entry.new_value is not None):
        field_name = entry.field_name or ""
        formatted = format_change(field_name, entry.old_value, entry.new_value)
        if formatted is not None:
            if not field_name:
                formatted.field = "Field"
            changes.append(formatted)

    return [change for change in changes if not _is_futile(change.old, change.new)]


def created_by_name(entry: ActivityLogEntry) -> str:
    user = entry.created_by_user or {}
    return user.get("full_name") or "Unknown User"


def build_log_views(entries: Iterable[ActivityLogEntry], now: Optional[datetime] = None) -> List[ActivityLogView]:
    return [
        ActivityLogView(
            id=entry.id,
            activity_type=entry.activity_type or "Unknown",
            action_description=entry.action_description or "Unknown",
            created_at=entry.created_at,
            created_by=created_by_name(entry),
            time_ago=days_ago_label(entry.created_at, now),
            changes=parse_changes(entry),
        )
        for entry in entries
    ]


# =============================================================================
# 설비 활동 로그 CSV 내보내기
# =============================================================================
ENTRY_STATUS_LABELS = {
    "general": "In Progress",
    "completed": "Completed",
    "testing": "Testing",
    "inspection": "Inspection",
}


def _equipment_status(entry: ActivityLogEntry) -> str:
    if entry.activity_type == "equipment_created":
        return "Created"
    if entry.activity_type == "equipment_updated":
        return "Updated"
    return ENTRY_STATUS_LABELS.get(entry.entry_type or "", "Activity")


def _equipment_unit(entry: ActivityLogEntry) -> str:
    equipment = entry.equipment or {}
    eq_type, tag = equipment.get("type"), equipment.get("tag_number")
    if entry.activity_type == "equipment_created":
        return f'Equipment "{eq_type}" ({tag}) was created'
    if entry.activity_type == "equipment_updated":
        return f'Equipment "{eq_type}" ({tag}) was updated'
    text = (entry.entry_text or "")[:50] or entry.action_description or "Progress update"
    return f"{tag or 'Unknown'} - {text}"


def equipment_export_rows(entries: Iterable[ActivityLogEntry], now: Optional[datetime] = None) -> List[Dict[str, str]]:
    rows = []
    for entry in entries:
        user = entry.created_by_user or {}
        rows.append({
            "Status": _equipment_status(entry),
            "Equipment": (entry.equipment or {}).get("type") or "Unknown Equipment",
            "Unit": _equipment_unit(entry),
            "Updated": format_display_date(entry.created_at, fallback="Unknown"),
            "Time Ago": days_ago_label(entry.created_at, now),
            "Updated By": user.get("full_name") or entry.created_by or "Unknown User",
        })
    return rows
