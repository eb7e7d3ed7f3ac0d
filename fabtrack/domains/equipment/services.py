# fabtrack/domains/equipment/services.py

"""
설비 가시성 필터와 설비 변경 이력(diff) 계산을 담당하는 순수 함수 모듈입니다.

현재 사용자의 역할/이메일은 전역 상태에서 읽지 않고 항상 인자로 전달받습니다.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from fabtrack.domains.activity.values import js_string
from fabtrack.domains.team.schemas import ALL_EQUIPMENT, FULL_ACCESS_ROLES, RESTRICTED_ROLES, EDITOR_ROLES, Role, TeamMember
from fabtrack.domains.team.services import find_member_by_email

from .schemas import Equipment

logger = logging.getLogger(__name__)

# 변경 이력으로 추적하는 설비 기본 필드
TRACKED_FIELDS = (
    "type", "tag_number", "status", "progress", "progress_phase",
    "location", "priority", "notes", "po_cdd",
)
# 요청 본문에 포함된 경우에만 추적하는 팀 담당자 필드
TEAM_FIELDS = ("supervisor", "welder", "qc_inspector", "project_manager")
# 구조 비교 필드와 값이 없을 때의 표시 문구
STRUCTURED_FIELDS = {
    "technical_sections": "No sections",
    "custom_fields": "No custom fields",
    "team_custom_fields": "No team custom fields",
}

NOT_SET = "Not set"
EMPTY_MARKERS = {"", "not set", "not-set", "not assigned", "null", "undefined"}


def _is_visible(item: Equipment, assignments: Sequence[str]) -> bool:
    for candidate in (item.id, item.name, item.tag_number):
        if candidate and candidate in assignments:
            return True
    return False


def filter_equipment(
    role: Optional[str],
    email: Optional[str],
    team_members: Optional[Sequence[TeamMember]],
    equipment: Sequence[Equipment],
    unknown_role_policy: str = "deny",
) -> List[Equipment]:
    """
    현재 사용자에게 보이는 설비 목록을 반환합니다.

    - 관리자/프로젝트 관리자/VDCR 관리자: 전체 목록 (순서 유지)
    - 편집자/열람자: 팀원 목록이 아직 로드되지 않았거나(None) 비어 있으면 빈 목록,
      이메일이 일치하는 팀원이 없으면 빈 목록, ALL_EQUIPMENT 배정이면 전체 목록,
      그 외에는 id / 이름 / 태그 번호 중 하나라도 배정 목록에 있는 설비만 반환합니다.
    - 그 밖의 역할: unknown_role_policy가 'allow'이면 전체 목록, 아니면 빈 목록.
    """
    parsed = Role.parse(role)

    if parsed in FULL_ACCESS_ROLES:
        return list(equipment)

    if parsed in RESTRICTED_ROLES:
        if not team_members:
            logger.debug("Team members not loaded yet - showing no equipment")
            return []

        member = find_member_by_email(team_members, email)
        if member is None:
            logger.debug("User %s not found in team members - showing no equipment", email)
            return []

        assignments = member.equipment_assignments or []
        if ALL_EQUIPMENT in assignments:
            return list(equipment)

        visible = [item for item in equipment if _is_visible(item, assignments)]
        logger.debug("Filtered equipment: %d of %d items", len(visible), len(equipment))
        return visible

    if unknown_role_policy == "allow":
        logger.warning("Unknown role %r - showing all equipment", role)
        return list(equipment)
    logger.warning("Unknown role %r - showing no equipment", role)
    return []


def can_edit_equipment(
    role: Optional[str],
    email: Optional[str],
    team_members: Optional[Sequence[TeamMember]],
    item: Equipment,
    unknown_role_policy: str = "deny",
) -> bool:
    if Role.parse(role) not in EDITOR_ROLES:
        return False
    return bool(filter_equipment(role, email, team_members, [item], unknown_role_policy))


def _normalize_for_comparison(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = js_string(value).strip()
    if text.lower() in EMPTY_MARKERS:
        return None
    return text


def diff_equipment(
    current: Mapping[str, Any],
    updated: Mapping[str, Any],
    sent_fields: Sequence[str] = (),
) -> Dict[str, Dict[str, Any]]:
    """
    수정 전/후 설비 레코드를 비교하여 {필드: {"old": ..., "new": ...}} 형태의 변경 목록을 만듭니다.

    빈 값 계열("Not set", "Not assigned", null, 빈 문자열 등)끼리의 변경은 기록하지 않습니다.
    progress_phase가 바뀌면 progress는 자동 계산 값이므로 제외합니다.
    팀 담당자 필드는 요청 본문에 포함된 경우(sent_fields)에만 비교합니다.
    """
    changes: Dict[str, Dict[str, Any]] = {}
    phase_changing = current.get("progress_phase") != updated.get("progress_phase")

    for field in TRACKED_FIELDS:
        if field == "progress" and phase_changing:
            continue
        old_value, new_value = current.get(field), updated.get(field)
        if old_value == new_value:
            continue
        old_norm = _normalize_for_comparison(old_value)
        new_norm = _normalize_for_comparison(new_value)
        if old_norm == new_norm:
            continue
        changes[field] = {"old": old_norm or NOT_SET, "new": new_norm or NOT_SET}

    for field in TEAM_FIELDS:
        if field not in sent_fields:
            continue
        old_norm = _normalize_for_comparison(current.get(field) or None)
        new_norm = _normalize_for_comparison(updated.get(field) or None)
        if old_norm != new_norm:
            changes[field] = {"old": old_norm or NOT_SET, "new": new_norm or NOT_SET}

    for field, placeholder in STRUCTURED_FIELDS.items():
        if current.get(field) != updated.get(field):
            changes[field] = {
                "old": current.get(field) or placeholder,
                "new": updated.get(field) or placeholder,
            }

    return changes
