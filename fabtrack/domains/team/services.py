# fabtrack/domains/team/services.py

from typing import Iterable, List, Optional, Sequence

from .schemas import ALL_EQUIPMENT, TeamMember


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def find_member_by_email(team_members: Iterable[TeamMember], email: Optional[str]) -> Optional[TeamMember]:
    """
    이메일(공백 제거, 대소문자 무시)이 일치하는 첫 번째 팀원을 반환합니다.
    """
    target = normalize_email(email)
    if not target:
        return None
    for member in team_members:
        if normalize_email(member.email) == target:
            return member
    return None


def normalize_assignments(selected: Sequence[str], equipment_ids: Sequence[str]) -> List[str]:
    """
    팀원의 설비 배정 목록을 정리합니다.

    - 순서를 유지하면서 중복을 제거합니다.
    - ALL_EQUIPMENT가 선택되어 있으면 ALL_EQUIPMENT와 전체 설비 id 목록으로 확장합니다.
    - 모든 설비가 개별 선택되어 있으면 ALL_EQUIPMENT를 추가합니다.
    """
    assignments: List[str] = []
    for item in selected:
        if item and item not in assignments:
            assignments.append(item)

    if ALL_EQUIPMENT in assignments:
        return [ALL_EQUIPMENT, *[eq_id for eq_id in dict.fromkeys(equipment_ids) if eq_id]]

    ids = [eq_id for eq_id in equipment_ids if eq_id]
    if ids and all(eq_id in assignments for eq_id in ids):
        assignments.append(ALL_EQUIPMENT)
    return assignments
