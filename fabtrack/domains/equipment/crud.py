# fabtrack/domains/equipment/crud.py

"""
'equipment' 도메인의 데이터 조회 모듈입니다.
영속성 서비스에서 받은 원시 레코드를 스키마로 변환하고, 현재 사용자의 가시성 필터를 적용합니다.
"""

from typing import List, Optional

from fabtrack.core.config import settings
from fabtrack.core.persistence import PersistenceClient
from fabtrack.domains.team.schemas import CurrentUser, RESTRICTED_ROLES, Role, TeamMember

from .schemas import Equipment
from .services import filter_equipment


async def get_team_members(persistence: PersistenceClient, project_id: str) -> List[TeamMember]:
    rows = await persistence.get_team_members_by_project(project_id)
    return [TeamMember.model_validate(row) for row in rows]


async def get_team_members_for(
    persistence: PersistenceClient, project_id: str, user: CurrentUser
) -> Optional[List[TeamMember]]:
    """
    배정 기반 필터가 필요한 역할(편집자/열람자)일 때만 팀원 목록을 조회합니다.
    """
    if Role.parse(user.role) not in RESTRICTED_ROLES:
        return None
    return await get_team_members(persistence, project_id)


async def get_visible_equipment(
    persistence: PersistenceClient, project_id: str, user: CurrentUser
) -> List[Equipment]:
    rows = await persistence.get_equipment_by_project(project_id)
    equipment = [Equipment.model_validate(row) for row in rows]
    team_members = await get_team_members_for(persistence, project_id, user)
    return filter_equipment(user.role, user.email, team_members, equipment, settings.UNKNOWN_ROLE_POLICY)
