# fabtrack/domains/team/routers.py

"""
'team' 도메인 (프로젝트 팀원 및 설비 배정)과 관련된 API 엔드포인트를 정의하는 모듈입니다.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from fabtrack.core import dependencies as deps
from fabtrack.core.notifications import send_project_team_notification
from fabtrack.domains.equipment import crud as equipment_crud

from . import schemas as team_schemas
from .services import find_member_by_email, normalize_assignments, normalize_email

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Project Team (프로젝트 팀)"],
    responses={404: {"description": "Not found"}},
)


async def _project_equipment_ids(persistence: deps.PersistenceClient, project_id: str) -> List[str]:
    rows = await persistence.get_equipment_by_project(project_id)
    return [row["id"] for row in rows if row.get("id")]


async def _ensure_project_member(persistence: deps.PersistenceClient, project_id: str, member_id: str) -> None:
    """팀원이 없거나 다른 프로젝트 소속이면 404를 발생시킵니다."""
    member = await persistence.get_project_member(member_id)
    if not member or member.get("project_id") != project_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team member not found")


@router.get(
    "/{project_id}/members",
    response_model=List[team_schemas.TeamMember],
    summary="프로젝트 팀원 목록 조회",
)
async def read_project_members(
    project_id: str,
    persistence: deps.PersistenceClient = Depends(deps.get_persistence),
    current_user: team_schemas.CurrentUser = Depends(deps.get_current_active_user),
):
    try:
        return await equipment_crud.get_team_members(persistence, project_id)
    except deps.PersistenceError as e:
        raise deps.bad_gateway(e) from e


@router.post(
    "/{project_id}/members",
    response_model=team_schemas.TeamMember,
    status_code=status.HTTP_201_CREATED,
    summary="프로젝트 팀원 추가 (초대 및 알림 메일)",
)
async def create_project_member(
    project_id: str,
    member_in: team_schemas.TeamMemberCreate,
    persistence: deps.PersistenceClient = Depends(deps.get_persistence),
    current_user: team_schemas.CurrentUser = Depends(deps.get_current_team_manager),
):
    """
    팀원을 추가합니다.
    - 설비 배정 목록은 정규화됩니다. (전체 설비를 선택하면 'All Equipment' 표식 추가)
    - send_invite가 참이면 초대 레코드를 만들고 알림 메일을 보냅니다. 두 작업의 실패는 추가 결과에 영향을 주지 않습니다.
    """
    try:
        existing = await equipment_crud.get_team_members(persistence, project_id)
        if find_member_by_email(existing, member_in.email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A team member with this email already exists in the project.",
            )
        equipment_ids = await _project_equipment_ids(persistence, project_id)
        member_data = {
            "project_id": project_id,
            "user_id": member_in.user_id,
            "name": member_in.name,
            "email": normalize_email(member_in.email),
            "role": member_in.role.value,
            "position": member_in.position,
            "equipment_assignments": normalize_assignments(member_in.equipment_assignments, equipment_ids),
        }
        created = await persistence.create_project_member(member_data)
    except deps.PersistenceError as e:
        raise deps.bad_gateway(e) from e

    member = team_schemas.TeamMember.model_validate(created or member_data)

    if member_in.send_invite:
        try:
            await persistence.create_invite({
                "email": member.email,
                "full_name": member.name,
                "role": member_in.role.value,
                "project_id": project_id,
                "firm_id": current_user.firm_id,
                "invited_by": current_user.id,
            })
        except deps.PersistenceError as e:
            logger.warning("Failed to create invite for %s: %s", member.email, e.message)

        result = await send_project_team_notification(
            member_name=member.name,
            member_email=member.email,
            role=member_in.role.value,
            project_name=member_in.project_name or project_id,
            company_name=member_in.company_name or "",
        )
        if not result["success"]:
            logger.warning("Team notification to %s failed: %s", member.email, result["message"])

    return member


@router.patch(
    "/{project_id}/members/{member_id}",
    response_model=team_schemas.TeamMember,
    summary="프로젝트 팀원 정보 수정",
)
async def update_project_member(
    project_id: str,
    member_id: str,
    member_in: team_schemas.TeamMemberUpdate,
    persistence: deps.PersistenceClient = Depends(deps.get_persistence),
    current_user: team_schemas.CurrentUser = Depends(deps.get_current_team_manager),
):
    update_data = member_in.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    try:
        await _ensure_project_member(persistence, project_id, member_id)
        if update_data.get("equipment_assignments") is not None:
            equipment_ids = await _project_equipment_ids(persistence, project_id)
            update_data["equipment_assignments"] = normalize_assignments(
                update_data["equipment_assignments"], equipment_ids
            )
        if member_in.role is not None:
            update_data["role"] = member_in.role.value
        updated = await persistence.update_project_member(member_id, update_data)
    except deps.PersistenceError as e:
        raise deps.bad_gateway(e) from e
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team member not found")
    return team_schemas.TeamMember.model_validate(updated)


@router.delete(
    "/{project_id}/members/{member_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="프로젝트 팀원 삭제",
)
async def delete_project_member(
    project_id: str,
    member_id: str,
    persistence: deps.PersistenceClient = Depends(deps.get_persistence),
    current_user: team_schemas.CurrentUser = Depends(deps.get_current_team_manager),
):
    try:
        await _ensure_project_member(persistence, project_id, member_id)
        await persistence.delete_project_member(member_id)
    except deps.PersistenceError as e:
        raise deps.bad_gateway(e) from e
    return None
