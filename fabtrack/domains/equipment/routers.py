# fabtrack/domains/equipment/routers.py

"""
'equipment' 도메인 (프로젝트 설비)과 관련된 API 엔드포인트를 정의하는 모듈입니다.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from fabtrack.core import dependencies as deps
from fabtrack.core.config import settings
from fabtrack.domains.team.schemas import CurrentUser

from . import crud as equipment_crud
from . import schemas as equipment_schemas
from .services import can_edit_equipment, diff_equipment

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Equipment (설비)"],
    responses={404: {"description": "Not found"}},
)


@router.get(
    "/{project_id}/equipment",
    response_model=List[equipment_schemas.Equipment],
    summary="현재 사용자에게 보이는 프로젝트 설비 목록 조회",
)
async def read_project_equipment(
    project_id: str,
    persistence: deps.PersistenceClient = Depends(deps.get_persistence),
    current_user: CurrentUser = Depends(deps.get_current_active_user),
):
    """
    프로젝트 설비 목록을 역할/배정 기반 가시성 필터를 적용하여 반환합니다.
    - 관리자/프로젝트 관리자/VDCR 관리자: 전체
    - 편집자/열람자: 배정된 설비만
    """
    try:
        return await equipment_crud.get_visible_equipment(persistence, project_id, current_user)
    except deps.PersistenceError as e:
        raise deps.bad_gateway(e) from e


@router.patch(
    "/{project_id}/equipment/{equipment_id}",
    response_model=equipment_schemas.EquipmentUpdateResult,
    summary="설비 정보 수정 (변경 이력 기록)",
)
async def update_project_equipment(
    project_id: str,
    equipment_id: str,
    equipment_in: equipment_schemas.EquipmentUpdate,
    persistence: deps.PersistenceClient = Depends(deps.get_persistence),
    current_user: CurrentUser = Depends(deps.get_current_editor),
):
    """
    설비 정보를 수정하고, 의미 있는 변경이 있으면 'equipment_updated' 활동 로그를 남깁니다.
    활동 로그 기록 실패는 수정 결과에 영향을 주지 않습니다.
    """
    update_data = equipment_in.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    try:
        current = await persistence.get_equipment(equipment_id)
        if not current or current.get("project_id") != project_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Equipment not found")

        team_members = await equipment_crud.get_team_members_for(persistence, project_id, current_user)
        if not can_edit_equipment(
            current_user.role, current_user.email, team_members,
            equipment_schemas.Equipment.model_validate(current), settings.UNKNOWN_ROLE_POLICY,
        ):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions for this equipment.",
            )

        updated = await persistence.update_equipment(equipment_id, update_data, updated_by=current_user.id)
    except deps.PersistenceError as e:
        raise deps.bad_gateway(e) from e
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Equipment not found")

    changes = diff_equipment(current, updated, list(update_data.keys()))
    if changes:
        try:
            await persistence.log_equipment_activity({
                "project_id": project_id,
                "equipment_id": equipment_id,
                "activity_type": "equipment_updated",
                "action_description": f'Equipment "{updated.get("type")}" ({updated.get("tag_number")}) was updated',
                "field_name": None,
                "old_value": None,
                "new_value": None,
                "metadata": {"changes": changes},
                "created_by": current_user.id,
            })
        except deps.PersistenceError as e:
            logger.warning("Failed to log equipment activity for %s: %s", equipment_id, e.message)

    return equipment_schemas.EquipmentUpdateResult(
        equipment=equipment_schemas.Equipment.model_validate(updated),
        changes=changes,
    )
