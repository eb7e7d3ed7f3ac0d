# fabtrack/domains/activity/routers.py

"""
'activity' 도메인 (설비/VDCR 활동 로그)과 관련된 API 엔드포인트를 정의하는 모듈입니다.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from fabtrack.core import dependencies as deps
from fabtrack.domains.equipment import crud as equipment_crud
from fabtrack.domains.team.schemas import CurrentUser, FULL_ACCESS_ROLES, Role
from fabtrack.utils.export import csv_response

from . import schemas as activity_schemas
from .services import build_log_views, equipment_export_rows

router = APIRouter(
    tags=["Activity Logs (활동 로그)"],
    responses={404: {"description": "Not found"}},
)


async def _read_equipment_logs(
    persistence: deps.PersistenceClient,
    project_id: str,
    user: CurrentUser,
    **filters,
) -> List[activity_schemas.ActivityLogEntry]:
    """
    설비 활동 로그를 조회합니다.
    전체 열람 권한이 없는 사용자는 볼 수 있는 설비 ID 목록을 조회 조건으로 넘겨,
    limit/offset 페이지가 필터링 이후의 결과에 적용되도록 합니다.
    """
    if Role.parse(user.role) not in FULL_ACCESS_ROLES:
        visible = await equipment_crud.get_visible_equipment(persistence, project_id, user)
        visible_ids = [item.id for item in visible]
        if not visible_ids:
            return []
        if filters.get("equipment_id") and filters["equipment_id"] not in visible_ids:
            return []
        filters["equipment_ids"] = visible_ids
    rows = await persistence.get_equipment_activity_logs(project_id, **filters)
    return [activity_schemas.ActivityLogEntry.model_validate(row) for row in rows]


@router.get(
    "/{project_id}/activity/equipment",
    response_model=List[activity_schemas.ActivityLogView],
    summary="설비 활동 로그 조회 (필드 변경 내역 포함)",
)
async def read_equipment_activity(
    project_id: str,
    equipment_id: Optional[str] = Query(None),
    activity_type: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None, description="작성자 사용자 ID"),
    date_from: Optional[str] = Query(None),
    date_to: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    offset: Optional[int] = Query(None, ge=0),
    persistence: deps.PersistenceClient = Depends(deps.get_persistence),
    current_user: CurrentUser = Depends(deps.get_current_active_user),
):
    try:
        entries = await _read_equipment_logs(
            persistence, project_id, current_user,
            equipment_id=equipment_id, activity_type=activity_type, user_id=user_id,
            date_from=date_from, date_to=date_to, limit=limit, offset=offset,
        )
    except deps.PersistenceError as e:
        raise deps.bad_gateway(e) from e
    return build_log_views(entries)


@router.get(
    "/{project_id}/activity/equipment/export",
    summary="설비 활동 로그 CSV 내보내기",
    responses={200: {"content": {"text/csv": {}}}},
)
async def export_equipment_activity(
    project_id: str,
    persistence: deps.PersistenceClient = Depends(deps.get_persistence),
    current_user: CurrentUser = Depends(deps.get_current_active_user),
):
    try:
        entries = await _read_equipment_logs(persistence, project_id, current_user)
    except deps.PersistenceError as e:
        raise deps.bad_gateway(e) from e
    rows = equipment_export_rows(entries)
    if not rows:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No records to export")
    return csv_response(rows, "Equipment_Logs")


@router.get(
    "/{project_id}/activity/vdcr",
    response_model=List[activity_schemas.ActivityLogView],
    summary="VDCR 활동 로그 조회",
)
async def read_vdcr_activity(
    project_id: str,
    vdcr_id: Optional[str] = Query(None),
    activity_type: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None, description="작성자 사용자 ID"),
    date_from: Optional[str] = Query(None),
    date_to: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    offset: Optional[int] = Query(None, ge=0),
    persistence: deps.PersistenceClient = Depends(deps.get_persistence),
    current_user: CurrentUser = Depends(deps.get_current_active_user),
):
    try:
        rows = await persistence.get_vdcr_activity_logs(
            project_id, vdcr_id=vdcr_id, activity_type=activity_type, user_id=user_id,
            date_from=date_from, date_to=date_to, limit=limit, offset=offset,
        )
    except deps.PersistenceError as e:
        raise deps.bad_gateway(e) from e
    return build_log_views(activity_schemas.ActivityLogEntry.model_validate(row) for row in rows)
