# fabtrack/domains/vdcr/routers.py

"""
'vdcr' 도메인 (벤더 문서 관리 레코드)과 관련된 API 엔드포인트를 정의하는 모듈입니다.
"""

import logging
from datetime import datetime, UTC
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from fabtrack.core import dependencies as deps
from fabtrack.domains.activity.schemas import ActivityLogEntry
from fabtrack.domains.team.schemas import CurrentUser
from fabtrack.utils.export import csv_response

from . import schemas as vdcr_schemas
from .services import calculate_stats, flatten_bucket, recent_updates, status_label, vdcr_log_export_rows

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["VDCR (벤더 문서)"],
    responses={404: {"description": "Not found"}},
)


async def _read_records(persistence: deps.PersistenceClient, project_id: str) -> List[vdcr_schemas.VDCRRecord]:
    try:
        rows = await persistence.get_vdcr_records_by_project(project_id)
    except deps.PersistenceError as e:
        raise deps.bad_gateway(e) from e
    return [vdcr_schemas.VDCRRecord.model_validate(row) for row in rows]


@router.get(
    "/{project_id}/vdcr/summary",
    response_model=vdcr_schemas.VDCRSummary,
    summary="VDCR 상태별 통계 및 최근 변경 요약",
)
async def read_vdcr_summary(
    project_id: str,
    persistence: deps.PersistenceClient = Depends(deps.get_persistence),
    current_user: CurrentUser = Depends(deps.get_current_active_user),
):
    records = await _read_records(persistence, project_id)
    return vdcr_schemas.VDCRSummary(stats=calculate_stats(records), recent_updates=recent_updates(records))


@router.get(
    "/{project_id}/vdcr/status/{vdcr_status}",
    response_model=List[vdcr_schemas.VDCRDocumentRow],
    summary="특정 상태의 VDCR 문서 목록 조회",
)
async def read_vdcr_by_status(
    project_id: str,
    vdcr_status: vdcr_schemas.VDCRStatus,
    persistence: deps.PersistenceClient = Depends(deps.get_persistence),
    current_user: CurrentUser = Depends(deps.get_current_active_user),
):
    """
    상태 카드를 클릭했을 때 보여줄 문서 행 목록입니다. 알 수 없는 상태 값은 422로 거부됩니다.
    """
    records = await _read_records(persistence, project_id)
    return flatten_bucket(records, vdcr_status)


@router.patch(
    "/{project_id}/vdcr/{vdcr_id}/status",
    response_model=vdcr_schemas.VDCRRecord,
    summary="VDCR 문서 상태 변경",
)
async def update_vdcr_status(
    project_id: str,
    vdcr_id: str,
    update_in: vdcr_schemas.VDCRStatusUpdate,
    persistence: deps.PersistenceClient = Depends(deps.get_persistence),
    current_user: CurrentUser = Depends(deps.get_current_editor),
):
    """
    문서 상태를 변경하고 'vdcr_status_changed' 활동 로그를 남깁니다.
    활동 로그 기록 실패는 상태 변경 결과에 영향을 주지 않습니다.
    """
    now = datetime.now(UTC).isoformat()
    update_data = {
        "status": update_in.status.value,
        "last_update": now,
        "updated_at": now,
        "updated_by": current_user.id,
    }
    if update_in.remarks is not None:
        update_data["remarks"] = update_in.remarks

    try:
        current = await persistence.get_vdcr_record(vdcr_id)
        if not current or current.get("project_id") != project_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="VDCR record not found")
        updated = await persistence.update_vdcr_record(vdcr_id, update_data)
    except deps.PersistenceError as e:
        raise deps.bad_gateway(e) from e
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="VDCR record not found")

    old_status = current.get("status")
    if old_status != update_in.status.value:
        document_name = current.get("document_name") or "Unknown Document"
        try:
            await persistence.log_vdcr_activity({
                "project_id": project_id,
                "vdcr_id": vdcr_id,
                "activity_type": "vdcr_status_changed",
                "action_description": (
                    f'Status of "{document_name}" changed from '
                    f"{status_label(old_status)} to {status_label(update_in.status.value)}"
                ),
                "field_name": "status",
                "old_value": old_status,
                "new_value": update_in.status.value,
                "metadata": {"documentName": document_name},
                "created_by": current_user.id,
            })
        except deps.PersistenceError as e:
            logger.warning("Failed to log VDCR activity for %s: %s", vdcr_id, e.message)

    return vdcr_schemas.VDCRRecord.model_validate(updated)


@router.get(
    "/{project_id}/vdcr/logs/export",
    summary="VDCR 활동 로그 CSV 내보내기",
    responses={200: {"content": {"text/csv": {}}}},
)
async def export_vdcr_logs(
    project_id: str,
    persistence: deps.PersistenceClient = Depends(deps.get_persistence),
    current_user: CurrentUser = Depends(deps.get_current_active_user),
):
    try:
        rows = await persistence.get_vdcr_activity_logs(project_id)
    except deps.PersistenceError as e:
        raise deps.bad_gateway(e) from e
    export_rows = vdcr_log_export_rows(ActivityLogEntry.model_validate(row) for row in rows)
    if not export_rows:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No records to export")
    return csv_response(export_rows, "VDCR_Logs")
