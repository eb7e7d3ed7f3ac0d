# fabtrack/domains/vdcr/services.py

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from fabtrack.domains.activity.schemas import ActivityLogEntry
from fabtrack.utils.dates import days_ago_label, format_display_date, timeline_label

from .schemas import VDCRDocumentRow, VDCRRecentUpdate, VDCRRecord, VDCRStats, VDCRStatus

STATUS_LABELS = {
    VDCRStatus.APPROVED: "Approved",
    VDCRStatus.REJECTED: "Rejected",
    VDCRStatus.RECEIVED_FOR_COMMENT: "Received for Comments",
    VDCRStatus.SENT_FOR_APPROVAL: "Sent for Approval",
    VDCRStatus.PENDING: "Pending",
}


def parse_status(value: Optional[str]) -> Optional[VDCRStatus]:
    try:
        return VDCRStatus(value)
    except ValueError:
        return None


def status_label(value: Optional[str]) -> str:
    status = parse_status(value)
    return STATUS_LABELS[status] if status else "Activity"


def bucket_by_status(records: Iterable[VDCRRecord]) -> Dict[VDCRStatus, List[VDCRRecord]]:
    """
    레코드를 상태별로 나눕니다. 모든 상태 키가 항상 존재하며, 각 목록은 입력 순서를 유지합니다.
    알 수 없는 상태의 레코드는 어느 버킷에도 들어가지 않습니다.
    """
    buckets: Dict[VDCRStatus, List[VDCRRecord]] = {status: [] for status in VDCRStatus}
    for record in records:
        status = parse_status(record.status)
        if status is not None:
            buckets[status].append(record)
    return buckets


def calculate_stats(records: Sequence[VDCRRecord]) -> VDCRStats:
    buckets = bucket_by_status(records)
    return VDCRStats(
        approved=len(buckets[VDCRStatus.APPROVED]),
        under_review=len(buckets[VDCRStatus.RECEIVED_FOR_COMMENT]),
        sent_for_approval=len(buckets[VDCRStatus.SENT_FOR_APPROVAL]),
        rejected=len(buckets[VDCRStatus.REJECTED]),
        pending=len(buckets[VDCRStatus.PENDING]),
        total=len(records),
    )


def _last_touched(record: VDCRRecord) -> Optional[str]:
    return record.last_update or record.updated_at


def flatten_record(record: VDCRRecord, now: Optional[datetime] = None) -> VDCRDocumentRow:
    updated_by_user = record.updated_by_user or {}
    return VDCRDocumentRow(
        document_name=record.document_name or "Unknown Document",
        revision=record.revision or "Rev-00",
        remarks=record.remarks or "No remarks",
        last_update=format_display_date(_last_touched(record), with_time=True),
        updated_by=updated_by_user.get("full_name") or record.updated_by or "Unknown User",
        days_ago=days_ago_label(_last_touched(record), now),
        document_url=record.document_url or "#",
        equipment_tags=list(record.equipment_tag_numbers or []),
    )


def flatten_bucket(
    records: Iterable[VDCRRecord], status: VDCRStatus, now: Optional[datetime] = None
) -> List[VDCRDocumentRow]:
    """특정 상태의 레코드를 표시용 행으로 변환합니다."""
    return [flatten_record(record, now) for record in bucket_by_status(records)[status]]


def recent_updates(
    records: Sequence[VDCRRecord], limit: int = 5, now: Optional[datetime] = None
) -> List[VDCRRecentUpdate]:
    return [
        VDCRRecentUpdate(
            document_name=record.document_name or "Unknown Document",
            status=record.status,
            status_label=status_label(record.status),
            timeline=timeline_label(_last_touched(record), now),
        )
        for record in records[:limit]
    ]


def vdcr_log_export_rows(logs: Iterable[ActivityLogEntry], now: Optional[datetime] = None) -> List[Dict[str, str]]:
    """
    VDCR 활동 로그를 CSV 내보내기용 평평한 행으로 변환합니다.
    """
    rows = []
    for log in logs:
        vdcr_record = log.vdcr_record or {}
        document_name = (
            vdcr_record.get("document_name")
            or (log.metadata or {}).get("documentName")
            or "VDCR Activity"
        )
        if log.activity_type == "vdcr_status_changed":
            status = status_label(log.new_value if isinstance(log.new_value, str) else None)
        else:
            status = status_label(vdcr_record.get("status"))
        rows.append({
            "Activity Type": log.activity_type or "Unknown",
            "Action": log.action_description or "Unknown",
            "Status": status,
            "Document": document_name,
            "Updated": format_display_date(log.created_at, fallback="Unknown"),
            "Time Ago": days_ago_label(log.created_at, now),
            "Updated By": (log.created_by_user or {}).get("full_name") or "Unknown User",
        })
    return rows
