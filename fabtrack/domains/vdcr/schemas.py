# fabtrack/domains/vdcr/schemas.py

"""
'vdcr' 도메인 (Vendor Document Control Record, 벤더 문서 관리 레코드)의
API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from enum import Enum
from typing import Any, Dict, List, Optional
from sqlmodel import SQLModel, Field


class VDCRStatus(str, Enum):
    APPROVED = "approved"
    SENT_FOR_APPROVAL = "sent-for-approval"
    RECEIVED_FOR_COMMENT = "received-for-comment"
    PENDING = "pending"
    REJECTED = "rejected"


# =============================================================================
# 1. VDCR 레코드 (외부 영속성 서비스 원본)
# =============================================================================
class VDCRRecord(SQLModel):
    id: Optional[str] = None
    project_id: Optional[str] = None
    document_name: Optional[str] = None
    revision: Optional[str] = None
    status: Optional[str] = None
    remarks: Optional[str] = None
    last_update: Optional[str] = None
    updated_at: Optional[str] = None
    updated_by: Optional[str] = None
    updated_by_user: Optional[Dict[str, Any]] = None
    document_url: Optional[str] = None
    equipment_tag_numbers: Optional[List[str]] = None


class VDCRStatusUpdate(SQLModel):
    status: VDCRStatus
    remarks: Optional[str] = None


# =============================================================================
# 2. 표시용 스키마
# =============================================================================
class VDCRDocumentRow(SQLModel):
    document_name: str
    revision: str
    remarks: str
    last_update: str
    updated_by: str
    days_ago: str
    document_url: str
    equipment_tags: List[str] = Field(default_factory=list)


class VDCRStats(SQLModel):
    approved: int = 0
    under_review: int = 0        # received-for-comment
    sent_for_approval: int = 0
    rejected: int = 0
    pending: int = 0
    total: int = 0


class VDCRRecentUpdate(SQLModel):
    document_name: str
    status: Optional[str] = None
    status_label: str
    timeline: str


class VDCRSummary(SQLModel):
    stats: VDCRStats
    recent_updates: List[VDCRRecentUpdate] = Field(default_factory=list)
