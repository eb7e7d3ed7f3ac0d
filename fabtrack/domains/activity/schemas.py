# fabtrack/domains/activity/schemas.py

"""
'activity' 도메인 (설비/VDCR 활동 로그)의 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import SQLModel


# =============================================================================
# 1. 활동 로그 원본 레코드
#    SQLModel의 클래스 속성 'metadata'와 충돌하므로 pydantic BaseModel을 사용합니다.
# =============================================================================
class ActivityLogEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    project_id: Optional[str] = None
    equipment_id: Optional[str] = None
    vdcr_id: Optional[str] = None
    activity_type: Optional[str] = None
    action_description: Optional[str] = None
    field_name: Optional[str] = None
    old_value: Any = None
    new_value: Any = None
    metadata: Optional[Dict[str, Any]] = Field(default_factory=dict)
    created_at: Optional[str] = None
    created_by: Optional[str] = None
    created_by_user: Optional[Dict[str, Any]] = None
    # 조인된 관련 레코드
    equipment: Optional[Dict[str, Any]] = None
    vdcr_record: Optional[Dict[str, Any]] = None
    # 진행 기록(progress entry) 형태의 로그
    entry_type: Optional[str] = None
    entry_text: Optional[str] = None


# =============================================================================
# 2. 표시용 스키마
# =============================================================================
class FormattedChange(SQLModel):
    field: str
    old: str
    new: str


class ActivityLogView(SQLModel):
    id: Optional[str] = None
    activity_type: str = "Unknown"
    action_description: str = "Unknown"
    created_at: Optional[str] = None
    created_by: str = "Unknown User"
    time_ago: str = "Unknown"
    changes: List[FormattedChange] = []
