# fabtrack/domains/equipment/schemas.py

"""
'equipment' 도메인 (프로젝트 설비)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
설비 레코드는 렌더링 시점마다 불변 스냅샷으로 취급합니다.
"""

from typing import Any, Dict, List, Optional, Union
from sqlmodel import SQLModel, Field
from pydantic import model_validator


class EquipmentBase(SQLModel):
    name: Optional[str] = None
    tag_number: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None
    progress: Optional[Union[int, float]] = None
    progress_phase: Optional[str] = None
    location: Optional[str] = None
    priority: Optional[str] = None
    notes: Optional[str] = None
    po_cdd: Optional[str] = None
    # 팀 담당자 필드
    supervisor: Optional[str] = None
    welder: Optional[str] = None
    qc_inspector: Optional[str] = None
    project_manager: Optional[str] = None
    # 구조화 필드 (JSONB)
    technical_sections: Optional[List[Any]] = None
    custom_fields: Optional[Any] = None
    team_custom_fields: Optional[Any] = None


class Equipment(EquipmentBase):
    id: Optional[str] = None
    project_id: Optional[str] = None
    updated_at: Optional[str] = None
    updated_by: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _accept_camel_case_tag(cls, data: Any) -> Any:
        # 프론트엔드 형태(tagNumber)로 들어온 값도 허용합니다.
        if isinstance(data, dict) and "tag_number" not in data and "tagNumber" in data:
            data = {**data, "tag_number": data["tagNumber"]}
        return data


class EquipmentUpdate(EquipmentBase):
    pass


class EquipmentChange(SQLModel):
    old: Any = None
    new: Any = None


class EquipmentUpdateResult(SQLModel):
    equipment: Equipment
    changes: Dict[str, EquipmentChange] = Field(default_factory=dict)
