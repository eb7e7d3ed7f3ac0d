# fabtrack/domains/team/schemas.py

"""
'team' 도메인 (프로젝트 팀원 및 권한)의 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
팀원 레코드는 외부 영속성 서비스가 소유하며, 여기서는 읽기/전송용 형태만 정의합니다.
"""

from enum import Enum
from typing import List, Optional
from sqlmodel import SQLModel, Field
from pydantic import EmailStr

# 팀원이 프로젝트의 모든 설비에 배정되었음을 나타내는 예약 값
ALL_EQUIPMENT = "All Equipment"


# =============================================================================
# 1. 역할 (Role)
# =============================================================================
class Role(str, Enum):
    """
    대시보드 사용자 역할입니다. DB에는 문자열 값으로 저장됩니다.
    """
    SUPER_ADMIN = "super_admin"          # 플랫폼 최고 관리자
    FIRM_ADMIN = "firm_admin"            # 회사 관리자
    ADMIN = "admin"                      # 관리자 (firm_admin 별칭)
    PROJECT_MANAGER = "project_manager"  # 프로젝트 관리자
    VDCR_MANAGER = "vdcr_manager"        # VDCR 관리자
    EDITOR = "editor"                    # 편집자 (배정된 설비만)
    VIEWER = "viewer"                    # 열람자 (배정된 설비만)

    @classmethod
    def parse(cls, value: object) -> Optional["Role"]:
        """문자열을 Role로 변환합니다. 알 수 없는 값이면 None을 반환합니다."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str) or not value.strip():
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


# 설비 전체 열람 권한 역할
FULL_ACCESS_ROLES = frozenset({
    Role.SUPER_ADMIN, Role.FIRM_ADMIN, Role.ADMIN, Role.PROJECT_MANAGER, Role.VDCR_MANAGER,
})
# 배정된 설비만 열람 가능한 역할
RESTRICTED_ROLES = frozenset({Role.EDITOR, Role.VIEWER})
# 팀 구성 변경 권한 역할
TEAM_MANAGER_ROLES = frozenset({Role.SUPER_ADMIN, Role.FIRM_ADMIN, Role.ADMIN, Role.PROJECT_MANAGER})
# 설비/VDCR 수정 권한 역할
EDITOR_ROLES = FULL_ACCESS_ROLES | {Role.EDITOR}


# =============================================================================
# 2. 현재 사용자 (CurrentUser)
# =============================================================================
class CurrentUser(SQLModel):
    id: str
    email: str = ""
    full_name: Optional[str] = None
    role: Optional[str] = None
    firm_id: Optional[str] = None
    is_active: bool = True


# =============================================================================
# 3. 팀원 (TeamMember) 스키마
# =============================================================================
class TeamMember(SQLModel):
    id: Optional[str] = None
    name: str = "Unknown"
    email: str = ""
    role: Optional[str] = None
    position: Optional[str] = None
    user_id: Optional[str] = None
    project_id: Optional[str] = None
    # 설비 id / 이름 / 태그 번호, 또는 ALL_EQUIPMENT
    equipment_assignments: List[str] = Field(default_factory=list)


class TeamMemberCreate(SQLModel):
    name: str = Field(..., max_length=200)
    email: EmailStr
    role: Role
    position: Optional[str] = Field(None, max_length=100)
    user_id: Optional[str] = None
    equipment_assignments: List[str] = Field(default_factory=list)
    send_invite: bool = True
    # 알림 메일 본문용 (선택)
    project_name: Optional[str] = None
    company_name: Optional[str] = None


class TeamMemberUpdate(SQLModel):
    role: Optional[Role] = None
    position: Optional[str] = None
    equipment_assignments: Optional[List[str]] = None
