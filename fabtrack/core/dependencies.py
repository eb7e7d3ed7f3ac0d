# fabtrack/core/dependencies.py

"""
FastAPI 애플리케이션의 의존성 주입(Dependency Injection)을 정의하는 모듈입니다.

- 외부 영속성 서비스 클라이언트 (get_persistence).
- 현재 인증된 사용자 정보 획득 (get_current_user, get_current_active_user 등).
- 사용자 역할(role) 기반 권한 부여를 위한 헬퍼 함수.
"""

# flake8: noqa
from fabtrack.core.persistence import get_persistence, PersistenceClient, PersistenceError
from fabtrack.core.security import (
    get_current_user,            # 토큰에서 사용자 정보를 가져오는 함수
    get_current_active_user,     # 활성 사용자 확인 함수
    get_current_team_manager,    # 팀 관리 권한 확인 함수
    get_current_editor,          # 편집 권한 확인 함수
)

from fastapi import HTTPException, status


# 요청 자체의 문제이므로 상태 코드를 그대로 전달하는 영속성 서비스 오류
PASS_THROUGH_STATUS_CODES = {
    status.HTTP_400_BAD_REQUEST,
    status.HTTP_404_NOT_FOUND,
    status.HTTP_409_CONFLICT,
}


def bad_gateway(error: PersistenceError) -> HTTPException:
    """
    영속성 서비스 오류를 HTTP 응답으로 변환합니다.
    (대시보드의 오류 토스트 알림에 해당합니다)
    잘못된 요청(400/404/409)은 그대로 전달하고, 나머지는 502로 응답합니다.
    """
    if error.status_code in PASS_THROUGH_STATUS_CODES:
        return HTTPException(status_code=error.status_code, detail=error.message)
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=error.message)
