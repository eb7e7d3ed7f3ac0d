# fabtrack/core/security.py

"""
애플리케이션의 보안 관련 유틸리티 함수 및 의존성 주입을 정의하는 모듈입니다.

- 영속성 서비스 인증이 발급한 JWT(JSON Web Token) 검증.
- HTTP Bearer 스키마를 사용하여 현재 사용자 획득.
- 사용자 역할(role) 기반 권한 부여(Authorization) 검사.

현재 사용자의 역할/이메일은 CurrentUser에 명시적으로 담겨 라우터로 전달되며,
순수 함수(설비 필터 등)에는 인자로 넘겨집니다.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from jose import jwt, JWTError
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from fabtrack.core.config import settings
from fabtrack.core.persistence import PersistenceClient, PersistenceError, get_persistence
from fabtrack.domains.team.schemas import CurrentUser, Role, TEAM_MANAGER_ROLES, EDITOR_ROLES

logger = logging.getLogger(__name__)

# auto_error=False: 헤더가 없을 때 401 메시지를 직접 구성합니다.
bearer_scheme = HTTPBearer(auto_error=False)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Access Token을 디코딩하고 서명/만료/audience를 검증합니다.
    """
    return jwt.decode(
        token,
        settings.JWT_SECRET.get_secret_value(),
        algorithms=[settings.ALGORITHM],
        audience=settings.JWT_AUDIENCE,
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    persistence: PersistenceClient = Depends(get_persistence),
) -> CurrentUser:
    """
    JWT 토큰을 검증하고 영속성 서비스의 users 테이블에서 현재 사용자 프로필을 가져옵니다.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError as e:
        logger.debug("JWTError: %s", e)
        raise credentials_exception
    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception

    try:
        profile = await persistence.get_user(user_id)
    except PersistenceError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    if profile is None:
        raise credentials_exception

    return CurrentUser(
        id=str(profile.get("id") or user_id),
        email=profile.get("email") or payload.get("email") or "",
        full_name=profile.get("full_name"),
        role=profile.get("role"),
        firm_id=profile.get("firm_id"),
        is_active=profile.get("is_active", True) is not False,
    )


def get_current_active_user(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """
    현재 인증된 활성 사용자를 반환합니다.
    계정이 비활성화된 경우 400 Bad Request를 발생시킵니다.
    """
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    return current_user


def require_role(user: CurrentUser, allowed: Iterable[Role], detail: str) -> None:
    if Role.parse(user.role) not in set(allowed):
        logger.debug("Role %r is not in allowed roles. Raising 403.", user.role)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def get_current_team_manager(current_user: CurrentUser = Depends(get_current_active_user)) -> CurrentUser:
    """
    팀 구성 변경 권한(관리자/프로젝트 관리자)을 가진 사용자를 반환합니다.
    """
    require_role(current_user, TEAM_MANAGER_ROLES, "Not enough permissions. Manager role required.")
    return current_user


def get_current_editor(current_user: CurrentUser = Depends(get_current_active_user)) -> CurrentUser:
    """
    설비/VDCR 수정 권한(편집자 이상)을 가진 사용자를 반환합니다.
    """
    require_role(current_user, EDITOR_ROLES, "Not enough permissions. Editor role required.")
    return current_user
