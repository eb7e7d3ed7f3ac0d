# tests/core/test_security.py

"""
Bearer JWT 검증(get_current_user)과 역할 기반 권한 의존성에 대한 테스트 모듈입니다.
토큰은 python-jose로 직접 서명하여 실제 검증 경로를 거칩니다.
"""

from datetime import datetime, timedelta, UTC

import pytest
from jose import jwt

from fabtrack.core.config import settings
from fabtrack.core.persistence import PersistenceError

from tests.conftest import PROJECT_ID

EQUIPMENT_URL = f"/api/v1/projects/{PROJECT_ID}/equipment"


def make_token(sub="user-1", secret=None, audience=None, expires_in=timedelta(hours=1), **claims):
    payload = {"aud": audience or settings.JWT_AUDIENCE, "exp": datetime.now(UTC) + expires_in, **claims}
    if sub is not None:
        payload["sub"] = sub
    return jwt.encode(payload, secret or settings.JWT_SECRET.get_secret_value(), algorithm=settings.ALGORITHM)


@pytest.fixture(name="known_user")
def known_user_fixture(fake_persistence):
    fake_persistence.users["user-1"] = {
        "id": "user-1", "email": "pm@example.com", "full_name": "Lee PM",
        "role": "project_manager", "firm_id": "firm-1", "is_active": True,
    }
    return fake_persistence.users["user-1"]


@pytest.mark.asyncio
class TestBearerAuthentication:

    async def test_valid_token(self, client, known_user):
        """(성공) 유효한 토큰이면 프로필의 역할로 요청이 처리됩니다."""
        response = await client.get(EQUIPMENT_URL, headers={"Authorization": f"Bearer {make_token()}"})
        assert response.status_code == 200
        assert len(response.json()) == 3

    async def test_missing_header(self, client):
        response = await client.get(EQUIPMENT_URL)
        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.parametrize("token_kwargs", [
        {"secret": "wrong-secret"},
        {"audience": "anon"},
        {"expires_in": timedelta(minutes=-5)},
        {"sub": None},
    ])
    async def test_invalid_tokens(self, client, known_user, token_kwargs):
        """(실패) 서명/audience/만료/sub 오류는 모두 401"""
        token = make_token(**token_kwargs)
        response = await client.get(EQUIPMENT_URL, headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Could not validate credentials"

    async def test_garbage_token(self, client):
        response = await client.get(EQUIPMENT_URL, headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    async def test_unknown_user(self, client):
        response = await client.get(EQUIPMENT_URL, headers={"Authorization": f"Bearer {make_token(sub='ghost')}"})
        assert response.status_code == 401

    async def test_inactive_profile(self, client, known_user):
        known_user["is_active"] = False
        response = await client.get(EQUIPMENT_URL, headers={"Authorization": f"Bearer {make_token()}"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Inactive user"

    async def test_profile_lookup_failure_is_502(self, client, fake_persistence):
        fake_persistence.fail_with = PersistenceError(503, "Persistence service unreachable")
        response = await client.get(EQUIPMENT_URL, headers={"Authorization": f"Bearer {make_token()}"})
        assert response.status_code == 502
