# tests/conftest.py

import os
from contextlib import asynccontextmanager
from datetime import datetime, UTC
from typing import Any, AsyncGenerator, Callable, Dict, List, Optional

# 설정(Settings)의 필수 값은 fabtrack 임포트 전에 지정해야 합니다.
os.environ.setdefault("PERSISTENCE_URL", "http://persistence.test")
os.environ.setdefault("PERSISTENCE_API_KEY", "test-service-key")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402

from fabtrack.main import app as main_app  # noqa: E402
from fabtrack.core import dependencies as deps  # noqa: E402
from fabtrack.core.persistence import PersistenceError, STANDALONE_PROJECT_ID  # noqa: E402
from fabtrack.domains.team.schemas import CurrentUser, Role  # noqa: E402

PROJECT_ID = "proj-1"
OTHER_PROJECT_ID = "proj-2"


def now_iso() -> str:
    return datetime.now(UTC).isoformat()


# =============================================================================
# 1. 메모리 기반 영속성 서비스 대역 (PersistenceClient와 같은 메서드 제공)
# =============================================================================
class FakePersistence:
    """
    테스트용 인메모리 영속성 서비스입니다.
    fail_with를 지정하면 모든 호출이 해당 PersistenceError를 발생시킵니다.
    fail_logging이 참이면 활동 로그 기록만 실패합니다.
    """

    def __init__(self):
        self.users: Dict[str, Dict[str, Any]] = {}
        self.members: List[Dict[str, Any]] = []
        self.equipment: Dict[str, Dict[str, Any]] = {}
        self.vdcr_records: Dict[str, Dict[str, Any]] = {}
        self.equipment_logs: List[Dict[str, Any]] = []
        self.vdcr_logs: List[Dict[str, Any]] = []
        self.invites: List[Dict[str, Any]] = []
        self.fail_with: Optional[PersistenceError] = None
        self.fail_logging = False

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    async def ping(self) -> bool:
        self._check()
        return True

    async def get_user(self, user_id: str):
        self._check()
        return self.users.get(user_id)

    async def aclose(self) -> None:
        pass

    # --- 팀원 ---
    async def get_team_members_by_project(self, project_id: str):
        self._check()
        if project_id == STANDALONE_PROJECT_ID:
            return []
        return [dict(m) for m in self.members if m.get("project_id") == project_id]

    async def get_project_member(self, member_id: str):
        self._check()
        for member in self.members:
            if member["id"] == member_id:
                return {"id": member["id"], "project_id": member.get("project_id")}
        return None

    async def create_project_member(self, member_data: Dict[str, Any]):
        self._check()
        if member_data.get("project_id") == STANDALONE_PROJECT_ID:
            raise PersistenceError(400, "Cannot create project member for standalone equipment.")
        row = {"id": f"member-{len(self.members) + 1}", **member_data}
        self.members.append(row)
        return dict(row)

    async def update_project_member(self, member_id: str, member_data: Dict[str, Any]):
        self._check()
        for member in self.members:
            if member["id"] == member_id:
                member.update(member_data)
                return dict(member)
        return None

    async def delete_project_member(self, member_id: str) -> None:
        self._check()
        self.members = [m for m in self.members if m["id"] != member_id]

    # --- 설비 ---
    async def get_equipment_by_project(self, project_id: str):
        self._check()
        return [dict(e) for e in self.equipment.values() if e.get("project_id") == project_id]

    async def get_equipment(self, equipment_id: str):
        self._check()
        row = self.equipment.get(equipment_id)
        return dict(row) if row else None

    async def update_equipment(self, equipment_id: str, data: Dict[str, Any], updated_by: Optional[str] = None):
        self._check()
        row = self.equipment.get(equipment_id)
        if row is None:
            return None
        row.update(data)
        row["updated_at"] = now_iso()
        if updated_by:
            row["updated_by"] = updated_by
        return dict(row)

    # --- VDCR ---
    async def get_vdcr_records_by_project(self, project_id: str):
        self._check()
        return [dict(r) for r in self.vdcr_records.values() if r.get("project_id") == project_id]

    async def get_vdcr_record(self, vdcr_id: str):
        self._check()
        row = self.vdcr_records.get(vdcr_id)
        return dict(row) if row else None

    async def update_vdcr_record(self, vdcr_id: str, update_data: Dict[str, Any]):
        self._check()
        row = self.vdcr_records.get(vdcr_id)
        if row is None:
            return None
        row.update(update_data)
        return dict(row)

    # --- 활동 로그 ---
    async def get_equipment_activity_logs(
        self,
        project_id: str,
        *,
        equipment_id: Optional[str] = None,
        equipment_ids: Optional[List[str]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        **filters,
    ):
        self._check()
        rows = [
            dict(log) for log in self.equipment_logs
            if log.get("project_id") == project_id
            and (not equipment_id or log.get("equipment_id") == equipment_id)
            and (equipment_ids is None or log.get("equipment_id") in equipment_ids)
        ]
        start = offset or 0
        return rows[start:start + limit] if limit else rows[start:]

    async def get_vdcr_activity_logs(self, project_id: str, *, vdcr_id: Optional[str] = None, **filters):
        self._check()
        return [
            dict(log) for log in self.vdcr_logs
            if log.get("project_id") == project_id and (not vdcr_id or log.get("vdcr_id") == vdcr_id)
        ]

    async def log_equipment_activity(self, log_data: Dict[str, Any]):
        self._check()
        if self.fail_logging:
            raise PersistenceError(500, "activity log insert failed")
        row = {"id": f"elog-{len(self.equipment_logs) + 1}", "created_at": now_iso(), **log_data}
        self.equipment_logs.append(row)
        return row

    async def log_vdcr_activity(self, log_data: Dict[str, Any]):
        self._check()
        if self.fail_logging:
            raise PersistenceError(500, "activity log insert failed")
        row = {"id": f"vlog-{len(self.vdcr_logs) + 1}", "created_at": now_iso(), **log_data}
        self.vdcr_logs.append(row)
        return row

    async def create_invite(self, invite_data: Dict[str, Any]):
        self._check()
        row = {"id": f"invite-{len(self.invites) + 1}", "status": "pending", **invite_data}
        self.invites.append(row)
        return row


# =============================================================================
# 2. 테스트 데이터 픽스처
# =============================================================================
def make_user(user_id: str, role: Optional[str], email: Optional[str] = None, is_active: bool = True) -> CurrentUser:
    return CurrentUser(
        id=user_id,
        email=email or f"{user_id}@example.com",
        full_name=user_id.replace("-", " ").title(),
        role=role,
        firm_id="firm-1",
        is_active=is_active,
    )


@pytest.fixture(scope="function")
def fake_persistence() -> FakePersistence:
    """
    프로젝트 하나에 설비 3대(다른 프로젝트 설비 1대 별도), 팀원 2명, VDCR 문서 3건이 있는 영속성 서비스 대역입니다.
    - editor@example.com: eq-1만 배정
    - viewer@example.com: 'All Equipment' 배정
    """
    fake = FakePersistence()
    fake.equipment = {
        "eq-1": {
            "id": "eq-1", "project_id": PROJECT_ID, "name": "Heat Exchanger", "tag_number": "HX-101",
            "type": "Heat Exchanger", "status": "in-progress", "progress": 40, "progress_phase": "fabrication",
            "location": "Bay 1", "priority": "high", "notes": "", "supervisor": "Kim",
        },
        "eq-2": {
            "id": "eq-2", "project_id": PROJECT_ID, "name": "Pressure Vessel", "tag_number": "PV-201",
            "type": "Pressure Vessel", "status": "pending", "progress": 0, "progress_phase": "documentation",
        },
        "eq-3": {
            "id": "eq-3", "project_id": PROJECT_ID, "name": "Reactor", "tag_number": "R-301",
            "type": "Reactor", "status": "pending", "progress": 10, "progress_phase": "documentation",
        },
        "eq-9": {
            "id": "eq-9", "project_id": OTHER_PROJECT_ID, "name": "Column", "tag_number": "C-901",
            "type": "Column", "status": "pending",
        },
    }
    fake.members = [
        {
            "id": "member-1", "project_id": PROJECT_ID, "name": "Editor User", "email": "Editor@Example.com",
            "role": "editor", "position": "editor", "user_id": "editor-user", "equipment_assignments": ["eq-1"],
        },
        {
            "id": "member-2", "project_id": PROJECT_ID, "name": "Viewer User", "email": "viewer@example.com",
            "role": "viewer", "position": "viewer", "user_id": "viewer-user", "equipment_assignments": ["All Equipment"],
        },
    ]
    fake.vdcr_records = {
        "vdcr-1": {
            "id": "vdcr-1", "project_id": PROJECT_ID, "document_name": "GA Drawing", "revision": "Rev-01",
            "status": "approved", "remarks": "OK", "last_update": now_iso(),
            "updated_by_user": {"full_name": "Project Manager"}, "equipment_tag_numbers": ["HX-101"],
        },
        "vdcr-2": {
            "id": "vdcr-2", "project_id": PROJECT_ID, "document_name": "Datasheet", "revision": None,
            "status": "received-for-comment", "remarks": None, "last_update": now_iso(),
        },
        "vdcr-3": {
            "id": "vdcr-3", "project_id": PROJECT_ID, "document_name": "Weld Map",
            "status": "sent-for-approval", "updated_at": now_iso(),
        },
    }
    return fake


@pytest.fixture(scope="function")
def admin_user() -> CurrentUser:
    return make_user("admin-user", Role.FIRM_ADMIN.value)


@pytest.fixture(scope="function")
def project_manager_user() -> CurrentUser:
    return make_user("pm-user", Role.PROJECT_MANAGER.value)


@pytest.fixture(scope="function")
def editor_user() -> CurrentUser:
    # 팀원 레코드와 대소문자/공백이 다른 이메일
    return make_user("editor-user", Role.EDITOR.value, email="  editor@example.com ")


@pytest.fixture(scope="function")
def viewer_user() -> CurrentUser:
    return make_user("viewer-user", Role.VIEWER.value, email="viewer@example.com")


@pytest.fixture(scope="function")
def outsider_editor_user() -> CurrentUser:
    """팀원 목록에 없는 편집자"""
    return make_user("outsider-user", Role.EDITOR.value, email="outsider@example.com")


@pytest.fixture(scope="function")
def unknown_role_user() -> CurrentUser:
    return make_user("guest-user", "contractor")


# =============================================================================
# 3. 클라이언트 픽스처
# =============================================================================
@pytest.fixture(scope="function")
def client_factory(fake_persistence: FakePersistence) -> Callable[..., Any]:
    """
    지정한 사용자로 인증된(또는 user=None이면 인증되지 않은) AsyncClient를 만드는 팩토리입니다.
    영속성 서비스는 항상 fake_persistence로 대체됩니다.
    """
    @asynccontextmanager
    async def _create_client(user: Optional[CurrentUser] = None) -> AsyncGenerator[AsyncClient, None]:
        original_overrides = main_app.dependency_overrides.copy()
        main_app.dependency_overrides[deps.get_persistence] = lambda: fake_persistence
        if user is not None:
            main_app.dependency_overrides[deps.get_current_user] = lambda: user
        try:
            transport = ASGITransport(app=main_app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                yield client
        finally:
            main_app.dependency_overrides.clear()
            main_app.dependency_overrides.update(original_overrides)

    return _create_client


@pytest_asyncio.fixture(scope="function")
async def client(client_factory) -> AsyncGenerator[AsyncClient, None]:
    """인증되지 않은 클라이언트"""
    async with client_factory() as c:
        yield c


@pytest_asyncio.fixture(scope="function")
async def admin_client(client_factory, admin_user) -> AsyncGenerator[AsyncClient, None]:
    async with client_factory(admin_user) as c:
        yield c


@pytest_asyncio.fixture(scope="function")
async def pm_client(client_factory, project_manager_user) -> AsyncGenerator[AsyncClient, None]:
    async with client_factory(project_manager_user) as c:
        yield c


@pytest_asyncio.fixture(scope="function")
async def editor_client(client_factory, editor_user) -> AsyncGenerator[AsyncClient, None]:
    async with client_factory(editor_user) as c:
        yield c


@pytest_asyncio.fixture(scope="function")
async def viewer_client(client_factory, viewer_user) -> AsyncGenerator[AsyncClient, None]:
    async with client_factory(viewer_user) as c:
        yield c
