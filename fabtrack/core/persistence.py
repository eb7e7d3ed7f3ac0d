# fabtrack/core/persistence.py

"""
외부 영속성 서비스(PostgREST/Supabase REST API) 클라이언트 모듈입니다.

이 서비스는 프로젝트, 팀원, 설비, VDCR 레코드, 활동 로그를 저장하는 외부 협력자이며,
이 애플리케이션은 저장소를 직접 소유하지 않고 httpx.AsyncClient를 통해 소비만 합니다.

- 요청: 엔티티 ID + 부분 필드 집합 (PostgREST 쿼리 문법: col=eq.value)
- 응답: 저장된 엔티티 또는 그 배열
- 오류: PersistenceError로 변환되어 호출 지점(라우터)에서 처리됩니다.
"""

import logging
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional

import httpx
from fastapi import Request

from fabtrack.core.config import Settings

logger = logging.getLogger(__name__)

# 프로젝트가 없는 독립 설비를 가리키는 예약 project_id
STANDALONE_PROJECT_ID = "standalone"


class PersistenceError(Exception):
    """영속성 서비스 호출 실패 (HTTP 오류 응답 또는 전송 실패)."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _first(rows: Any) -> Optional[Dict[str, Any]]:
    if isinstance(rows, list) and rows:
        return rows[0]
    return None


class PersistenceClient:
    """
    영속성 서비스에 대한 비동기 CRUD 클라이언트입니다.
    애플리케이션 수명 주기 동안 하나의 httpx.AsyncClient 커넥션 풀을 공유합니다.
    """

    def __init__(self, http_client: httpx.AsyncClient):
        self._http = http_client

    @classmethod
    def from_settings(cls, settings: Settings) -> "PersistenceClient":
        api_key = settings.PERSISTENCE_API_KEY.get_secret_value()
        http_client = httpx.AsyncClient(
            base_url=f"{settings.PERSISTENCE_URL.rstrip('/')}/rest/v1",
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "Prefer": "return=representation",
            },
            timeout=settings.REQUEST_TIMEOUT_SECONDS,
        )
        return cls(http_client)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        try:
            response = await self._http.request(method, path, params=params, json=json, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("Persistence %s %s failed: %s %s", method, path, e.response.status_code, e.response.text)
            raise PersistenceError(e.response.status_code, e.response.text or str(e)) from e
        except httpx.RequestError as e:
            logger.error("Persistence %s %s unreachable: %s", method, path, e)
            raise PersistenceError(503, f"Persistence service unreachable: {e}") from e

        if not response.content:
            return None
        return response.json()

    # =========================================================================
    # 0. 헬스 체크 / 사용자
    # =========================================================================
    async def ping(self) -> bool:
        await self._request("GET", "/users", params={"select": "id", "limit": "1"})
        return True

    async def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        rows = await self._request(
            "GET", "/users",
            params={"id": f"eq.{user_id}", "select": "id,email,full_name,role,firm_id,is_active"},
        )
        return _first(rows)

    # =========================================================================
    # 1. 프로젝트 팀원 (project_members)
    # =========================================================================
    async def get_team_members_by_project(self, project_id: str) -> List[Dict[str, Any]]:
        """
        프로젝트의 팀원 목록을 users 테이블과 조인하여 조회하고, 표시용 형태로 변환합니다.
        """
        if project_id == STANDALONE_PROJECT_ID:
            return []
        rows = await self._request(
            "GET", "/project_members",
            params={
                "project_id": f"eq.{project_id}",
                "select": "*,users(*)",
                "order": "created_at.desc",
            },
        )
        members = []
        for member in rows or []:
            user = member.get("users") or {}
            members.append({
                "id": member.get("id"),
                "name": user.get("full_name") or user.get("name") or "Unknown",
                "email": user.get("email") or member.get("email") or "",
                "role": member.get("role"),
                "position": member.get("position") or member.get("role"),
                "user_id": member.get("user_id"),
                "project_id": member.get("project_id"),
                "equipment_assignments": member.get("equipment_assignments") or [],
            })
        return members

    async def get_project_member(self, member_id: str) -> Optional[Dict[str, Any]]:
        rows = await self._request(
            "GET", "/project_members",
            params={"id": f"eq.{member_id}", "select": "id,project_id"},
        )
        return _first(rows)

    async def create_project_member(self, member_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if member_data.get("project_id") == STANDALONE_PROJECT_ID:
            raise PersistenceError(400, "Cannot create project member for standalone equipment.")
        rows = await self._request("POST", "/project_members", json=member_data)
        return _first(rows)

    async def update_project_member(self, member_id: str, member_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        update_data = dict(member_data)
        # user_id가 비어 있으면 제약 조건 충돌을 피하기 위해 제거합니다.
        if not update_data.get("user_id"):
            update_data.pop("user_id", None)
        rows = await self._request("PATCH", "/project_members", params={"id": f"eq.{member_id}"}, json=update_data)
        return _first(rows)

    async def delete_project_member(self, member_id: str) -> None:
        await self._request(
            "DELETE", "/project_members",
            params={"id": f"eq.{member_id}"},
            headers={"Prefer": "return=minimal"},
        )

    # =========================================================================
    # 2. 설비 (equipment)
    # =========================================================================
    async def get_equipment_by_project(self, project_id: str) -> List[Dict[str, Any]]:
        rows = await self._request(
            "GET", "/equipment",
            params={"project_id": f"eq.{project_id}", "select": "*", "order": "created_at.desc"},
        )
        return rows or []

    async def get_equipment(self, equipment_id: str) -> Optional[Dict[str, Any]]:
        rows = await self._request("GET", "/equipment", params={"id": f"eq.{equipment_id}", "select": "*"})
        return _first(rows)

    async def update_equipment(
        self, equipment_id: str, equipment_data: Dict[str, Any], updated_by: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        update_data = {**equipment_data, "updated_at": datetime.now(UTC).isoformat()}
        if updated_by:
            update_data["updated_by"] = updated_by
        rows = await self._request("PATCH", "/equipment", params={"id": f"eq.{equipment_id}"}, json=update_data)
        return _first(rows)

    # =========================================================================
    # 3. VDCR 레코드 (vdcr_records)
    # =========================================================================
    async def get_vdcr_records_by_project(self, project_id: str) -> List[Dict[str, Any]]:
        rows = await self._request(
            "GET", "/vdcr_records",
            params={
                "project_id": f"eq.{project_id}",
                "select": "*,updated_by_user:updated_by(full_name,email)",
                "order": "created_at.desc",
            },
        )
        return rows or []

    async def get_vdcr_record(self, vdcr_id: str) -> Optional[Dict[str, Any]]:
        rows = await self._request("GET", "/vdcr_records", params={"id": f"eq.{vdcr_id}", "select": "*"})
        return _first(rows)

    async def update_vdcr_record(self, vdcr_id: str, update_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        rows = await self._request("PATCH", "/vdcr_records", params={"id": f"eq.{vdcr_id}"}, json=update_data)
        return _first(rows)

    # =========================================================================
    # 4. 활동 로그 (equipment_activity_logs / vdcr_activity_logs)
    # =========================================================================
    @staticmethod
    def _activity_params(
        project_id: str,
        select: str,
        *,
        activity_type: Optional[str] = None,
        user_id: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        **eq_filters: Optional[str],
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"project_id": f"eq.{project_id}", "select": select}
        for column, value in eq_filters.items():
            if value:
                params[column] = f"eq.{value}"
        if activity_type:
            params["activity_type"] = f"eq.{activity_type}"
        if user_id:
            params["created_by"] = f"eq.{user_id}"
        # PostgREST에서 같은 컬럼에 두 조건을 걸 때는 and 필터를 사용합니다.
        if date_from and date_to:
            params["and"] = f"(created_at.gte.{date_from},created_at.lte.{date_to})"
        elif date_from:
            params["created_at"] = f"gte.{date_from}"
        elif date_to:
            params["created_at"] = f"lte.{date_to}"
        params["order"] = "created_at.desc"
        if limit:
            params["limit"] = str(limit)
        if offset:
            params["offset"] = str(offset)
        return params

    async def get_equipment_activity_logs(
        self,
        project_id: str,
        *,
        equipment_id: Optional[str] = None,
        equipment_ids: Optional[List[str]] = None,
        **filters: Any,
    ) -> List[Dict[str, Any]]:
        """
        equipment_ids가 주어지면 해당 설비들의 로그로 제한합니다. (limit/offset보다 먼저 적용)
        """
        params = self._activity_params(
            project_id,
            "*,equipment:equipment_id(id,tag_number,type,name,project_id),created_by_user:created_by(full_name,email)",
            equipment_id=equipment_id,
            **filters,
        )
        if equipment_ids is not None and not equipment_id:
            params["equipment_id"] = f"in.({','.join(equipment_ids)})"
        rows = await self._request("GET", "/equipment_activity_logs", params=params)
        return rows or []

    async def get_vdcr_activity_logs(
        self, project_id: str, *, vdcr_id: Optional[str] = None, **filters: Any
    ) -> List[Dict[str, Any]]:
        params = self._activity_params(
            project_id,
            "*,created_by_user:created_by(full_name,email),vdcr_record:vdcr_id(document_name,status)",
            vdcr_id=vdcr_id,
            **filters,
        )
        rows = await self._request("GET", "/vdcr_activity_logs", params=params)
        return rows or []

    async def log_equipment_activity(self, log_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        rows = await self._request("POST", "/equipment_activity_logs", json=log_data)
        return _first(rows)

    async def log_vdcr_activity(self, log_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        rows = await self._request("POST", "/vdcr_activity_logs", json=log_data)
        return _first(rows)

    # =========================================================================
    # 5. 초대 (invites)
    # =========================================================================
    async def create_invite(self, invite_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        rows = await self._request("POST", "/invites", json={"status": "pending", **invite_data})
        return _first(rows)


def get_persistence(request: Request) -> PersistenceClient:
    """
    FastAPI 의존성: lifespan에서 생성되어 app.state에 보관된 영속성 클라이언트를 반환합니다.
    """
    return request.app.state.persistence
