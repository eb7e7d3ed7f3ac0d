# tests/core/test_notifications.py

"""
프로젝트 팀원 배정 알림 메일 발송(send_project_team_notification) 테스트 모듈입니다.
"""

import json

import httpx
import pytest

from fabtrack.core import notifications
from fabtrack.core.config import settings


@pytest.fixture(name="emailjs_configured")
def emailjs_configured_fixture(monkeypatch):
    monkeypatch.setattr(settings, "EMAILJS_SERVICE_ID", "service_abc")
    monkeypatch.setattr(settings, "EMAILJS_TEMPLATE_ID", "template_abc")
    monkeypatch.setattr(settings, "EMAILJS_PUBLIC_KEY", "public_abc")


def make_http_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


NOTIFICATION_ARGS = {
    "member_name": "Kim Welder",
    "member_email": "kim@example.com",
    "role": "editor",
    "project_name": "Refinery Expansion",
    "company_name": "Acme Fabrication",
}


@pytest.mark.asyncio
class TestProjectTeamNotification:

    async def test_unconfigured_credentials_skip_sending(self, monkeypatch):
        """(성공) 자격 증명이 없으면 발송하지 않고 성공으로 처리합니다."""
        monkeypatch.setattr(settings, "EMAILJS_SERVICE_ID", None)

        def handler(request):
            raise AssertionError("no request expected")

        result = await notifications.send_project_team_notification(
            **NOTIFICATION_ARGS, http_client=make_http_client(handler)
        )
        assert result == {"success": True, "message": "Email credentials not configured"}

    async def test_placeholder_credentials_skip_sending(self, emailjs_configured, monkeypatch):
        monkeypatch.setattr(settings, "EMAILJS_SERVICE_ID", "your_service_id")
        result = await notifications.send_project_team_notification(**NOTIFICATION_ARGS)
        assert result["message"] == "Email credentials not configured"

    async def test_invalid_email(self, emailjs_configured):
        args = {**NOTIFICATION_ARGS, "member_email": "not-an-email"}
        result = await notifications.send_project_team_notification(**args)
        assert result["success"] is False
        assert "Invalid email format" in result["message"]

    async def test_sends_template_params(self, emailjs_configured):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, text="OK")

        result = await notifications.send_project_team_notification(
            **NOTIFICATION_ARGS, http_client=make_http_client(handler)
        )
        assert result == {"success": True, "message": "Email sent successfully"}
        assert captured["url"] == settings.EMAILJS_API_URL
        body = captured["body"]
        assert body["service_id"] == "service_abc"
        assert body["template_params"]["to_email"] == "kim@example.com"
        assert body["template_params"]["dashboard_url"] == settings.DASHBOARD_URL
        assert "assigned as editor for the project: Refinery Expansion" in body["template_params"]["message"]

    async def test_error_response(self, emailjs_configured):
        def handler(request):
            return httpx.Response(400, text="The template ID is invalid")

        result = await notifications.send_project_team_notification(
            **NOTIFICATION_ARGS, http_client=make_http_client(handler)
        )
        assert result == {"success": False, "message": "Email failed: 400 - The template ID is invalid"}

    async def test_transport_error_is_not_raised(self, emailjs_configured):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        result = await notifications.send_project_team_notification(
            **NOTIFICATION_ARGS, http_client=make_http_client(handler)
        )
        assert result["success"] is False
        assert result["message"].startswith("Email service error")
