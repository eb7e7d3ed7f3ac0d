# fabtrack/core/notifications.py

"""
프로젝트 팀원 배정 알림 메일 발송 모듈입니다. (EmailJS 호환 HTTP API)

알림은 부가 작업이므로 실패해도 예외를 발생시키지 않고
{"success": bool, "message": str} 형태의 결과만 반환합니다.
"""

import logging
import re
from typing import Dict, Optional, Union

import httpx

from fabtrack.core.config import settings

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PLACEHOLDER_VALUES = {"your_service_id", "your_template_id", "your_public_key"}


def _credentials_configured() -> bool:
    values = (settings.EMAILJS_SERVICE_ID, settings.EMAILJS_TEMPLATE_ID, settings.EMAILJS_PUBLIC_KEY)
    return all(values) and not any(value in PLACEHOLDER_VALUES for value in values)


async def send_project_team_notification(
    *,
    member_name: str,
    member_email: str,
    role: str,
    project_name: str,
    company_name: str,
    equipment_name: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Union[bool, str]]:
    """
    팀원에게 프로젝트 배정 안내 메일을 발송합니다.
    """
    if not _credentials_configured():
        logger.info("Email credentials not configured, skipping notification to %s", member_email)
        return {"success": True, "message": "Email credentials not configured"}

    if not EMAIL_PATTERN.match(member_email or ""):
        return {"success": False, "message": f"Invalid email format: {member_email}"}

    dashboard_url = settings.DASHBOARD_URL
    template_params = {
        "to_name": member_name,
        "to_email": member_email,
        "company_name": company_name,
        "role": role,
        "project_name": project_name,
        "equipment_name": equipment_name or "",
        "login_url": dashboard_url,
        "dashboard_url": dashboard_url,
        "message": (
            f"Hi {member_name},\n\n"
            f"You have been assigned as {role} for the project: {project_name}\n\n"
            f"Company: {company_name}\n\n"
            f"Access your dashboard here: {dashboard_url}\n\n"
            f"Login with your email: {member_email}\n\n"
            "Best regards,\nEngineering Project Management Team"
        ),
    }
    payload = {
        "service_id": settings.EMAILJS_SERVICE_ID,
        "template_id": settings.EMAILJS_TEMPLATE_ID,
        "user_id": settings.EMAILJS_PUBLIC_KEY,
        "template_params": template_params,
    }

    client = http_client or httpx.AsyncClient(timeout=settings.REQUEST_TIMEOUT_SECONDS)
    try:
        response = await client.post(settings.EMAILJS_API_URL, json=payload)
    except httpx.HTTPError as e:
        logger.warning("Project team email error for %s: %s", member_email, e)
        return {"success": False, "message": f"Email service error: {e}"}
    finally:
        if http_client is None:
            await client.aclose()

    if response.status_code == 200:
        return {"success": True, "message": "Email sent successfully"}
    logger.warning("Project team email failed: %s %s", response.status_code, response.text)
    return {"success": False, "message": f"Email failed: {response.status_code} - {response.text}"}
