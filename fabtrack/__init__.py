# fabtrack/__init__.py

"""
Fabtrack FastAPI 애플리케이션의 메인 패키지입니다.

제작(fabrication) 프로젝트 대시보드를 위한 백엔드로,
설비 가시성 필터, 활동 로그 변경 이력 포맷, VDCR 상태 분류 및 CSV 내보내기를 제공합니다.
공통 설정, 외부 영속성 서비스 클라이언트, 보안 유틸리티를 담는 core 서브패키지와
각 비즈니스 도메인을 대표하는 domains 서브패키지로 구성됩니다.
"""

APP_NAME = "Fabtrack API"
APP_VERSION = "0.1.0"
API_PREFIX = "/api/v1"  # API 라우트의 공통 접두사 (main.py에서 적용)

__version__ = APP_VERSION
__title__ = APP_NAME
__description__ = "Fabrication project tracking (equipment, VDCR, team) API backend."
__all__ = []
