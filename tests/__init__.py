# tests/__init__.py

"""
Fabtrack API의 테스트 스위트 패키지입니다.

주요 구성:
- `domains/`: 각 비즈니스 도메인(team, equipment, activity, vdcr)의 순수 함수 및 API 엔드포인트 테스트.
- `core/`: 설정, 영속성 서비스 클라이언트, 보안, 알림 메일 등 공통 모듈 테스트.
- `utils/`: 날짜 표시 및 CSV 내보내기 유틸리티 테스트.
- `conftest.py`: 인메모리 영속성 서비스 대역, 역할별 사용자, 인증된 AsyncClient 픽스처.
"""

__title__ = "Fabtrack API Tests"
__description__ = "Test suite for Fabtrack FastAPI application."
__version__ = "0.1.0"
__all__ = []
