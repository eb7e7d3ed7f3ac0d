# tests/domains/__init__.py

"""
Fabtrack API의 도메인별 테스트 스위트 패키지입니다.

- `test_team_n.py`: 'team' 도메인 (팀원, 설비 배정, 초대)
- `test_equipment_n.py`: 'equipment' 도메인 (가시성 필터, 설비 수정 및 변경 이력)
- `test_activity_n.py`: 'activity' 도메인 (변경 내역 포맷, 활동 로그 조회 및 내보내기)
- `test_vdcr_n.py`: 'vdcr' 도메인 (상태별 분류, 요약, 상태 변경, 로그 내보내기)
"""

__title__ = "Fabtrack Domain Tests"
__description__ = "Categorized tests for each business domain in Fabtrack FastAPI application."
__version__ = "0.1.0"
__all__ = []
