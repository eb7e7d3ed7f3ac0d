import logging
from typing import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

# 핵심 설정 및 영속성 클라이언트 모듈 임포트
from fabtrack.core.config import settings
from fabtrack.core.persistence import PersistenceClient, PersistenceError, get_persistence

from fabtrack import API_PREFIX

# 각 도메인의 라우터들을 임포트합니다.
from fabtrack.domains.team.routers import router as team_router
from fabtrack.domains.equipment.routers import router as equipment_router
from fabtrack.domains.activity.routers import router as activity_router
from fabtrack.domains.vdcr.routers import router as vdcr_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# -- 애플리케이션 수명 주기 이벤트 핸들러 --
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    외부 영속성 서비스 HTTP 클라이언트를 생성하고, 종료 시 연결을 닫습니다.
    """
    logger.info("FastAPI 애플리케이션 시작 중... (env=%s, debug=%s)", settings.APP_ENV, settings.DEBUG_MODE)
    app.state.persistence = PersistenceClient.from_settings(settings)
    logger.info("영속성 서비스 클라이언트 생성 완료: %s", settings.PERSISTENCE_URL)

    yield  # 애플리케이션 실행

    logger.info("FastAPI 애플리케이션 종료 중...")
    await app.state.persistence.aclose()
    logger.info("영속성 서비스 클라이언트 종료 완료.")


# -- FastAPI 애플리케이션 인스턴스 생성 --
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    debug=settings.DEBUG_MODE,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# -- CORS 미들웨어 설정 --
# 프로덕션에서는 CORS_ORIGINS를 실제 대시보드 도메인으로 제한해야 합니다.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -- 도메인 라우터 포함 --
# 모든 도메인 엔드포인트는 프로젝트 단위 경로(/projects/{project_id}/...) 아래에 있습니다.
app.include_router(team_router, prefix=f"{API_PREFIX}/projects")
app.include_router(equipment_router, prefix=f"{API_PREFIX}/projects")
app.include_router(activity_router, prefix=f"{API_PREFIX}/projects")
app.include_router(vdcr_router, prefix=f"{API_PREFIX}/projects")


# -- 루트 엔드포인트 --
@app.get("/", summary="API Root", response_description="Welcome message and documentation link.")
async def read_root():
    """
    Fabtrack API의 루트 엔드포인트입니다.
    API의 시작점을 알리고 문서 링크를 제공합니다.
    """
    return {"message": "Welcome to Fabtrack API. Visit /docs for interactive API documentation."}


# -- 헬스 체크 엔드포인트 --
@app.get("/health-check", summary="Health Check", response_description="Status of the application and persistence service.")
async def health_check(persistence: PersistenceClient = Depends(get_persistence)):
    """
    애플리케이션의 헬스 체크 엔드포인트입니다.
    외부 영속성 서비스에 가벼운 요청을 보내 연결 상태를 확인합니다.
    """
    try:
        await persistence.ping()
    except PersistenceError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Persistence service error during health check: {e.message}",
        )
    return {"status": "ok", "persistence_connection": "successful"}


# -- Uvicorn 서버 직접 실행 (개발용) --
# if __name__ == "__main__":
#     import uvicorn
#     uvicorn.run("fabtrack.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
