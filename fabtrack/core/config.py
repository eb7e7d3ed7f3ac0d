# fabtrack/core/config.py

from typing import List, Literal, Optional
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
import os

# 프로젝트의 루트 디렉토리 경로를 계산합니다.
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class Settings(BaseSettings):
    """
    애플리케이션의 모든 설정을 정의하는 Pydantic BaseSettings 모델입니다.
    환경 변수 및 .env 파일에서 값을 자동으로 로드합니다.
    """

    # --- Pydantic Settings 설정 ---
    model_config = SettingsConfigDict(
        env_file=os.path.join(BASE_DIR, '.env'),  # 프로젝트 루트의 .env 파일을 명시적으로 지정
        env_file_encoding='utf-8',
        extra='ignore',                      # 모델에 없는 변수는 무시
        case_sensitive=True
    )

    # --- 애플리케이션 기본 설정 ---
    APP_NAME: str = "Fabtrack API"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Fabrication project tracking API (equipment, VDCR, team)"
    APP_ENV: str = Field("development", description="Application environment (e.g., development, production, testing)")
    DEBUG_MODE: bool = Field(False, description="Enable debug mode for detailed logging and error messages")
    LOG_LEVEL: str = Field("INFO", description="Root logging level")

    # --- 외부 영속성 서비스 (PostgREST) 설정 ---
    PERSISTENCE_URL: str = Field(..., description="Base URL of the persistence service (without /rest/v1)")
    PERSISTENCE_API_KEY: SecretStr = Field(..., description="Service key sent as apikey and bearer token")
    REQUEST_TIMEOUT_SECONDS: float = Field(30.0, description="Timeout for persistence requests in seconds")

    # --- JWT 설정 (영속성 서비스 인증이 발급한 사용자 토큰 검증) ---
    JWT_SECRET: SecretStr = Field(..., description="Secret used to verify user access tokens")
    ALGORITHM: str = Field("HS256", description="Algorithm used for JWT signing")
    JWT_AUDIENCE: str = Field("authenticated", description="Expected 'aud' claim")

    # --- 권한 정책 ---
    # 알 수 없는 역할에 대한 설비 가시성 정책: 'deny'(기본, 빈 목록) 또는 'allow'(전체 목록)
    UNKNOWN_ROLE_POLICY: Literal["deny", "allow"] = Field("deny", description="Visibility policy for unrecognized roles")

    # --- 이메일 알림 설정 (미설정 시 발송 생략) ---
    EMAILJS_API_URL: str = Field("https://api.emailjs.com/api/v1.0/email/send")
    EMAILJS_SERVICE_ID: Optional[str] = None
    EMAILJS_TEMPLATE_ID: Optional[str] = None
    EMAILJS_PUBLIC_KEY: Optional[str] = None
    DASHBOARD_URL: str = Field("http://localhost:5173", description="Dashboard link placed in notifications")

    # --- CORS ---
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])


settings = Settings()
