"""
카탈로그 서비스 설정 관리
"""
import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


# 현재 파일 기준으로 catalog 패키지 경로 계산
CURRENT_DIR = Path(__file__).parent.parent  # catalog 디렉토리
ROOT_DIR = CURRENT_DIR.parent  # 프로젝트 루트 디렉토리

# 환경 변수 파일 경로들 (존재하는 파일들만)
ENV_FILES = []
potential_env_files = [
    CURRENT_DIR / ".env.development",
    CURRENT_DIR / ".env.production",
    CURRENT_DIR / ".env",
    ROOT_DIR / ".env.development",
    ROOT_DIR / ".env"
]

for env_file in potential_env_files:
    if env_file.exists():
        ENV_FILES.append(str(env_file))


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # 기본 설정
    DEBUG: bool = Field(default=False, env="DEBUG")
    ENV: str = Field(default=os.getenv("ENV", "development"), env="ENV")
    SERVICE_NAME: str = "catalog-service"

    # API 설정
    API_V1_STR: str = Field(default="/api/v1", env="API_V1_STR")
    PROJECT_NAME: str = Field(default="Catalog", env="PROJECT_NAME")

    # 데이터베이스 상세 설정
    POSTGRES_USER: str = Field(default="catalog_user", env="POSTGRES_USER")
    POSTGRES_PASSWORD: str = Field(default="catalog", env="POSTGRES_PASSWORD")
    POSTGRES_DB: str = Field(default="catalog", env="POSTGRES_DB")
    POSTGRES_HOST: str = Field(default="localhost", env="POSTGRES_HOST")
    POSTGRES_PORT: int = Field(default=5432, env="POSTGRES_PORT")

    # 테스트/로컬 실행용 (예: sqlite+aiosqlite:///./catalog.db)
    DATABASE_URL_OVERRIDE: Optional[str] = Field(default=None, env="DATABASE_URL_OVERRIDE")

    @property
    def DATABASE_URL(self) -> str:
        """비동기 데이터베이스 연결 URL"""
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # 연결 풀 설정
    DB_POOL_SIZE: int = Field(default=20, env="DB_POOL_SIZE")
    DB_MAX_OVERFLOW: int = Field(default=30, env="DB_MAX_OVERFLOW")
    DB_POOL_TIMEOUT: int = Field(default=30, env="DB_POOL_TIMEOUT")
    DB_POOL_RECYCLE: int = Field(default=3600, env="DB_POOL_RECYCLE")

    # Redis 설정
    REDIS_URL: str = Field(default="redis://localhost:6379/0", env="REDIS_URL")
    REDIS_PASSWORD: Optional[str] = Field(default=None, env="REDIS_PASSWORD")

    # 캐시 설정
    CACHE_KEY_PREFIX: str = Field(default="catalog", env="CACHE_KEY_PREFIX")
    CACHE_TTL_TREE: int = Field(default=300, env="CACHE_TTL_TREE")  # 카테고리 트리 TTL (초, 5분)
    CACHE_TTL_ATTRIBUTES: int = Field(default=60, env="CACHE_TTL_ATTRIBUTES")  # 속성 조회 결과 TTL (초, 1분)

    # 페이지네이션 기본값
    DEFAULT_PAGE_LIMIT: int = Field(default=10, env="DEFAULT_PAGE_LIMIT")

    # CORS 설정
    ALLOWED_ORIGINS: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:8000",
        ],
        env="ALLOWED_ORIGINS"
    )

    # 로깅 설정
    LOG_LEVEL: str = Field(default="INFO", env="LOG_LEVEL")
    LOG_DIR: str = Field(default="./logs", env="LOG_DIR")
    LOG_TO_FILE: bool = Field(default=True, env="LOG_TO_FILE")

    class Config:
        case_sensitive = True
        env_file_encoding = 'utf-8'
        env_file = ENV_FILES
        extra = "ignore"  # 추가 환경변수 무시


@lru_cache()
def get_settings() -> Settings:
    """설정 인스턴스 반환 (캐시됨)"""
    return Settings()
