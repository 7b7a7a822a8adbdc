"""
상품 카탈로그 서비스 메인 애플리케이션
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from catalog.core.config import get_settings
from catalog.core.database import close_db_connections, init_models
from catalog.core.exceptions import CatalogError
from catalog.core.logger import setup_loguru
from catalog.services.cache_manager import CacheManager
from catalog import dependencies

settings = get_settings()

# 전역 서비스 인스턴스
cache_manager: CacheManager = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 생명주기 관리"""
    global cache_manager

    setup_loguru()
    try:
        logger.info("카탈로그 서비스 시작 중...")

        if settings.DEBUG:
            await init_models()

        cache_manager = CacheManager()
        await cache_manager.initialize()
        dependencies.set_cache_manager(cache_manager)

        logger.info("카탈로그 서비스 시작 완료")

        yield

    except Exception as e:
        logger.error(f"서비스 시작 중 오류 발생: {e}")
        raise
    finally:
        logger.info("카탈로그 서비스 종료 중...")

        if cache_manager:
            await cache_manager.close()
        await close_db_connections()

        logger.info("카탈로그 서비스 종료 완료")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="카테고리 트리와 카테고리별 속성(직접/상속/전역) 조회 API",
    version="0.1.0",
    lifespan=lifespan
)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# 라우터 등록 (import를 여기서 해서 순환 import 방지)
from catalog.api.routers import category_router, attribute_router  # noqa: E402

app.include_router(category_router, prefix=f"{settings.API_V1_STR}/categories", tags=["카테고리"])
app.include_router(attribute_router, prefix=f"{settings.API_V1_STR}/attributes", tags=["속성"])


@app.get("/health")
async def health_check():
    """헬스 체크"""
    cache_status = "healthy" if cache_manager and await cache_manager.is_healthy() else "unhealthy"
    if cache_status != "healthy":
        raise HTTPException(status_code=503, detail={"status": "unhealthy", "cache_manager": cache_status})
    return {
        "status": "healthy",
        "service": settings.SERVICE_NAME,
        "services": {
            "cache_manager": cache_status
        }
    }


@app.exception_handler(CatalogError)
async def catalog_exception_handler(request, exc: CatalogError):
    """서비스 예외를 HTTP 상태 코드로 변환"""
    if exc.status_code >= 500:
        logger.error(f"서비스 오류: {exc.message}")
    else:
        logger.info(f"요청 거부 ({exc.status_code}): {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """전역 예외 처리"""
    logger.opt(exception=exc).error(f"예외 발생: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "내부 서버 오류가 발생했습니다."}
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "catalog.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info"
    )
