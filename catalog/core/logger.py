"""
카탈로그 서비스 로깅 설정 (Loguru 기반)
"""
import sys
from datetime import datetime
from pathlib import Path

from loguru import logger
from catalog.core.config import get_settings


CONSOLE_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}"


def setup_loguru() -> None:
    """Loguru 로거 설정"""
    settings = get_settings()

    # 기본 로거 제거 (loguru의 기본 stderr 핸들러)
    logger.remove()

    log_level = settings.LOG_LEVEL.upper()

    # 콘솔 로거
    logger.add(
        sys.stderr,
        level=log_level,
        format=CONSOLE_FORMAT,
        colorize=True,
        backtrace=True,
        diagnose=settings.DEBUG
    )

    if not settings.LOG_TO_FILE:
        logger.info(f"Loguru 로깅 시스템 초기화 완료 (콘솔 전용, 레벨: {log_level})")
        return

    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    # 파일 로거 (일반 로그)
    logger.add(
        log_dir / "catalog_{time:YYYY-MM-DD}.log",
        level=log_level,
        format=FILE_FORMAT,
        rotation="00:00",  # 매일 자정에 로테이션
        retention="30 days",
        compression="gz",
        encoding="utf-8",
        enqueue=True  # 멀티프로세싱 환경에서 안전
    )

    # 에러 로거 (에러만 별도 파일)
    logger.add(
        log_dir / "error_{time:YYYY-MM-DD}.log",
        level="ERROR",
        format=FILE_FORMAT + " | {exception}",
        rotation="00:00",
        retention="90 days",  # 에러는 90일 보관
        compression="gz",
        encoding="utf-8",
        enqueue=True,
        backtrace=True
    )

    logger.info("Loguru 로깅 시스템 초기화 완료")
    logger.info(f"로그 레벨: {log_level}")
    logger.info(f"로그 디렉토리: {log_dir}")


class LoggerMixin:
    """로거 믹스인 클래스 (Loguru 버전)"""

    @property
    def logger(self) -> "loguru.Logger":
        """클래스별 로거 반환"""
        return logger.bind(name=self.__class__.__name__)


class LogContext:
    """로그 컨텍스트 관리자 (Loguru 버전)"""

    def __init__(self, logger_instance: "loguru.Logger", operation: str, **kwargs):
        self.logger = logger_instance
        self.operation = operation
        self.context = kwargs
        self.start_time = None

    def __enter__(self):
        self.start_time = datetime.now()
        self.logger.debug(f"[{self.operation}] 시작")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = datetime.now() - self.start_time

        if exc_type is None:
            self.logger.debug(
                f"[{self.operation}] 완료 (소요시간: {duration.total_seconds():.3f}초)"
            )
        else:
            self.logger.error(
                f"[{self.operation}] 실패 (소요시간: {duration.total_seconds():.3f}초): {exc_val}"
            )
        # 예외는 그대로 전파
        return False

    def log_progress(self, message: str):
        """진행 상황 로깅"""
        self.logger.info(f"[{self.operation}] {message}")
