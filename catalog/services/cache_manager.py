"""
Redis 캐시 매니저
카테고리 트리 및 속성 조회 결과 캐싱
"""
import hashlib
import json
from typing import Any, Dict, Optional

import redis.asyncio as redis
from redis.asyncio import Redis
from redis.exceptions import RedisError

from catalog.core.config import get_settings
from catalog.core.logger import LoggerMixin, LogContext


class CacheManager(LoggerMixin):
    """Redis 캐시 매니저

    모든 키는 CACHE_KEY_PREFIX 아래에 둔다. reset_all()은 이 접두사 아래의
    키만 지우므로 Redis를 다른 서비스와 같이 써도 안전하다.
    """

    def __init__(self, redis_client: Optional[Redis] = None):
        self.settings = get_settings()
        self.redis_client: Optional[Redis] = redis_client
        self.prefix = self.settings.CACHE_KEY_PREFIX
        self._init_namespaces()
        self._initialized = False

    async def initialize(self) -> None:
        """캐시 매니저 초기화"""
        if self._initialized:
            return

        with LogContext(self.logger, "캐시 매니저 초기화") as ctx:
            if self.redis_client is None:
                self.redis_client = redis.from_url(
                    self.settings.REDIS_URL,
                    password=self.settings.REDIS_PASSWORD,
                    decode_responses=True,
                    retry_on_timeout=True,
                    health_check_interval=30
                )

            # 연결 테스트
            await self.redis_client.ping()
            ctx.log_progress("Redis 연결 성공")
            self._initialized = True

    def _init_namespaces(self) -> None:
        """캐시 네임스페이스 정의"""
        self.namespaces = {
            'category_tree': f'{self.prefix}:category_tree',
            'attributes': f'{self.prefix}:attributes',
        }

    async def close(self) -> None:
        """Redis 연결 종료"""
        if self.redis_client:
            await self.redis_client.close()
            self.logger.info("Redis 연결 종료")

    async def is_healthy(self) -> bool:
        """캐시 매니저 상태 확인"""
        if not self.redis_client:
            return False
        try:
            await self.redis_client.ping()
            return True
        except RedisError as e:
            self.logger.warning(f"Redis 헬스 체크 실패: {e}")
            return False

    # ===========================================
    # 키 생성
    # ===========================================

    def tree_key(self, include_counts: bool) -> str:
        """카테고리 트리 캐시 키 (카운트 포함 여부별로 하나씩)"""
        return f"{self.namespaces['category_tree']}:{str(include_counts).lower()}"

    def tree_keys(self) -> list:
        return [self.tree_key(True), self.tree_key(False)]

    def attributes_key(self, payload: Dict[str, Any]) -> str:
        """속성 조회 캐시 키

        payload는 정규화된 필터여야 한다. 키 순서를 고정해 직렬화한 뒤 해시한다.
        """
        serialized = json.dumps(payload, sort_keys=True, separators=(",", ":"))
        digest = hashlib.md5(serialized.encode("utf-8")).hexdigest()
        return f"{self.namespaces['attributes']}:{digest}"

    # ===========================================
    # 일반 캐시 관리
    # ===========================================

    async def get_cache(self, key: str) -> Optional[Any]:
        """
        캐시 데이터 조회

        Args:
            key (str): 캐시 키

        Returns:
            Optional[Any]: 캐시된 데이터 또는 None
        """
        try:
            data = await self.redis_client.get(key)
        except Exception as e:
            self.logger.error(f"캐시 조회 실패 [{key}]: {e}")
            raise

        if data is None:
            return None
        return json.loads(data)

    async def set_cache(self, key: str, data: Any, ttl: Optional[int] = None) -> None:
        """
        캐시 데이터 저장

        Args:
            key (str): 캐시 키
            data (Any): 저장할 데이터 (JSON 직렬화 가능해야 함)
            ttl (Optional[int]): TTL (초), None이면 만료 없음
        """
        value = json.dumps(data, ensure_ascii=False, default=str)
        try:
            if ttl:
                await self.redis_client.setex(key, ttl, value)
            else:
                await self.redis_client.set(key, value)
        except Exception as e:
            self.logger.error(f"캐시 저장 실패 [{key}]: {e}")
            raise

    async def delete_cache_key(self, *keys: str) -> int:
        """
        캐시 키 삭제

        Returns:
            int: 삭제된 키 개수
        """
        if not keys:
            return 0
        try:
            return await self.redis_client.delete(*keys)
        except Exception as e:
            self.logger.error(f"캐시 키 삭제 실패 {keys}: {e}")
            raise

    async def reset_all(self) -> int:
        """
        이 서비스의 모든 네임스페이스 캐시 삭제

        Returns:
            int: 삭제된 키 개수
        """
        deleted = 0
        try:
            batch = []
            async for key in self.redis_client.scan_iter(match=f"{self.prefix}:*", count=500):
                batch.append(key)
                if len(batch) >= 500:
                    deleted += await self.redis_client.delete(*batch)
                    batch = []
            if batch:
                deleted += await self.redis_client.delete(*batch)
        except Exception as e:
            self.logger.error(f"전체 캐시 초기화 실패: {e}")
            raise

        self.logger.info(f"전체 캐시 초기화: {deleted}개 키 삭제")
        return deleted
