"""
이벤트 버스 — Redis Stream 기반, Redis 없으면 인메모리 큐로 fallback
- 텔레메트리는 스트림(채널)마다 key(차량 ID)와 JSON payload로 저장된다.
"""

import json
import logging
from collections import defaultdict
from datetime import datetime, timezone

import redis

logger = logging.getLogger(__name__)


class InMemoryEventBus:
    """Redis 없을 때 사용하는 인메모리 이벤트 버스"""

    def __init__(self, max_size: int = 1000):
        self._streams: dict[str, list[dict]] = defaultdict(list)
        self._max_size = max_size  # 스트림당 최대 이벤트 수
        self._sequence: dict[str, int] = defaultdict(int)

    def publish(self, stream: str, data: dict, key: str | None = None):
        """이벤트를 스트림에 발행"""
        self._sequence[stream] += 1
        event = {
            "id": f"{self._sequence[stream]}",
            "key": key,
            "data": data,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        self._streams[stream].append(event)
        # 최대 크기 초과 시 오래된 이벤트 제거
        if len(self._streams[stream]) > self._max_size:
            self._streams[stream] = self._streams[stream][-self._max_size:]

    def get_recent(self, stream: str, count: int = 10) -> list[dict]:
        """최근 이벤트 조회"""
        if count <= 0 or stream not in self._streams:
            return []
        return self._streams[stream][-count:]

    def get_all_streams(self) -> dict[str, int]:
        """모든 스트림의 이벤트 수 반환"""
        return {k: len(v) for k, v in self._streams.items()}


class EventBus:
    """
    Redis Stream 래퍼 — Redis 연결 실패 시 InMemoryEventBus로 fallback
    """

    def __init__(self, redis_url: str = "redis://localhost:6379",
                 enabled: bool = True, maxlen: int = 1000):
        self._redis = None
        self._maxlen = maxlen
        self._in_memory = InMemoryEventBus(max_size=maxlen)
        self._use_redis = False
        self.enabled = enabled

        if not enabled:
            logger.info("Redis 비활성화 — 인메모리 이벤트 버스 사용")
            return

        try:
            self._redis = redis.from_url(redis_url, decode_responses=True)
            self._redis.ping()
            self._use_redis = True
            logger.info(f"Redis 연결 성공 ({redis_url}) — Redis Stream 사용")
        except (redis.RedisError, ValueError) as e:
            logger.warning(f"Redis 연결 실패 ({e}) — 인메모리 이벤트 버스로 fallback")
            self._redis = None

    @property
    def is_redis(self) -> bool:
        return self._use_redis

    def publish(self, stream: str, data: dict, key: str | None = None):
        """이벤트 발행 (key는 파티셔닝/식별용 차량 ID)"""
        if self._use_redis:
            try:
                fields = {"payload": json.dumps(data)}
                if key is not None:
                    fields["key"] = key
                self._redis.xadd(stream, fields, maxlen=self._maxlen, approximate=True)
                return
            except redis.RedisError as e:
                logger.error(f"Redis publish 실패 ({stream}): {e}, 인메모리로 fallback")
        self._in_memory.publish(stream, data, key=key)

    def get_recent(self, stream: str, count: int = 10) -> list[dict]:
        """최근 이벤트 조회 (최신순 아님, 발행 순서)"""
        if count <= 0:
            return []
        if self._use_redis:
            try:
                entries = self._redis.xrevrange(stream, count=count)
                return [
                    {"id": eid, "key": edata.get("key"), "data": json.loads(edata.get("payload", "{}"))}
                    for eid, edata in reversed(entries)
                ]
            except redis.RedisError:
                return self._in_memory.get_recent(stream, count)
        return self._in_memory.get_recent(stream, count)

    def get_all_streams(self) -> dict[str, int]:
        """인메모리 스트림의 이벤트 수 (Redis 모드에서는 fallback분만)"""
        return self._in_memory.get_all_streams()

    def close(self):
        """Redis 연결 종료"""
        if self._redis is not None:
            self._redis.close()
            self._redis = None
            self._use_redis = False
            logger.info("Redis 연결 종료")
