"""
토큰 버킷 기반 요청 속도 제한기

클라이언트 키(인증 사용자 또는 IP)마다 버킷을 하나씩 두고, 요청마다 토큰 1개를 소비한다.
버킷은 refill_period 동안 capacity개가 채워지는 속도로 연속(greedy) 리필된다.

버킷 테이블은 프로세스 내 유일한 공유 가변 상태이므로 Lock으로 보호한다.
refill_period 이상 사용되지 않은 버킷은 가득 찬 상태와 같으므로 주기적으로 제거한다.
"""
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

Clock = Callable[[], float]


@dataclass(frozen=True)
class RateLimitDecision:
    """
    try_acquire 결과
    - allowed: 요청 허용 여부
    - limit: 버킷 용량
    - remaining: 소비 후 남은 토큰 수(정수 내림)
    - reset_after: 버킷이 가득 찰 때까지 남은 초
    - retry_after: 토큰 1개가 생길 때까지 남은 초 (허용 시 0)
    """
    allowed: bool
    limit: int
    remaining: int
    reset_after: int
    retry_after: int


class TokenBucket:
    """
    단일 토큰 버킷 (스레드 안전하지 않음, RateLimiter의 Lock 아래에서만 사용)
    """

    def __init__(self, capacity: int, refill_period: float, now: float):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        if refill_period <= 0:
            raise ValueError("refill_period must be > 0")
        self.capacity = capacity
        self.refill_period = float(refill_period)
        self.tokens = float(capacity)
        self.updated_at = now

    def _tokens_for(self, seconds: float) -> float:
        return seconds * self.capacity / self.refill_period

    def _seconds_for(self, tokens: float) -> float:
        return tokens * self.refill_period / self.capacity

    def _refill(self, now: float) -> None:
        elapsed = max(0.0, now - self.updated_at)
        self.tokens = min(float(self.capacity), self.tokens + self._tokens_for(elapsed))
        self.updated_at = now

    def try_consume(self, now: float) -> bool:
        self._refill(now)
        if self.tokens >= 1.0:
            self.tokens -= 1.0
            return True
        return False

    def seconds_until_available(self) -> int:
        missing = 1.0 - self.tokens
        if missing <= 0:
            return 0
        return max(1, math.ceil(self._seconds_for(missing)))

    def seconds_until_full(self) -> int:
        missing = self.capacity - self.tokens
        if missing <= 0:
            return 0
        return math.ceil(self._seconds_for(missing))

    @property
    def available(self) -> int:
        return int(self.tokens)


class RateLimiter:
    """
    클라이언트 키별 토큰 버킷 테이블
    - authenticated: 인증 요청용 용량 (기본 분당 100)
    - anonymous: 비인증 요청용 용량 (기본 분당 20)
    """

    def __init__(
        self,
        authenticated_capacity: int,
        anonymous_capacity: int,
        refill_period: float,
        clock: Clock = time.monotonic,
    ):
        self.authenticated_capacity = authenticated_capacity
        self.anonymous_capacity = anonymous_capacity
        self.refill_period = refill_period
        self._clock = clock
        self._lock = threading.Lock()
        self._buckets: Dict[Tuple[str, bool], TokenBucket] = {}
        self._last_sweep = clock()

    def capacity_for(self, authenticated: bool) -> int:
        return self.authenticated_capacity if authenticated else self.anonymous_capacity

    def try_acquire(self, client_key: str, authenticated: bool = False) -> RateLimitDecision:
        """
        client_key의 버킷에서 토큰 1개 소비를 시도 (대기하지 않고 즉시 판정)
        """
        capacity = self.capacity_for(authenticated)
        with self._lock:
            now = self._clock()
            self._evict_idle(now)
            key = (client_key, authenticated)
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = TokenBucket(capacity, self.refill_period, now)
                self._buckets[key] = bucket

            allowed = bucket.try_consume(now)
            return RateLimitDecision(
                allowed=allowed,
                limit=capacity,
                remaining=bucket.available,
                reset_after=bucket.seconds_until_full(),
                retry_after=0 if allowed else bucket.seconds_until_available(),
            )

    def _evict_idle(self, now: float) -> None:
        # Lock 아래에서만 호출, refill_period당 최대 1회 스캔
        if now - self._last_sweep < self.refill_period:
            return
        idle = [key for key, bucket in self._buckets.items() if now - bucket.updated_at >= self.refill_period]
        for key in idle:
            del self._buckets[key]
        self._last_sweep = now

    @property
    def bucket_count(self) -> int:
        with self._lock:
            return len(self._buckets)

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()
