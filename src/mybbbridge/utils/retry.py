"""
재시도 로직 유틸리티.

최초 DB 연결에만 사용합니다 (고정 횟수, 고정 대기).
그 외 실패는 재시도하지 않고 바로 보고.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    재시도 정책.

    max_attempts: 총 시도 횟수 (첫 시도 포함, 최소 1)
    delay: 시도 사이 고정 대기 시간(초)
    """
    max_attempts: int = 3
    delay: float = 1.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay < 0:
            raise ValueError("delay must not be negative")


def retry_call(
    func: Callable[..., T],
    policy: RetryPolicy,
    exceptions: tuple[type[Exception], ...] = (Exception,),
    sleep: Callable[[float], Any] = time.sleep,
    *args: Any,
    **kwargs: Any,
) -> T:
    """
    고정 대기 재시도.

    Args:
        func: 재시도할 함수
        policy: 재시도 정책
        exceptions: 재시도할 예외 타입들
        sleep: 대기 함수 (테스트에서 교체)
        *args: func에 전달할 위치 인자
        **kwargs: func에 전달할 키워드 인자

    Returns:
        func의 반환값

    Raises:
        마지막 시도에서 발생한 예외
    """
    for attempt in range(1, policy.max_attempts + 1):
        try:
            result = func(*args, **kwargs)
            if attempt > 1:
                logger.info(
                    f"Retry succeeded on attempt {attempt}/{policy.max_attempts}"
                )
            return result

        except exceptions as e:
            if attempt == policy.max_attempts:
                logger.error(
                    f"All {policy.max_attempts} attempts failed. Last error: {e}"
                )
                raise

            logger.warning(
                f"Attempt {attempt}/{policy.max_attempts} failed: {e}. "
                f"Retrying in {policy.delay:.1f}s..."
            )
            sleep(policy.delay)

    # Should never reach here
    msg = "Unexpected retry logic error"
    raise RuntimeError(msg)
