"""
아티팩트별 락: 같은 (set, title) / (theme, name) 저장을 직렬화.

저장 1건 = SELECT → INSERT/UPDATE → (stylesheet) 캐시 갱신.
락 없이 동시에 들어오면 나중에 끝난 쪽이 조용히 덮어씀 → 파일 락으로 막는다.
"""

import hashlib
import logging
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout

from mybbbridge.domain.errors import ErrorCodes, LockTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 10.0


def lock_key(*identity: str) -> str:
    """identity → 파일명으로 안전한 키 (SHA-256 앞 16자리)."""
    joined = "\x1f".join(identity)
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()[:16]


@contextmanager
def artifact_lock(
    locks_dir: Path,
    *identity: str,
    timeout: float = DEFAULT_LOCK_TIMEOUT,
) -> Generator[None, None, None]:
    """
    identity 단위 락 획득.

    Args:
        locks_dir: 락 파일 디렉터리
        *identity: 락 식별자 (예: "template", set 이름, title)
        timeout: 획득 대기 시간(초)

    Yields:
        None

    Raises:
        LockTimeoutError: LOCK_TIMEOUT
    """
    locks_dir.mkdir(parents=True, exist_ok=True)
    lock_file = locks_dir / f"{lock_key(*identity)}.lock"
    lock = FileLock(lock_file, timeout=timeout)

    try:
        lock.acquire()
    except Timeout:
        raise LockTimeoutError(
            f"Failed to acquire lock for {'/'.join(identity)}",
            code=ErrorCodes.LOCK_TIMEOUT,
            identity=list(identity),
            timeout=timeout,
        ) from None

    try:
        yield
    finally:
        lock.release()
