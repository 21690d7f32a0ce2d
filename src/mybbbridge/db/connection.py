"""
MySQL 연결 관리.

- Engine 하나를 런타임 동안 재사용 (pool_pre_ping으로 매 사용 전 생존 확인,
  끊긴 연결은 투명하게 재생성)
- 최초 연결만 RetryPolicy로 재시도 (고정 횟수, 고정 대기)
"""

import logging
import time
from collections.abc import Callable
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import DBAPIError

from mybbbridge.core.config import DatabaseConfig
from mybbbridge.domain.errors import DatabaseConnectionError, ErrorCodes
from mybbbridge.utils.retry import RetryPolicy, retry_call

logger = logging.getLogger(__name__)

# MySQL wait_timeout(기본 8시간)보다 짧게
POOL_RECYCLE_SECONDS = 3600

EngineFactory = Callable[[DatabaseConfig], Engine]


def build_database_url(db: DatabaseConfig) -> URL:
    """DatabaseConfig → mysql+pymysql URL (비밀번호는 URL 객체 안에서만)."""
    return URL.create(
        "mysql+pymysql",
        username=db.user,
        password=db.password or None,
        host=db.host,
        port=db.port,
        database=db.database,
        query={"charset": "utf8mb4"},
    )


def create_bridge_engine(db: DatabaseConfig) -> Engine:
    """
    MySQL Engine 생성 (연결은 아직 안 함).

    Args:
        db: database 설정

    Returns:
        Engine
    """
    return create_engine(
        build_database_url(db),
        pool_pre_ping=True,
        pool_recycle=POOL_RECYCLE_SECONDS,
    )


def connect(
    db: DatabaseConfig,
    policy: RetryPolicy | None = None,
    engine_factory: EngineFactory = create_bridge_engine,
    sleep: Callable[[float], Any] | None = None,
) -> Engine:
    """
    Engine 생성 + 연결 확인 (재시도 포함).

    Args:
        db: database 설정
        policy: 재시도 정책 (None이면 db.retry_policy)
        engine_factory: Engine 생성 함수 (테스트에서 교체)
        sleep: 대기 함수 (테스트에서 교체)

    Returns:
        연결이 확인된 Engine

    Raises:
        DatabaseConnectionError: 모든 시도 실패
    """
    policy = policy or db.retry_policy
    engine = engine_factory(db)

    def _probe() -> None:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    logger.info(
        f"Connecting to database {db.database} at {db.host}:{db.port} "
        f"(max {policy.max_attempts} attempts)"
    )

    try:
        retry_call(_probe, policy, exceptions=(DBAPIError,), sleep=sleep or time.sleep)
    except DBAPIError as e:
        engine.dispose()
        raise DatabaseConnectionError(
            f"Failed to establish a database connection after "
            f"{policy.max_attempts} attempts: {e.orig or e}",
            code=ErrorCodes.DB_CONNECTION_FAILED,
            host=db.host,
            port=db.port,
            database=db.database,
        ) from e

    return engine
