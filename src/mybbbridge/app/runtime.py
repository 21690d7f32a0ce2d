"""
워크스페이스 런타임: 설정 → Engine → SyncController 를 lazy하게 구성.

- 최초 사용 시 설정 로드 + DB 연결 (재시도 포함)
- create config 이후 reload()로 다시 구성
- 그룹 캐시는 런타임 단위로 공유, reload 시 invalidate
- 캐시 갱신과 포럼 로그는 httpx 클라이언트 하나를 같이 쓴다
"""

import logging
import threading
from pathlib import Path

import httpx
from sqlalchemy.engine import Engine

from mybbbridge.app.cache_refresh import CacheRefreshClient
from mybbbridge.app.forum_log import ForumLogClient
from mybbbridge.app.sync import SyncController
from mybbbridge.core.config import BridgeConfig, load_config
from mybbbridge.db.connection import EngineFactory, connect, create_bridge_engine
from mybbbridge.domain.constants import CACHE_REFRESH_TIMEOUT
from mybbbridge.templates.grouping import TemplateGroupCache

logger = logging.getLogger(__name__)


class BridgeRuntime:
    """
    워크스페이스 하나의 실행 상태.

    HTTP 핸들러가 스레드 풀에서 동시에 부를 수 있으므로 구성 단계는 락으로 보호.
    """

    def __init__(
        self,
        workspace: Path,
        engine_factory: EngineFactory = create_bridge_engine,
        http_client: httpx.Client | None = None,
    ):
        """
        Args:
            workspace: 워크스페이스 루트
            engine_factory: Engine 생성 함수 (테스트에서 SQLite로 교체)
            http_client: 캐시 갱신/포럼 로그용 httpx 클라이언트 (None이면 런타임이 lazy 생성)
        """
        self.workspace = workspace
        self.engine_factory = engine_factory
        self.http_client = http_client
        self.group_cache = TemplateGroupCache()

        self._lock = threading.RLock()
        self._config: BridgeConfig | None = None
        self._engine: Engine | None = None
        self._refresher: CacheRefreshClient | None = None
        self._forum_log: ForumLogClient | None = None
        self._owned_client: httpx.Client | None = None
        self._controller: SyncController | None = None

    def config(self) -> BridgeConfig:
        """
        설정 (최초 호출 시 로드).

        Raises:
            ConfigError: 설정 파일 없음/형식 오류
        """
        with self._lock:
            if self._config is None:
                self._config = load_config(self.workspace)
            return self._config

    def _shared_client(self) -> httpx.Client:
        if self.http_client is not None:
            return self.http_client
        if self._owned_client is None:
            self._owned_client = httpx.Client(timeout=CACHE_REFRESH_TIMEOUT)
        return self._owned_client

    def forum_log(self) -> ForumLogClient:
        """
        포럼 로그 클라이언트 (DB 연결 없이 설정만 필요).

        Raises:
            ConfigError: 설정 파일 없음/형식 오류
        """
        with self._lock:
            if self._forum_log is None:
                config = self.config()
                self._forum_log = ForumLogClient(
                    config.mybb_url,
                    token=config.token,
                    client=self._shared_client(),
                )
            return self._forum_log

    def controller(self) -> SyncController:
        """
        SyncController (최초 호출 시 DB 연결).

        Raises:
            ConfigError: 설정 문제
            DatabaseConnectionError: 재시도 후에도 연결 실패
        """
        with self._lock:
            if self._controller is None:
                config = self.config()
                self._engine = connect(config.database, engine_factory=self.engine_factory)
                self._refresher = CacheRefreshClient(
                    config.mybb_url,
                    token=config.token,
                    client=self._shared_client(),
                )
                self._controller = SyncController(
                    self.workspace,
                    config,
                    self._engine,
                    self._refresher,
                    group_cache=self.group_cache,
                )
                logger.info(f"Bridge runtime ready for workspace {self.workspace}")
            return self._controller

    def reload(self) -> None:
        """설정/연결/그룹 캐시 폐기. 다음 사용 시 다시 구성."""
        with self._lock:
            self.close()
            self.group_cache.invalidate()
            logger.info("Bridge runtime reloaded")

    def close(self) -> None:
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
            if self._refresher is not None:
                self._refresher.close()
            if self._owned_client is not None:
                self._owned_client.close()
            self._config = None
            self._engine = None
            self._refresher = None
            self._forum_log = None
            self._owned_client = None
            self._controller = None
