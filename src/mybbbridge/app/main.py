"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uvicorn mybbbridge.app.main:app --reload
- CLI: mybbbridge --workspace DIR serve

워크스페이스는 MYBBBRIDGE_WORKSPACE 환경변수 (없으면 현재 디렉터리).
"""

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from mybbbridge import __version__
from mybbbridge.app.routes import sync
from mybbbridge.app.runtime import BridgeRuntime
from mybbbridge.core.config import get_config_path, load_config
from mybbbridge.core.logging import configure_logging
from mybbbridge.domain.errors import ConfigError

logger = logging.getLogger(__name__)

WORKSPACE_ENV = "MYBBBRIDGE_WORKSPACE"


def default_workspace() -> Path:
    return Path(os.environ.get(WORKSPACE_ENV) or Path.cwd())


def _configure_logging(workspace: Path) -> None:
    """설정 파일이 있으면 logFilePath로 파일 로그, 없으면 콘솔만."""
    if not get_config_path(workspace).exists():
        configure_logging()
        return
    try:
        config = load_config(workspace)
    except ConfigError as e:
        configure_logging()
        logger.warning(f"Config not usable for logging: {e.message}")
        return
    configure_logging(config.log_file_path)


# =============================================================================
# App Factory
# =============================================================================

def create_app(runtime: BridgeRuntime | None = None) -> FastAPI:
    """
    FastAPI 앱 생성.

    Args:
        runtime: 미리 구성된 런타임 (None이면 lifespan에서 생성)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        시작 시: 런타임 준비, 로그 설정
        종료 시: Engine / HTTP 클라이언트 정리
        """
        # Startup
        if runtime is None:
            workspace = default_workspace()
            _configure_logging(workspace)
            app.state.runtime = BridgeRuntime(workspace)
        else:
            app.state.runtime = runtime
        logger.info(f"Serving workspace {app.state.runtime.workspace}")

        yield

        # Shutdown
        app.state.runtime.close()

    app = FastAPI(
        title="MyBB Bridge",
        description="로컬 워크스페이스 ↔ MyBB 템플릿/stylesheet 동기화",
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(sync.api_router, prefix="/api", tags=["Sync API"])

    @app.get("/health")
    async def health() -> dict[str, str]:
        """헬스 체크."""
        return {"status": "ok"}

    return app


app = create_app()
