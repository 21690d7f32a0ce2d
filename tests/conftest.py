"""
Pytest fixtures for the bridge tests.

구성:
- MyBB 테이블은 tmp_path의 SQLite 파일로 대체 (같은 SQLAlchemy 테이블 정의 사용)
- 캐시 갱신은 호출만 기록하는 RecordingRefresher로 대체
"""

import json
import logging
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy import create_engine, func, insert, select
from sqlalchemy.engine import Engine

from mybbbridge.core.config import BridgeConfig, DatabaseConfig
from mybbbridge.core.logging import ROOT_LOGGER_NAME
from mybbbridge.db.tables import BridgeTables, build_tables
from mybbbridge.domain.constants import CONFIG_DIR, CONFIG_FILENAME, MASTER_SET_ID

# =============================================================================
# Seed Data
# =============================================================================

TEMPLATE_SETS = [
    {"sid": 1, "title": "Default Templates"},
    {"sid": 2, "title": "Other Templates"},
]

TEMPLATE_GROUPS = [
    {"gid": 1, "prefix": "header", "title": "Navigation", "isdefault": 1},
    {"gid": 2, "prefix": "index", "title": "<lang:group_index>", "isdefault": 1},
    {"gid": 3, "prefix": "global", "title": "Site Wide", "isdefault": 1},
]

TEMPLATES = [
    {"title": "header_welcome", "template": "<div>master welcome</div>", "sid": MASTER_SET_ID},
    {"title": "global_footer", "template": "<footer>master</footer>", "sid": MASTER_SET_ID},
    {"title": "index", "template": "<main>master index</main>", "sid": MASTER_SET_ID},
    {"title": "index", "template": "<main>custom index</main>", "sid": 1},
    {"title": "random_thing", "template": "<p>random</p>", "sid": MASTER_SET_ID},
    {"title": "custom_only", "template": "<p>custom only</p>", "sid": 1},
    {"title": "usercp_nav", "template": "<nav>other set</nav>", "sid": 2},
]

THEMES = [
    {"tid": 1, "name": "Default"},
    {"tid": 2, "name": "Dark"},
]

STYLESHEETS = [
    {"name": "global.css", "tid": 1, "stylesheet": "body { color: #000; }"},
    {"name": "usercp.css", "tid": 1, "stylesheet": ".usercp { margin: 0; }"},
    {"name": "global.css", "tid": 2, "stylesheet": "body { color: #fff; }"},
]


def seed_database(engine: Engine, tables: BridgeTables) -> None:
    """기본 MyBB 데이터 입력."""
    with engine.begin() as conn:
        conn.execute(insert(tables.templatesets), TEMPLATE_SETS)
        conn.execute(insert(tables.templategroups), TEMPLATE_GROUPS)
        conn.execute(
            insert(tables.templates),
            [{"version": "1800", "status": "", "dateline": 0, **row} for row in TEMPLATES],
        )
        conn.execute(insert(tables.themes), THEMES)
        conn.execute(
            insert(tables.themestylesheets),
            [
                {"attachedto": "", "cachefile": row["name"], "lastmodified": 0, **row}
                for row in STYLESHEETS
            ],
        )


def make_engine(url: str) -> Engine:
    return create_engine(url, connect_args={"check_same_thread": False})


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def tables() -> BridgeTables:
    """mybb_ prefix 테이블."""
    return build_tables("mybb_")


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """SQLite 파일 URL (Engine을 dispose해도 데이터 유지)."""
    return f"sqlite:///{tmp_path / 'mybb.db'}"


@pytest.fixture
def engine(database_url: str, tables: BridgeTables) -> Generator[Engine, None, None]:
    """스키마 생성 + seed 완료된 Engine."""
    engine = make_engine(database_url)
    tables.metadata.create_all(engine)
    seed_database(engine, tables)
    yield engine
    engine.dispose()


@pytest.fixture
def engine_factory(database_url: str, engine: Engine) -> Callable[[DatabaseConfig], Engine]:
    """BridgeRuntime / connect()에 넘길 Engine 생성 함수 (seed된 DB 사용)."""
    return lambda db: make_engine(database_url)


def _count_rows(engine: Engine, table: Any, **where: Any) -> int:
    statement = select(func.count()).select_from(table)
    for column, value in where.items():
        statement = statement.where(table.c[column] == value)
    with engine.connect() as conn:
        return int(conn.execute(statement).scalar_one())


def _fetch_row(engine: Engine, table: Any, **where: Any) -> dict[str, Any] | None:
    statement = select(table)
    for column, value in where.items():
        statement = statement.where(table.c[column] == value)
    with engine.connect() as conn:
        row = conn.execute(statement).mappings().first()
    return dict(row) if row is not None else None


@pytest.fixture
def count_rows(engine: Engine) -> Callable[..., int]:
    """조건에 맞는 행 수.

    Usage:
        count_rows(tables.templates, title="index", sid=1)
    """
    return lambda table, **where: _count_rows(engine, table, **where)


@pytest.fixture
def fetch_row(engine: Engine) -> Callable[..., dict[str, Any] | None]:
    """조건에 맞는 첫 행 (dict)."""
    return lambda table, **where: _fetch_row(engine, table, **where)


# =============================================================================
# Refresher Fixtures
# =============================================================================

class RecordingRefresher:
    """refresh 호출만 기록. error가 있으면 기록 후 raise."""

    def __init__(self, error: Exception | None = None):
        self.calls: list[tuple[str, str]] = []
        self.error = error

    def refresh(self, stylesheet_name: str, theme_name: str) -> None:
        self.calls.append((stylesheet_name, theme_name))
        if self.error is not None:
            raise self.error


@pytest.fixture
def refresher() -> RecordingRefresher:
    return RecordingRefresher()


@pytest.fixture
def make_refresher() -> Callable[..., RecordingRefresher]:
    """error를 지정한 RecordingRefresher 생성."""
    return RecordingRefresher


# =============================================================================
# Workspace Fixtures
# =============================================================================

@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """빈 워크스페이스 루트."""
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def bridge_config(workspace: Path) -> BridgeConfig:
    """테스트용 설정 (재시도 1회, 대기 없음)."""
    return BridgeConfig(
        database=DatabaseConfig(prefix="mybb_", connect_retries=1, connect_retry_delay=0.0),
        mybb_url="http://forum.test",
        mybb_version="1860",
        auto_upload=True,
        log_file_path=workspace / "bridge.log",
        token="",
        lock_timeout=1.0,
    )


@pytest.fixture
def write_config(workspace: Path) -> Callable[..., Path]:
    """
    워크스페이스에 mbbb.json 작성.

    Usage:
        write_config(autoUpload=False)
    """

    def _write(**overrides: Any) -> Path:
        data: dict[str, Any] = {
            "database": {
                "host": "localhost",
                "port": 3306,
                "database": "mybb",
                "prefix": "mybb_",
                "user": "root",
                "password": "",
                "connectRetries": 1,
                "connectRetryDelay": 0,
            },
            "mybbVersion": 1860,
            "mybbUrl": "http://forum.test",
            "autoUpload": True,
            "logFilePath": str(workspace / "bridge.log"),
            "token": "",
            "lockTimeout": 1.0,
        }
        data.update(overrides)
        config_path = workspace / CONFIG_DIR / CONFIG_FILENAME
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(data, indent=4), encoding="utf-8")
        return config_path

    return _write


# =============================================================================
# Logging Cleanup
# =============================================================================

@pytest.fixture(autouse=True)
def reset_bridge_logger() -> Generator[None, None, None]:
    """configure_logging()이 설치한 핸들러를 테스트마다 제거."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
