"""
DB layer: MyBB 테마 테이블 접근.

역할:
- 테이블 정의 (tables.py)
- 연결 + 최초 연결 재시도 (connection.py)
- template set / style 저장소 (repository.py)
"""

from .connection import build_database_url, connect, create_bridge_engine
from .repository import (
    CacheRefresher,
    StyleStore,
    TemplateSetStore,
    ThemeSetStore,
    execute_statement,
)
from .tables import BridgeTables, build_tables

__all__ = [
    # connection
    "connect",
    "create_bridge_engine",
    "build_database_url",
    # repository
    "ThemeSetStore",
    "TemplateSetStore",
    "StyleStore",
    "CacheRefresher",
    "execute_statement",
    # tables
    "BridgeTables",
    "build_tables",
]
