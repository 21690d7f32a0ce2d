"""
Core layer: 설정, 로그, 락, 경로 해석.

역할:
- mbbb.json 로드/생성 (config)
- 파일 + 콘솔 로그 (logging)
- 아티팩트별 저장 직렬화 (locks)
- 워크스페이스 경로 ↔ 아티팩트 (paths)
"""

from .config import BridgeConfig, DatabaseConfig, create_config, load_config
from .locks import artifact_lock
from .logging import configure_logging
from .paths import parse_artifact_path

__all__ = [
    # config
    "BridgeConfig",
    "DatabaseConfig",
    "load_config",
    "create_config",
    # locks
    "artifact_lock",
    # logging
    "configure_logging",
    # paths
    "parse_artifact_path",
]
