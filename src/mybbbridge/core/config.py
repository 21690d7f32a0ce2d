"""
워크스페이스 설정: <workspace>/.vscode/mbbb.json

JSON은 YAML의 부분집합이므로 yaml.safe_load로 읽는다 (YAML로 써도 동작).
create_config()는 JSON 스켈레톤을 만들고 기존 파일은 덮어쓰지 않는다.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from mybbbridge.domain.constants import (
    CONFIG_DIR,
    CONFIG_FILENAME,
    DEFAULT_LOG_FILENAME,
    DEFAULT_TABLE_PREFIX,
)
from mybbbridge.domain.errors import ConfigError, ErrorCodes
from mybbbridge.utils.retry import RetryPolicy

logger = logging.getLogger(__name__)

# create_config가 쓰는 기본 내용
DEFAULT_CONFIG: dict[str, Any] = {
    "database": {
        "host": "localhost",
        "port": 3306,
        "database": "mybb",
        "prefix": DEFAULT_TABLE_PREFIX,
        "user": "root",
        "password": "",
    },
    "mybbVersion": 1860,
    "mybbUrl": "http://localhost",
    "autoUpload": True,
    "logFilePath": "",
    "token": "",
}


def _parse_auto_upload(value: Any) -> bool:
    """autoUpload는 JSON/YAML bool만 허용 ("false" 문자열은 거부)."""
    if not isinstance(value, bool):
        raise ConfigError(
            f"autoUpload must be true or false, got {value!r}",
            code=ErrorCodes.CONFIG_INVALID,
        )
    return value


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class DatabaseConfig:
    """database 섹션."""
    host: str = "localhost"
    port: int = 3306
    database: str = "mybb"
    prefix: str = DEFAULT_TABLE_PREFIX
    user: str = "root"
    password: str = ""

    # 최초 연결 재시도 정책
    connect_retries: int = 3
    connect_retry_delay: float = 1.0

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.connect_retries,
            delay=self.connect_retry_delay,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DatabaseConfig":
        try:
            config = cls(
                host=str(data.get("host", "localhost")),
                port=int(data.get("port", 3306)),
                database=str(data.get("database", "mybb")),
                prefix=str(data.get("prefix", DEFAULT_TABLE_PREFIX) or ""),
                user=str(data.get("user", "root")),
                password=str(data.get("password") or ""),
                connect_retries=int(data.get("connectRetries", 3)),
                connect_retry_delay=float(data.get("connectRetryDelay", 1.0)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(
                f"Invalid database configuration: {e}",
                code=ErrorCodes.CONFIG_INVALID,
            ) from e

        if config.connect_retries < 1:
            raise ConfigError(
                f"connectRetries must be at least 1, got {config.connect_retries}",
                code=ErrorCodes.CONFIG_INVALID,
            )
        if config.connect_retry_delay < 0:
            raise ConfigError(
                f"connectRetryDelay must not be negative, got {config.connect_retry_delay}",
                code=ErrorCodes.CONFIG_INVALID,
            )
        return config


@dataclass
class BridgeConfig:
    """mbbb.json 전체."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    mybb_url: str = ""
    mybb_version: str = ""
    auto_upload: bool = False
    log_file_path: Path | None = None
    token: str = ""
    lock_timeout: float = 10.0

    @classmethod
    def from_dict(cls, data: dict[str, Any], workspace: Path) -> "BridgeConfig":
        """
        dict → BridgeConfig.

        Args:
            data: 파싱된 설정 내용
            workspace: 워크스페이스 루트 (logFilePath 기본값 계산용)

        Raises:
            ConfigError: database 섹션 누락/형식 오류
        """
        database = data.get("database")
        if not isinstance(database, dict):
            raise ConfigError(
                "Database configuration is missing in config file.",
                code=ErrorCodes.CONFIG_INVALID,
            )

        log_file = data.get("logFilePath") or ""
        log_file_path = Path(log_file) if log_file else workspace / DEFAULT_LOG_FILENAME

        version = data.get("mybbVersion")
        try:
            lock_timeout = float(data.get("lockTimeout", 10.0))
        except (TypeError, ValueError) as e:
            raise ConfigError(
                f"Invalid lockTimeout: {data.get('lockTimeout')!r}",
                code=ErrorCodes.CONFIG_INVALID,
            ) from e

        return cls(
            database=DatabaseConfig.from_dict(database),
            mybb_url=str(data.get("mybbUrl") or ""),
            mybb_version="" if version is None else str(version),
            auto_upload=_parse_auto_upload(data.get("autoUpload", False)),
            log_file_path=log_file_path,
            token=str(data.get("token") or ""),
            lock_timeout=lock_timeout,
        )


# =============================================================================
# Load / Create
# =============================================================================

def get_config_path(workspace: Path) -> Path:
    return workspace / CONFIG_DIR / CONFIG_FILENAME


def load_config(workspace: Path) -> BridgeConfig:
    """
    설정 파일 로드.

    Args:
        workspace: 워크스페이스 루트

    Returns:
        BridgeConfig

    Raises:
        ConfigError: CONFIG_NOT_FOUND, CONFIG_INVALID
    """
    config_path = get_config_path(workspace)
    if not config_path.exists():
        raise ConfigError(
            f"Config file {config_path} not found. Try the 'create config' command.",
            code=ErrorCodes.CONFIG_NOT_FOUND,
            path=str(config_path),
        )

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Config file {config_path} is not valid JSON/YAML: {e}",
            code=ErrorCodes.CONFIG_INVALID,
            path=str(config_path),
        ) from e

    if not isinstance(data, dict):
        raise ConfigError(
            f"Config file {config_path} must contain an object",
            code=ErrorCodes.CONFIG_INVALID,
            path=str(config_path),
        )

    return BridgeConfig.from_dict(data, workspace)


def create_config(workspace: Path) -> Path:
    """
    기본 설정 파일 생성.

    Args:
        workspace: 워크스페이스 루트

    Returns:
        생성된 설정 파일 경로

    Raises:
        ConfigError: CONFIG_EXISTS
    """
    config_path = get_config_path(workspace)
    if config_path.exists():
        raise ConfigError(
            f"Config file {config_path} already exists!",
            code=ErrorCodes.CONFIG_EXISTS,
            path=str(config_path),
        )

    config_path.parent.mkdir(parents=True, exist_ok=True)

    content = dict(DEFAULT_CONFIG)
    content["logFilePath"] = str(workspace / DEFAULT_LOG_FILENAME)
    config_path.write_text(json.dumps(content, indent=4), encoding="utf-8")

    logger.info(f"Config file {config_path} created")
    return config_path
