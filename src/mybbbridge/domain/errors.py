"""
Error definitions for the bridge.

규칙:
- 조용한 실패 금지 → 모든 실패는 BridgeError 계열로 명시적 실패
- 커맨드/이벤트 경계(app.commands)에서만 잡아서 로그 + 사용자 메시지로 변환
- 자동 재시도는 최초 DB 연결에만 허용
"""

from typing import Any


class BridgeError(Exception):
    """
    브리지 동작 실패 시 발생하는 에러의 베이스.

    Usage:
        raise NotFoundError("Template set 'Default' not found", set_name="Default")
    """

    code = "BRIDGE_ERROR"

    def __init__(self, message: str, code: str | None = None, **context: Any) -> None:
        if code is not None:
            self.code = code
        self.message = message
        self.context = context
        super().__init__(f"[{self.code}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            "message": self.message,
            **self.context,
        }


class NotFoundError(BridgeError):
    """이름으로 지정한 template set / theme 이 DB에 없음."""

    code = "NOT_FOUND"


class NoRowsAffectedError(BridgeError):
    """UPDATE/INSERT가 0행에 적용됨. no-op으로 넘기지 않는다."""

    code = "NO_ROWS_AFFECTED"


class DatabaseConnectionError(BridgeError):
    """재시도 후에도 DB 연결 실패."""

    code = "DB_CONNECTION_FAILED"


class RefreshError(BridgeError):
    """포럼 측 stylesheet 캐시 갱신 실패."""

    code = "REFRESH_FAILED"


class InvalidResponseError(RefreshError):
    """cachecss.php 응답이 JSON이 아니거나 형식이 맞지 않음."""

    code = "INVALID_RESPONSE"


class ConfigError(BridgeError):
    """설정 파일 없음/형식 오류/중복 생성."""

    code = "CONFIG_INVALID"


class InvalidPathError(BridgeError):
    """워크스페이스에 쓸 수 없는 경로 (구분자 포함 title 등)."""

    code = "INVALID_PATH"


class LockTimeoutError(BridgeError):
    """아티팩트별 락 획득 timeout."""

    code = "LOCK_TIMEOUT"


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수. HTTP 상태 매핑은 app.routes 참조."""

    # === Persistence ===
    NOT_FOUND = "NOT_FOUND"
    NO_ROWS_AFFECTED = "NO_ROWS_AFFECTED"
    DB_CONNECTION_FAILED = "DB_CONNECTION_FAILED"
    DB_ERROR = "DB_ERROR"

    # === Cache refresh ===
    REFRESH_FAILED = "REFRESH_FAILED"
    MYBB_URL_MISSING = "MYBB_URL_MISSING"
    INVALID_RESPONSE = "INVALID_RESPONSE"

    # === Config ===
    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    CONFIG_INVALID = "CONFIG_INVALID"
    CONFIG_EXISTS = "CONFIG_EXISTS"

    # === Workspace ===
    INVALID_PATH = "INVALID_PATH"
    LOCK_TIMEOUT = "LOCK_TIMEOUT"
    IO_ERROR = "IO_ERROR"
