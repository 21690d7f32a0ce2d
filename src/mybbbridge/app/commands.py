"""
커맨드/이벤트 경계.

에디터(HTTP API, CLI)에서 들어오는 모든 요청은 여기서 실행된다.
실패는 로그로 남기고 SyncOutcome으로 변환 (예외가 바깥으로 새지 않음).
저장 결과는 성공/실패 모두 포럼 log.php로도 보낸다 (best-effort).
"""

import logging
from collections.abc import Callable
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from mybbbridge.app.runtime import BridgeRuntime
from mybbbridge.core.config import create_config
from mybbbridge.domain.errors import BridgeError, ConfigError, ErrorCodes, RefreshError
from mybbbridge.domain.schemas import SyncOutcome

logger = logging.getLogger(__name__)


def _run(action: str, func: Callable[[], SyncOutcome]) -> SyncOutcome:
    """func 실행 + 실패를 SyncOutcome으로 변환."""
    try:
        return func()
    except BridgeError as e:
        logger.error(f"{action} failed: {e.message}", extra={"context": e.to_dict()})
        return SyncOutcome(
            success=False,
            message=e.message,
            code=e.code,
            detail=dict(e.context),
        )
    except SQLAlchemyError as e:
        logger.exception(f"{action} failed with a database error")
        return SyncOutcome(
            success=False,
            message=f"Database error: {e}",
            code=ErrorCodes.DB_ERROR,
        )
    except OSError as e:
        logger.exception(f"{action} failed with an I/O error")
        return SyncOutcome(
            success=False,
            message=f"I/O error: {e}",
            code=ErrorCodes.IO_ERROR,
        )


def _report_to_forum(runtime: BridgeRuntime, message: str) -> None:
    try:
        forum_log = runtime.forum_log()
    except ConfigError:
        # 설정이 없으면 보낼 곳도 없음 (원래 에러는 outcome으로 보고됨)
        return
    forum_log.send(message)


# =============================================================================
# Save Event
# =============================================================================

def on_artifact_saved(
    runtime: BridgeRuntime,
    path: Path,
    content: str,
    force: bool = False,
) -> SyncOutcome:
    """
    파일 저장 이벤트.

    Args:
        runtime: 워크스페이스 런타임
        path: 저장된 파일 경로
        content: 저장된 내용
        force: autoUpload 설정 무시 (CLI push)

    Returns:
        SyncOutcome (브리지 대상이 아니거나 autoUpload off면 skipped)
    """

    def _save() -> SyncOutcome:
        config = runtime.config()
        if not config.auto_upload and not force:
            logger.debug(f"Auto upload disabled, skipping {path}")
            return SyncOutcome(
                success=True,
                message="Auto upload is disabled",
                detail={"skipped": True},
            )

        try:
            result = runtime.controller().save_artifact(path, content)
        except RefreshError as e:
            # 저장은 커밋된 상태
            raise RefreshError(
                f"Saved, but cache refresh failed: {e.message}",
                code=e.code,
                **e.context,
            ) from e

        if result is None:
            return SyncOutcome(
                success=True,
                message=f"{path} is not a template or stylesheet",
                detail={"skipped": True},
            )
        return SyncOutcome(success=True, message=result.message, detail=result.to_dict())

    outcome = _run(f"Saving {path}", _save)
    if outcome.detail.get("skipped"):
        return outcome

    if outcome.success:
        _report_to_forum(runtime, outcome.message)
    else:
        _report_to_forum(runtime, f"Error saving {path.name}: {outcome.message}")
    return outcome


# =============================================================================
# Commands
# =============================================================================

def load_template_set_command(runtime: BridgeRuntime, name: str) -> SyncOutcome:
    """템플릿 세트를 워크스페이스로 내려받기."""

    def _load() -> SyncOutcome:
        result = runtime.controller().load_template_set(name)
        return SyncOutcome(
            success=result.complete,
            message=result.summary,
            detail=result.to_dict(),
        )

    return _run(f"Loading template set '{name}'", _load)


def load_style_command(runtime: BridgeRuntime, name: str) -> SyncOutcome:
    """테마 stylesheet를 워크스페이스로 내려받기."""

    def _load() -> SyncOutcome:
        result = runtime.controller().load_style(name)
        return SyncOutcome(
            success=result.complete,
            message=result.summary,
            detail=result.to_dict(),
        )

    return _run(f"Loading style '{name}'", _load)


def create_config_command(runtime: BridgeRuntime) -> SyncOutcome:
    """설정 스켈레톤 생성 후 런타임 재구성."""

    def _create() -> SyncOutcome:
        config_path = create_config(runtime.workspace)
        runtime.reload()
        return SyncOutcome(
            success=True,
            message=f"Config file {config_path} created",
            detail={"path": str(config_path)},
        )

    return _run("Creating config", _create)
