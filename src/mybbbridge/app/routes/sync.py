"""
Sync Routes: 에디터 → 브리지 API.

- POST /api/events/saved        → 저장 이벤트 (autoUpload 적용)
- POST /api/template-sets/load  → 템플릿 세트 내려받기
- POST /api/styles/load         → 테마 stylesheet 내려받기
- POST /api/config              → 설정 스켈레톤 생성

DB/HTTP 호출이 블로킹이므로 핸들러는 def (스레드 풀에서 실행).
"""

from pathlib import Path
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from mybbbridge.app import commands
from mybbbridge.app.runtime import BridgeRuntime
from mybbbridge.domain.errors import ErrorCodes
from mybbbridge.domain.schemas import SyncOutcome

api_router = APIRouter()

# 에러 코드 → HTTP 상태 (나머지는 400)
STATUS_BY_CODE: dict[str, int] = {
    ErrorCodes.NOT_FOUND: 404,
    ErrorCodes.CONFIG_NOT_FOUND: 404,
    ErrorCodes.DB_CONNECTION_FAILED: 503,
    ErrorCodes.REFRESH_FAILED: 502,
    ErrorCodes.MYBB_URL_MISSING: 502,
    ErrorCodes.INVALID_RESPONSE: 502,
}


# =============================================================================
# Request Models
# =============================================================================

class SavedEvent(BaseModel):
    """저장된 문서."""
    path: str
    content: str


class LoadRequest(BaseModel):
    """template set 또는 theme 이름."""
    name: str


# =============================================================================
# Helpers
# =============================================================================

def _runtime(request: Request) -> BridgeRuntime:
    runtime: BridgeRuntime = request.app.state.runtime
    return runtime


def _respond(outcome: SyncOutcome) -> dict[str, Any]:
    """
    SyncOutcome → 응답 본문.

    에러 코드가 있으면 HTTPException. 부분 실패한 load(코드 없음)는 200 + success=false.
    """
    if not outcome.success and outcome.code is not None:
        raise HTTPException(
            status_code=STATUS_BY_CODE.get(outcome.code, 400),
            detail={"code": outcome.code, "message": outcome.message},
        )
    return outcome.to_dict()


# =============================================================================
# API Routes
# =============================================================================

@api_router.post("/events/saved")
def artifact_saved(request: Request, event: SavedEvent) -> dict[str, Any]:
    """저장 이벤트."""
    outcome = commands.on_artifact_saved(_runtime(request), Path(event.path), event.content)
    return _respond(outcome)


@api_router.post("/template-sets/load")
def load_template_set(request: Request, body: LoadRequest) -> dict[str, Any]:
    """템플릿 세트 내려받기."""
    return _respond(commands.load_template_set_command(_runtime(request), body.name))


@api_router.post("/styles/load")
def load_style(request: Request, body: LoadRequest) -> dict[str, Any]:
    """테마 stylesheet 내려받기."""
    return _respond(commands.load_style_command(_runtime(request), body.name))


@api_router.post("/config")
def create_config(request: Request) -> dict[str, Any]:
    """설정 스켈레톤 생성."""
    return _respond(commands.create_config_command(_runtime(request)))
