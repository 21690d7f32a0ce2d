"""
포럼 stylesheet 캐시 갱신 클라이언트.

프로토콜 (서버 측 cachecss.php, 고정 계약):
- POST {mybbUrl}/cachecss.php
- form: theme_name, stylesheet (+ token 옵션)
- 응답: {"success": bool, "message": str}

서버의 캐시 파일 레이아웃은 가정하지 않는다.
"""

import json
import logging
from typing import Any

import httpx

from mybbbridge.domain.constants import CACHE_REFRESH_SCRIPT, CACHE_REFRESH_TIMEOUT
from mybbbridge.domain.errors import ErrorCodes, InvalidResponseError, RefreshError

logger = logging.getLogger(__name__)


def url_join(*parts: str) -> str:
    """URL 조각 결합 (끝 "/" 제거 후 "/"로 연결)."""
    return "/".join(part.rstrip("/") for part in parts)


class CacheRefreshClient:
    """
    cachecss.php 호출.

    Usage:
        client = CacheRefreshClient("http://localhost/mybb", token="secret")
        client.refresh("global.css", "Default")
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        client: httpx.Client | None = None,
        timeout: float = CACHE_REFRESH_TIMEOUT,
    ):
        """
        Args:
            base_url: 포럼 base URL (mybbUrl)
            token: 공유 비밀값 (비어 있으면 전송 안 함)
            client: httpx 클라이언트 (None이면 lazy 생성)
            timeout: 요청 timeout(초)
        """
        self.base_url = base_url
        self.token = token
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout)
        return self._client

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def refresh(self, stylesheet_name: str, theme_name: str) -> None:
        """
        stylesheet 캐시 재생성 요청.

        Args:
            stylesheet_name: stylesheet 이름 (예: global.css)
            theme_name: theme 이름

        Raises:
            RefreshError: URL 미설정, HTTP 실패, success=false
            InvalidResponseError: JSON 아님 / 형식 오류
        """
        if not self.base_url:
            raise RefreshError(
                "MyBB URL not configured",
                code=ErrorCodes.MYBB_URL_MISSING,
            )

        url = url_join(self.base_url, CACHE_REFRESH_SCRIPT)
        form: dict[str, str] = {
            "theme_name": theme_name,
            "stylesheet": stylesheet_name,
        }
        if self.token:
            form["token"] = self.token

        logger.info(f"Requesting cache refresh for {stylesheet_name} in theme {theme_name}")

        try:
            response = self._get_client().post(
                url,
                data=form,
                headers={"Accept": "application/json"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise RefreshError(
                f"Cache refresh request failed: {e}",
                code=ErrorCodes.REFRESH_FAILED,
                url=url,
                stylesheet=stylesheet_name,
                theme=theme_name,
            ) from e

        payload = self._parse_response(response)

        if not payload["success"]:
            raise RefreshError(
                str(payload.get("message") or "Unknown cache refresh error"),
                code=ErrorCodes.REFRESH_FAILED,
                stylesheet=stylesheet_name,
                theme=theme_name,
            )

        logger.info(f"Cache refresh successful: {payload.get('message', '')}")

    def _parse_response(self, response: httpx.Response) -> dict[str, Any]:
        """응답 본문 → {"success": bool, "message": str}."""
        try:
            payload = json.loads(response.text)
        except json.JSONDecodeError as e:
            logger.warning(f"Raw cache refresh response: {response.text[:500]}")
            raise InvalidResponseError(
                f"Invalid JSON response: {response.text[:200]}",
                code=ErrorCodes.INVALID_RESPONSE,
            ) from e

        if not isinstance(payload, dict) or not isinstance(payload.get("success"), bool):
            raise InvalidResponseError(
                f"Malformed cache refresh response: {payload!r}",
                code=ErrorCodes.INVALID_RESPONSE,
            )

        logger.info(f"Cache refresh response: {payload}")
        return payload
