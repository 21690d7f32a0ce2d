"""
포럼 측 로그 전송 (best-effort).

- POST {mybbUrl}/log.php
- form: message (+ token 옵션)
- 응답 본문은 보지 않는다. 실패는 로컬 로그에만 남기고 raise하지 않음
"""

import logging

import httpx

from mybbbridge.app.cache_refresh import url_join
from mybbbridge.domain.constants import CACHE_REFRESH_TIMEOUT, FORUM_LOG_SCRIPT

logger = logging.getLogger(__name__)


class ForumLogClient:
    """
    log.php 호출.

    Usage:
        forum_log = ForumLogClient("http://localhost/mybb", token="secret", client=client)
        forum_log.send('Updated stylesheet "global.css"')
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        client: httpx.Client | None = None,
        timeout: float = CACHE_REFRESH_TIMEOUT,
    ):
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

    def send(self, message: str) -> bool:
        """
        메시지 1건 전송.

        Returns:
            전송 성공 여부 (URL 미설정이면 False, 요청 없음)
        """
        if not self.base_url:
            return False

        form: dict[str, str] = {"message": message}
        if self.token:
            form["token"] = self.token

        url = url_join(self.base_url, FORUM_LOG_SCRIPT)
        try:
            response = self._get_client().post(url, data=form)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Failed to send log to {url}: {e}")
            return False

        logger.debug(f"Logged to forum: {message}")
        return True
