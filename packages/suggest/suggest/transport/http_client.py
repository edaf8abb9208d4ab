"""HttpxTransport：httpx.AsyncClient GET；超时/连接失败/HTTP>=400 映射为带 code 的错误，不重试。"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

import httpx

from suggest.errors import (
    SuggestNetworkError,
    SuggestParseError,
    SuggestServiceError,
    SuggestTimeoutError,
)

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; suggest/0.1)"
ACCEPT_LANGUAGE = "en-US,en;q=0.9"
JSON_CONTENT_TYPES = ("application/json", "text/javascript", "application/javascript")


def _is_json_content_type(ct: str) -> bool:
    if not ct or not isinstance(ct, str):
        return False
    ct_lower = ct.split(";")[0].strip().lower()
    return ct_lower in JSON_CONTENT_TYPES or ct_lower.endswith("+json")


class HttpxTransport:
    """单个 AsyncClient 复用连接；timeout_sec=None 表示不设超时（挂起的请求永不完成）。"""

    transport_id: str = "httpx"

    def __init__(
        self,
        timeout_sec: Optional[float] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {
            "User-Agent": user_agent or USER_AGENT,
            "Accept-Language": ACCEPT_LANGUAGE,
        }
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_sec),
            headers=headers,
            transport=transport,
            follow_redirects=True,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, url: str) -> httpx.Response:
        try:
            resp = await self._client.get(url)
        except httpx.TimeoutException as e:
            raise SuggestTimeoutError(str(e)[:500]) from e
        except httpx.RequestError as e:
            raise SuggestNetworkError(str(e)[:500]) from e
        if resp.status_code >= 400:
            raise SuggestServiceError(f"HTTP {resp.status_code}", status=str(resp.status_code))
        return resp

    async def get_json(self, url: str) -> Any:
        resp = await self._get(url)
        try:
            return resp.json()
        except (ValueError, TypeError) as e:
            raise SuggestParseError(str(e)[:500]) from e

    async def get_text(self, url: str) -> Union[str, Any]:
        resp = await self._get(url)
        if _is_json_content_type(resp.headers.get("content-type", "")):
            try:
                return resp.json()
            except (ValueError, TypeError) as e:
                raise SuggestParseError(str(e)[:500]) from e
        return resp.text

    async def load_image(self, url: str) -> bool:
        try:
            resp = await self._client.get(url)
        except httpx.HTTPError as e:
            logger.debug("suggest thumbnail load failed url=%s error=%s", url, e)
            return False
        if not resp.is_success:
            logger.debug("suggest thumbnail load failed url=%s status=%s", url, resp.status_code)
            return False
        return True
