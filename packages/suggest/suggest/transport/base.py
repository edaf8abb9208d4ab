"""SuggestTransport 协议：transport 只负责“发请求拿原始响应”，解析与缓存在 fetcher / joiner。"""

from __future__ import annotations

from typing import Any, Protocol, Union


class SuggestTransport(Protocol):
    """transport_id + 三类 GET；失败抛 suggest.errors 中的带 code 错误。"""

    @property
    def transport_id(self) -> str:
        """例如 httpx, stub。"""
        ...

    async def get_json(self, url: str) -> Any:
        """GET 并解码 JSON（搜索服务）。"""
        ...

    async def get_text(self, url: str) -> Union[str, Any]:
        """GET blurb：响应为 JSON 时返回解码后的对象，否则返回文本。"""
        ...

    async def load_image(self, url: str) -> bool:
        """加载缩略图；成功 True、失败 False，均视为“已解析”，不抛异常。"""
        ...
