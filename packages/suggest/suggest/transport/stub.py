"""Stub SuggestTransport：内存 fixtures，确定性结果，不打网；记录请求过的 URL。"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Iterable, List, Mapping, Optional
from urllib.parse import parse_qs, urlparse

from suggest.errors import SuggestServiceError
from suggest.url_builder import WILDCARD

DEFAULT_CANDIDATES: List[Dict[str, Any]] = [
    {
        "id": "/en/paris",
        "name": "Paris",
        "type": [{"id": "/common/topic", "name": "Topic"}, {"id": "/location/citytown", "name": "City/Town"}],
        "domain": [{"id": "/location", "name": "Location"}],
        "alias": ["City of Light"],
        "article": {"id": "/en/paris"},
        "image": {"id": "/en/paris"},
    },
    {
        "id": "/en/paris_hilton",
        "name": "Paris Hilton",
        "type": [{"id": "/people/person", "name": "Person"}],
        "article": "/en/paris_hilton",
        "image": None,
    },
    {
        "id": "/en/parma",
        "name": "Parma",
        "type": [{"id": "/location/citytown", "name": "City/Town"}],
        "article": None,
        "image": "/en/parma",
    },
]

DEFAULT_BLURBS: Dict[str, str] = {
    "/en/paris": "Paris is the capital and largest city of France.",
    "/en/paris_hilton": "Paris Whitney Hilton is an American media personality.",
}

DEFAULT_IMAGES = ("/en/paris", "/en/parma")


def _path_matches(url: str, resource_id: str) -> bool:
    return urlparse(url).path.endswith(resource_id)


class StubTransport:
    """按名称前缀匹配 fixtures；blurb 未命中返回 404（ServiceError），图片未命中 load_image=False。"""

    transport_id: str = "stub"

    def __init__(
        self,
        candidates: Optional[Iterable[Mapping[str, Any]]] = None,
        blurbs: Optional[Mapping[str, str]] = None,
        images: Optional[Iterable[str]] = None,
        query_param: str = "query",
    ) -> None:
        self._candidates = [dict(c) for c in (DEFAULT_CANDIDATES if candidates is None else candidates)]
        self._blurbs = dict(DEFAULT_BLURBS if blurbs is None else blurbs)
        self._images = tuple(DEFAULT_IMAGES if images is None else images)
        self._query_param = query_param
        self.requests: List[str] = []

    async def get_json(self, url: str) -> Any:
        self.requests.append(url)
        await asyncio.sleep(0)
        values = parse_qs(urlparse(url).query).get(self._query_param) or [""]
        prefix = values[0]
        if prefix.endswith(WILDCARD):
            prefix = prefix[: -len(WILDCARD)]
        prefix = prefix.strip().lower()
        result = [c for c in self._candidates if str(c.get("name") or "").lower().startswith(prefix)]
        return {"status": "200 OK", "result": result}

    async def get_text(self, url: str) -> Any:
        self.requests.append(url)
        await asyncio.sleep(0)
        for resource_id, body in self._blurbs.items():
            if _path_matches(url, resource_id):
                return {"status": "200 OK", "result": {"body": body}}
        raise SuggestServiceError("HTTP 404", status="404")

    async def load_image(self, url: str) -> bool:
        self.requests.append(url)
        await asyncio.sleep(0)
        return any(_path_matches(url, resource_id) for resource_id in self._images)
