"""ResourceJoiner：为高亮候选并发取 blurb 与缩略图，两者都就绪后只触发一次 ready。

JoinToken 是两个槽位（text / image）+ disabled 标记的显式对象，由加载完成时写入。
cancel 只置 disabled，不中止在途请求；迟到的结果仍写入缓存，但不会再触发 ready。
reset（teardown）之后迟到的结果连缓存也不写。
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from suggest import url_builder
from suggest.cache import ResultCache
from suggest.config import SuggestOptions
from suggest.errors import DELIVERY_ERRORS
from suggest.models import (
    IMAGE_PLACEHOLDER,
    RESOURCE_IMAGE,
    RESOURCE_TEXT,
    TEXT_PLACEHOLDER,
    Candidate,
    ReadyEvent,
    ResourceEntry,
)
from suggest.responses import parse_blurb_response
from suggest.transport.base import SuggestTransport

logger = logging.getLogger(__name__)

OnReady = Callable[[ReadyEvent], None]

_EMPTY: Any = object()


class JoinToken:
    """一次“选中变化”对应一个 token：要么触发一次 ready，要么被 disable，二者至多其一。"""

    def __init__(self, candidate: Candidate, on_ready: OnReady) -> None:
        self.candidate = candidate
        self._on_ready = on_ready
        self._text: Any = _EMPTY
        self._image: Any = _EMPTY
        self.disabled = False
        self.fired = False

    @property
    def text(self) -> Optional[str]:
        return None if self._text is _EMPTY else self._text

    @property
    def image(self) -> Optional[str]:
        return None if self._image is _EMPTY else self._image

    @property
    def live(self) -> bool:
        return not (self.disabled or self.fired)

    def disable(self) -> None:
        self.disabled = True

    def write(self, slot: str, value: str) -> bool:
        """写入槽位；disabled 或已触发时丢弃并返回 False。写满两个槽位的那次写入触发 ready。"""
        if not self.live:
            return False
        if slot == RESOURCE_TEXT:
            self._text = value
        elif slot == RESOURCE_IMAGE:
            self._image = value
        else:
            raise ValueError(f"unknown join slot: {slot}")
        if self._text is not _EMPTY and self._image is not _EMPTY:
            self.fired = True
            self._on_ready(ReadyEvent(candidate=self.candidate, text=self._text, image_url=self._image))
        return True


class ResourceJoiner:
    """同一 (kind, id) 同时只有一个在途加载；后来的 token 挂到该加载上等待结果。"""

    def __init__(self, transport: SuggestTransport, cache: ResultCache, on_ready: OnReady) -> None:
        self._transport = transport
        self._cache = cache
        self._on_ready = on_ready
        self._tasks: Set[asyncio.Task] = set()
        self._waiters: Dict[Tuple[str, str], List[JoinToken]] = {}
        self._generation = 0

    def begin(self, candidate: Candidate, options: SuggestOptions) -> JoinToken:
        """缓存命中的槽位同步写入（两者都命中时 ready 在 begin 返回前触发）；其余起后台任务。"""
        token = JoinToken(candidate, self._on_ready)
        if not candidate.id or not candidate.has_resources:
            logger.debug("suggest join skipped id=%s reason=no_resources", candidate.id)
            return token

        article_id = candidate.article_id
        if article_id:
            self._resolve(token, article_id, RESOURCE_TEXT, options)
        else:
            token.write(RESOURCE_TEXT, TEXT_PLACEHOLDER)

        image_id = candidate.image_id
        if image_id:
            self._resolve(token, image_id, RESOURCE_IMAGE, options)
        else:
            token.write(RESOURCE_IMAGE, IMAGE_PLACEHOLDER)
        return token

    def cancel(self, token: Optional[JoinToken]) -> None:
        if token is not None:
            token.disable()

    def reset(self) -> None:
        """teardown：丢弃所有等待中的 token；此前发出的加载完成后既不写缓存也不写 token。"""
        for waiters in self._waiters.values():
            for token in waiters:
                token.disable()
        self._waiters.clear()
        self._generation += 1

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def _resolve(self, token: JoinToken, resource_id: str, kind: str, options: SuggestOptions) -> None:
        entry = self._cache.get_resource(resource_id, kind)
        if entry is not None:
            token.write(kind, entry.value)
            return
        key = (kind, resource_id)
        waiters = self._waiters.get(key)
        if waiters is not None:
            logger.debug("suggest join attached to in-flight load kind=%s id=%s", kind, resource_id)
            waiters.append(token)
            return
        self._waiters[key] = [token]
        if kind == RESOURCE_TEXT:
            coro = self._load_text(resource_id, options, self._generation)
        else:
            coro = self._load_image(resource_id, options, self._generation)
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _settle(self, kind: str, resource_id: str, value: Optional[str], generation: int) -> None:
        if generation != self._generation:
            logger.debug("suggest %s discarded id=%s reason=reset", kind, resource_id)
            return
        waiters = self._waiters.pop((kind, resource_id), [])
        if value is None:
            return
        self._cache.put_resource(resource_id, ResourceEntry(kind, value))
        for token in waiters:
            if not token.write(kind, value):
                logger.debug("suggest %s discarded id=%s reason=token_spent", kind, resource_id)

    async def _load_text(self, resource_id: str, options: SuggestOptions, generation: int) -> None:
        url = url_builder.blurb_url(resource_id, options)
        try:
            doc = await self._transport.get_text(url)
            text = parse_blurb_response(doc)
        except DELIVERY_ERRORS as e:
            logger.warning(
                "suggest blurb failed id=%s transport=%s code=%s error=%s",
                resource_id,
                self._transport.transport_id,
                e.code,
                e.detail,
            )
            self._settle(RESOURCE_TEXT, resource_id, None, generation)
            return
        self._settle(RESOURCE_TEXT, resource_id, text, generation)

    async def _load_image(self, resource_id: str, options: SuggestOptions, generation: int) -> None:
        url = url_builder.thumbnail_url(resource_id, options)
        loaded = await self._transport.load_image(url)
        if not loaded:
            # 破图也算已解析，flyout 照常展示
            logger.debug("suggest thumbnail unavailable id=%s url=%s", resource_id, url)
        self._settle(RESOURCE_IMAGE, resource_id, url, generation)
