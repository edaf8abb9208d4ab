"""SuggestionFetcher：按 (context, text) 去重的搜索请求；命中与未命中都经事件循环异步交付。"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, List, Optional, Set

from suggest import url_builder
from suggest.cache import ResultCache
from suggest.config import SuggestOptions
from suggest.errors import DELIVERY_ERRORS
from suggest.models import Candidate, QueryKey
from suggest.responses import parse_search_response
from suggest.transport.base import SuggestTransport

logger = logging.getLogger(__name__)

Deliver = Callable[[QueryKey, List[Candidate]], None]


class SuggestionFetcher:
    """fetch() 立即返回 Task；交付通过构造时注入的 deliver 回调完成，失败时不交付。

    同一 context 内，较新的缓存命中会取消尚未交付的旧命中（旧 Task 以 cancelled 结束）；
    不同 context 之间互不影响。网络请求从不取消。
    """

    def __init__(self, transport: SuggestTransport, cache: ResultCache, deliver: Deliver) -> None:
        self._transport = transport
        self._cache = cache
        self._deliver = deliver
        self._tasks: Set[asyncio.Task] = set()
        self._pending_hits: Dict[str, asyncio.Task] = {}
        self._generation = 0

    def fetch(self, context: str, text: str, options: SuggestOptions) -> Optional[asyncio.Task]:
        """空文本不发请求也不交付，返回 None；需在运行中的事件循环内调用。"""
        if not text:
            return None
        key = QueryKey(context, text)
        cached = self._cache.get_candidates(key)
        if cached is not None:
            logger.debug("suggest cache hit context=%s query=%r count=%d", context, text, len(cached))
            pending = self._pending_hits.get(context)
            if pending is not None and not pending.done():
                pending.cancel()
            task = self._spawn(self._deliver_cached(key, cached, options, self._generation))
            self._pending_hits[context] = task
            task.add_done_callback(lambda t, ctx=context: self._forget_hit(ctx, t))
            return task
        logger.debug("suggest cache miss context=%s query=%r", context, text)
        return self._spawn(self._load(key, options, self._generation))

    def reset(self) -> None:
        """teardown：取消未交付的命中；在途请求照常结束，但结果既不写缓存也不交付。"""
        for task in list(self._pending_hits.values()):
            task.cancel()
        self._pending_hits.clear()
        self._generation += 1

    async def drain(self) -> None:
        """等待所有在途请求结束（teardown / CLI / 测试）。"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _forget_hit(self, context: str, task: asyncio.Task) -> None:
        if self._pending_hits.get(context) is task:
            del self._pending_hits[context]

    async def _deliver_cached(
        self, key: QueryKey, candidates: List[Candidate], options: SuggestOptions, generation: int
    ) -> Optional[List[Candidate]]:
        if generation != self._generation:
            return None
        return self._emit(key, candidates, options)

    async def _load(self, key: QueryKey, options: SuggestOptions, generation: int) -> Optional[List[Candidate]]:
        url = url_builder.search_url(options, key.text)
        try:
            payload = await self._transport.get_json(url)
            candidates = parse_search_response(payload)
        except DELIVERY_ERRORS as e:
            logger.warning(
                "suggest search failed context=%s query=%r transport=%s code=%s error=%s",
                key.context,
                key.text,
                self._transport.transport_id,
                e.code,
                e.detail,
            )
            return None
        if generation != self._generation:
            logger.debug("suggest search discarded context=%s query=%r reason=reset", key.context, key.text)
            return None
        self._cache.put_candidates(key, candidates)
        return self._emit(key, candidates, options)

    def _emit(self, key: QueryKey, candidates: List[Candidate], options: SuggestOptions) -> List[Candidate]:
        if options.filter is not None:
            candidates = [c for c in candidates if options.filter(c)]
        self._deliver(key, candidates)
        return candidates
