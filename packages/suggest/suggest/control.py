"""SuggestControl：持有 ResultCache / SuggestionFetcher / ResourceJoiner，对接外部列表组件与 flyout 渲染。

外部 UI 只通过 SuggestWidget / FlyoutRenderer 两个协议与核心交互；control 同一时刻最多持有一个
live JoinToken，新建前先 disable 旧的。
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Dict, List, Optional, Protocol

from suggest import url_builder
from suggest.cache import ResultCache
from suggest.config import SuggestOptions
from suggest.fetcher import SuggestionFetcher
from suggest.joiner import JoinToken, ResourceJoiner
from suggest.models import NO_MATCHES_ID, Candidate, QueryKey, ReadyEvent
from suggest.transport.base import SuggestTransport
from suggest.transport.http_client import HttpxTransport

logger = logging.getLogger(__name__)

EVENT_SELECT = "fb-select"
EVENT_SELECT_NEW = "fb-select-new"


class SuggestWidget(Protocol):
    """外部列表/输入组件：渲染候选、维护高亮、向宿主派发事件。"""

    def show_candidates(self, context: str, text: str, candidates: List[Candidate]) -> None:
        ...

    def highlighted(self, context: str) -> Optional[Candidate]:
        ...

    def is_list_visible(self) -> bool:
        ...

    def trigger(self, context: str, event: str, data: Dict[str, Any]) -> None:
        ...


class FlyoutRenderer(Protocol):
    def show_flyout(self, event: ReadyEvent, link: str) -> None:
        ...

    def hide_flyout(self) -> None:
        ...


class SuggestControl:
    """一个 control 可挂多个 input（context）；缓存在这些 input 间共享，生命周期到 destroy 为止。"""

    def __init__(
        self,
        widget: SuggestWidget,
        renderer: FlyoutRenderer,
        transport: Optional[SuggestTransport] = None,
        options: Optional[SuggestOptions] = None,
    ) -> None:
        self.options = options or SuggestOptions()
        self._owns_transport = transport is None
        self.transport: SuggestTransport = transport or HttpxTransport(timeout_sec=self.options.timeout_sec)
        self.cache = ResultCache()
        self.fetcher = SuggestionFetcher(self.transport, self.cache, self._on_candidates)
        self.joiner = ResourceJoiner(self.transport, self.cache, self._on_ready)
        self._widget = widget
        self._renderer = renderer
        self._inputs: Dict[str, SuggestOptions] = {}
        self._token: Optional[JoinToken] = None
        self._flyout_context: Optional[str] = None

    def attach(self, context: Optional[str] = None, **overrides: Any) -> str:
        """注册一个 input；overrides 只作用于该 input，未知字段抛 SuggestInvalidInputError。"""
        context = context or uuid.uuid4().hex
        self._inputs[context] = self.options.merged(overrides)
        logger.debug("suggest attach context=%s", context)
        return context

    def detach(self, context: str) -> None:
        if self._flyout_context == context:
            self.hide_flyout()
        self._inputs.pop(context, None)

    def options_for(self, context: str) -> SuggestOptions:
        return self._inputs.get(context, self.options)

    @property
    def current_token(self) -> Optional[JoinToken]:
        return self._token

    # --- 外部组件回调 ---

    def on_query_text_changed(self, context: str, text: str) -> Optional[asyncio.Task]:
        if context not in self._inputs:
            logger.debug("suggest fetch ignored context=%s reason=not_attached", context)
            return None
        return self.fetcher.fetch(context, text, self._inputs[context])

    def on_highlight_changed(self, context: str, candidate: Optional[Candidate]) -> Optional[JoinToken]:
        self.hide_flyout()
        if context not in self._inputs:
            logger.debug("suggest join ignored context=%s reason=not_attached", context)
            return None
        options = self._inputs[context]
        if candidate is None or not options.flyout or candidate.id == NO_MATCHES_ID:
            return None
        self._flyout_context = context
        self._token = self.joiner.begin(candidate, options)
        return self._token

    def on_hidden(self) -> None:
        self.hide_flyout()

    def select(self, context: str, candidate: Candidate) -> None:
        self._widget.trigger(context, EVENT_SELECT, {"id": candidate.id, "name": candidate.label})
        self.on_hidden()

    def select_new(self, context: str, text: str) -> bool:
        """仅在配置了 suggest_new 时派发 fb-select-new；否则忽略并返回 False。"""
        if self.options_for(context).suggest_new is None:
            logger.debug("suggest select_new ignored context=%s reason=suggest_new_disabled", context)
            return False
        self._widget.trigger(context, EVENT_SELECT_NEW, {"name": text})
        self.on_hidden()
        return True

    def hide_flyout(self) -> None:
        if self._token is not None:
            self.joiner.cancel(self._token)
            self._token = None
        self._flyout_context = None
        self._renderer.hide_flyout()

    # --- 生命周期 ---

    async def drain(self) -> None:
        while self.fetcher.in_flight or self.joiner.in_flight:
            await self.fetcher.drain()
            await self.joiner.drain()

    def destroy(self) -> None:
        self.hide_flyout()
        self.fetcher.reset()
        self.joiner.reset()
        self.cache.clear()
        self._inputs.clear()

    async def aclose(self) -> None:
        self.destroy()
        if self._owns_transport and isinstance(self.transport, HttpxTransport):
            await self.transport.aclose()

    # --- 核心回调 ---

    def _on_candidates(self, key: QueryKey, candidates: List[Candidate]) -> None:
        if key.context not in self._inputs:
            logger.debug("suggest delivery dropped context=%s reason=detached", key.context)
            return
        self._widget.show_candidates(key.context, key.text, candidates)

    def _on_ready(self, event: ReadyEvent) -> None:
        context = self._flyout_context
        if context is None or not self._widget.is_list_visible():
            return
        current = self._widget.highlighted(context)
        if current is None or current.id != event.candidate.id:
            logger.debug("suggest flyout dropped id=%s reason=highlight_moved", event.candidate.id)
            return
        link = url_builder.view_url(event.candidate.id or "", self.options_for(context))
        self._renderer.show_flyout(event, link)
