"""SuggestControl：外部组件回调 -> fetch / join / flyout，单一 live token。"""

import asyncio
from typing import Any, Dict, List, Optional, Tuple

import pytest

from suggest.control import EVENT_SELECT, EVENT_SELECT_NEW, SuggestControl
from suggest.errors import SuggestInvalidInputError
from suggest.models import NO_MATCHES_ID, Candidate, ReadyEvent
from suggest.transport.stub import StubTransport


class FakeWidget:
    def __init__(self) -> None:
        self.shown: List[Tuple[str, str, List[Candidate]]] = []
        self.current: Dict[str, Optional[Candidate]] = {}
        self.visible = True
        self.events: List[Tuple[str, str, Dict[str, Any]]] = []

    def show_candidates(self, context: str, text: str, candidates: List[Candidate]) -> None:
        self.shown.append((context, text, candidates))

    def highlighted(self, context: str) -> Optional[Candidate]:
        return self.current.get(context)

    def is_list_visible(self) -> bool:
        return self.visible

    def trigger(self, context: str, event: str, data: Dict[str, Any]) -> None:
        self.events.append((context, event, data))


class FakeRenderer:
    def __init__(self) -> None:
        self.flyouts: List[Tuple[ReadyEvent, str]] = []
        self.hidden = 0

    def show_flyout(self, event: ReadyEvent, link: str) -> None:
        self.flyouts.append((event, link))

    def hide_flyout(self) -> None:
        self.hidden += 1


def _make():
    widget = FakeWidget()
    renderer = FakeRenderer()
    transport = StubTransport()
    control = SuggestControl(widget, renderer, transport=transport)
    return control, widget, renderer, transport


def _highlight(control, widget, context, candidate):
    widget.current[context] = candidate
    return control.on_highlight_changed(context, candidate)


def test_query_text_changed_renders_candidates():
    async def run_test() -> None:
        control, widget, renderer, transport = _make()
        ctx = control.attach("ctx1")
        await control.on_query_text_changed(ctx, "par")
        context, text, candidates = widget.shown[0]
        assert (context, text) == ("ctx1", "par")
        assert [c.id for c in candidates] == ["/en/paris", "/en/paris_hilton", "/en/parma"]

        await control.on_query_text_changed(ctx, "par")
        assert len(transport.requests) == 1
        assert len(widget.shown) == 2

    asyncio.run(run_test())


def test_unattached_context_is_ignored():
    async def run_test() -> None:
        control, widget, renderer, transport = _make()
        assert control.on_query_text_changed("nobody", "par") is None
        assert control.on_query_text_changed(control.attach(), "") is None
        await control.drain()
        assert transport.requests == []
        assert widget.shown == []

    asyncio.run(run_test())


def test_highlight_shows_flyout_with_view_link():
    async def run_test() -> None:
        control, widget, renderer, transport = _make()
        ctx = control.attach("ctx1")
        await control.on_query_text_changed(ctx, "par")
        paris = widget.shown[0][2][0]
        token = _highlight(control, widget, ctx, paris)
        assert control.current_token is token
        await control.drain()
        event, link = renderer.flyouts[0]
        assert link == "http://www.freebase.com/view/en/paris"
        assert event.text.startswith("Paris is the capital")
        assert event.image_url == "http://www.freebase.com/api/trans/image_thumb/en/paris"

    asyncio.run(run_test())


def test_hidden_before_ready_cancels_flyout():
    async def run_test() -> None:
        control, widget, renderer, transport = _make()
        ctx = control.attach("ctx1")
        await control.on_query_text_changed(ctx, "par")
        token = _highlight(control, widget, ctx, widget.shown[0][2][0])
        control.on_hidden()
        await control.drain()
        assert token.disabled
        assert control.current_token is None
        assert renderer.flyouts == []
        assert renderer.hidden >= 2

    asyncio.run(run_test())


def test_new_highlight_disables_previous_token():
    async def run_test() -> None:
        control, widget, renderer, transport = _make()
        ctx = control.attach("ctx1")
        await control.on_query_text_changed(ctx, "par")
        paris, hilton, parma = widget.shown[0][2]
        first = _highlight(control, widget, ctx, paris)
        second = _highlight(control, widget, ctx, hilton)
        assert first.disabled and not second.disabled
        await control.drain()
        assert [e.candidate.id for e, _ in renderer.flyouts] == ["/en/paris_hilton"]
        # image 为 null -> 占位
        assert not renderer.flyouts[0][0].has_image

    asyncio.run(run_test())


def test_ready_is_dropped_when_highlight_moved_or_list_hidden():
    async def run_test() -> None:
        control, widget, renderer, transport = _make()
        ctx = control.attach("ctx1")
        await control.on_query_text_changed(ctx, "par")
        paris, hilton, parma = widget.shown[0][2]
        _highlight(control, widget, ctx, paris)
        widget.current[ctx] = parma
        await control.drain()
        assert renderer.flyouts == []

        _highlight(control, widget, ctx, hilton)
        widget.visible = False
        await control.drain()
        assert renderer.flyouts == []

    asyncio.run(run_test())


def test_no_join_for_placeholder_or_disabled_flyout():
    async def run_test() -> None:
        control, widget, renderer, transport = _make()
        ctx = control.attach("ctx1")
        quiet = control.attach("ctx2", flyout=False)
        placeholder = Candidate(id=NO_MATCHES_ID, name="No matches", article=None, image=None)
        assert control.on_highlight_changed(ctx, placeholder) is None
        assert control.on_highlight_changed(ctx, None) is None
        paris = Candidate.model_validate({"id": "/en/paris", "article": "/en/paris", "image": "/en/paris"})
        assert control.on_highlight_changed(quiet, paris) is None
        await control.drain()
        assert transport.requests == []
        assert renderer.flyouts == []

    asyncio.run(run_test())


def test_resource_cache_is_shared_across_inputs():
    async def run_test() -> None:
        control, widget, renderer, transport = _make()
        ctx1 = control.attach("ctx1")
        ctx2 = control.attach("ctx2")
        paris = Candidate.model_validate({"id": "/en/paris", "article": "/en/paris", "image": "/en/paris"})
        _highlight(control, widget, ctx1, paris)
        await control.drain()
        requests_after_first = len(transport.requests)

        _highlight(control, widget, ctx2, paris)
        # 两个资源都在缓存里：begin 内同步触发
        assert len(renderer.flyouts) == 2
        assert len(transport.requests) == requests_after_first

    asyncio.run(run_test())


def test_select_and_select_new_trigger_events():
    async def run_test() -> None:
        control, widget, renderer, transport = _make()
        plain = control.attach("plain")
        creating = control.attach("creating", suggest_new="Create new topic")
        paris = Candidate(id="/en/paris", name="Paris")
        control.select(plain, paris)
        assert control.select_new(plain, "Parisx") is False
        assert control.select_new(creating, "Parisx") is True
        assert widget.events == [
            ("plain", EVENT_SELECT, {"id": "/en/paris", "name": "Paris"}),
            ("creating", EVENT_SELECT_NEW, {"name": "Parisx"}),
        ]

    asyncio.run(run_test())


def test_attach_rejects_unknown_options():
    control, widget, renderer, transport = _make()
    with pytest.raises(SuggestInvalidInputError):
        control.attach("ctx1", widht=300)


def test_destroy_clears_cache_and_drops_late_deliveries():
    async def run_test() -> None:
        control, widget, renderer, transport = _make()
        ctx = control.attach("ctx1")
        await control.on_query_text_changed(ctx, "par")
        assert len(control.cache) == 1
        task = control.on_query_text_changed(ctx, "pa")
        control.destroy()
        await task
        assert len(widget.shown) == 1
        assert control.on_query_text_changed(ctx, "par") is None

    asyncio.run(run_test())


def test_detach_hides_its_flyout_and_drops_deliveries():
    async def run_test() -> None:
        control, widget, renderer, transport = _make()
        ctx = control.attach("ctx1")
        task = control.on_query_text_changed(ctx, "par")
        paris = Candidate.model_validate({"id": "/en/paris", "article": "/en/paris", "image": "/en/paris"})
        token = _highlight(control, widget, ctx, paris)
        control.detach(ctx)
        await task
        await control.drain()
        assert token.disabled
        assert widget.shown == []
        assert renderer.flyouts == []
        assert control.options_for(ctx) is control.options

    asyncio.run(run_test())


def test_destroy_keeps_cache_empty_after_in_flight_work_finishes():
    async def run_test() -> None:
        control, widget, renderer, transport = _make()
        ctx = control.attach("ctx1")
        control.on_query_text_changed(ctx, "par")
        paris = Candidate.model_validate({"id": "/en/paris", "article": "/en/paris", "image": "/en/paris"})
        _highlight(control, widget, ctx, paris)
        control.destroy()
        await control.drain()
        assert len(control.cache) == 0
        assert widget.shown == []
        assert renderer.flyouts == []

        # 重新挂上后不会拿到 destroy 之前的结果
        ctx = control.attach("ctx1")
        requests_before = len(transport.requests)
        await control.on_query_text_changed(ctx, "par")
        assert len(transport.requests) == requests_before + 1
        assert len(widget.shown) == 1

    asyncio.run(run_test())


def test_highlight_on_unattached_context_is_ignored():
    async def run_test() -> None:
        control, widget, renderer, transport = _make()
        paris = Candidate.model_validate({"id": "/en/paris", "article": "/en/paris", "image": "/en/paris"})
        assert control.on_highlight_changed("nobody", paris) is None
        assert control.current_token is None
        await control.drain()
        assert transport.requests == []
        assert renderer.flyouts == []

    asyncio.run(run_test())
