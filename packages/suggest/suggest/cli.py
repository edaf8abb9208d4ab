"""命令行演示：一次查询 -> 打印候选 -> 高亮第一条 -> 打印 flyout（blurb + 缩略图）。

Usage:
    python -m suggest par
    python -m suggest par --stub --verbose
    python -m suggest "blade run" --type /film/film --limit 5
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional, Sequence, Tuple

from suggest.config import SuggestOptions
from suggest.control import SuggestControl
from suggest.models import Candidate, ReadyEvent
from suggest.transport.base import SuggestTransport
from suggest.transport.stub import StubTransport

CLI_CONTEXT = "cli"


class ConsoleWidget:
    """最小列表组件：记住每个 context 的候选，默认高亮第一条。"""

    def __init__(self) -> None:
        self.candidates: Dict[str, List[Candidate]] = {}
        self._highlight: Dict[str, Optional[Candidate]] = {}
        self._visible = False

    def show_candidates(self, context: str, text: str, candidates: List[Candidate]) -> None:
        self.candidates[context] = candidates
        self._visible = bool(candidates)

    def highlight(self, context: str, candidate: Optional[Candidate]) -> None:
        self._highlight[context] = candidate

    def highlighted(self, context: str) -> Optional[Candidate]:
        return self._highlight.get(context)

    def is_list_visible(self) -> bool:
        return self._visible

    def trigger(self, context: str, event: str, data: Dict[str, Any]) -> None:
        print(f"{event} {json.dumps(data, ensure_ascii=False)}")


class ConsoleFlyout:
    def __init__(self) -> None:
        self.shown: Optional[Tuple[ReadyEvent, str]] = None

    def show_flyout(self, event: ReadyEvent, link: str) -> None:
        self.shown = (event, link)

    def hide_flyout(self) -> None:
        self.shown = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="suggest", description="Query the suggest service and show the flyout")
    parser.add_argument("text", help="Text typed into the input")
    parser.add_argument("--service-url", default=None, help="Base URL of the search/blurb/thumbnail services")
    parser.add_argument("--type", dest="type_filter", default=None, help="Type filter, e.g. /film/film")
    parser.add_argument("--limit", type=int, default=None, help="Maximum number of candidates")
    parser.add_argument("--stub", action="store_true", help="Use in-memory fixtures instead of the network")
    parser.add_argument("--no-flyout", action="store_true", help="Do not load blurb/thumbnail")
    parser.add_argument("--verbose", action="store_true", help="DEBUG logging")
    return parser


def _options_from_args(args: argparse.Namespace) -> SuggestOptions:
    options = SuggestOptions.from_env()
    overrides: Dict[str, Any] = {}
    if args.service_url:
        overrides["service_url"] = args.service_url.rstrip("/")
    if args.type_filter or args.limit is not None:
        ac_param = dict(options.ac_param)
        if args.type_filter:
            ac_param["type"] = args.type_filter
        if args.limit is not None:
            ac_param["limit"] = args.limit
        overrides["ac_param"] = ac_param
    if args.no_flyout:
        overrides["flyout"] = False
    return options.merged(overrides)


async def run(args: argparse.Namespace, transport: Optional[SuggestTransport] = None) -> int:
    widget = ConsoleWidget()
    flyout = ConsoleFlyout()
    control = SuggestControl(widget, flyout, transport=transport, options=_options_from_args(args))
    try:
        context = control.attach(CLI_CONTEXT)
        if control.on_query_text_changed(context, args.text) is None:
            print("empty query", file=sys.stderr)
            return 1
        await control.drain()
        candidates = widget.candidates.get(context)
        if not candidates:
            print("NO_MATCHES")
            return 1
        for candidate in candidates:
            print(f"{candidate.id}\t{candidate.label}")

        first = candidates[0]
        widget.highlight(context, first)
        control.on_highlight_changed(context, first)
        await control.drain()
        if flyout.shown is not None:
            event, link = flyout.shown
            print(f"flyout {link}")
            if event.text:
                print(f"blurb: {event.text}")
            if event.has_image:
                print(f"image: {event.image_url}")
        return 0
    finally:
        await control.aclose()


def main(argv: Sequence[str] | None = None, *, transport: Optional[SuggestTransport] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s %(message)s",
    )
    if transport is None and args.stub:
        transport = StubTransport()
    return asyncio.run(run(args, transport))


if __name__ == "__main__":
    sys.exit(main())
