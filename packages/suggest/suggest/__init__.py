"""suggest: 增量搜索建议的异步取数与协调层（缓存、搜索请求、blurb/缩略图 join）。"""

from suggest.cache import ResultCache
from suggest.config import SuggestOptions
from suggest.control import FlyoutRenderer, SuggestControl, SuggestWidget
from suggest.fetcher import SuggestionFetcher
from suggest.joiner import JoinToken, ResourceJoiner
from suggest.models import Candidate, QueryKey, ReadyEvent, Ref, ResourceEntry

__all__ = [
    "Candidate",
    "FlyoutRenderer",
    "JoinToken",
    "QueryKey",
    "ReadyEvent",
    "Ref",
    "ResourceEntry",
    "ResourceJoiner",
    "ResultCache",
    "SuggestControl",
    "SuggestOptions",
    "SuggestWidget",
    "SuggestionFetcher",
]
