from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional

from suggest.errors import SuggestInvalidInputError

if TYPE_CHECKING:
    from suggest.models import Candidate

DEFAULT_SERVICE_URL = "http://www.freebase.com"


def _read_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in {"0", "false", "off", "no"}:
        return False
    if normalized in {"1", "true", "on", "yes"}:
        return True
    return default


def _read_float_env(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None


def _default_ac_param() -> Dict[str, Any]:
    return {"type": "/common/topic", "start": 0, "limit": 20}


def _default_blurb_param() -> Dict[str, Any]:
    return {"maxlength": 300}


@dataclass(frozen=True)
class SuggestOptions:
    """一个 input 的 suggest 配置；SuggestControl 持有默认值，attach 时按 input 覆盖。"""

    service_url: str = DEFAULT_SERVICE_URL
    ac_path: str = "/api/service/search"
    ac_param: Mapping[str, Any] = field(default_factory=_default_ac_param)
    ac_qstr: str = "query"
    blurb_path: str = "/api/trans/blurb"
    blurb_param: Mapping[str, Any] = field(default_factory=_default_blurb_param)
    thumbnail_path: str = "/api/trans/image_thumb"
    thumbnail_param: Mapping[str, Any] = field(default_factory=dict)
    view_path: str = "/view"
    flyout: bool = True
    suggest_new: Optional[str] = None
    filter: Optional[Callable[["Candidate"], bool]] = None
    timeout_sec: Optional[float] = None

    @classmethod
    def from_env(cls) -> "SuggestOptions":
        return cls(
            service_url=os.getenv("SUGGEST_SERVICE_URL", DEFAULT_SERVICE_URL),
            flyout=_read_bool_env("SUGGEST_FLYOUT", True),
            timeout_sec=_read_float_env("SUGGEST_TIMEOUT_SEC"),
        )

    def merged(self, overrides: Optional[Mapping[str, Any]] = None) -> "SuggestOptions":
        """浅合并：覆盖项整体替换字段（dict 字段不做深合并）；未知字段抛 SuggestInvalidInputError。"""
        if not overrides:
            return self
        known = {f.name for f in dataclasses.fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise SuggestInvalidInputError(f"unknown suggest options: {', '.join(unknown)}")
        return dataclasses.replace(self, **dict(overrides))
