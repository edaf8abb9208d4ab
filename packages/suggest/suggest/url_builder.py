"""URL 拼装：service_url + path + quote_id(id) + ?query；纯函数，不校验 base URL。"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote, urlencode

from suggest.config import SuggestOptions

# 搜索服务要求末尾 * 才做前缀匹配（否则是精确搜索）
WILDCARD = "*"

# 与 encodeURIComponent 保持一致的不转义字符（quote 默认已保留 _.-~）
_ID_SAFE = "!*'()"


def quote_id(resource_id: str) -> str:
    """以 / 开头的 id 原样使用；否则百分号编码并加前导 /。"""
    if resource_id.startswith("/"):
        return resource_id
    return "/" + quote(resource_id, safe=_ID_SAFE)


def query_string(params: Optional[Mapping[str, Any]]) -> str:
    return urlencode(dict(params or {}), doseq=True)


def _with_query(url: str, params: Optional[Mapping[str, Any]]) -> str:
    qs = query_string(params)
    return f"{url}?{qs}" if qs else url


def search_params(options: SuggestOptions, text: str) -> Dict[str, Any]:
    """ac_param 的副本 + {ac_qstr: text + "*"}；不修改配置里的 dict。"""
    params = dict(options.ac_param)
    params[options.ac_qstr] = text + WILDCARD
    return params


def search_url(options: SuggestOptions, text: str) -> str:
    return _with_query(options.service_url + options.ac_path, search_params(options, text))


def blurb_url(resource_id: str, options: SuggestOptions) -> str:
    return _with_query(options.service_url + options.blurb_path + quote_id(resource_id), options.blurb_param)


def thumbnail_url(resource_id: str, options: SuggestOptions) -> str:
    return _with_query(
        options.service_url + options.thumbnail_path + quote_id(resource_id),
        options.thumbnail_param,
    )


def view_url(resource_id: str, options: SuggestOptions) -> str:
    return options.service_url + options.view_path + quote_id(resource_id)
