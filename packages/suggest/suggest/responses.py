"""解析搜索与 blurb 响应；结构异常抛 SuggestParseError，envelope 非 200 抛 SuggestServiceError。"""

from __future__ import annotations

import logging
from typing import Any, List

from pydantic import ValidationError

from suggest.errors import SuggestParseError, SuggestServiceError
from suggest.models import Candidate

logger = logging.getLogger(__name__)

STATUS_OK = "200 OK"


def _check_envelope_status(data: dict) -> None:
    status = data.get("status")
    if status is not None and status != STATUS_OK:
        code = data.get("code")
        messages = data.get("messages")
        raise SuggestServiceError(f"status={status} code={code} messages={messages}"[:500], status=str(status))


def parse_search_response(data: Any) -> List[Candidate]:
    """接受裸 list 或 {"status": "200 OK", "result": [...]}；非 dict 项与校验失败项跳过。"""
    if isinstance(data, dict):
        _check_envelope_status(data)
        data = data.get("result")
    if not isinstance(data, list):
        raise SuggestParseError("Missing or invalid 'result' array")
    out: List[Candidate] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        try:
            out.append(Candidate.model_validate(item))
        except ValidationError as e:
            logger.debug("suggest candidate skipped id=%s error=%s", item.get("id"), e)
    return out


def parse_blurb_response(data: Any) -> str:
    """blurb 可能是纯文本，也可能是 {"status": "200 OK", "result": {"body": "..."}}。"""
    if isinstance(data, str):
        return data
    if isinstance(data, dict):
        _check_envelope_status(data)
        result = data.get("result")
        body = result.get("body") if isinstance(result, dict) else None
        if not isinstance(body, str):
            raise SuggestParseError("Missing 'result.body' in blurb response")
        return body
    raise SuggestParseError(f"Unexpected blurb payload type: {type(data).__name__}")
