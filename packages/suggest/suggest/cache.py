"""ResultCache：(context, text) -> 候选列表，(kind, resource_id) -> ResourceEntry；进程内、不淘汰。"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from suggest.models import Candidate, QueryKey, ResourceEntry


class ResultCache:
    """由 SuggestControl 持有并注入 fetcher / joiner；只在 control 销毁时 clear。

    写入一律覆盖；同 key 的重复写入结果相同，交错的回调之间无需加锁。
    """

    def __init__(self) -> None:
        self._candidates: Dict[QueryKey, Tuple[Candidate, ...]] = {}
        self._resources: Dict[Tuple[str, str], ResourceEntry] = {}

    def get_candidates(self, key: QueryKey) -> Optional[List[Candidate]]:
        """命中返回新 list（缓存内容本身不可变），未命中返回 None。"""
        stored = self._candidates.get(key)
        if stored is None:
            return None
        return list(stored)

    def put_candidates(self, key: QueryKey, candidates: Sequence[Candidate]) -> None:
        self._candidates[key] = tuple(candidates)

    def get_resource(self, resource_id: str, kind: str) -> Optional[ResourceEntry]:
        return self._resources.get((kind, resource_id))

    def put_resource(self, resource_id: str, entry: ResourceEntry) -> None:
        self._resources[(entry.kind, resource_id)] = entry

    def clear(self) -> None:
        self._candidates.clear()
        self._resources.clear()

    def __len__(self) -> int:
        return len(self._candidates) + len(self._resources)
