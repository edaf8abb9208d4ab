"""suggest 数据模型：Candidate / Ref（服务端 JSON）、QueryKey、ResourceEntry、ReadyEvent。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, NamedTuple, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# 搜索服务为“无结果”返回的占位候选，不触发 flyout
NO_MATCHES_ID = "NO_MATCHES"

# article / image 缺失时写入 join 槽位的中性值；"#" 表示不渲染 <img>
TEXT_PLACEHOLDER = ""
IMAGE_PLACEHOLDER = "#"

RESOURCE_TEXT = "text"
RESOURCE_IMAGE = "image"


class Ref(BaseModel):
    """类型/领域/文章/图片引用：至少带 id。"""

    model_config = ConfigDict(extra="allow")

    id: str
    name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name or self.id


RefLike = Union[Ref, str]


def ref_id(ref: Optional[RefLike]) -> Optional[str]:
    """引用可能是裸 id 或带 id 的对象；空值返回 None。"""
    if ref is None:
        return None
    if isinstance(ref, Ref):
        return ref.id or None
    return ref or None


class Candidate(BaseModel):
    """搜索服务返回的一条候选；核心层只关心 id/article/image，其余字段原样透传给 UI。"""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = None
    name: Optional[str] = None
    types: List[Ref] = Field(default_factory=list, alias="type")
    domains: List[Ref] = Field(default_factory=list, alias="domain")
    aliases: List[str] = Field(default_factory=list, alias="alias")
    properties: List[str] = Field(default_factory=list)
    article: Optional[RefLike] = None
    image: Optional[RefLike] = None

    @field_validator("types", "domains", mode="before")
    @classmethod
    def _coerce_refs(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [{"id": v} if isinstance(v, str) else v for v in value]
        return value

    @field_validator("aliases", "properties", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def label(self) -> str:
        return self.name or self.id or ""

    @property
    def article_id(self) -> Optional[str]:
        return ref_id(self.article)

    @property
    def image_id(self) -> Optional[str]:
        return ref_id(self.image)

    @property
    def has_resources(self) -> bool:
        """payload 中出现过 article 或 image 键（值可为 null，null 时用占位值）。"""
        return "article" in self.model_fields_set or "image" in self.model_fields_set


class QueryKey(NamedTuple):
    """(input 上下文, 原样查询文本)；不做大小写/空白规范化。"""

    context: str
    text: str


class ResourceEntry(NamedTuple):
    kind: str
    value: str


@dataclass(frozen=True)
class ReadyEvent:
    """join 完成：candidate 的 blurb 与缩略图 URL（或占位值）同时就绪。"""

    candidate: Candidate
    text: str
    image_url: str

    @property
    def has_image(self) -> bool:
        return self.image_url != IMAGE_PLACEHOLDER
