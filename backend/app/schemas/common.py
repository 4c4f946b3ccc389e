from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictInt
from pydantic.alias_generators import to_camel

from ..storage.records import MAX_ENTITY_ID


# 请求体里引用其它实体的 ID（folderId / parentId 等）：必须是能落进 SQL INTEGER 的正整数
EntityRef = Annotated[StrictInt, Field(ge=1, le=MAX_ENTITY_ID)]


class CamelModel(BaseModel):
    """对外 JSON 使用 camelCase（与前端保持一致），Python 侧仍用 snake_case。"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
