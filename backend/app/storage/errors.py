from __future__ import annotations


class StorageError(Exception):
    """存储层异常基类"""


class EntityNotFoundError(StorageError):
    """目标记录不存在，或不属于当前调用者（两者对外不可区分）。"""

    def __init__(self, kind: str, entity_id: int | None):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} not found: {entity_id}")
