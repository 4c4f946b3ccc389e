from sqlalchemy import Column, Integer, String
from ..database import Base


class EntityId(Base):
    """全局 ID 分配表：users / journals / folders 共用同一个自增序列。"""
    __tablename__ = "entity_ids"

    id = Column(Integer, primary_key=True, autoincrement=True)
    kind = Column(String(20), nullable=False)
