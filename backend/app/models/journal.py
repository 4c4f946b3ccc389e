from sqlalchemy import JSON, Column, DateTime, Integer, String, Text
from ..database import Base


class Journal(Base):
    """日记表 - 富文本内容以序列化字符串原样保存"""
    __tablename__ = "journals"

    id = Column(Integer, primary_key=True, autoincrement=False)
    user_id = Column(Integer, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, default="")
    type = Column(String(20), nullable=False)  # daily / casual / gratitude / travel / dream
    folder_id = Column(Integer, nullable=True, index=True)
    tags = Column(JSON, nullable=False, default=list)
    mood = Column(String(100), nullable=False, default="")
    date = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
