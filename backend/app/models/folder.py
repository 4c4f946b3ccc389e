from sqlalchemy import Column, Integer, String
from ..database import Base


class Folder(Base):
    """文件夹表 - parent_id 支持嵌套（前端目前只展示一层）"""
    __tablename__ = "folders"

    id = Column(Integer, primary_key=True, autoincrement=False)
    user_id = Column(Integer, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    parent_id = Column(Integer, nullable=True)
