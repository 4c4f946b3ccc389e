from sqlalchemy import Column, Integer, String, Text
from ..database import Base


class User(Base):
    """用户表 - 登录账号"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=False)
    username = Column(String(100), unique=True, nullable=False, index=True)
    # pbkdf2_sha256$<iterations>$<salt_b64>$<hash_b64>
    password = Column(Text, nullable=False)
