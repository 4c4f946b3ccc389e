from .entity_id import EntityId
from .user import User
from .journal import Journal
from .folder import Folder

__all__ = [
    "EntityId",
    "User",
    "Journal",
    "Folder",
]
