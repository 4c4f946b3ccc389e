from .folder import FolderCreate, FolderResponse
from .journal import JournalCreate, JournalResponse, JournalUpdate
from .transfer import ExportDocument, ImportDocument, ImportFolder, ImportJournal, ImportResult
from .user import ChangePasswordRequest, LoginRequest, RegisterRequest, UserResponse

__all__ = [
    "FolderCreate",
    "FolderResponse",
    "JournalCreate",
    "JournalResponse",
    "JournalUpdate",
    "ExportDocument",
    "ImportDocument",
    "ImportFolder",
    "ImportJournal",
    "ImportResult",
    "ChangePasswordRequest",
    "LoginRequest",
    "RegisterRequest",
    "UserResponse",
]
