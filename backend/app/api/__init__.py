from .auth import router as auth_router
from .journals import router as journals_router
from .folders import router as folders_router
from .upload import router as upload_router

__all__ = [
    "auth_router",
    "journals_router",
    "folders_router",
    "upload_router",
]
