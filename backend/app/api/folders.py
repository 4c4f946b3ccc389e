"""Folder API"""

from fastapi import APIRouter, Depends

from ..schemas import FolderCreate, FolderResponse
from ..storage import Storage
from .deps import get_storage, require_user_id

router = APIRouter(prefix="/folders", tags=["folders"])


@router.post("", response_model=FolderResponse, status_code=201)
async def create_folder(
    payload: FolderCreate,
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
):
    """新建文件夹"""
    return await storage.create_folder(user_id, payload.model_dump())


@router.get("", response_model=list[FolderResponse])
async def list_folders(
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
):
    """当前用户的全部文件夹"""
    return await storage.get_user_folders(user_id)
