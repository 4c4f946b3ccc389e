"""Journal API"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from ..schemas import (
    ExportDocument,
    ImportDocument,
    ImportResult,
    JournalCreate,
    JournalResponse,
    JournalUpdate,
)
from ..services.ownership import ensure_owned
from ..services.transfer import export_user_data, import_user_data
from ..storage import MAX_ENTITY_ID, EntityNotFoundError, Journal, Storage
from ..utils.errors import InvariantViolationError
from .deps import get_storage, require_user_id

router = APIRouter(prefix="/journals", tags=["journals"])
logger = logging.getLogger(__name__)


async def _get_owned_journal(storage: Storage, journal_id: int, user_id: int) -> Journal:
    """取出调用者自己的日记；不存在或属于别人都返回 404（不泄露是否存在）。"""
    if not 0 < journal_id <= MAX_ENTITY_ID:
        raise HTTPException(status_code=404, detail="Journal not found")
    try:
        return ensure_owned(await storage.get_journal(journal_id), user_id)
    except EntityNotFoundError:
        raise HTTPException(status_code=404, detail="Journal not found") from None


@router.post("", response_model=JournalResponse, status_code=201)
async def create_journal(
    payload: JournalCreate,
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
):
    """新建日记"""
    return await storage.create_journal(user_id, payload.model_dump())


@router.get("", response_model=list[JournalResponse])
async def list_journals(
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
):
    """当前用户的全部日记"""
    return await storage.get_user_journals(user_id)


@router.get("/export", response_model=ExportDocument)
async def export_journals(
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
):
    """导出当前用户的文件夹与日记（JSON，可直接用于导入）"""
    return await export_user_data(storage, user_id)


@router.post("/import", response_model=ImportResult, status_code=201)
async def import_journals(
    payload: ImportDocument,
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
):
    """导入日记：接受导出文件，或旧版前端导出的日记数组。

    所有条目都已通过格式校验后才开始写入；导入的记录一律归当前用户所有。
    """
    return await import_user_data(storage, user_id, payload)


@router.get("/{journal_id}", response_model=JournalResponse)
async def get_journal(
    journal_id: int,
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
):
    """获取单篇日记"""
    return await _get_owned_journal(storage, journal_id, user_id)


@router.patch("/{journal_id}", response_model=JournalResponse)
async def update_journal(
    journal_id: int,
    payload: JournalUpdate,
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
):
    """局部更新日记（合并规则见 storage.merge）"""
    journal = await _get_owned_journal(storage, journal_id, user_id)
    try:
        return await storage.update_journal(journal.id, payload.changes())
    except EntityNotFoundError as e:
        # 刚刚确认存在的记录在更新时消失：属于内部异常，不作为 404 返回
        raise InvariantViolationError(f"journal {journal.id} vanished during update") from e


@router.delete("/{journal_id}", status_code=204)
async def delete_journal(
    journal_id: int,
    user_id: int = Depends(require_user_id),
    storage: Storage = Depends(get_storage),
) -> Response:
    """删除日记"""
    journal = await _get_owned_journal(storage, journal_id, user_id)
    await storage.delete_journal(journal.id)
    logger.info("[JOURNAL] deleted id=%s user_id=%s", journal.id, user_id)
    return Response(status_code=204)
