"""导入 / 导出当前用户的数据"""

from __future__ import annotations

import logging
from dataclasses import asdict

from ..schemas import ExportDocument, ImportDocument, ImportFolder, ImportResult
from ..storage import Folder, Journal, Storage
from ..utils.dates import utcnow

logger = logging.getLogger(__name__)


async def export_user_data(storage: Storage, user_id: int) -> ExportDocument:
    folders = await storage.get_user_folders(user_id)
    journals = await storage.get_user_journals(user_id)
    return ExportDocument.model_validate(
        {
            "exported_at": utcnow(),
            "folders": [asdict(f) for f in folders],
            "journals": [asdict(j) for j in journals],
        }
    )


def _remap(ref: int | None, id_map: dict[int, int], owned: set[int]) -> int | None:
    """引用重映射：优先映射到本次导入的新文件夹；其次保留调用者已有的文件夹；否则置空。"""
    if ref is None:
        return None
    if ref in id_map:
        return id_map[ref]
    if ref in owned:
        return ref
    return None


def _parents_first(folders: list[ImportFolder]) -> list[ImportFolder]:
    """按 parentId 排序：父文件夹先于子文件夹创建（文件里的顺序不作要求）。

    parentId 指向文件外的文件夹时视为根；成环的剩余条目按原顺序追加，尚未创建的父引用由 `_remap` 置空。
    """
    in_file = {f.id for f in folders if f.id is not None}
    placed: set[int] = set()
    ordered: list[ImportFolder] = []
    pending = list(folders)
    while pending:
        ready = [
            f for f in pending
            if f.parent_id is None or f.parent_id not in in_file or f.parent_id in placed
        ]
        if not ready:
            ordered.extend(pending)
            break
        for f in ready:
            ordered.append(f)
            if f.id is not None:
                placed.add(f.id)
        ready_keys = {id(f) for f in ready}
        pending = [f for f in pending if id(f) not in ready_keys]
    return ordered


async def import_user_data(storage: Storage, user_id: int, document: ImportDocument) -> ImportResult:
    """把已校验的导入文档写入存储。

    - 文件夹按父先子后的顺序创建，parentId 指向本次导入或调用者已有的文件夹
    - 日记的 folderId 同样重映射；原 id / userId / 时间戳一律不沿用
    """
    owned = {f.id for f in await storage.get_user_folders(user_id)}
    id_map: dict[int, int] = {}

    created_folders: list[Folder] = []
    for item in _parents_first(document.folders):
        folder = await storage.create_folder(
            user_id,
            {
                "name": item.name,
                "parent_id": _remap(item.parent_id, id_map, owned),
            },
        )
        if item.id is not None:
            id_map[item.id] = folder.id
        created_folders.append(folder)

    created_journals: list[Journal] = []
    for item in document.journals:
        data = item.model_dump()
        data["folder_id"] = _remap(item.folder_id, id_map, owned)
        created_journals.append(await storage.create_journal(user_id, data))

    logger.info(
        "[IMPORT] user_id=%s folders=%s journals=%s",
        user_id,
        len(created_folders),
        len(created_journals),
    )
    return ImportResult.model_validate(
        {
            "imported": len(created_journals),
            "folders": [asdict(f) for f in created_folders],
            "journals": [asdict(j) for j in created_journals],
        }
    )
