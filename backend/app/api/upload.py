"""Journal image upload API（尚未实现）"""

from fastapi import APIRouter, Depends, HTTPException

from .deps import require_user_id

router = APIRouter(prefix="/upload", tags=["upload"])


@router.post("", status_code=501)
async def upload_file(_user_id: int = Depends(require_user_id)):
    # TODO: 接入对象存储后改为保存图片并返回可访问的 URL
    raise HTTPException(status_code=501, detail="File upload not implemented yet")
