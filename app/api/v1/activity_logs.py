"""
活动日志查询API（只读）
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.auth import Actor, Permission, require_permission
from app.db.session import get_db
from app.schemas.inventory_schemas import ActivityLogResponse
from app.services.activity_log_service import ActivityLogService

router = APIRouter()


@router.get("", response_model=List[ActivityLogResponse], summary="最近的活动日志")
def list_activity_logs(
    limit: Optional[int] = Query(None, ge=1, le=1000, description="返回条数，默认取配置值"),
    item_type: Optional[str] = Query(None, alias="itemType", description="实体类型"),
    item_id: Optional[int] = Query(None, alias="itemId", ge=1, description="实体ID"),
    actor: Actor = Depends(require_permission(Permission.READ)),
    db: Session = Depends(get_db),
):
    service = ActivityLogService(db)
    if item_type:
        return service.list_by_entity(item_type, item_id, limit=limit)
    return service.list(limit=limit)
