"""
活动日志服务

活动日志只用于审计展示，写入失败只记录到运行日志，不影响已提交的业务操作
"""

from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.constants.operation_types import ActivityAction, OperationType, OperationResult
from app.core.config import settings
from app.core.logging_config import get_logger
from app.models.inventory_models import ActivityLog
from app.utils.log_helper import log_operation

logger = get_logger(__name__)


class ActivityLogService:
    """活动日志服务"""

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        actor: str,
        action: ActivityAction,
        item_type: str,
        item_id: Optional[int],
        details: str,
    ) -> Optional[ActivityLog]:
        """
        追加一条活动日志

        必须在业务事务提交之后调用：这里单独提交，失败时回滚本条日志并返回None
        """
        try:
            entry = ActivityLog(
                user_id=actor,
                action=action,
                item_type=item_type,
                item_id=item_id,
                details=details,
            )
            self.db.add(entry)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to write activity log: %s %s:%s", action, item_type, item_id)
            log_operation(
                OperationType.ACTIVITY_LOG_WRITE,
                f"{item_type}:{item_id}",
                actor,
                OperationResult.FAILED,
                message=details,
            )
            return None
        return entry

    def list(self, limit: Optional[int] = None) -> List[ActivityLog]:
        return (
            self.db.query(ActivityLog)
            .order_by(desc(ActivityLog.timestamp), desc(ActivityLog.id))
            .limit(limit or settings.ACTIVITY_LOG_LIMIT)
            .all()
        )

    def list_by_entity(
        self,
        item_type: str,
        item_id: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[ActivityLog]:
        query = self.db.query(ActivityLog).filter(ActivityLog.item_type == item_type)
        if item_id is not None:
            query = query.filter(ActivityLog.item_id == item_id)
        return (
            query.order_by(desc(ActivityLog.timestamp), desc(ActivityLog.id))
            .limit(limit or settings.ACTIVITY_LOG_LIMIT)
            .all()
        )
