"""
仪表盘统计服务（只读）
"""

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.constants.operation_types import AssignmentStatus, ItemStatus
from app.models.inventory_models import Assignment, Credential, ITEM_MODELS, Vlan
from app.schemas.inventory_schemas import DashboardStats


class DashboardService:

    def __init__(self, db: Session):
        self.db = db

    def get_stats(self) -> DashboardStats:
        items_by_status = {}
        totals = {}
        for kind, model in ITEM_MODELS.items():
            counts = {status.value: 0 for status in ItemStatus}
            rows = self.db.query(model.status, func.count(model.id)).group_by(model.status).all()
            for status, count in rows:
                counts[ItemStatus(status).value] = count
            items_by_status[kind.value] = counts
            totals[kind.value] = sum(counts.values())

        assignments_by_status = {status.value: 0 for status in AssignmentStatus}
        rows = self.db.query(Assignment.status, func.count(Assignment.id)).group_by(Assignment.status).all()
        for status, count in rows:
            assignments_by_status[AssignmentStatus(status).value] = count

        return DashboardStats(
            total_hardware=totals["hardware"],
            total_network_devices=totals["network_device"],
            total_general_inventory=totals["general_inventory"],
            total_vlans=self.db.query(func.count(Vlan.id)).scalar() or 0,
            total_credentials=self.db.query(func.count(Credential.id)).scalar() or 0,
            assignments_by_status=assignments_by_status,
            items_by_status=items_by_status,
        )
