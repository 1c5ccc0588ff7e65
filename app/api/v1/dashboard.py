from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import Actor, Permission, require_permission
from app.db.session import get_db
from app.schemas.inventory_schemas import DashboardStats
from app.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/stats", response_model=DashboardStats, summary="仪表盘统计")
def get_dashboard_stats(
    actor: Actor = Depends(require_permission(Permission.READ)),
    db: Session = Depends(get_db),
):
    return DashboardService(db).get_stats()
