"""
分配台账API路由
"""

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, Response, status
from sqlalchemy.orm import Session

from app.constants.operation_types import AssignmentStatus, ItemKind
from app.core.auth import Actor, Permission, require_permission
from app.db.session import get_db
from app.schemas.assignment_schemas import (
    AssignmentCreate, AssignmentResponse, AssignmentUpdate, ReconcileReport, ReturnRequest,
)
from app.services.assignment_service import AssignmentService

router = APIRouter()


def get_assignment_service(db: Session = Depends(get_db)) -> AssignmentService:
    return AssignmentService(db)


# =====================================================
# 状态对账（固定路径，需声明在 /{assignment_id} 之前）
# =====================================================

@router.get("/reconcile", response_model=ReconcileReport, summary="检查资产状态与分配记录是否一致")
def check_item_status(
    actor: Actor = Depends(require_permission(Permission.RECONCILE)),
    service: AssignmentService = Depends(get_assignment_service),
):
    return service.reconcile(fix=False, actor=actor.user_id)


@router.post("/reconcile", response_model=ReconcileReport, summary="修复资产状态偏差")
def repair_item_status(
    actor: Actor = Depends(require_permission(Permission.RECONCILE)),
    service: AssignmentService = Depends(get_assignment_service),
):
    return service.reconcile(fix=True, actor=actor.user_id)


# =====================================================
# 分配记录CRUD
# =====================================================

@router.get("", response_model=List[AssignmentResponse], summary="分配记录列表")
def list_assignments(
    status_filter: Optional[AssignmentStatus] = Query(None, alias="status", description="按状态过滤"),
    item_type: Optional[ItemKind] = Query(None, alias="itemType", description="资产类别"),
    item_id: Optional[int] = Query(None, alias="itemId", ge=1, description="资产ID"),
    assigned_to: Optional[str] = Query(None, alias="assignedTo", description="领用人"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    actor: Actor = Depends(require_permission(Permission.READ)),
    service: AssignmentService = Depends(get_assignment_service),
):
    return service.list(
        status=status_filter,
        item_type=item_type,
        item_id=item_id,
        assigned_to=assigned_to,
        skip=skip,
        limit=limit,
    )


@router.get("/{assignment_id}", response_model=AssignmentResponse, summary="分配记录详情")
def read_assignment(
    assignment_id: int = Path(..., ge=1),
    actor: Actor = Depends(require_permission(Permission.READ)),
    service: AssignmentService = Depends(get_assignment_service),
):
    return service.get_or_404(assignment_id)


@router.post("", response_model=AssignmentResponse, status_code=status.HTTP_201_CREATED,
             summary="创建分配记录")
def create_assignment(
    payload: AssignmentCreate,
    actor: Actor = Depends(require_permission(Permission.WRITE)),
    service: AssignmentService = Depends(get_assignment_service),
):
    """
    创建分配记录，资产状态在同一事务内改为 assigned

    - 资产不存在：404
    - 资产不可分配或被并发请求抢先占用：409
    """
    return service.create_assignment(payload, actor.user_id)


@router.put("/{assignment_id}", response_model=AssignmentResponse, summary="更新分配记录")
@router.patch("/{assignment_id}", response_model=AssignmentResponse, summary="更新分配记录")
def update_assignment(
    payload: AssignmentUpdate,
    assignment_id: int = Path(..., ge=1),
    actor: Actor = Depends(require_permission(Permission.WRITE)),
    service: AssignmentService = Depends(get_assignment_service),
):
    return service.update_assignment(assignment_id, payload, actor.user_id)


@router.post("/{assignment_id}/return", response_model=AssignmentResponse, summary="归还资产")
def return_item(
    assignment_id: int = Path(..., ge=1),
    payload: Optional[ReturnRequest] = Body(None),
    actor: Actor = Depends(require_permission(Permission.WRITE)),
    service: AssignmentService = Depends(get_assignment_service),
):
    payload = payload or ReturnRequest()
    return service.return_item(
        assignment_id,
        actor.user_id,
        return_date=payload.return_date,
        notes=payload.notes,
    )


@router.delete("/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT,
               response_class=Response, summary="删除分配记录")
def delete_assignment(
    assignment_id: int = Path(..., ge=1),
    actor: Actor = Depends(require_permission(Permission.DELETE)),
    service: AssignmentService = Depends(get_assignment_service),
):
    service.delete_assignment(assignment_id, actor.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
