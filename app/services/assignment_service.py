"""
分配台账服务

负责分配记录的创建、更新、归还、删除，是唯一决定资产 status 随分配变化的地方。
每个操作中“分配记录写入”与“资产状态变更”在同一个数据库事务内完成；
资产占用通过条件更新（status='in_stock' 时才改为 'assigned'）实现，
并发请求中只有一个能占用成功，其余返回 Conflict。
"""

from contextlib import contextmanager
from typing import Dict, List, Optional

from sqlalchemy import desc, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.constants.operation_types import (
    ASSIGNMENT_TRANSITIONS, ActivityAction, AssignmentStatus, EntityType, HOLDING_STATUSES,
    ItemKind, ItemStatus, OperationType,
)
from app.core.exceptions import ConflictError, InvalidOperationError, NotFoundError
from app.core.logging_config import get_logger
from app.models.inventory_models import Assignment, ITEM_FK_FIELDS, ITEM_MODELS, ItemRef
from app.schemas.assignment_schemas import (
    AssignmentCreate, AssignmentUpdate, MultipleHolders, ReconcileReport, StatusDrift,
)
from app.services.activity_log_service import ActivityLogService
from app.utils.log_helper import log_operation
from app.utils.time_helpers import utcnow

logger = get_logger(__name__)

ITEM_LABELS = {
    ItemKind.HARDWARE: "Hardware",
    ItemKind.NETWORK_DEVICE: "Network device",
    ItemKind.GENERAL_INVENTORY: "Inventory item",
}


class AssignmentService:
    """分配台账服务"""

    def __init__(self, db: Session):
        self.db = db
        self.activity_log = ActivityLogService(db)

    # =====================================================
    # 查询
    # =====================================================

    def get(self, assignment_id: int) -> Optional[Assignment]:
        return self.db.query(Assignment).filter(Assignment.id == assignment_id).first()

    def get_or_404(self, assignment_id: int) -> Assignment:
        assignment = self.get(assignment_id)
        if assignment is None:
            raise NotFoundError("Assignment", assignment_id)
        return assignment

    def list(
        self,
        status: Optional[str] = None,
        item_type: Optional[ItemKind] = None,
        item_id: Optional[int] = None,
        assigned_to: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Assignment]:
        query = self.db.query(Assignment)
        if status:
            query = query.filter(Assignment.status == status)
        if item_type:
            fk = getattr(Assignment, ITEM_FK_FIELDS[ItemKind(item_type)])
            query = query.filter(fk == item_id) if item_id is not None else query.filter(fk.isnot(None))
        elif item_id is not None:
            query = query.filter(or_(*[
                getattr(Assignment, field) == item_id for field in ITEM_FK_FIELDS.values()
            ]))
        if assigned_to:
            query = query.filter(Assignment.assigned_to == assigned_to)
        return (
            query.order_by(desc(Assignment.assignment_date), desc(Assignment.id))
            .offset(skip)
            .limit(limit)
            .all()
        )

    # =====================================================
    # 分配生命周期
    # =====================================================

    def create_assignment(self, data: AssignmentCreate, actor: str) -> Assignment:
        """
        创建分配记录并占用资产

        - 资产不存在：NotFound
        - 资产不是 in_stock（已分配/维护中/已退役）：Conflict，不做任何写入
        - 并发占用失败：Conflict，分配记录随事务回滚
        """
        ref = data.item_ref
        item = self._get_item_or_404(ref)
        label = ITEM_LABELS[ref.kind]
        if item.status != ItemStatus.IN_STOCK:
            raise ConflictError(
                f"{label} {ref.id} is not available for assignment (status '{_value(item.status)}')"
            )

        fields = data.model_dump(exclude={"hardware_id", "network_device_id", "general_inventory_id"})
        fields["assignment_date"] = fields.get("assignment_date") or utcnow()
        assignment = Assignment(**fields)
        setattr(assignment, ITEM_FK_FIELDS[ref.kind], ref.id)

        with self._unit_of_work():
            self.db.add(assignment)
            self.db.flush()
            if not self._set_item_status(ref, ItemStatus.ASSIGNED, expected=ItemStatus.IN_STOCK):
                raise ConflictError(f"{label} {ref.id} was assigned by a concurrent request")
        self.db.refresh(assignment)

        log_operation(OperationType.ASSIGNMENT_CREATE, f"{EntityType.ASSIGNMENT}:{assignment.id}", actor,
                      message=f"{ref.kind.value}:{ref.id} assigned to {assignment.assigned_to}")
        self.activity_log.record(
            actor, ActivityAction.ASSIGN, EntityType.ASSIGNMENT, assignment.id,
            f"Assigned {label.lower()} {item.name} to {assignment.assigned_to}",
        )
        self._record_item_status(ref, ItemStatus.ASSIGNED, actor, f"assignment {assignment.id}")
        return assignment

    def update_assignment(self, assignment_id: int, data: AssignmentUpdate, actor: str) -> Assignment:
        """
        局部更新分配记录

        status 改为 returned 时，在同一事务中把资产改回 in_stock 并补齐 returnDate；
        不支持修改分配记录指向的资产
        """
        assignment = self.get_or_404(assignment_id)
        ref = assignment.item_ref
        self._reject_repointing(assignment, data)

        changes = data.model_dump(
            exclude_unset=True,
            exclude={"hardware_id", "network_device_id", "general_inventory_id"},
        )
        current = AssignmentStatus(assignment.status)
        new_status = AssignmentStatus(changes["status"]) if changes.get("status") else None
        releasing = False
        if new_status is not None and new_status != current:
            if new_status not in ASSIGNMENT_TRANSITIONS[current]:
                raise ConflictError(
                    f"Assignment {assignment_id} cannot move from '{current.value}' to '{new_status.value}'"
                )
            releasing = new_status == AssignmentStatus.RETURNED
            if releasing and not changes.get("return_date"):
                changes["return_date"] = utcnow()

        with self._unit_of_work():
            if new_status is not None and new_status != current:
                self._claim_transition(assignment_id, current, new_status)
            for field, value in changes.items():
                setattr(assignment, field, value)
            if releasing:
                self._release_item(ref, assignment_id)
        self.db.refresh(assignment)

        operation_type = OperationType.ASSIGNMENT_RETURN if releasing else OperationType.ASSIGNMENT_UPDATE
        log_operation(operation_type, f"{EntityType.ASSIGNMENT}:{assignment.id}", actor)
        if releasing:
            details = f"Returned assignment {assignment.id} from {assignment.assigned_to}"
        else:
            details = f"Updated assignment {assignment.id} ({', '.join(sorted(changes)) or 'no changes'})"
        self.activity_log.record(actor, ActivityAction.UPDATE, EntityType.ASSIGNMENT, assignment.id, details)
        if releasing:
            self._record_item_status(ref, ItemStatus.IN_STOCK, actor, f"assignment {assignment.id} returned")
        return assignment

    def return_item(
        self,
        assignment_id: int,
        actor: str,
        return_date=None,
        notes: Optional[str] = None,
    ) -> Assignment:
        """归还：等价于 update_assignment(status=returned, returnDate=now)，重复归还返回 Conflict"""
        assignment = self.get_or_404(assignment_id)
        if assignment.status == AssignmentStatus.RETURNED:
            raise ConflictError(f"Assignment {assignment_id} has already been returned")

        patch = {"status": AssignmentStatus.RETURNED, "return_date": return_date or utcnow()}
        if notes is not None:
            patch["notes"] = notes
        return self.update_assignment(assignment_id, AssignmentUpdate(**patch), actor)

    def delete_assignment(self, assignment_id: int, actor: str) -> None:
        """删除分配记录；若该记录占用着资产，则把资产改回 in_stock"""
        assignment = self.get_or_404(assignment_id)
        ref = assignment.item_ref
        current = AssignmentStatus(assignment.status)
        was_holding = current in HOLDING_STATUSES
        assigned_to = assignment.assigned_to

        with self._unit_of_work():
            # 以读取时的状态为条件删除，防止依据过期状态回滚资产
            deleted = (
                self.db.query(Assignment)
                .filter(Assignment.id == assignment_id, Assignment.status == current)
                .delete(synchronize_session=False)
            )
            if deleted != 1:
                raise ConflictError(f"Assignment {assignment_id} was changed by a concurrent request")
            if was_holding:
                self._release_item(ref, assignment_id)
        self.db.expunge(assignment)

        log_operation(OperationType.ASSIGNMENT_DELETE, f"{EntityType.ASSIGNMENT}:{assignment_id}", actor)
        self.activity_log.record(
            actor, ActivityAction.DELETE, EntityType.ASSIGNMENT, assignment_id,
            f"Deleted assignment {assignment_id} ({ref.kind.value} {ref.id} to {assigned_to})",
        )
        if was_holding:
            self._record_item_status(ref, ItemStatus.IN_STOCK, actor, f"assignment {assignment_id} deleted")

    # =====================================================
    # 状态对账
    # =====================================================

    def reconcile(self, fix: bool = False, actor: Optional[str] = None) -> ReconcileReport:
        """
        检查资产 status 与占用中的分配记录是否一致

        fix=True 时只修复 assigned <-> in_stock 的偏差；同一资产被多条记录占用的情况只报告
        """
        report = ReconcileReport()
        repairs: List[tuple] = []

        for kind, model in ITEM_MODELS.items():
            holders = self._holders_by_item(kind)
            for item in self.db.query(model).order_by(model.id).all():
                report.checked_items += 1
                holding_ids = holders.get(item.id, [])
                status = ItemStatus(item.status)
                if len(holding_ids) > 1:
                    report.multiple_holders.append(MultipleHolders(
                        item_type=kind.value, item_id=item.id, holding_assignment_ids=holding_ids,
                    ))
                if holding_ids and status != ItemStatus.ASSIGNED:
                    expected = ItemStatus.ASSIGNED
                elif not holding_ids and status == ItemStatus.ASSIGNED:
                    expected = ItemStatus.IN_STOCK
                else:
                    continue
                report.drift.append(StatusDrift(
                    item_type=kind.value, item_id=item.id, status=status.value,
                    expected_status=expected.value, holding_assignment_ids=holding_ids,
                ))
                if {status, expected} == {ItemStatus.ASSIGNED, ItemStatus.IN_STOCK}:
                    repairs.append((ItemRef(kind, item.id), status, expected))

        if fix and repairs:
            with self._unit_of_work():
                for ref, status, expected in repairs:
                    self._set_item_status(ref, expected, expected=status)
            report.fixed = len(repairs)
            for ref, status, expected in repairs:
                log_operation(OperationType.RECONCILE, f"{ref.kind.value}:{ref.id}", actor or "system",
                              message=f"Status drift repaired: {status.value} -> {expected.value}")
                self._record_item_status(ref, expected, actor or "system", "reconciliation")

        if report.drift or report.multiple_holders:
            logger.warning(
                "Status reconciliation found %d drifted items and %d multi-holder items",
                len(report.drift), len(report.multiple_holders),
            )
        return report

    # =====================================================
    # 内部方法
    # =====================================================

    @contextmanager
    def _unit_of_work(self):
        """一个逻辑操作一个事务：正常结束提交，任何异常回滚后重新抛出"""
        try:
            yield
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning("Assignment write rejected by constraint: %s", e.orig)
            raise ConflictError("Assignment violates an integrity constraint")
        except Exception:
            self.db.rollback()
            raise

    def _get_item_or_404(self, ref: ItemRef):
        model = ITEM_MODELS[ref.kind]
        item = self.db.query(model).filter(model.id == ref.id).first()
        if item is None:
            raise NotFoundError(ITEM_LABELS[ref.kind], ref.id)
        return item

    def _set_item_status(self, ref: ItemRef, status: ItemStatus,
                         expected: Optional[ItemStatus] = None) -> bool:
        """更新资产状态；给定 expected 时为条件更新，返回是否命中"""
        model = ITEM_MODELS[ref.kind]
        query = self.db.query(model).filter(model.id == ref.id)
        if expected is not None:
            query = query.filter(model.status == expected)
        updated = query.update(
            {model.status: status, model.last_updated: utcnow()},
            synchronize_session=False,
        )
        return updated == 1

    def _claim_transition(self, assignment_id: int, current: AssignmentStatus,
                          new_status: AssignmentStatus) -> None:
        """条件更新分配状态（status 仍为读取时的值才生效），未命中返回 Conflict"""
        updated = (
            self.db.query(Assignment)
            .filter(Assignment.id == assignment_id, Assignment.status == current)
            .update(
                {Assignment.status: new_status, Assignment.last_updated: utcnow()},
                synchronize_session=False,
            )
        )
        if updated != 1:
            raise ConflictError(f"Assignment {assignment_id} was changed by a concurrent request")

    def _release_item(self, ref: ItemRef, assignment_id: int) -> None:
        if not self._set_item_status(ref, ItemStatus.IN_STOCK, expected=ItemStatus.ASSIGNED):
            logger.warning(
                "%s:%s was not 'assigned' when assignment %s released it",
                ref.kind.value, ref.id, assignment_id,
            )

    def _reject_repointing(self, assignment: Assignment, data: AssignmentUpdate) -> None:
        for field in ITEM_FK_FIELDS.values():
            if field not in data.model_fields_set:
                continue
            if getattr(data, field) != getattr(assignment, field):
                raise InvalidOperationError(
                    "Changing the item of an assignment is not supported; delete it and create a new one"
                )

    def _holders_by_item(self, kind: ItemKind) -> Dict[int, List[int]]:
        fk = getattr(Assignment, ITEM_FK_FIELDS[kind])
        rows = (
            self.db.query(fk, Assignment.id)
            .filter(fk.isnot(None), Assignment.status.in_(HOLDING_STATUSES))
            .order_by(Assignment.id)
            .all()
        )
        holders: Dict[int, List[int]] = {}
        for item_id, assignment_id in rows:
            holders.setdefault(item_id, []).append(assignment_id)
        return holders

    def _record_item_status(self, ref: ItemRef, status: ItemStatus, actor: str, reason: str) -> None:
        log_operation(OperationType.ITEM_STATUS_SYNC, f"{ref.kind.value}:{ref.id}", actor,
                      message=f"Status set to {status.value} ({reason})")
        self.activity_log.record(
            actor, ActivityAction.UPDATE, ref.kind.value, ref.id,
            f"{ITEM_LABELS[ref.kind]} status changed to {status.value} ({reason})",
        )


def _value(status) -> str:
    return getattr(status, "value", status)
