"""
资产登记服务

RegistryService 提供单表CRUD；ItemRegistryService 在此基础上为可分配资产
（硬件/网络设备/通用库存）增加状态约束，保证 status 与分配记录不脱节
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from pydantic import BaseModel

from app.constants.operation_types import (
    ActivityAction, AssignmentStatus, EntityType, HOLDING_STATUSES, ItemKind, ItemStatus,
    OperationType,
)
from app.core.exceptions import ConflictError, NotFoundError
from app.core.logging_config import get_logger
from app.models.inventory_models import (
    Assignment, Credential, GeneralInventoryItem, Hardware, ITEM_FK_FIELDS, NetworkDevice, Vlan,
)
from app.services.activity_log_service import ActivityLogService
from app.utils.log_helper import log_operation

logger = get_logger(__name__)


class RegistryService:
    """单表登记服务"""

    model = None
    entity_type: str = None
    label: str = None
    unique_fields: tuple = ()

    def __init__(self, db: Session):
        self.db = db
        self.activity_log = ActivityLogService(db)

    # =====================================================
    # 查询
    # =====================================================

    def get(self, entity_id: int):
        return self.db.query(self.model).filter(self.model.id == entity_id).first()

    def get_or_404(self, entity_id: int):
        entity = self.get(entity_id)
        if entity is None:
            raise NotFoundError(self.label, entity_id)
        return entity

    def list(self, skip: int = 0, limit: int = 100) -> List[Any]:
        return self._base_query().offset(skip).limit(limit).all()

    def _base_query(self):
        return self.db.query(self.model).order_by(desc(self.model.id))

    # =====================================================
    # 写操作
    # =====================================================

    def create(self, data: BaseModel, actor: str):
        payload = data.model_dump()
        self._check_unique(payload)
        self._before_create(payload)

        entity = self.model(**payload)
        self.db.add(entity)
        self._commit_or_conflict()
        self.db.refresh(entity)

        self._after_write(ActivityAction.ADD, OperationType.ITEM_CREATE, entity, actor,
                          f"Added {self.label.lower()}: {self._describe(entity)}")
        return entity

    def update(self, entity_id: int, data: BaseModel, actor: str):
        entity = self.get_or_404(entity_id)
        changes = data.model_dump(exclude_unset=True)
        changes = {
            field: value for field, value in changes.items()
            if getattr(entity, field) != value
        }
        if not changes:
            return entity

        self._check_unique(changes, exclude_id=entity.id)
        self._before_update(entity, changes)

        for field, value in changes.items():
            setattr(entity, field, value)
        self._commit_or_conflict()
        self.db.refresh(entity)

        self._after_write(ActivityAction.UPDATE, OperationType.ITEM_UPDATE, entity, actor,
                          f"Updated {self.label.lower()}: {self._describe(entity)} "
                          f"({', '.join(sorted(changes))})")
        return entity

    def delete(self, entity_id: int, actor: str) -> None:
        entity = self.get_or_404(entity_id)
        description = self._describe(entity)
        self._before_delete(entity)

        self.db.delete(entity)
        self._commit_or_conflict()

        log_operation(OperationType.ITEM_DELETE, f"{self.entity_type}:{entity_id}", actor)
        self.activity_log.record(actor, ActivityAction.DELETE, self.entity_type, entity_id,
                                 f"Deleted {self.label.lower()}: {description}")

    # =====================================================
    # 扩展点与内部方法
    # =====================================================

    def _before_create(self, payload: Dict[str, Any]) -> None:
        pass

    def _before_update(self, entity, changes: Dict[str, Any]) -> None:
        pass

    def _before_delete(self, entity) -> None:
        pass

    def _describe(self, entity) -> str:
        return entity.name

    def _check_unique(self, payload: Dict[str, Any], exclude_id: Optional[int] = None) -> None:
        for field in self.unique_fields:
            value = payload.get(field)
            if value is None:
                continue
            query = self.db.query(self.model.id).filter(getattr(self.model, field) == value)
            if exclude_id is not None:
                query = query.filter(self.model.id != exclude_id)
            if query.first():
                raise ConflictError(f"{self.label} with {field} '{value}' already exists")

    def _commit_or_conflict(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning("%s write rejected by constraint: %s", self.label, e.orig)
            raise ConflictError(f"{self.label} violates a uniqueness or integrity constraint")

    def _after_write(self, action: ActivityAction, operation_type: str, entity, actor: str,
                     details: str) -> None:
        log_operation(operation_type, f"{self.entity_type}:{entity.id}", actor)
        self.activity_log.record(actor, action, self.entity_type, entity.id, details)


class ItemRegistryService(RegistryService):
    """可分配资产登记服务"""

    kind: ItemKind = None
    unique_fields = ("serial_number",)

    def list(self, skip: int = 0, limit: int = 100, status: Optional[str] = None) -> List[Any]:
        query = self._base_query()
        if status:
            query = query.filter(self.model.status == status)
        return query.offset(skip).limit(limit).all()

    def holding_assignments(self, item_id: int) -> List[Assignment]:
        """占用该资产的分配记录（active/pending）"""
        fk = getattr(Assignment, ITEM_FK_FIELDS[self.kind])
        return (
            self.db.query(Assignment)
            .filter(fk == item_id, Assignment.status.in_(HOLDING_STATUSES))
            .all()
        )

    def assignment_history(self, item_id: int) -> List[Assignment]:
        self.get_or_404(item_id)
        fk = getattr(Assignment, ITEM_FK_FIELDS[self.kind])
        return (
            self.db.query(Assignment)
            .filter(fk == item_id)
            .order_by(desc(Assignment.assignment_date), desc(Assignment.id))
            .all()
        )

    def _before_create(self, payload: Dict[str, Any]) -> None:
        # 新资产不可能已有分配记录
        if payload.get("status") == ItemStatus.ASSIGNED:
            raise ConflictError(
                f"{self.label} cannot be created as 'assigned'; create an assignment instead"
            )

    def _before_update(self, entity, changes: Dict[str, Any]) -> None:
        if "status" not in changes:
            return
        new_status = changes["status"]
        held = bool(self.holding_assignments(entity.id))
        if new_status == ItemStatus.ASSIGNED and not held:
            raise ConflictError(
                f"{self.label} {entity.id} cannot be marked 'assigned' without an active assignment"
            )
        if held and new_status != ItemStatus.ASSIGNED:
            raise ConflictError(
                f"{self.label} {entity.id} is held by an assignment; return or delete it first"
            )

    def _before_delete(self, entity) -> None:
        if self.holding_assignments(entity.id):
            raise ConflictError(
                f"{self.label} {entity.id} is held by an assignment; return or delete it first"
            )
        # 已归还的历史记录随资产一起删除
        fk = getattr(Assignment, ITEM_FK_FIELDS[self.kind])
        self.db.query(Assignment).filter(
            fk == entity.id, Assignment.status == AssignmentStatus.RETURNED
        ).delete(synchronize_session=False)


# =====================================================
# 具体登记服务
# =====================================================

class HardwareService(ItemRegistryService):
    model = Hardware
    kind = ItemKind.HARDWARE
    entity_type = EntityType.HARDWARE
    label = "Hardware"


class NetworkDeviceService(ItemRegistryService):
    model = NetworkDevice
    kind = ItemKind.NETWORK_DEVICE
    entity_type = EntityType.NETWORK_DEVICE
    label = "Network device"


class GeneralInventoryService(ItemRegistryService):
    model = GeneralInventoryItem
    kind = ItemKind.GENERAL_INVENTORY
    entity_type = EntityType.GENERAL_INVENTORY
    label = "Inventory item"


class VlanService(RegistryService):
    model = Vlan
    entity_type = EntityType.VLAN
    label = "VLAN"
    unique_fields = ("vlan_id",)

    def _describe(self, entity) -> str:
        return f"{entity.vlan_id} {entity.name}"


class CredentialService(RegistryService):
    model = Credential
    entity_type = EntityType.CREDENTIAL
    label = "Credential"


ITEM_SERVICES = {
    ItemKind.HARDWARE: HardwareService,
    ItemKind.NETWORK_DEVICE: NetworkDeviceService,
    ItemKind.GENERAL_INVENTORY: GeneralInventoryService,
}
