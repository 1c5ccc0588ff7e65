"""
分配记录 Schemas
"""

from pydantic import Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime

from app.constants.operation_types import AssignmentStatus, ItemKind
from app.models.inventory_models import ItemRef
from app.schemas.inventory_schemas import BaseSchema, PartialUpdateSchema


class AssignmentItemFields(BaseSchema):
    """三个互斥的资产外键字段"""
    hardware_id: Optional[int] = Field(None, gt=0, description="硬件ID")
    network_device_id: Optional[int] = Field(None, gt=0, description="网络设备ID")
    general_inventory_id: Optional[int] = Field(None, gt=0, description="通用库存ID")

    def _item_refs(self) -> List[ItemRef]:
        candidates = (
            (ItemKind.HARDWARE, self.hardware_id),
            (ItemKind.NETWORK_DEVICE, self.network_device_id),
            (ItemKind.GENERAL_INVENTORY, self.general_inventory_id),
        )
        return [ItemRef(kind, item_id) for kind, item_id in candidates if item_id is not None]


class AssignmentCreate(AssignmentItemFields):
    assigned_to: str = Field(..., min_length=1, max_length=200, description="领用人/团队")
    department: Optional[str] = Field(None, max_length=100, description="部门")
    assignment_date: Optional[datetime] = Field(None, description="分配时间，默认当前时间")
    return_date: Optional[datetime] = Field(None, description="预计归还时间")
    status: AssignmentStatus = Field(AssignmentStatus.ACTIVE, description="状态：active/pending")
    notes: Optional[str] = Field(None, description="备注")

    @field_validator("status")
    @classmethod
    def status_must_hold_item(cls, v):
        if v == AssignmentStatus.RETURNED:
            raise ValueError("a new assignment must be 'active' or 'pending'")
        return v

    @model_validator(mode="after")
    def exactly_one_item(self):
        if len(self._item_refs()) != 1:
            raise ValueError(
                "exactly one of hardwareId, networkDeviceId, generalInventoryId must be provided"
            )
        return self

    @property
    def item_ref(self) -> ItemRef:
        return self._item_refs()[0]


class AssignmentUpdate(AssignmentItemFields, PartialUpdateSchema):
    NOT_NULL_FIELDS = ("assigned_to", "assignment_date", "status")

    assigned_to: Optional[str] = Field(None, min_length=1, max_length=200)
    department: Optional[str] = Field(None, max_length=100)
    assignment_date: Optional[datetime] = None
    return_date: Optional[datetime] = None
    status: Optional[AssignmentStatus] = None
    notes: Optional[str] = None


class AssignmentResponse(BaseSchema):
    id: int
    hardware_id: Optional[int] = None
    network_device_id: Optional[int] = None
    general_inventory_id: Optional[int] = None
    item_type: str = Field(..., description="资产类别：hardware/network_device/general_inventory")
    item_id: int
    assigned_to: str
    department: Optional[str] = None
    assignment_date: datetime
    return_date: Optional[datetime] = None
    status: AssignmentStatus
    notes: Optional[str] = None
    last_updated: datetime


class ReturnRequest(BaseSchema):
    """归还请求（可选指定归还时间与备注）"""
    return_date: Optional[datetime] = None
    notes: Optional[str] = None


# =====================================================
# 状态对账 Schemas
# =====================================================

class StatusDrift(BaseSchema):
    item_type: str
    item_id: int
    status: str
    expected_status: str
    holding_assignment_ids: List[int] = Field(default_factory=list)


class MultipleHolders(BaseSchema):
    item_type: str
    item_id: int
    holding_assignment_ids: List[int]


class ReconcileReport(BaseSchema):
    checked_items: int = 0
    drift: List[StatusDrift] = Field(default_factory=list)
    multiple_holders: List[MultipleHolders] = Field(default_factory=list)
    fixed: int = 0
