"""
IT资产台账 - Pydantic Schemas
用于API请求和响应的数据验证和序列化（JSON字段使用camelCase）
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import ClassVar, Optional, List, Dict
from datetime import datetime, date

from app.constants.operation_types import ItemStatus, HardwareType, CredentialType

# =====================================================
# 基础Schema类
# =====================================================

class BaseSchema(BaseModel):
    """基础Schema类"""
    model_config = ConfigDict(
        from_attributes=True,
        use_enum_values=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class PartialUpdateSchema(BaseSchema):
    """局部更新Schema基类：NOT_NULL_FIELDS 中的字段可以省略，但不能显式置空"""
    NOT_NULL_FIELDS: ClassVar[tuple] = ()

    @field_validator("*")
    @classmethod
    def reject_null_for_required(cls, v, info):
        if v is None and info.field_name in cls.NOT_NULL_FIELDS:
            raise ValueError("may not be null")
        return v


class SerialNumberMixin(BaseSchema):
    """序列号留空（空串或仅空白）按未填写处理，不参与唯一性校验"""

    @field_validator("serial_number", mode="before", check_fields=False)
    @classmethod
    def blank_serial_to_none(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v

# =====================================================
# 硬件 Schemas
# =====================================================

class HardwareBase(SerialNumberMixin):
    name: str = Field(..., min_length=1, max_length=200, description="名称")
    type: HardwareType = Field(..., description="硬件类型")
    manufacturer: Optional[str] = Field(None, max_length=100, description="厂商")
    model: Optional[str] = Field(None, max_length=200, description="型号")
    serial_number: Optional[str] = Field(None, max_length=200, description="序列号")
    purchase_date: Optional[date] = Field(None, description="采购日期")
    warranty_expiry: Optional[date] = Field(None, description="保修到期日期")
    status: ItemStatus = Field(ItemStatus.IN_STOCK, description="状态")
    location: Optional[str] = Field(None, max_length=200, description="位置")
    notes: Optional[str] = Field(None, description="备注")
    image_url: Optional[str] = Field(None, max_length=500, description="图片地址")

class HardwareCreate(HardwareBase):
    pass

class HardwareUpdate(SerialNumberMixin, PartialUpdateSchema):
    NOT_NULL_FIELDS = ("name", "type", "status")

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[HardwareType] = None
    manufacturer: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=200)
    serial_number: Optional[str] = Field(None, max_length=200)
    purchase_date: Optional[date] = None
    warranty_expiry: Optional[date] = None
    status: Optional[ItemStatus] = None
    location: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)

class HardwareResponse(HardwareBase):
    id: int
    last_updated: datetime

# =====================================================
# 网络设备 Schemas
# =====================================================

class NetworkDeviceBase(SerialNumberMixin):
    name: str = Field(..., min_length=1, max_length=200, description="名称")
    type: str = Field(..., min_length=1, max_length=50, description="设备类型（switch/router/firewall等）")
    manufacturer: Optional[str] = Field(None, max_length=100, description="厂商")
    model: Optional[str] = Field(None, max_length=200, description="型号")
    serial_number: Optional[str] = Field(None, max_length=200, description="序列号")
    ip_address: Optional[str] = Field(None, max_length=45, description="IP地址")
    mac_address: Optional[str] = Field(None, max_length=17, description="MAC地址")
    location: Optional[str] = Field(None, max_length=200, description="位置")
    status: ItemStatus = Field(ItemStatus.IN_STOCK, description="状态")
    notes: Optional[str] = Field(None, description="备注")
    purchase_date: Optional[date] = Field(None, description="采购日期")

class NetworkDeviceCreate(NetworkDeviceBase):
    pass

class NetworkDeviceUpdate(SerialNumberMixin, PartialUpdateSchema):
    NOT_NULL_FIELDS = ("name", "type", "status")

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[str] = Field(None, min_length=1, max_length=50)
    manufacturer: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=200)
    serial_number: Optional[str] = Field(None, max_length=200)
    ip_address: Optional[str] = Field(None, max_length=45)
    mac_address: Optional[str] = Field(None, max_length=17)
    location: Optional[str] = Field(None, max_length=200)
    status: Optional[ItemStatus] = None
    notes: Optional[str] = None
    purchase_date: Optional[date] = None

class NetworkDeviceResponse(NetworkDeviceBase):
    id: int
    last_updated: datetime

# =====================================================
# 通用库存 Schemas
# =====================================================

class GeneralInventoryBase(SerialNumberMixin):
    name: str = Field(..., min_length=1, max_length=200, description="名称")
    category: str = Field(..., min_length=1, max_length=50, description="分类")
    description: Optional[str] = Field(None, description="描述")
    serial_number: Optional[str] = Field(None, max_length=200, description="序列号")
    quantity: int = Field(1, ge=1, description="数量")
    location: Optional[str] = Field(None, max_length=200, description="位置")
    status: ItemStatus = Field(ItemStatus.IN_STOCK, description="状态")
    notes: Optional[str] = Field(None, description="备注")
    purchase_date: Optional[date] = Field(None, description="采购日期")

class GeneralInventoryCreate(GeneralInventoryBase):
    pass

class GeneralInventoryUpdate(SerialNumberMixin, PartialUpdateSchema):
    NOT_NULL_FIELDS = ("name", "category", "quantity", "status")

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None
    serial_number: Optional[str] = Field(None, max_length=200)
    quantity: Optional[int] = Field(None, ge=1)
    location: Optional[str] = Field(None, max_length=200)
    status: Optional[ItemStatus] = None
    notes: Optional[str] = None
    purchase_date: Optional[date] = None

class GeneralInventoryResponse(GeneralInventoryBase):
    id: int
    last_updated: datetime

# =====================================================
# VLAN Schemas
# =====================================================

class VlanBase(BaseSchema):
    vlan_id: int = Field(..., ge=1, le=4094, description="VLAN号")
    name: str = Field(..., min_length=1, max_length=100, description="名称")
    subnet: Optional[str] = Field(None, max_length=50, description="子网")
    description: Optional[str] = Field(None, description="描述")
    assigned_devices: Optional[str] = Field(None, description="关联设备描述")

class VlanCreate(VlanBase):
    pass

class VlanUpdate(PartialUpdateSchema):
    NOT_NULL_FIELDS = ("vlan_id", "name")

    vlan_id: Optional[int] = Field(None, ge=1, le=4094)
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    subnet: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    assigned_devices: Optional[str] = None

class VlanResponse(VlanBase):
    id: int
    last_updated: datetime

# =====================================================
# 凭据 Schemas
# =====================================================

class CredentialBase(BaseSchema):
    name: str = Field(..., min_length=1, max_length=200, description="名称")
    type: CredentialType = Field(..., description="凭据类型")
    username: str = Field(..., min_length=1, max_length=200, description="用户名")
    password: str = Field(..., min_length=1, max_length=500, description="密码")
    url: Optional[str] = Field(None, max_length=500, description="访问地址")
    ip_address: Optional[str] = Field(None, max_length=45, description="IP地址")
    notes: Optional[str] = Field(None, description="备注")
    expiration_date: Optional[date] = Field(None, description="过期日期")

class CredentialCreate(CredentialBase):
    pass

class CredentialUpdate(PartialUpdateSchema):
    NOT_NULL_FIELDS = ("name", "type", "username", "password")

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[CredentialType] = None
    username: Optional[str] = Field(None, min_length=1, max_length=200)
    password: Optional[str] = Field(None, min_length=1, max_length=500)
    url: Optional[str] = Field(None, max_length=500)
    ip_address: Optional[str] = Field(None, max_length=45)
    notes: Optional[str] = None
    expiration_date: Optional[date] = None

class CredentialResponse(CredentialBase):
    id: int
    last_updated: datetime

# =====================================================
# 活动日志 / 仪表盘 Schemas
# =====================================================

class ActivityLogResponse(BaseSchema):
    id: int
    user_id: str
    action: str
    item_type: str
    item_id: Optional[int] = None
    details: Optional[str] = None
    timestamp: datetime

class DashboardStats(BaseSchema):
    """仪表盘统计"""
    total_hardware: int = 0
    total_network_devices: int = 0
    total_vlans: int = 0
    total_credentials: int = 0
    total_general_inventory: int = 0
    assignments_by_status: Dict[str, int] = Field(default_factory=dict)
    items_by_status: Dict[str, Dict[str, int]] = Field(default_factory=dict)

class ErrorResponse(BaseSchema):
    message: str
    errors: Optional[List[dict]] = None
