"""
IT资产台账 - SQLAlchemy模型定义
包含：硬件、网络设备、通用库存、VLAN、凭据、分配记录、活动日志
"""

from typing import NamedTuple

from sqlalchemy import (
    Column, Integer, String, Text, Date, DateTime,
    Enum, ForeignKey, CheckConstraint, Index,
)
from sqlalchemy.orm import relationship

from app.db.session import Base
from app.constants.operation_types import (
    ItemStatus, AssignmentStatus, HardwareType, CredentialType, ItemKind, ActivityAction,
)
from app.utils.time_helpers import utcnow


def _enum_column(enum_cls, **kwargs):
    """枚举列：以字符串存储并生成CHECK约束"""
    return Column(
        Enum(
            enum_cls,
            values_callable=lambda e: [member.value for member in e],
            native_enum=False,
            create_constraint=True,
            validate_strings=True,
            length=20,
        ),
        **kwargs
    )


# =====================================================
# 可分配资产（硬件 / 网络设备 / 通用库存）
# =====================================================

class AssignableItemMixin:
    """可分配资产的公共字段"""
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, comment="名称")
    serial_number = Column(String(200), unique=True, comment="序列号（表内唯一）")
    status = _enum_column(ItemStatus, nullable=False, default=ItemStatus.IN_STOCK, comment="状态")
    location = Column(String(200), comment="位置")
    notes = Column(Text, comment="备注")
    purchase_date = Column(Date, comment="采购日期")
    last_updated = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class Hardware(AssignableItemMixin, Base):
    """硬件资产表"""
    __tablename__ = "hardware"

    type = _enum_column(HardwareType, nullable=False, comment="硬件类型")
    manufacturer = Column(String(100), comment="厂商")
    model = Column(String(200), comment="型号")
    warranty_expiry = Column(Date, comment="保修到期日期")
    image_url = Column(String(500), comment="图片地址")

    __table_args__ = (
        Index('idx_hardware_status', 'status'),
    )


class NetworkDevice(AssignableItemMixin, Base):
    """网络设备表"""
    __tablename__ = "network_devices"

    type = Column(String(50), nullable=False, comment="设备类型（switch/router/firewall等）")
    manufacturer = Column(String(100), comment="厂商")
    model = Column(String(200), comment="型号")
    ip_address = Column(String(45), comment="IP地址")
    mac_address = Column(String(17), comment="MAC地址")

    __table_args__ = (
        Index('idx_network_device_status', 'status'),
    )


class GeneralInventoryItem(AssignableItemMixin, Base):
    """通用库存表"""
    __tablename__ = "general_inventory"

    category = Column(String(50), nullable=False, comment="分类（storage/av/peripheral等）")
    description = Column(Text, comment="描述")
    quantity = Column(Integer, nullable=False, default=1, comment="数量")

    __table_args__ = (
        Index('idx_general_inventory_status', 'status'),
    )


# =====================================================
# 无分配关系的登记表（VLAN / 凭据）
# =====================================================

class Vlan(Base):
    """VLAN表，assigned_devices 仅为描述文本，不构成关联"""
    __tablename__ = "vlans"

    id = Column(Integer, primary_key=True, index=True)
    vlan_id = Column(Integer, unique=True, nullable=False, comment="VLAN号")
    name = Column(String(100), nullable=False, comment="名称")
    subnet = Column(String(50), comment="子网")
    description = Column(Text, comment="描述")
    assigned_devices = Column(Text, comment="关联设备描述")
    last_updated = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class Credential(Base):
    """凭据表（密码明文存储，与原系统一致）"""
    __tablename__ = "credentials"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, comment="名称")
    type = _enum_column(CredentialType, nullable=False, comment="凭据类型")
    username = Column(String(200), nullable=False, comment="用户名")
    password = Column(String(500), nullable=False, comment="密码")
    url = Column(String(500), comment="访问地址")
    ip_address = Column(String(45), comment="IP地址")
    notes = Column(Text, comment="备注")
    expiration_date = Column(Date, comment="过期日期")
    last_updated = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


# =====================================================
# 分配记录
# =====================================================

class ItemRef(NamedTuple):
    """分配记录指向的资产：类别 + 表内ID"""
    kind: ItemKind
    id: int


ITEM_MODELS = {
    ItemKind.HARDWARE: Hardware,
    ItemKind.NETWORK_DEVICE: NetworkDevice,
    ItemKind.GENERAL_INVENTORY: GeneralInventoryItem,
}

# 资产类别 -> Assignment 上的外键属性名
ITEM_FK_FIELDS = {
    ItemKind.HARDWARE: "hardware_id",
    ItemKind.NETWORK_DEVICE: "network_device_id",
    ItemKind.GENERAL_INVENTORY: "general_inventory_id",
}


class Assignment(Base):
    """分配记录表：三个外键列中恰好一个非空"""
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, index=True)
    hardware_id = Column(Integer, ForeignKey("hardware.id"), comment="硬件ID")
    network_device_id = Column(Integer, ForeignKey("network_devices.id"), comment="网络设备ID")
    general_inventory_id = Column(Integer, ForeignKey("general_inventory.id"), comment="通用库存ID")
    assigned_to = Column(String(200), nullable=False, comment="领用人/团队")
    department = Column(String(100), comment="部门")
    assignment_date = Column(DateTime, nullable=False, default=utcnow, comment="分配时间")
    return_date = Column(DateTime, comment="预计或实际归还时间")
    status = _enum_column(AssignmentStatus, nullable=False, default=AssignmentStatus.ACTIVE, comment="状态")
    notes = Column(Text, comment="备注")
    last_updated = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    hardware = relationship("Hardware")
    network_device = relationship("NetworkDevice")
    general_inventory = relationship("GeneralInventoryItem")

    __table_args__ = (
        CheckConstraint(
            "(CASE WHEN hardware_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN network_device_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN general_inventory_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_assignment_single_item",
        ),
        Index('idx_assignment_hardware', 'hardware_id'),
        Index('idx_assignment_network_device', 'network_device_id'),
        Index('idx_assignment_general_inventory', 'general_inventory_id'),
        Index('idx_assignment_status', 'status'),
    )

    @property
    def item_ref(self) -> ItemRef:
        for kind, field in ITEM_FK_FIELDS.items():
            value = getattr(self, field)
            if value is not None:
                return ItemRef(kind, value)
        raise ValueError(f"Assignment {self.id} does not reference any item")

    @property
    def item_type(self) -> str:
        return self.item_ref.kind.value

    @property
    def item_id(self) -> int:
        return self.item_ref.id


# =====================================================
# 活动日志（只追加）
# =====================================================

class ActivityLog(Base):
    """活动日志表：写入后不修改、不删除"""
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(100), nullable=False, comment="操作人")
    action = _enum_column(ActivityAction, nullable=False, comment="动作")
    item_type = Column(String(50), nullable=False, comment="对象类型")
    item_id = Column(Integer, comment="对象ID")
    details = Column(Text, comment="描述")
    timestamp = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_activity_entity', 'item_type', 'item_id'),
        Index('idx_activity_timestamp', 'timestamp'),
    )
