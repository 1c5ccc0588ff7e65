"""
业务枚举与操作类型常量定义
"""

import enum


class ItemStatus(str, enum.Enum):
    """可分配资产状态（硬件/网络设备/通用库存共用）"""
    IN_STOCK = "in_stock"
    ASSIGNED = "assigned"
    MAINTENANCE = "maintenance"
    RETIRED = "retired"


class AssignmentStatus(str, enum.Enum):
    """分配记录状态"""
    ACTIVE = "active"
    PENDING = "pending"
    RETURNED = "returned"


# 占用资产的分配状态：pending 与 active 一样视为已占用
HOLDING_STATUSES = (AssignmentStatus.ACTIVE, AssignmentStatus.PENDING)

# 允许的分配状态流转（同状态补丁不在此表中，视为无变化）
ASSIGNMENT_TRANSITIONS = {
    AssignmentStatus.ACTIVE: {AssignmentStatus.RETURNED, AssignmentStatus.PENDING},
    AssignmentStatus.PENDING: {AssignmentStatus.ACTIVE},
    AssignmentStatus.RETURNED: set(),
}


class HardwareType(str, enum.Enum):
    LAPTOP = "laptop"
    DESKTOP = "desktop"
    SERVER = "server"
    MONITOR = "monitor"
    PRINTER = "printer"
    NETWORK = "network"
    PERIPHERAL = "peripheral"
    OTHER = "other"


class CredentialType(str, enum.Enum):
    NETWORK = "network"
    SERVER = "server"
    SERVICE = "service"
    DATABASE = "database"
    API = "api"


class ItemKind(str, enum.Enum):
    """可被分配的资产类别，同时作为活动日志的 itemType"""
    HARDWARE = "hardware"
    NETWORK_DEVICE = "network_device"
    GENERAL_INVENTORY = "general_inventory"


class EntityType:
    """活动日志 itemType 取值"""
    HARDWARE = ItemKind.HARDWARE.value
    NETWORK_DEVICE = ItemKind.NETWORK_DEVICE.value
    GENERAL_INVENTORY = ItemKind.GENERAL_INVENTORY.value
    VLAN = "vlan"
    CREDENTIAL = "credential"
    ASSIGNMENT = "assignment"


class ActivityAction(str, enum.Enum):
    """活动日志动作"""
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"
    ASSIGN = "assign"
    LOGIN = "login"


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    TECHNICIAN = "technician"
    READONLY = "readonly"


class OperationType:
    """结构化业务日志的操作类型"""

    ITEM_CREATE = "item.create"
    ITEM_UPDATE = "item.update"
    ITEM_DELETE = "item.delete"
    ITEM_STATUS_SYNC = "item.status_sync"

    ASSIGNMENT_CREATE = "assignment.create"
    ASSIGNMENT_UPDATE = "assignment.update"
    ASSIGNMENT_RETURN = "assignment.return"
    ASSIGNMENT_DELETE = "assignment.delete"

    RECONCILE = "assignment.reconcile"
    ACTIVITY_LOG_WRITE = "activity_log.write"


class OperationResult:
    """操作结果常量"""
    SUCCESS = "success"
    FAILED = "failed"
