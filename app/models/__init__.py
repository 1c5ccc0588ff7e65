# models package
from app.models.inventory_models import *

__all__ = [
    # 可分配资产
    "Hardware",
    "NetworkDevice",
    "GeneralInventoryItem",
    # 登记表
    "Vlan",
    "Credential",
    # 分配与日志
    "Assignment",
    "ActivityLog",
    "ItemRef",
    "ITEM_MODELS",
    "ITEM_FK_FIELDS",
]
