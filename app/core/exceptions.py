"""
业务异常定义

服务层只抛出这些异常，由 app.main 中的全局异常处理器统一转换为HTTP响应
"""

from typing import Optional


class InventoryError(Exception):
    """业务异常基类"""
    status_code = 500

    def __init__(self, message: str, detail: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail or {}


class InvalidOperationError(InventoryError):
    """请求格式正确但业务上不允许（如修改分配记录指向的资产）"""
    status_code = 400


class PermissionDeniedError(InventoryError):
    status_code = 403


class NotFoundError(InventoryError):
    status_code = 404

    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity} {entity_id} not found", {"entity": entity, "id": entity_id})


class ConflictError(InventoryError):
    """唯一约束冲突或状态不变量冲突（如重复分配）"""
    status_code = 409
