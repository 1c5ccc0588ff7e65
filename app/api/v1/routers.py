from fastapi import APIRouter
from app.api.v1 import activity_logs, assignments, dashboard
from app.api.v1.registries import (
    credential_router, general_inventory_router, hardware_router, network_device_router, vlan_router,
)
from app.schemas.inventory_schemas import ErrorResponse

# 统一错误响应格式（由 app.main 中的异常处理器生成）
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation failed or invalid operation"},
    403: {"model": ErrorResponse, "description": "Permission denied"},
    404: {"model": ErrorResponse, "description": "Entity not found"},
    409: {"model": ErrorResponse, "description": "Uniqueness or assignment conflict"},
}

api_router = APIRouter(responses=ERROR_RESPONSES)

# 可分配资产登记
api_router.include_router(hardware_router, prefix="/hardware", tags=["hardware"])
api_router.include_router(network_device_router, prefix="/network-devices", tags=["network-devices"])
api_router.include_router(general_inventory_router, prefix="/general-inventory", tags=["general-inventory"])

# 网络配置与凭据
api_router.include_router(vlan_router, prefix="/vlans", tags=["vlans"])
api_router.include_router(credential_router, prefix="/credentials", tags=["credentials"])

# 分配台账
api_router.include_router(assignments.router, prefix="/assignments", tags=["assignments"])

# 活动日志（只读）
api_router.include_router(activity_logs.router, prefix="/activity-logs", tags=["activity-logs"])

# 仪表盘
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
