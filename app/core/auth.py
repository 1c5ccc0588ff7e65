"""
认证协作方接口

身份认证由外部系统完成，本服务只消费两项结果：
- 当前操作人标识（写入活动日志的 userId）
- 当前角色是否允许执行某个动作
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header

from app.constants.operation_types import UserRole
from app.core.config import settings
from app.core.exceptions import PermissionDeniedError


class Permission:
    """权限点"""
    READ = "read"
    READ_CREDENTIALS = "credentials.read"
    WRITE = "write"
    WRITE_CREDENTIALS = "credentials.write"
    DELETE = "delete"
    RECONCILE = "reconcile"


ROLE_PERMISSIONS = {
    UserRole.READONLY: {Permission.READ},
    UserRole.TECHNICIAN: {Permission.READ, Permission.READ_CREDENTIALS, Permission.WRITE},
    UserRole.MANAGER: {
        Permission.READ, Permission.READ_CREDENTIALS, Permission.WRITE,
        Permission.WRITE_CREDENTIALS, Permission.DELETE, Permission.RECONCILE,
    },
}


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: UserRole

    def can(self, permission: str) -> bool:
        if self.role == UserRole.ADMIN:
            return True
        return permission in ROLE_PERMISSIONS.get(self.role, set())


def get_current_actor(
    x_user_id: Optional[str] = Header(None, description="操作人标识"),
    x_user_role: Optional[str] = Header(None, description="操作人角色：admin/manager/technician/readonly"),
) -> Actor:
    """从请求头解析操作人；未提供时使用配置中的占位身份"""
    user_id = (x_user_id or settings.DEFAULT_ACTOR).strip()
    role_value = (x_user_role or settings.DEFAULT_ROLE).strip().lower()
    try:
        role = UserRole(role_value)
    except ValueError:
        raise PermissionDeniedError(f"Unknown role '{role_value}'")
    return Actor(user_id=user_id or settings.DEFAULT_ACTOR, role=role)


def require_permission(permission: str):
    """路由依赖：校验当前操作人具备指定权限，返回操作人"""
    def permission_dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if not actor.can(permission):
            raise PermissionDeniedError(
                f"Role '{actor.role.value}' is not allowed to perform '{permission}'"
            )
        return actor
    return permission_dependency
