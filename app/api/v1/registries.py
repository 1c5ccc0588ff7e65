"""
资产登记API路由

硬件、网络设备、通用库存、VLAN、凭据使用相同的REST形态，由 build_registry_router 生成：
GET 列表 / GET 详情 / POST 创建 / PUT|PATCH 局部更新 / DELETE 删除
"""

from typing import List, Optional, Type

from fastapi import APIRouter, Depends, Path, Query, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.constants.operation_types import ItemStatus
from app.core.auth import Actor, Permission, require_permission
from app.db.session import get_db
from app.schemas.assignment_schemas import AssignmentResponse
from app.schemas.inventory_schemas import (
    CredentialCreate, CredentialResponse, CredentialUpdate,
    GeneralInventoryCreate, GeneralInventoryResponse, GeneralInventoryUpdate,
    HardwareCreate, HardwareResponse, HardwareUpdate,
    NetworkDeviceCreate, NetworkDeviceResponse, NetworkDeviceUpdate,
    VlanCreate, VlanResponse, VlanUpdate,
)
from app.services.registry_service import (
    CredentialService, GeneralInventoryService, HardwareService, ItemRegistryService,
    NetworkDeviceService, RegistryService, VlanService,
)


def build_registry_router(
    service_cls: Type[RegistryService],
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    response_schema: Type[BaseModel],
    read_permission: str = Permission.READ,
    write_permission: str = Permission.WRITE,
) -> APIRouter:
    router = APIRouter()
    label = service_cls.label
    is_item_registry = issubclass(service_cls, ItemRegistryService)

    def get_service(db: Session = Depends(get_db)) -> RegistryService:
        return service_cls(db)

    if is_item_registry:
        @router.get("", response_model=List[response_schema], summary=f"{label} list")
        def list_entities(
            status_filter: Optional[ItemStatus] = Query(None, alias="status", description="按状态过滤"),
            skip: int = Query(0, ge=0),
            limit: int = Query(100, ge=1, le=1000),
            actor: Actor = Depends(require_permission(read_permission)),
            service: ItemRegistryService = Depends(get_service),
        ):
            return service.list(skip=skip, limit=limit, status=status_filter)

        @router.get("/{entity_id}/assignments", response_model=List[AssignmentResponse],
                    summary=f"{label} assignment history")
        def list_entity_assignments(
            entity_id: int = Path(..., ge=1),
            actor: Actor = Depends(require_permission(Permission.READ)),
            service: ItemRegistryService = Depends(get_service),
        ):
            return service.assignment_history(entity_id)
    else:
        @router.get("", response_model=List[response_schema], summary=f"{label} list")
        def list_entities(
            skip: int = Query(0, ge=0),
            limit: int = Query(100, ge=1, le=1000),
            actor: Actor = Depends(require_permission(read_permission)),
            service: RegistryService = Depends(get_service),
        ):
            return service.list(skip=skip, limit=limit)

    @router.get("/{entity_id}", response_model=response_schema, summary=f"{label} detail")
    def read_entity(
        entity_id: int = Path(..., ge=1),
        actor: Actor = Depends(require_permission(read_permission)),
        service: RegistryService = Depends(get_service),
    ):
        return service.get_or_404(entity_id)

    @router.post("", response_model=response_schema, status_code=status.HTTP_201_CREATED,
                 summary=f"Create {label.lower()}")
    def create_entity(
        payload: create_schema,
        actor: Actor = Depends(require_permission(write_permission)),
        service: RegistryService = Depends(get_service),
    ):
        return service.create(payload, actor.user_id)

    @router.put("/{entity_id}", response_model=response_schema, summary=f"Update {label.lower()}")
    @router.patch("/{entity_id}", response_model=response_schema, summary=f"Update {label.lower()}")
    def update_entity(
        payload: update_schema,
        entity_id: int = Path(..., ge=1),
        actor: Actor = Depends(require_permission(write_permission)),
        service: RegistryService = Depends(get_service),
    ):
        return service.update(entity_id, payload, actor.user_id)

    @router.delete("/{entity_id}", status_code=status.HTTP_204_NO_CONTENT,
                   response_class=Response, summary=f"Delete {label.lower()}")
    def delete_entity(
        entity_id: int = Path(..., ge=1),
        actor: Actor = Depends(require_permission(Permission.DELETE)),
        service: RegistryService = Depends(get_service),
    ):
        service.delete(entity_id, actor.user_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


hardware_router = build_registry_router(
    HardwareService, HardwareCreate, HardwareUpdate, HardwareResponse,
)
network_device_router = build_registry_router(
    NetworkDeviceService, NetworkDeviceCreate, NetworkDeviceUpdate, NetworkDeviceResponse,
)
general_inventory_router = build_registry_router(
    GeneralInventoryService, GeneralInventoryCreate, GeneralInventoryUpdate, GeneralInventoryResponse,
)
vlan_router = build_registry_router(
    VlanService, VlanCreate, VlanUpdate, VlanResponse,
)
credential_router = build_registry_router(
    CredentialService, CredentialCreate, CredentialUpdate, CredentialResponse,
    read_permission=Permission.READ_CREDENTIALS,
    write_permission=Permission.WRITE_CREDENTIALS,
)
