from fastapi import APIRouter, Depends, Query, Request, status

from app.core.logging_config import log_security_event
from app.dependencies import get_store, get_tenant_id
from app.schemas.common import success_response
from app.schemas.trainer_schemas import TrainerCreate, TrainerUpdate
from app.services.trainer_service import TrainerService
from app.store.base import TenantScopedStore

router = APIRouter()


@router.get("")
async def list_trainers(
    tenant_id: str = Depends(get_tenant_id), store: TenantScopedStore = Depends(get_store)
):
    """Get all trainers of the gym, newest first"""
    trainers = await TrainerService(store).list_trainers(tenant_id)
    return success_response([trainer.to_api() for trainer in trainers], count=len(trainers))


@router.get("/search")
async def search_trainers(
    query: str | None = Query(None),
    specialization: str | None = Query(None),
    is_active: bool | None = Query(None, alias="isActive"),
    tenant_id: str = Depends(get_tenant_id),
    store: TenantScopedStore = Depends(get_store),
):
    """Search trainers; best rated first"""
    trainers = await TrainerService(store).search_trainers(tenant_id, query, specialization, is_active)
    return success_response([trainer.to_api() for trainer in trainers], count=len(trainers))


@router.get("/stats")
async def trainer_stats(
    tenant_id: str = Depends(get_tenant_id), store: TenantScopedStore = Depends(get_store)
):
    return success_response(await TrainerService(store).get_stats(tenant_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_trainer(
    data: TrainerCreate,
    request: Request,
    tenant_id: str = Depends(get_tenant_id),
    store: TenantScopedStore = Depends(get_store),
):
    """Add a trainer"""
    trainer = await TrainerService(store).create_trainer(data, tenant_id)
    log_security_event("trainer_created", request, trainerId=trainer.id, trainerName=trainer.name)
    return success_response(trainer.to_api(), message="Trainer created successfully")


@router.get("/{trainer_id}")
async def get_trainer(
    trainer_id: str,
    tenant_id: str = Depends(get_tenant_id),
    store: TenantScopedStore = Depends(get_store),
):
    trainer = await TrainerService(store).get_trainer(trainer_id, tenant_id)
    return success_response(trainer.to_api())


@router.put("/{trainer_id}")
async def update_trainer(
    trainer_id: str,
    data: TrainerUpdate,
    request: Request,
    tenant_id: str = Depends(get_tenant_id),
    store: TenantScopedStore = Depends(get_store),
):
    """Update trainer details"""
    trainer = await TrainerService(store).update_trainer(trainer_id, data, tenant_id)
    log_security_event(
        "trainer_updated", request, trainerId=trainer.id, updatedFields=sorted(data.changes())
    )
    return success_response(trainer.to_api(), message="Trainer updated successfully")


@router.delete("/{trainer_id}")
async def delete_trainer(
    trainer_id: str,
    request: Request,
    tenant_id: str = Depends(get_tenant_id),
    store: TenantScopedStore = Depends(get_store),
):
    """Remove a trainer"""
    trainer = await TrainerService(store).delete_trainer(trainer_id, tenant_id)
    log_security_event("trainer_deleted", request, trainerId=trainer.id, trainerName=trainer.name)
    return success_response({"id": trainer.id}, message="Trainer deleted successfully")
