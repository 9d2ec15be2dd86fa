from fastapi import APIRouter, Depends

from ..auth import get_current_principal
from ..deps import Services, get_services
from ..guard import Principal
from ..schemas import ActivityCreate, ActivityUpdate, IdOut

router = APIRouter(prefix="/activity", tags=["activities"])


@router.post("/create", response_model=dict)
def create_activity(
    payload: ActivityCreate,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return {"data": IdOut(id=services.activities.create_activity(principal, payload))}


@router.put("/{activity_id}", response_model=dict)
def update_activity(
    activity_id: int,
    payload: ActivityUpdate,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return {"data": IdOut(id=services.activities.update_activity(principal, activity_id, payload))}


@router.delete("/{activity_id}", response_model=dict)
def delete_activity(
    activity_id: int,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    services.activities.delete_activity(principal, activity_id)
    return {"data": "ok"}
