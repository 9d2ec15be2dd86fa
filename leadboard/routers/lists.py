from fastapi import APIRouter, Depends

from ..auth import get_current_principal
from ..deps import Services, get_services
from ..guard import Principal
from ..schemas import ListCreate, ListUpdate

router = APIRouter(prefix="/list", tags=["lists"])


@router.get("/create-default", response_model=dict)
def create_default_lists(
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return {"data": {"lists": services.lists.create_default_lists(principal)}}


@router.get("/all", response_model=dict)
def get_lists(
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return {"data": {"lists": services.lists.get_lists(principal)}}


@router.post("/create", response_model=dict)
def create_list(
    payload: ListCreate,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return {"data": services.lists.create_list(principal, payload)}


@router.put("/{list_id}", response_model=dict)
def update_list(
    list_id: int,
    payload: ListUpdate,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return {"data": services.lists.update_list(principal, list_id, payload)}


@router.delete("/{list_id}", response_model=dict)
def delete_list(
    list_id: int,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    services.lists.delete_list(principal, list_id)
    return {"data": "ok"}
