from fastapi import APIRouter, Depends

from ..auth import get_current_principal
from ..deps import Services, get_services
from ..guard import Principal
from ..schemas import IdOut, TagCardLink, TagCreate, TagEdit

router = APIRouter(prefix="/tag", tags=["tags"])


@router.post("/create", response_model=dict)
def create_tag(
    payload: TagCreate,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return {"data": IdOut(id=services.tags.create_tag(principal, payload))}


@router.post("/add-to-card", response_model=dict)
def add_tag(
    payload: TagCardLink,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    services.tags.add_tag(principal, payload)
    return {"data": "ok"}


@router.post("/remove-from-card", response_model=dict)
def remove_tag(
    payload: TagCardLink,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    services.tags.remove_tag(principal, payload)
    return {"data": "ok"}


@router.get("/", response_model=dict)
def get_tags(
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return {"data": {"tags": services.tags.get_tags(principal)}}


@router.put("/", response_model=dict)
def edit_tag(
    payload: TagEdit,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return {"data": IdOut(id=services.tags.edit_tag(principal, payload))}


@router.delete("/{tag_id}", response_model=dict)
def delete_tag(
    tag_id: int,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    services.tags.delete_tag(principal, tag_id)
    return {"data": "ok"}
