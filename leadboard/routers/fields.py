from fastapi import APIRouter, Depends

from ..auth import get_current_principal
from ..deps import Services, get_services
from ..guard import Principal
from ..schemas import FieldCreate, FieldValueIn, IdOut

router = APIRouter(prefix="/field", tags=["fields"])


@router.post("/field-definitions", response_model=dict)
def create_field(
    payload: FieldCreate,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return {"data": IdOut(id=services.fields.create_field(principal, payload))}


@router.post("/field-value", response_model=dict)
def insert_field_value(
    payload: FieldValueIn,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return {"data": IdOut(id=services.fields.insert_field_value(principal, payload))}


@router.get("/", response_model=dict)
def get_fields(
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return {"data": {"fields": services.fields.get_fields(principal)}}
