from fastapi import APIRouter, Depends

from ..auth import get_current_principal
from ..deps import Services, get_services
from ..guard import Principal
from ..schemas import APIKeyCreated

router = APIRouter(prefix="/key", tags=["keys"])


@router.get("/api", response_model=dict)
def create_api_key(
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return {"data": APIKeyCreated(value=services.keys.create_api_key(principal))}


@router.get("/", response_model=dict)
def get_api_key(
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return {"data": services.keys.get_api_key(principal)}
