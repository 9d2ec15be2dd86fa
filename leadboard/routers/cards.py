from fastapi import APIRouter, Depends

from ..auth import get_api_key_principal, get_current_principal
from ..deps import Services, get_services
from ..guard import Principal
from ..schemas import (
    BulkCreateOut,
    BulkProspects,
    CardCreate,
    CardDetailsUpdate,
    CardMove,
    CardUpdate,
    IdOut,
)

router = APIRouter(prefix="/card", tags=["cards"])
api_router = APIRouter(prefix="/api", tags=["api"])


@router.post("/create", response_model=dict)
def create_card(
    payload: CardCreate,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return {"data": IdOut(id=services.cards.create_card(principal, payload))}


@router.post("/move", response_model=dict)
def move_card(
    payload: CardMove,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    services.cards.move_card(principal, payload)
    return {"data": "ok"}


@router.delete("/{card_id}", response_model=dict)
def delete_card(
    card_id: int,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    services.cards.delete_card(principal, card_id)
    return {"data": "ok"}


@router.put("/details/{card_id}", response_model=dict)
def update_card_details(
    card_id: int,
    payload: CardDetailsUpdate,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return {"data": IdOut(id=services.cards.update_card_details(principal, card_id, payload))}


@router.put("/{card_id}", response_model=dict)
def update_card(
    card_id: int,
    payload: CardUpdate,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    services.cards.update_card(principal, card_id, payload)
    return {"data": "ok"}


@router.get("/{card_id}", response_model=dict)
def get_card(
    card_id: int,
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return {"data": services.cards.get_card(principal, card_id)}


@api_router.post("/bulk-prospect", response_model=dict)
def bulk_prospect(
    payload: BulkProspects,
    principal: Principal = Depends(get_api_key_principal),
    services: Services = Depends(get_services),
):
    return {"data": BulkCreateOut(ids=services.cards.bulk_create(principal, payload))}
