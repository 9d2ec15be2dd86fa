from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class IdOut(BaseModel):
    id: int


# === Users ===


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    profile_picture: str


class GoogleProfile(BaseModel):
    email: str
    name: str = ""
    picture: str = ""


class TokenOut(BaseModel):
    token: str
    user: UserOut


class RedirectOut(BaseModel):
    redirect_url: str


# === Tags ===


class TagCreate(BaseModel):
    name: str = Field(min_length=1, max_length=80)
    color: str = Field(default="", max_length=16)


class TagEdit(BaseModel):
    tag_id: int
    name: str = Field(min_length=1, max_length=80)
    color: Optional[str] = Field(default=None, max_length=16)


class TagCardLink(BaseModel):
    tag_id: int
    card_id: int


class TagOut(BaseModel):
    id: int
    name: str
    color: str


# === Cards ===


class CardCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    designation: str = Field(default="", max_length=200)
    email: str = Field(default="", max_length=320)
    phone: str = Field(default="", max_length=64)
    image_url: str = ""
    list_id: int


class CardUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    designation: str = Field(default="", max_length=200)
    email: str = Field(default="", max_length=320)
    phone: str = Field(default="", max_length=64)
    image_url: str = ""


class CardDetailsUpdate(CardUpdate):
    location: str = Field(default="", max_length=200)
    company_name: str = Field(default="", max_length=200)
    company_role: str = Field(default="", max_length=200)
    company_location: str = Field(default="", max_length=200)
    company_phone: str = Field(default="", max_length=64)
    company_email: str = Field(default="", max_length=320)


class CardMove(BaseModel):
    prev_card: Optional[int] = None
    curr_card: int = Field(gt=0)
    next_card: Optional[int] = None
    list_id: int = Field(gt=0)


class CardOut(BaseModel):
    id: int
    name: str
    designation: str
    email: str
    phone: str
    image_url: str
    list_id: int
    card_order: float
    tags: list[TagOut] = []


class CompanyOut(BaseModel):
    name: str
    role: str
    location: str
    phone: str
    email: str


class FieldDetail(BaseModel):
    id: int
    name: str
    value: str
    data_type: str


class ActivityOut(BaseModel):
    id: int
    content: str
    created_at: datetime


class CardDetail(BaseModel):
    card: CardOut
    profile_url: str
    ai_summary: str
    location: str
    list_name: str
    list_color: str
    company: CompanyOut
    additional_contact: list[FieldDetail]
    additional_company: list[FieldDetail]
    activity: list[ActivityOut]


class Prospect(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    designation: str = ""
    email: str = ""
    phone: str = ""
    image_url: str = ""
    location: str = ""
    profile_url: str = ""
    ai_summary: str = ""


class BulkProspects(BaseModel):
    list_id: int
    prospects: list[Prospect] = Field(min_length=1)


class BulkCreateOut(BaseModel):
    ids: list[int]


# === Lists ===


class ListCreate(BaseModel):
    name: str = Field(min_length=1, max_length=140)
    color: str = Field(default="", max_length=16)


class ListUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=140)
    color: Optional[str] = Field(default=None, max_length=16)


class ListOut(BaseModel):
    id: int
    name: str
    color: str
    list_order: float
    created_at: datetime
    updated_at: datetime


class ListWithCards(ListOut):
    cards: list[CardOut]


# === Fields ===


class FieldCreate(BaseModel):
    field_name: str = Field(min_length=1, max_length=140)
    type: str
    data_type: str = Field(default="string", max_length=32)


class FieldValueIn(BaseModel):
    field_id: int
    card_id: int
    value: str


class FieldWithSample(BaseModel):
    id: int
    name: str
    type: str
    data_type: str
    sample_value: Optional[str] = None


# === Activities ===


class ActivityCreate(BaseModel):
    card_id: int
    text: str = Field(min_length=1)


class ActivityUpdate(BaseModel):
    text: str = Field(min_length=1)


# === Keys ===


class APIKeyCreated(BaseModel):
    value: str


class APIKeyOut(BaseModel):
    id: int
    key: str
    name: str
    created_at: datetime
