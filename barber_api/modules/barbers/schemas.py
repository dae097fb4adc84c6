from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class BarberCreate(BaseModel):
    # Presence is checked by the service so every missing field yields the same 400
    title: Optional[str] = None
    caption: Optional[str] = None
    rating: Optional[int] = Field(default=None, ge=0, le=5)
    image: Optional[str] = None  # data URI or http(s) URL


class BarberOwner(BaseModel):
    id: str
    username: Optional[str] = None
    profile_image: Optional[str] = None


class BarberResponse(BaseModel):
    id: str
    title: str
    caption: str
    rating: int
    image: str
    user: str
    created_at: datetime

    class Config:
        from_attributes = True


class BarberListItem(BarberResponse):
    user: Optional[BarberOwner] = None


class BarberListResponse(BaseModel):
    barbers: List[BarberListItem]
    current_page: int = Field(alias="currentPage")
    total_barbers: int = Field(alias="totalBarbers")
    total_pages: int = Field(alias="totalPages")

    class Config:
        populate_by_name = True


class MessageResponse(BaseModel):
    message: str
