from fastapi import APIRouter, Depends, Query
from barber_api.database.supabase_client import get_supabase
from barber_api.modules.barbers.schemas import (
    BarberCreate, BarberResponse, BarberListResponse, MessageResponse
)
from barber_api.modules.barbers.service import BarberService
from barber_api.core.dependencies import get_current_user
from supabase import AsyncClient
from typing import List, Dict

router = APIRouter(prefix="/barbers", tags=["barbers"])


def get_barber_service(supabase: AsyncClient = Depends(get_supabase)) -> BarberService:
    return BarberService(supabase)


@router.post("", response_model=BarberResponse, status_code=201)
@router.post("/", response_model=BarberResponse, status_code=201, include_in_schema=False)
async def create_barber(
    barber_data: BarberCreate,
    user_data: Dict = Depends(get_current_user),
    service: BarberService = Depends(get_barber_service)
):
    """Create a barber; the image is uploaded to S3 first"""
    return await service.create_barber(barber_data, user_data["id"])


@router.get("", response_model=BarberListResponse)
@router.get("/", response_model=BarberListResponse, include_in_schema=False)
async def list_barbers(
    page: int = Query(1, ge=1),
    limit: int = Query(5, ge=1),
    user_data: Dict = Depends(get_current_user),
    service: BarberService = Depends(get_barber_service)
):
    """Paginated feed of all barbers, newest first (infinite scroll)"""
    return await service.list_barbers(page=page, limit=limit)


@router.get("/user", response_model=List[BarberResponse])
async def list_my_barbers(
    user_data: Dict = Depends(get_current_user),
    service: BarberService = Depends(get_barber_service)
):
    """Barbers created by the logged in user"""
    return await service.list_user_barbers(user_data["id"])


@router.delete("/{barber_id}", response_model=MessageResponse)
async def delete_barber(
    barber_id: str,
    user_data: Dict = Depends(get_current_user),
    service: BarberService = Depends(get_barber_service)
):
    """Delete a barber (owner only)"""
    return await service.delete_barber(barber_id, user_data["id"])
