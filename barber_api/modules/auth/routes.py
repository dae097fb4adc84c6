from fastapi import APIRouter, Depends
from barber_api.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse, UserProfile
)
from barber_api.modules.auth.service import AuthService
from barber_api.core.dependencies import get_auth_service, get_current_user
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return await service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return await service.login(login_data)


@router.get("/me", response_model=UserProfile)
async def get_me(
    current_user: Dict = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    """Get the authenticated user's profile"""
    return await service.get_profile(current_user["id"])
