import logging
from supabase import AsyncClient
from barber_api.modules.auth.models import DEFAULT_AVATAR_URL
from barber_api.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse, UserProfile
)
from fastapi import HTTPException
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, supabase: AsyncClient, auth_client: Optional[AsyncClient] = None):
        self.supabase = supabase
        self.auth_client = auth_client or supabase

    async def _get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        result = await self.supabase.table("users")\
            .select("*")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        if result is None or not result.data:
            return None
        return result.data

    async def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register a new user with Supabase Auth and create their profile row"""
        try:
            existing = await self.supabase.table("users")\
                .select("id")\
                .eq("username", register_data.username)\
                .execute()
            if existing.data:
                raise HTTPException(status_code=400, detail="Username already exists")

            profile_image = DEFAULT_AVATAR_URL.format(username=register_data.username)
            auth_response = await self.auth_client.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": {
                        "username": register_data.username,
                        "profile_image": profile_image,
                    }
                }
            })

            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")

            user = auth_response.user
            await self.supabase.table("users").insert({
                "id": user.id,
                "email": user.email or register_data.email,
                "username": register_data.username,
                "profile_image": profile_image,
            }).execute()

            return RegisterResponse(
                user_id=user.id,
                email=user.email or register_data.email,
                username=register_data.username,
                message="User registered successfully",
                access_token=auth_response.session.access_token if auth_response.session else None,
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            logger.exception("Registration failed for %s", register_data.email)
            raise HTTPException(status_code=500, detail="Registration failed")

    async def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = await self.auth_client.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid credentials")

            user = auth_response.user
            profile = await self._get_profile(user.id)
            if profile is None:
                # Accounts created outside /register have no profile row yet
                metadata = user.user_metadata or {}
                profile = {
                    "id": user.id,
                    "email": user.email,
                    "username": metadata.get("username"),
                    "profile_image": metadata.get("profile_image"),
                }

            return TokenResponse(
                access_token=auth_response.session.access_token,
                token_type="bearer",
                user=UserProfile(**profile),
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            logger.exception("Login failed for %s", login_data.email)
            raise HTTPException(status_code=500, detail="Login failed")

    async def get_current_user(self, token: str) -> Dict[str, Any]:
        """Resolve a bearer token to the Supabase Auth user it was issued for."""
        try:
            user_response = await self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            return {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
            }
        except HTTPException:
            raise
        except Exception as e:
            logger.warning("Token verification failed: %s", e)
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    async def get_profile(self, user_id: str) -> UserProfile:
        try:
            profile = await self._get_profile(user_id)
        except Exception:
            logger.exception("Error fetching profile %s", user_id)
            raise HTTPException(status_code=500, detail="Internal server error")
        if profile is None:
            raise HTTPException(status_code=404, detail="User not found")
        return UserProfile(**profile)
