"""
Core dependencies for route protection
"""

from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from barber_api.database.supabase_client import get_supabase, get_supabase_auth
from barber_api.modules.auth.service import AuthService
from supabase import AsyncClient
from typing import Any, Dict, Optional

# auto_error=False so a missing header is a 401 like any other bad credential
security = HTTPBearer(auto_error=False)


def get_auth_service(
    supabase: AsyncClient = Depends(get_supabase),
    auth_client: AsyncClient = Depends(get_supabase_auth),
) -> AuthService:
    return AuthService(supabase, auth_client)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """Extract current user info from the bearer token"""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return await auth_service.get_current_user(credentials.credentials)
