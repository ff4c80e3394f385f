from fastapi import APIRouter, Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse, MeResponse
)
from app.modules.auth.service import AuthService
from app.core.dependencies import get_auth_service, get_current_profile, get_user_permissions, is_root
from app.config.permissions_config import PERMISSION_MATRIX
from typing import Dict, Optional

router = APIRouter(prefix="/auth", tags=["auth"])

bearer = HTTPBearer(auto_error=False)


def get_current_token(credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer)) -> str:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    return credentials.credentials


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(register_data: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(login_data: LoginRequest, service: AuthService = Depends(get_auth_service)):
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Drops the cached token and revokes the refresh session"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=MeResponse)
async def get_me(profile: Dict = Depends(get_current_profile)):
    """Current user, profile role and effective permissions (for frontend UI gating)."""
    if is_root(profile):
        permissions = [p["name"] for p in PERMISSION_MATRIX["permissions"]]
    else:
        permissions = get_user_permissions(profile)
    return MeResponse(
        id=profile["id"],
        email=profile.get("email"),
        role=profile.get("role"),
        workspace_id=profile.get("workspace_id"),
        first_name=profile.get("first_name"),
        last_name=profile.get("last_name"),
        permissions=permissions,
    )
