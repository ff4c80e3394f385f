import hashlib
import logging
import time
from typing import Any, Dict, Optional, Tuple

from fastapi import HTTPException
from supabase import Client

from app.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse

logger = logging.getLogger(__name__)


class TokenCache:
    """Short-lived map of token digest -> auth user, so parallel requests share one get_user call"""

    def __init__(self, ttl_seconds: float = 60, max_size: int = 500):
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._entries: Dict[str, Tuple[Dict[str, Any], float]] = {}

    @staticmethod
    def key(token: str) -> str:
        return hashlib.sha256(token.encode()).hexdigest()

    def get(self, token: str) -> Optional[Dict[str, Any]]:
        entry = self._entries.get(self.key(token))
        if entry is None:
            return None
        user, expires_at = entry
        if time.monotonic() >= expires_at:
            self._entries.pop(self.key(token), None)
            return None
        return user

    def put(self, token: str, user: Dict[str, Any]) -> None:
        if len(self._entries) >= self.max_size:
            return
        self._entries[self.key(token)] = (user, time.monotonic() + self.ttl_seconds)

    def forget(self, token: str) -> None:
        self._entries.pop(self.key(token), None)

    def clear(self) -> None:
        self._entries.clear()


_token_cache = TokenCache()


def clear_auth_cache():
    _token_cache.clear()


def _auth_error(error: Exception, fallback_status: int, fallback_detail: str) -> HTTPException:
    """Map a Supabase Auth error message onto the HTTP error the client should see"""
    message = str(error).lower()
    if "already registered" in message or "already exists" in message:
        return HTTPException(status_code=400, detail="User already exists")
    if "invalid login" in message or "credentials" in message:
        return HTTPException(status_code=401, detail="Invalid email or password")
    if "jwt" in message or "expired" in message or "invalid" in message:
        return HTTPException(status_code=401, detail="Invalid or expired token")
    return HTTPException(status_code=fallback_status, detail=f"{fallback_detail}: {error}")


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Sign up through Supabase Auth; the profile row is created by the on-signup trigger"""
        metadata = register_data.model_dump(include={"first_name", "last_name"}, exclude_none=True)
        try:
            result = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {"data": metadata},
            })
        except Exception as e:
            raise _auth_error(e, 500, "Registration failed")

        if not result.user:
            raise HTTPException(status_code=400, detail="Failed to register user")

        logger.info("Registered user %s", result.user.id)
        message = "User registered successfully"
        if getattr(result, "session", None) is None:
            message = "Check your email to confirm your account"
        return RegisterResponse(user_id=result.user.id, email=result.user.email or register_data.email,
                                message=message)

    def login(self, login_data: LoginRequest) -> TokenResponse:
        try:
            result = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password,
            })
        except Exception as e:
            raise _auth_error(e, 500, "Login failed")

        if not result.user or not result.session:
            raise HTTPException(status_code=401, detail="Invalid credentials")

        return TokenResponse(
            access_token=result.session.access_token,
            refresh_token=getattr(result.session, "refresh_token", None),
            expires_in=getattr(result.session, "expires_in", None),
            user_id=result.user.id,
            email=result.user.email or login_data.email,
        )

    def get_current_user(self, token: str) -> Dict[str, Any]:
        cached = _token_cache.get(token)
        if cached is not None:
            return cached

        try:
            result = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            error = _auth_error(e, 401, "Authentication failed")
            if error.status_code != 401:
                error = HTTPException(status_code=401, detail="Authentication failed")
            raise error

        if not result or not result.user:
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        user = {
            "id": result.user.id,
            "email": result.user.email,
            "user_metadata": result.user.user_metadata or {},
            "app_metadata": result.user.app_metadata or {},
        }
        _token_cache.put(token, user)
        return user

    def logout(self, token: str) -> bool:
        _token_cache.forget(token)
        try:
            # access tokens stay valid until expiry; this only revokes the refresh session
            self.supabase.auth.sign_out()
        except Exception as e:
            logger.warning("Sign out failed: %s", e)
            return False
        return True
