"""
Authentication & account routes.

- Login: email + password (verified by Firebase). Returns id_token, profile and
  the navigation header for the user's role.
- Logout: revokes the caller's refresh tokens.
- Users are created by admins only.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..auth.dependencies import get_current_user, require_admin
from ..auth.session import AuthSession
from ..models.user import LoginRequest, UserCreate
from ..services.auth_service import auth_service
from ..services.navigation_service import build_header
from .responses import envelope_or_raise

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["authentication"])


def _redact_sensitive(body: BaseModel) -> Dict[str, Any]:
    redacted = body.model_dump(mode="json", exclude_none=True)
    if redacted.get("password") is not None:
        redacted["password"] = "***"
    return redacted


@router.post("/login", response_model=dict)
async def login(body: LoginRequest) -> Dict[str, Any]:
    try:
        logger.info("Login attempt: %s", _redact_sensitive(body))

        session = AuthSession()
        result = await auth_service.login(body.email, body.password, session=session)
        envelope = envelope_or_raise(result)

        header = build_header(session.user)
        return {
            **envelope,
            "id_token": session.id_token,
            "token_type": "Bearer",
            "navigation": header.model_dump() if header else None,
        }
    except HTTPException:
        raise
    except Exception:
        logger.exception("Email/password login failed")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/logout", response_model=dict)
async def logout(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    try:
        session = AuthSession()
        session.start(current_user)
        return envelope_or_raise(await auth_service.logout(session))
    except HTTPException:
        raise
    except Exception:
        logger.exception("Logout failed")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/users", response_model=dict)
async def create_user(body: UserCreate, current_user: Dict[str, Any] = Depends(require_admin)) -> Dict[str, Any]:
    try:
        logger.info("User creation by %s: %s", current_user.get("uid"), _redact_sensitive(body))

        profile = body.model_dump(mode="json", exclude_none=True, exclude={"email", "password"})
        result = await auth_service.create_user(body.email, body.password, profile)
        return envelope_or_raise(result)
    except HTTPException:
        raise
    except Exception:
        logger.exception("User creation failed")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/me", response_model=dict)
async def get_current_user_info(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    """Current user's profile plus the navigation allowed for it."""
    header = build_header(current_user)
    return {
        "success": True,
        "user": current_user,
        "navigation": header.model_dump() if header else None,
    }
