from typing import Any, Dict, List
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .firebase_auth import firebase_auth
from ..database.collections import COLLECTIONS
from ..database.database_service import database_service

security = HTTPBearer()
logger = logging.getLogger(__name__)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Dict[str, Any]:
    """
    Resolve the bearer token to the signed-in user.

    The verified token claims are merged with the stored profile, so role,
    permissions and assignedOperators always come from the users collection
    rather than from possibly stale custom claims. A valid token without a
    profile is rejected with 401.
    """
    try:
        claims = await firebase_auth.verify_token(credentials.credentials)
        if not claims:
            logger.warning("[Auth] Rejected bearer token")
            raise _unauthorized("Invalid authentication credentials")

        uid = claims.get("uid")
        ok, profile, error = await database_service.get_document(COLLECTIONS['users'], uid)
        if not ok or not profile:
            logger.warning(f"[Auth] No profile for uid {uid}: {error or 'missing'}")
            raise _unauthorized("User profile not found")

        current_user = {**claims, **profile, "uid": uid}
        logger.debug(f"[Auth] {current_user.get('email')} signed in as {current_user.get('role')}")
        return current_user
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[Auth] Authentication error: {e}")
        raise _unauthorized(f"Authentication failed: {e}")


def require_role(required_roles: List[str]):
    def role_checker(current_user: Dict[str, Any] = Depends(get_current_user)):
        user_role = current_user.get("role")
        if user_role not in required_roles:
            logger.warning(f"[Auth] Role '{user_role}' not in {required_roles}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required role: {required_roles}, current role: {user_role}"
            )
        return current_user
    return role_checker


async def require_admin(current_user: Dict[str, Any] = Depends(get_current_user)):
    if current_user.get("role") != "admin":
        logger.warning(f"[Auth] Admin access denied for {current_user.get('uid')}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Admin access required. Current role: {current_user.get('role')}"
        )
    return current_user


async def require_dealer_or_admin(dealer_id: str, current_user: Dict[str, Any] = Depends(get_current_user)):
    """A dealer may only act on its own dealership; admins on any."""
    role = current_user.get("role")
    is_own_dealership = role == "dealer" and current_user.get("uid") == dealer_id
    if role != "admin" and not is_own_dealership:
        logger.warning(f"[Auth] {current_user.get('uid')} tried to access dealer {dealer_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only view reports assigned to your own dealership"
        )
    return current_user
