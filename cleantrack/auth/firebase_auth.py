from firebase_admin import auth
import httpx
import logging
from typing import Any, Dict, Optional

from ..core.config import settings
from ..core.firebase_init import initialize_firebase, is_firebase_available

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"


class AuthProviderError(Exception):
    """Raised when the identity provider rejects a request."""


class FirebaseAuth:
    def _ensure_initialized(self):
        if not is_firebase_available():
            if not initialize_firebase():
                raise AuthProviderError("Firebase initialization failed - Auth not available")

    async def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        """
        Password verification through the Identity Toolkit REST API.
        Returns {idToken, refreshToken, expiresIn, localId, email, ...}
        """
        if not settings.FIREBASE_WEB_API_KEY:
            raise AuthProviderError("Missing FIREBASE_WEB_API_KEY")

        payload = {"email": email, "password": password, "returnSecureToken": True}
        async with httpx.AsyncClient(timeout=settings.AUTH_REQUEST_TIMEOUT) as client:
            resp = await client.post(
                IDENTITY_TOOLKIT_URL,
                params={"key": settings.FIREBASE_WEB_API_KEY},
                json=payload,
                headers={"Content-Type": "application/json"},
            )

        if resp.status_code != 200:
            try:
                reason = resp.json().get("error", {}).get("message", "")
            except ValueError:
                reason = ""
            logger.info(f"Sign-in rejected for {email}: {reason or resp.status_code}")
            raise AuthProviderError("Invalid email or password")

        return resp.json()

    async def verify_token(self, token: str) -> Optional[dict]:
        try:
            self._ensure_initialized()
            return auth.verify_id_token(token)
        except Exception as e:
            logger.warning(f"Token verification failed: {e}")
            return None

    async def create_user(self, email: str, password: str, display_name: str = None) -> dict:
        self._ensure_initialized()
        try:
            user = auth.create_user(
                email=email,
                password=password,
                display_name=display_name
            )
            return {
                "uid": user.uid,
                "email": user.email,
            }
        except Exception as e:
            raise AuthProviderError(f"User creation failed: {e}")

    async def set_custom_claims(self, uid: str, claims: dict):
        self._ensure_initialized()
        try:
            auth.set_custom_user_claims(uid, claims)
        except Exception as e:
            raise AuthProviderError(f"Setting custom claims failed: {e}")

    async def revoke_sessions(self, uid: str):
        """Invalidate every refresh token issued to the user (server-side sign out)."""
        self._ensure_initialized()
        try:
            auth.revoke_refresh_tokens(uid)
        except Exception as e:
            raise AuthProviderError(f"Sign out failed: {e}")

    async def delete_user(self, uid: str):
        """Delete a user from Firebase Auth"""
        self._ensure_initialized()
        try:
            auth.delete_user(uid)
        except Exception as e:
            raise AuthProviderError(f"User deletion failed: {e}")


firebase_auth = FirebaseAuth()
