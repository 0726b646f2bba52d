from typing import Any, Callable, Dict, Optional
import logging

from ..auth.firebase_auth import AuthProviderError, firebase_auth
from ..auth.session import AuthListener, AuthSession
from ..core.clock import utc_now_iso
from ..database.collections import COLLECTIONS
from ..database.database_service import database_service
from ..models.result import ErrorKind, ServiceResult

logger = logging.getLogger(__name__)


class AuthService:
    """Sign-in, sign-out and account creation on top of Firebase Auth + the users collection."""

    def __init__(self):
        self.db = database_service
        self.auth = firebase_auth

    async def login(self, email: str, password: str, session: Optional[AuthSession] = None) -> ServiceResult:
        """
        Check credentials with the identity provider, load the stored profile and
        stamp lastLogin. Valid credentials without a profile still fail.
        """
        try:
            token_data = await self.auth.sign_in_with_password(email, password)
            uid = token_data.get("localId")
            if not uid:
                return ServiceResult.fail("Login failed: missing uid", ErrorKind.AUTHENTICATION)

            ok, profile, error = await self.db.get_document(COLLECTIONS['users'], uid)
            if not ok:
                return ServiceResult.fail(error, ErrorKind.STORAGE)
            if not profile:
                logger.warning(f"Login for {email} succeeded but no profile exists (uid={uid})")
                return ServiceResult.fail("User profile not found", ErrorKind.PROFILE_NOT_FOUND)

            now = utc_now_iso()
            ok, error = await self.db.update_document(
                COLLECTIONS['users'], uid, {"lastLogin": now, "updatedAt": now}
            )
            if not ok:
                return ServiceResult.fail(error, ErrorKind.STORAGE)

            user = {
                "uid": uid,
                "email": token_data.get("email", email),
                **profile,
                "lastLogin": now,
                "updatedAt": now,
            }
            tokens = {
                "idToken": token_data.get("idToken"),
                "refreshToken": token_data.get("refreshToken"),
                "expiresIn": token_data.get("expiresIn", "3600"),
            }

            if session is not None:
                session.start(user, tokens)

            logger.info(f"User {uid} logged in with role {profile.get('role')}")
            return ServiceResult.ok(user=user, tokens=tokens)
        except AuthProviderError as e:
            return ServiceResult.fail(str(e), ErrorKind.AUTHENTICATION)
        except Exception as e:
            logger.error(f"Login failed for {email}: {e}")
            return ServiceResult.fail(str(e))

    async def logout(self, session: AuthSession) -> ServiceResult:
        try:
            if session.uid:
                await self.auth.revoke_sessions(session.uid)
            session.clear()
            return ServiceResult.ok()
        except AuthProviderError as e:
            return ServiceResult.fail(str(e), ErrorKind.AUTHENTICATION)
        except Exception as e:
            logger.error(f"Logout failed: {e}")
            return ServiceResult.fail(str(e))

    async def create_user(self, email: str, password: str, user_data: Dict[str, Any]) -> ServiceResult:
        """
        Create the identity-provider account, then the profile keyed by its uid.
        If the profile write fails the new account is deleted again.
        """
        try:
            firebase_user = await self.auth.create_user(
                email=email,
                password=password,
                display_name=user_data.get("name"),
            )
            uid = firebase_user["uid"]

            now = utc_now_iso()
            new_user = {
                "id": uid,
                "email": firebase_user.get("email", email),
                **{k: v for k, v in user_data.items() if k not in ("id", "password")},
                "createdAt": now,
                "updatedAt": now,
            }

            if new_user.get("role"):
                try:
                    await self.auth.set_custom_claims(uid, {"role": new_user["role"]})
                except AuthProviderError:
                    logger.warning(f"Could not set role claim for {uid}", exc_info=True)

            ok, _, error = await self.db.create_document(COLLECTIONS['users'], new_user, document_id=uid)
            if not ok:
                try:
                    await self.auth.delete_user(uid)
                except AuthProviderError:
                    logger.warning(f"Rollback of auth account {uid} failed, account is orphaned", exc_info=True)
                return ServiceResult.fail(f"Failed to create user profile: {error}", ErrorKind.STORAGE)

            logger.info(f"Created user {uid} ({email}) with role {new_user.get('role')}")
            return ServiceResult.ok(user=new_user)
        except AuthProviderError as e:
            return ServiceResult.fail(str(e), ErrorKind.AUTHENTICATION)
        except Exception as e:
            logger.error(f"User creation failed for {email}: {e}")
            return ServiceResult.fail(str(e))

    def on_auth_state_changed(self, session: AuthSession, callback: AuthListener) -> Callable[[], None]:
        return session.subscribe(callback)

    def get_current_user(self, session: AuthSession) -> Optional[Dict[str, Any]]:
        return session.user

    async def get_user_by_id(self, user_id: str, session: Optional[AuthSession] = None) -> ServiceResult:
        try:
            if not user_id:
                return ServiceResult.fail("User ID is required", ErrorKind.VALIDATION)

            ok, user, error = await self.db.get_document(COLLECTIONS['users'], user_id)
            if not ok:
                return ServiceResult.fail(error, ErrorKind.STORAGE)
            if not user:
                return ServiceResult.fail("User not found", ErrorKind.NOT_FOUND)

            if session is not None and session.uid == user_id:
                session.refresh(user)
            return ServiceResult.ok(user=user)
        except Exception as e:
            logger.error(f"Error getting user {user_id}: {e}")
            return ServiceResult.fail(str(e))


auth_service = AuthService()
