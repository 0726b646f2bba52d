from typing import Any, Callable, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

AuthListener = Callable[[Optional[Dict[str, Any]]], None]


class AuthSession:
    """
    Signed-in user of one client.

    Lifecycle: ``start`` on successful login, ``refresh`` whenever the profile is
    fetched again, ``clear`` on logout. Listeners get the current user (or None)
    on subscription and after every change.
    """

    def __init__(self):
        self._user: Optional[Dict[str, Any]] = None
        self._tokens: Dict[str, Any] = {}
        self._listeners: List[AuthListener] = []

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        return self._user

    @property
    def uid(self) -> Optional[str]:
        return self._user.get("uid") if self._user else None

    @property
    def id_token(self) -> Optional[str]:
        return self._tokens.get("idToken")

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def start(self, user: Dict[str, Any], tokens: Optional[Dict[str, Any]] = None):
        self._user = dict(user)
        self._tokens = dict(tokens or {})
        self._notify()

    def refresh(self, profile: Dict[str, Any]):
        if not self._user:
            return
        self._user = {**self._user, **profile}
        self._notify()

    def clear(self):
        if self._user is None and not self._tokens:
            return
        self._user = None
        self._tokens = {}
        self._notify()

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)
        listener(self._user)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        for listener in list(self._listeners):
            try:
                listener(self._user)
            except Exception:
                logger.exception("Auth state listener failed")
