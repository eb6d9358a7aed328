"""Authentication session: one per process, persisted to durable storage, observable."""

import json
import logging
from collections.abc import Callable

from circle.application.dto import (
    AuthSession,
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
)
from circle.application.ports import AuthGateway, KeyValueStorage
from circle.domain import SessionExpired, User

logger = logging.getLogger(__name__)

TOKEN_KEY = "auth_token"
USER_KEY = "user_data"

SessionListener = Callable[[AuthSession], None]


class SessionStore:
    """Holds the bearer token and user profile.

    State is rehydrated from storage on construction; corrupt or partial data
    means logged out. Subscribers are notified after every change.
    """

    def __init__(self, storage: KeyValueStorage, gateway: AuthGateway) -> None:
        self._storage = storage
        self._gateway = gateway
        self._listeners: list[SessionListener] = []
        self._session = self._rehydrate()

    def _rehydrate(self) -> AuthSession:
        token = self._storage.get(TOKEN_KEY)
        raw_user = self._storage.get(USER_KEY)
        if not token or not token.strip() or not raw_user:
            return AuthSession()
        try:
            user = User.from_dict(json.loads(raw_user))
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable stored session: %s", exc)
            return AuthSession()
        return AuthSession(token=token.strip(), user=user)

    # --- reads ---

    def current_session(self) -> AuthSession:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    @property
    def token(self) -> str | None:
        return self._session.token

    @property
    def user(self) -> User | None:
        return self._session.user

    # --- transitions ---

    async def login(self, credentials: LoginRequest) -> AuthSession:
        """Authenticate and persist. Raises AuthError(invalid_credentials) on rejection."""
        token, user = await self._gateway.login(credentials)
        logger.info("Logged in as user id %s", user.id)
        return self._establish(token, user)

    async def register(self, profile: RegisterRequest) -> AuthSession:
        """Create the account and log in. Raises AuthError(duplicate_identity | invalid_profile)."""
        token, user = await self._gateway.register(profile)
        logger.info("Registered user id %s", user.id)
        return self._establish(token, user)

    def logout(self) -> None:
        """Clear storage and memory. Never raises."""
        for key in (TOKEN_KEY, USER_KEY):
            try:
                self._storage.delete(key)
            except OSError as exc:
                logger.error("Could not remove %s from session storage: %s", key, exc)
        if self._session.is_authenticated:
            logger.info("Logged out")
        self._set(AuthSession())

    def expire(self) -> None:
        """Logout caused by an authorization failure from the API."""
        if self._session.is_authenticated:
            logger.warning("Session rejected by the server; logging out")
        self.logout()

    async def refresh_user(self) -> User:
        """Re-read the profile from the server and replace the stored user."""
        token = self._session.token
        if not token:
            raise SessionExpired(None, "Not authenticated.")
        user = await self._gateway.current_user()
        if self._session.token != token:
            raise SessionExpired(None, "Session changed while refreshing the profile.")
        self._storage.set(USER_KEY, json.dumps(user.to_dict()))
        self._set(AuthSession(token=token, user=user))
        return user

    async def change_password(self, request: ChangePasswordRequest) -> None:
        if not self.is_authenticated:
            raise SessionExpired(None, "Not authenticated.")
        await self._gateway.change_password(request)
        logger.info("Password changed")

    def _establish(self, token: str, user: User) -> AuthSession:
        self._storage.set(TOKEN_KEY, token)
        self._storage.set(USER_KEY, json.dumps(user.to_dict()))
        session = AuthSession(token=token, user=user)
        self._set(session)
        return session

    def _set(self, session: AuthSession) -> None:
        changed = session != self._session
        self._session = session
        if changed:
            for listener in list(self._listeners):
                try:
                    listener(session)
                except Exception:
                    logger.exception("Session listener %r failed", listener)

    # --- observers ---

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register listener for session changes. Returns an idempotent unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
