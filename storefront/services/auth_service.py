# storefront/services/auth_service.py
"""
Authentication providers.

Real sign-in happens in the hosted identity provider (Clerk); the client
only keeps the issued session token and user snapshot. When no
publishable key is configured the storefront runs in demo mode: a local
stand-in with two fixed accounts and no backend involved.
"""
import time
from typing import Optional

from pydantic import ValidationError

from storefront.domain.schemas import User
from storefront.exceptions import AuthError
from storefront.services.storage import (
    AUTH_TOKEN_KEY,
    AUTH_USER_KEY,
    DEMO_USER_KEY,
    LocalStorage,
)
from storefront.utils.logging import get_logger
from storefront.utils.settings import CLERK_PUBLISHABLE_KEY, DEMO_PASSWORD

logger = get_logger(__name__)

DEMO_USERS = {
    "demo@chamundanursery.com": User(
        id="demo_user_1",
        email="demo@chamundanursery.com",
        first_name="Demo",
        last_name="User",
        role="user",
        image_url="/logo.svg",
    ),
    "admin@chamundanursery.com": User(
        id="demo_admin_1",
        email="admin@chamundanursery.com",
        first_name="Admin",
        last_name="User",
        role="admin",
        image_url="/logo.svg",
    ),
}


class AuthProvider:
    storage_key = AUTH_USER_KEY

    def __init__(self, storage: LocalStorage):
        self.storage = storage
        self.current_user: Optional[User] = None

    @property
    def is_signed_in(self) -> bool:
        return self.current_user is not None

    @property
    def is_admin(self) -> bool:
        return self.current_user is not None and self.current_user.is_admin

    def require_user(self) -> User:
        if self.current_user is None:
            raise AuthError("User not authenticated")
        return self.current_user

    def get_token(self) -> Optional[str]:
        raise NotImplementedError

    def restore(self) -> Optional[User]:
        raw = self.storage.get(self.storage_key)
        if raw:
            try:
                self.current_user = User.model_validate(raw)
            except ValidationError as e:
                logger.warning(f"Ignoring unreadable saved user: {e}")
                self.storage.remove(self.storage_key)
        return self.current_user

    def sign_out(self) -> None:
        self.current_user = None
        self.storage.remove(self.storage_key)


class DemoAuthProvider(AuthProvider):
    storage_key = DEMO_USER_KEY

    def __init__(self, storage: LocalStorage, password: str = DEMO_PASSWORD):
        super().__init__(storage)
        self.password = password

    def _signed_in(self, user: User) -> User:
        self.current_user = user
        self.storage.set(DEMO_USER_KEY, user.model_dump(mode="json"))
        logger.info(f"Demo user {user.id} signed in")
        return user

    def sign_in(self, email: str, password: str) -> User:
        user = DEMO_USERS.get(email)
        if user is None or password != self.password:
            raise AuthError(
                "Invalid credentials. Use demo@chamundanursery.com or "
                "admin@chamundanursery.com with the demo password"
            )
        return self._signed_in(user)

    def sign_up(self, email: str, password: str, first_name: str, last_name: str) -> User:
        if not email or not password:
            raise AuthError("Email and password are required")
        return self._signed_in(
            User(
                id=f"demo_user_{int(time.time() * 1000)}",
                email=email,
                first_name=first_name,
                last_name=last_name,
                role="user",
                image_url="/logo.svg",
            )
        )

    def get_token(self) -> Optional[str]:
        # demo sessions never reach protected endpoints with a real token
        return f"demo:{self.current_user.id}" if self.current_user else None


class TokenAuthProvider(AuthProvider):
    """Keeps the token and user snapshot handed over by the identity provider."""

    def set_session(self, token: str, user: User) -> None:
        self.current_user = user
        self.storage.set(AUTH_TOKEN_KEY, token)
        self.storage.set(AUTH_USER_KEY, user.model_dump(mode="json"))
        logger.info(f"Session stored for {user.id}")

    def get_token(self) -> Optional[str]:
        return self.storage.get(AUTH_TOKEN_KEY)

    def sign_out(self) -> None:
        super().sign_out()
        self.storage.remove(AUTH_TOKEN_KEY)


def is_demo_mode(publishable_key: str | None = None) -> bool:
    key = CLERK_PUBLISHABLE_KEY if publishable_key is None else publishable_key
    return not key or not key.startswith("pk_")


def build_auth_provider(storage: LocalStorage, publishable_key: str | None = None) -> AuthProvider:
    provider = DemoAuthProvider(storage) if is_demo_mode(publishable_key) else TokenAuthProvider(storage)
    provider.restore()
    return provider
