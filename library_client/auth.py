"""Session wrapper around an external identity provider.

The provider owns the sign-in protocol. This module only maps its session
primitives onto :class:`User` and keeps the loading flag honest.
"""
import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Iterable

from library_client.models import User

logger = logging.getLogger(__name__)


class IdentityProvider(ABC):
    """Session primitives of a hosted identity provider."""

    @abstractmethod
    def get_current_user(self) -> Dict[str, Any]:
        """
        Return the signed-in user.

        Returns:
            Mapping with ``user_id``, ``username`` and optionally ``login_id``

        Raises:
            Exception: when there is no active session
        """

    @abstractmethod
    def fetch_user_attributes(self) -> Dict[str, str]:
        """Return profile attributes (``email``, ``name``) of the current user."""

    @abstractmethod
    def sign_in(self, username: str, password: str) -> bool:
        """Sign in; return True when the session is fully established."""

    @abstractmethod
    def sign_up(self, username: str, password: str, attributes: Dict[str, str]) -> None:
        pass

    @abstractmethod
    def confirm_sign_up(self, username: str, code: str) -> None:
        pass

    @abstractmethod
    def sign_out(self) -> None:
        pass

    @abstractmethod
    def get_id_token(self) -> Optional[str]:
        """Bearer token of the active session."""


class EnvTokenProvider(IdentityProvider):
    """
    Token-only provider for scripts and the CLI.

    Hands out a pre-issued ID token (``LIBRARY_API_TOKEN``) and cannot
    run interactive sign-in flows.
    """

    def __init__(self, token: Optional[str] = None):
        self.token = token if token is not None else os.getenv("LIBRARY_API_TOKEN")

    def get_id_token(self) -> Optional[str]:
        if not self.token:
            raise RuntimeError("No active session")
        return self.token

    def get_current_user(self) -> Dict[str, Any]:
        raise NotImplementedError("EnvTokenProvider has no user profile")

    def fetch_user_attributes(self) -> Dict[str, str]:
        raise NotImplementedError("EnvTokenProvider has no user profile")

    def sign_in(self, username: str, password: str) -> bool:
        raise NotImplementedError("Sign-in is handled by the identity provider")

    def sign_up(self, username: str, password: str, attributes: Dict[str, str]) -> None:
        raise NotImplementedError("Sign-up is handled by the identity provider")

    def confirm_sign_up(self, username: str, code: str) -> None:
        raise NotImplementedError("Sign-up is handled by the identity provider")

    def sign_out(self) -> None:
        self.token = None


def derive_role(email: str, admin_emails: Iterable[str]) -> str:
    """
    Map an email to ``admin`` or ``user`` using a static allow-list.

    This is a display hint. Anything that matters is authorized by the API.
    """
    allowed = {e.lower() for e in admin_emails}
    return "admin" if (email or "").lower() in allowed else "user"


class AuthSession:
    """Current-user state on top of an :class:`IdentityProvider`."""

    def __init__(self, provider: IdentityProvider, admin_emails: Iterable[str] = ()):
        self.provider = provider
        self.admin_emails = list(admin_emails)
        self.user: Optional[User] = None
        self.is_loading = True

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def _load_user(self, fallback_email: str = "") -> User:
        current = self.provider.get_current_user()
        attributes = self.provider.fetch_user_attributes()
        email = attributes.get("email") or fallback_email or current.get("login_id") or ""
        return User(
            id=current["user_id"],
            email=email,
            name=attributes.get("name") or current.get("username", ""),
            role=derive_role(email, self.admin_emails),
            created_at=datetime.now(timezone.utc).isoformat()
        )

    def restore(self) -> Optional[User]:
        """
        Probe for an existing session.

        No session is not an error: ``user`` is simply left as None.
        """
        try:
            self.user = self._load_user()
            logger.info(f"Restored session for {self.user.email}")
        except Exception as e:
            logger.info(f"No active session: {e}")
            self.user = None
        finally:
            self.is_loading = False
        return self.user

    def login(self, email: str, password: str) -> Optional[User]:
        self.is_loading = True
        try:
            if self.provider.sign_in(email, password):
                self.user = self._load_user(fallback_email=email)
            return self.user
        except Exception as e:
            logger.error(f"Login error: {e}")
            raise
        finally:
            self.is_loading = False

    def logout(self) -> None:
        self.is_loading = True
        try:
            self.provider.sign_out()
            self.user = None
        except Exception as e:
            logger.error(f"Logout error: {e}")
            raise
        finally:
            self.is_loading = False

    def signup(self, email: str, password: str, name: str) -> None:
        self.is_loading = True
        try:
            self.provider.sign_up(email, password, {"email": email, "name": name})
        except Exception as e:
            logger.error(f"Signup error: {e}")
            raise
        finally:
            self.is_loading = False

    def confirm_signup(self, email: str, code: str) -> None:
        self.is_loading = True
        try:
            self.provider.confirm_sign_up(email, code)
        except Exception as e:
            logger.error(f"Confirm signup error: {e}")
            raise
        finally:
            self.is_loading = False
