"""
Auth Controller

The session is a list of at most one user, merged from the auth channel
like any other entity list: login appends, logout removes.
"""

from typing import Optional

from mintlite.audit.logger import AuditLogger
from mintlite.controllers.base import BaseController, Binding
from mintlite.models.user import User
from mintlite.providers.auth import AuthProvider


class SessionController(BaseController[User]):
    """Tracks the signed-in user through the auth provider's channel."""

    def __init__(
        self,
        provider: AuthProvider,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(audit_logger)
        self._provider = provider

    def _bindings(self) -> list[Binding]:
        return [(self._provider.mutations, self._on_mutation)]

    async def _load(self) -> None:
        await self._run(
            "load_session",
            self._provider.fetch_all,
            self._replace_items,
            sequence=self._next_list_request(),
        )

    @property
    def current_user(self) -> Optional[User]:
        return self._items[0] if self._items else None

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    async def logout(self) -> None:
        await self._run("logout", self._provider.logout, lambda _: self._replace_items([]))


class AuthController(SessionController):
    """Login, registration and biometric unlock."""

    def __init__(
        self,
        provider: AuthProvider,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(provider, audit_logger)
        self._biometric_verified = False

    @property
    def biometric_verified(self) -> bool:
        return self._biometric_verified

    def _on_cleanup(self) -> None:
        self._biometric_verified = False

    def _sign_in(self, user: User) -> None:
        self._replace_items([user])
        self._biometric_verified = False

    async def login(self, email: str, password: str) -> Optional[User]:
        return await self._run(
            "login",
            lambda: self._provider.login(email, password),
            self._sign_in,
        )

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
    ) -> Optional[User]:
        return await self._run(
            "register",
            lambda: self._provider.register(email, password, first_name, last_name),
            self._sign_in,
        )

    async def authenticate_with_biometrics(self) -> bool:
        def apply(passed: bool) -> None:
            self._biometric_verified = passed

        result = await self._run(
            "authenticate_with_biometrics",
            self._provider.authenticate_with_biometrics,
            apply,
        )
        return bool(result)
