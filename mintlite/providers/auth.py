"""
Auth Provider

Simulated sign-in. The collection holds at most one user: the signed-in
one. Login and registration publish CREATED, settings changes publish
UPDATED and logout publishes DELETED, so the session is observable on the
same kind of channel as every other domain.

Biometric checks are delegated to a pass/fail capability callable; the
platform mechanics behind it are not simulated here.
"""

from typing import Any, Callable, Optional

from mintlite.errors import (
    BiometricUnavailableError,
    NotAuthenticatedError,
    ValidationCode,
    ValidationError,
)
from mintlite.models.user import MIN_PASSWORD_LENGTH, User, is_valid_email, is_valid_password
from mintlite.providers.base import SimulatedProvider
from mintlite.providers.channel import MutationKind

MOCK_FIRST_NAME = "Mock"
MOCK_LAST_NAME = "User"


def biometrics_available() -> bool:
    return True


class AuthProvider(SimulatedProvider[User]):
    entity_class = User

    def __init__(
        self,
        *args: Any,
        biometric_capability: Callable[[], bool] = biometrics_available,
        default_currency: str = "USD",
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self._biometric_capability = biometric_capability
        self._default_currency = default_currency
        self._remember_biometric = False

    @property
    def current_user(self) -> Optional[User]:
        return next(iter(self._items.values()), None)

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    # =========================================================================
    # Session
    # =========================================================================

    async def login(self, email: str, password: str) -> User:
        """
        Sign in as the mock user for `email`.

        Raises:
            ValidationError: malformed email or empty password
        """
        await self._simulate_network("login")
        self._check_email("login", email)
        if not password:
            raise self._failed(
                "login",
                ValidationError(
                    ValidationCode.PASSWORD_INVALID,
                    "Password cannot be empty",
                    field="password",
                ),
            )
        user = self._build(
            "login",
            id=self._new_id(),
            email=email,
            first_name=MOCK_FIRST_NAME,
            last_name=MOCK_LAST_NAME,
            preferred_currency=self._default_currency,
            biometric_enabled=self._remember_biometric,
        )
        return self._start_session(user, "password")

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
    ) -> User:
        """
        Create an account and sign in.

        Raises:
            ValidationError: malformed email, short password or blank names
        """
        await self._simulate_network("register")
        self._check_email("register", email)
        if not is_valid_password(password):
            raise self._failed(
                "register",
                ValidationError(
                    ValidationCode.PASSWORD_INVALID,
                    f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                    field="password",
                ),
            )
        user = self._build(
            "register",
            id=self._new_id(),
            email=email,
            first_name=first_name,
            last_name=last_name,
            preferred_currency=self._default_currency,
        )
        return self._start_session(user, "registration")

    async def create(self, fields: dict[str, Any]) -> User:
        return await self.register(**fields)

    async def logout(self) -> None:
        """End the session. Logging out twice is a no-op."""
        await self._simulate_network("logout")
        user = self.current_user
        if user is None:
            return
        self._commit(MutationKind.DELETED, user)
        if self._audit:
            self._audit.log_user_logged_out(user.id)

    async def delete(self, entity_id: str) -> None:
        self._require(entity_id, "delete")
        await self.logout()

    async def authenticate_with_biometrics(self) -> bool:
        """
        Re-authenticate the current user with the platform biometric check.

        Raises:
            NotAuthenticatedError: nobody is signed in
            BiometricUnavailableError: biometrics disabled for the user or
                unavailable on the device
        """
        user = self._require_user("authenticate_with_biometrics")
        if not user.biometric_enabled:
            raise self._failed(
                "authenticate_with_biometrics",
                BiometricUnavailableError("Biometric login is not enabled"),
                entity_id=user.id,
            )
        if not self._biometric_capability():
            raise self._failed(
                "authenticate_with_biometrics",
                BiometricUnavailableError("Biometric authentication is not available"),
                entity_id=user.id,
            )
        await self._simulate_network("authenticate_with_biometrics")
        if self._audit:
            self._audit.log_user_logged_in(user.id, "biometric")
        return True

    # =========================================================================
    # Settings
    # =========================================================================

    async def update(self, entity: User) -> User:
        await self._simulate_network("update")
        current = self._require_user("update")
        if entity.id != current.id:
            raise self._failed(
                "update",
                NotAuthenticatedError("Only the signed-in user can be updated"),
                entity_id=entity.id,
            )
        return self._commit(MutationKind.UPDATED, entity)

    async def update_profile(
        self,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        email: Optional[str] = None,
        profile_image_url: Optional[str] = None,
    ) -> User:
        """
        Change name, email or picture of the signed-in user.

        Raises:
            NotAuthenticatedError: nobody is signed in
            ValidationError: blank name or malformed email
        """
        return await self._change_preferences(
            "update_profile",
            first_name=first_name,
            last_name=last_name,
            email=email,
            profile_image_url=profile_image_url,
        )

    async def set_biometric_enabled(self, enabled: bool) -> User:
        if enabled and not self._biometric_capability():
            raise self._failed(
                "set_biometric_enabled",
                BiometricUnavailableError("Biometric authentication is not available"),
            )
        user = await self._change_preferences("set_biometric_enabled", biometric_enabled=enabled)
        self._remember_biometric = enabled
        return user

    async def set_notifications_enabled(self, enabled: bool) -> User:
        return await self._change_preferences(
            "set_notifications_enabled",
            notifications_enabled=enabled,
        )

    async def update_currency(self, currency: str) -> User:
        return await self._change_preferences("update_currency", preferred_currency=currency)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _change_preferences(self, operation: str, **changes: Any) -> User:
        await self._simulate_network(operation)
        user = self._require_user(operation)
        try:
            updated = user.with_preferences(**changes)
        except ValidationError as e:
            raise self._failed(operation, e, entity_id=user.id)
        return self._commit(MutationKind.UPDATED, updated)

    def _start_session(self, user: User, method: str) -> User:
        previous = self.current_user
        if previous is not None:
            self._commit(MutationKind.DELETED, previous)
        self._commit(MutationKind.CREATED, user)
        if self._audit:
            self._audit.log_user_logged_in(user.id, method)
        return user

    def _require_user(self, operation: str) -> User:
        user = self.current_user
        if user is None:
            raise self._failed(operation, NotAuthenticatedError("No user is signed in"))
        return user

    def _check_email(self, operation: str, email: str) -> None:
        if not is_valid_email(email):
            raise self._failed(
                operation,
                ValidationError(
                    ValidationCode.EMAIL_INVALID,
                    f"Invalid email address: {email!r}",
                    field="email",
                ),
            )
