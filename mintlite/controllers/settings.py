"""
Settings Controller

Profile and preference screen for the signed-in user. Every change goes
through the auth provider; the updated user comes back both as the direct
result and on the auth channel.
"""

from typing import Optional

from mintlite.controllers.auth import SessionController
from mintlite.models.user import User


class SettingsController(SessionController):

    @property
    def biometric_enabled(self) -> bool:
        user = self.current_user
        return bool(user and user.biometric_enabled)

    @property
    def notifications_enabled(self) -> bool:
        user = self.current_user
        return bool(user and user.notifications_enabled)

    @property
    def preferred_currency(self) -> Optional[str]:
        user = self.current_user
        return user.preferred_currency if user else None

    async def update_profile(
        self,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        email: Optional[str] = None,
        profile_image_url: Optional[str] = None,
    ) -> Optional[User]:
        return await self._run(
            "update_profile",
            lambda: self._provider.update_profile(
                first_name=first_name,
                last_name=last_name,
                email=email,
                profile_image_url=profile_image_url,
            ),
            self._merge,
        )

    async def set_biometric_enabled(self, enabled: bool) -> Optional[User]:
        return await self._run(
            "set_biometric_enabled",
            lambda: self._provider.set_biometric_enabled(enabled),
            self._merge,
        )

    async def toggle_biometric(self) -> Optional[User]:
        return await self.set_biometric_enabled(not self.biometric_enabled)

    async def set_notifications_enabled(self, enabled: bool) -> Optional[User]:
        return await self._run(
            "set_notifications_enabled",
            lambda: self._provider.set_notifications_enabled(enabled),
            self._merge,
        )

    async def toggle_notifications(self) -> Optional[User]:
        return await self.set_notifications_enabled(not self.notifications_enabled)

    async def update_currency(self, currency: str) -> Optional[User]:
        return await self._run(
            "update_currency",
            lambda: self._provider.update_currency(currency),
            self._merge,
        )
