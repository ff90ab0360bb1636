"""
Notification Controller

Shown newest first, so new notifications from the channel are inserted at
the top instead of appended.
"""

from typing import Optional, Union

from mintlite.audit.logger import AuditLogger
from mintlite.controllers.base import BaseController, Binding
from mintlite.models.notification import Notification, NotificationType
from mintlite.providers.notifications import NotificationProvider


class NotificationController(BaseController[Notification]):

    def __init__(
        self,
        provider: NotificationProvider,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(audit_logger)
        self._provider = provider

    def _bindings(self) -> list[Binding]:
        return [(self._provider.mutations, self._on_mutation)]

    async def _load(self) -> None:
        await self.fetch_notifications()

    def _insert(self, entity: Notification) -> None:
        self._items.insert(0, entity)

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._items if not n.is_read)

    @property
    def unread(self) -> list[Notification]:
        return [n for n in self._items if not n.is_read]

    async def fetch_notifications(self) -> Optional[list[Notification]]:
        return await self._run(
            "fetch_notifications",
            self._provider.fetch_all,
            self._replace_items,
            sequence=self._next_list_request(),
        )

    async def mark_as_read(self, notification_id: str) -> Optional[Notification]:
        return await self._run(
            "mark_as_read",
            lambda: self._provider.mark_as_read(notification_id),
            self._merge,
        )

    async def mark_all_as_read(self) -> Optional[list[Notification]]:
        def apply(notifications: list[Notification]) -> None:
            for notification in notifications:
                self._merge(notification)

        return await self._run("mark_all_as_read", self._provider.mark_all_as_read, apply)

    async def simulate(
        self,
        notification_type: Union[NotificationType, str],
    ) -> Optional[Notification]:
        return await self._run(
            "simulate_notification",
            lambda: self._provider.simulate_notification(notification_type),
            self._merge,
        )

    async def dismiss(self, notification_id: str) -> None:
        await self._run(
            "dismiss",
            lambda: self._provider.delete(notification_id),
            lambda _: self._remove(notification_id),
        )
