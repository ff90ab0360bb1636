"""
Notification Provider

Stands in for the push channel. Notifications arrive from the seed, from
`simulate_notification` (a canned alert per type) or from `push` (an
externally built event). Listing is always newest first.
"""

from decimal import Decimal
from typing import Any, Optional, Union

from mintlite.errors import ValidationCode, ValidationError
from mintlite.models.notification import (
    Notification,
    NotificationData,
    NotificationPriority,
    NotificationType,
)
from mintlite.providers.base import SimulatedProvider
from mintlite.providers.channel import MutationKind
from mintlite.providers.fixtures import MockDataGenerator
from mintlite.utils.dates import utc_now


class NotificationProvider(SimulatedProvider[Notification]):
    entity_class = Notification

    def __init__(
        self,
        *args: Any,
        initial_notifications: Optional[list[Notification]] = None,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        if initial_notifications is None:
            initial_notifications = MockDataGenerator(rng=self._rng).notifications()
        for notification in initial_notifications:
            self._items[notification.id] = notification

    def snapshot(self) -> list[Notification]:
        return sorted(self._items.values(), key=lambda n: n.timestamp, reverse=True)

    async def unread_count(self) -> int:
        return sum(1 for n in await self.fetch_all() if not n.is_read)

    async def mark_as_read(self, notification_id: str) -> Notification:
        await self._simulate_network("mark_as_read")
        notification = self._require(notification_id, "mark_as_read")
        if notification.is_read:
            return notification
        return self._commit(MutationKind.UPDATED, notification.mark_as_read())

    async def mark_all_as_read(self) -> list[Notification]:
        await self._simulate_network("mark_all_as_read")
        return [
            self._commit(MutationKind.UPDATED, n.mark_as_read())
            for n in self.snapshot()
            if not n.is_read
        ]

    async def push(self, notification: Notification) -> Notification:
        """Inject an event built elsewhere."""
        await self._simulate_network("push")
        return self._commit(MutationKind.CREATED, notification)

    async def create(self, fields: dict[str, Any]) -> Notification:
        data = dict(fields)
        data.setdefault("id", self._new_id())
        return await self.push(self._build("create", **data))

    async def simulate_notification(
        self,
        notification_type: Union[NotificationType, str],
    ) -> Notification:
        """Generate and deliver the canned alert for a notification type."""
        await self._simulate_network("simulate_notification")
        try:
            notification_type = NotificationType(notification_type)
        except ValueError:
            raise self._failed(
                "simulate_notification",
                ValidationError(
                    ValidationCode.FIELD_INVALID,
                    f"Unknown notification type: {notification_type!r}",
                    field="type",
                ),
            ) from None
        notification = self._build(
            "simulate_notification",
            id=self._new_id(),
            timestamp=utc_now(),
            **self._template(notification_type),
        )
        return self._commit(MutationKind.CREATED, notification)

    def _template(self, notification_type: NotificationType) -> dict[str, Any]:
        ref = self._new_id()
        if notification_type == NotificationType.BUDGET_ALERT:
            return dict(
                type=notification_type,
                title="Budget Alert",
                message="Budget threshold exceeded",
                priority=NotificationPriority.HIGH,
                data=NotificationData(budget_id=f"budget{ref}", percentage=85.0),
            )
        if notification_type == NotificationType.TRANSACTION_ALERT:
            return dict(
                type=notification_type,
                title="Transaction Alert",
                message="Large transaction detected",
                priority=NotificationPriority.MEDIUM,
                data=NotificationData(transaction_id=f"trans{ref}", amount=Decimal("100.00")),
            )
        if notification_type == NotificationType.INVESTMENT_UPDATE:
            return dict(
                type=notification_type,
                title="Investment Update",
                message="Portfolio change detected",
                priority=NotificationPriority.LOW,
                data=NotificationData(account_id=f"inv{ref}", percentage=1.5),
            )
        if notification_type == NotificationType.GOAL_PROGRESS:
            return dict(
                type=notification_type,
                title="Goal Progress",
                message="You're closer to your savings goal",
                priority=NotificationPriority.MEDIUM,
                data=NotificationData(goal_id=f"goal{ref}", percentage=75.0),
            )
        if notification_type == NotificationType.ACCOUNT_SYNC:
            return dict(
                type=notification_type,
                title="Account Sync",
                message="Account sync completed",
                priority=NotificationPriority.LOW,
                data=NotificationData(account_id=f"acc{ref}"),
            )
        return dict(
            type=notification_type,
            title="Security Alert",
            message="Unusual account activity detected",
            priority=NotificationPriority.HIGH,
            data=NotificationData(account_id=f"acc{ref}"),
        )
