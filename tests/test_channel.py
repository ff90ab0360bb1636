"""Tests for mutation channel delivery semantics."""

from decimal import Decimal

from mintlite.models import Account, AccountType
from mintlite.providers import Mutation, MutationChannel, MutationKind


def account_mutation(kind=MutationKind.UPDATED, balance="10.00"):
    account = Account(
        id="ACC1",
        institution_id="chase",
        account_type=AccountType.CHECKING,
        balance=Decimal(balance),
    )
    return Mutation(kind=kind, entity=account)


class TestDelivery:
    """Tests for publish ordering and fan-out."""

    def test_every_listener_once_in_subscription_order(self):
        channel = MutationChannel("test")
        received = []
        for index in range(3):
            channel.subscribe(lambda payload, index=index: received.append(index))

        delivered = channel.publish("event")

        assert delivered == 3
        assert received == [0, 1, 2]

    def test_no_listeners(self):
        assert MutationChannel().publish("event") == 0

    def test_payload_is_delivered_unchanged(self):
        channel = MutationChannel("accounts")
        received = []
        channel.subscribe(received.append)
        mutation = account_mutation()

        channel.publish(mutation)

        assert received == [mutation]
        assert received[0].entity_id == "ACC1"
        assert isinstance(received[0].entity, Account)

    def test_consecutive_publishes_arrive_in_order(self):
        channel = MutationChannel()
        received = []
        channel.subscribe(received.append)
        for value in ("a", "b", "c"):
            channel.publish(value)
        assert received == ["a", "b", "c"]


class TestSubscriptionLifecycle:
    """Tests for subscribe/unsubscribe, including during delivery."""

    def test_unsubscribe_stops_delivery(self):
        channel = MutationChannel()
        received = []
        handle = channel.subscribe(received.append)

        assert channel.unsubscribe(handle)
        channel.publish("event")

        assert received == []
        assert not handle.active
        assert channel.subscriber_count == 0

    def test_unsubscribe_is_idempotent(self):
        channel = MutationChannel()
        handle = channel.subscribe(lambda payload: None)
        assert channel.unsubscribe(handle) is True
        assert channel.unsubscribe(handle) is False
        handle.cancel()
        assert channel.subscriber_count == 0

    def test_foreign_handle_is_ignored(self):
        first, second = MutationChannel("first"), MutationChannel("second")
        handle = first.subscribe(lambda payload: None)
        assert second.unsubscribe(handle) is False
        assert handle.active
        assert first.subscriber_count == 1

    def test_subscriber_added_during_delivery_waits_for_next_publish(self):
        channel = MutationChannel()
        late = []

        def add_late_listener(payload):
            if payload == "first":
                channel.subscribe(late.append)

        channel.subscribe(add_late_listener)
        channel.publish("first")
        assert late == []

        channel.publish("second")
        assert late == ["second"]

    def test_unsubscribe_during_delivery_skips_remaining_listener(self):
        channel = MutationChannel()
        received = []
        handles = {}

        def remove_second(payload):
            received.append("first")
            channel.unsubscribe(handles["second"])

        channel.subscribe(remove_second)
        handles["second"] = channel.subscribe(lambda payload: received.append("second"))

        delivered = channel.publish("event")

        assert received == ["first"]
        assert delivered == 1

    def test_clear_cancels_every_subscription(self):
        channel = MutationChannel()
        handles = [channel.subscribe(lambda payload: None) for _ in range(2)]
        channel.clear()
        assert channel.subscriber_count == 0
        assert not any(handle.active for handle in handles)


class TestListenerFailures:
    """A failing listener must not affect the publisher or other listeners."""

    def test_failing_listener_does_not_block_others(self):
        channel = MutationChannel()
        received = []

        def broken(payload):
            raise RuntimeError("listener bug")

        channel.subscribe(received.append)
        channel.subscribe(broken)
        channel.subscribe(received.append)

        channel.publish("event")

        assert received == ["event", "event"]

    def test_failing_listener_stays_subscribed(self):
        channel = MutationChannel()
        calls = []

        def flaky(payload):
            calls.append(payload)
            raise ValueError("still broken")

        channel.subscribe(flaky)
        channel.publish(1)
        channel.publish(2)

        assert calls == [1, 2]
