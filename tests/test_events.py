from infrastructure.events import UNAUTHORIZED, EventBus


def test_publish_delivers_in_subscription_order():
    bus = EventBus()
    calls = []
    bus.subscribe(UNAUTHORIZED, lambda **p: calls.append(("first", p)))
    bus.subscribe(UNAUTHORIZED, lambda **p: calls.append(("second", p)))

    assert bus.publish(UNAUTHORIZED, path="/x") == 2
    assert calls == [("first", {"path": "/x"}), ("second", {"path": "/x"})]


def test_unsubscribe_stops_delivery_and_is_repeatable():
    bus = EventBus()
    calls = []
    unsubscribe = bus.subscribe(UNAUTHORIZED, lambda **p: calls.append(p))

    unsubscribe()
    unsubscribe()

    assert bus.publish(UNAUTHORIZED) == 0
    assert calls == []


def test_publish_without_subscribers():
    assert EventBus().publish("nobody:listens") == 0
