from hand_breath.events import EventChannel


def test_listeners_called_in_subscription_order():
    channel = EventChannel("test")
    calls = []
    channel.subscribe(lambda p: calls.append(("a", p)))
    channel.subscribe(lambda p: calls.append(("b", p)))

    channel.emit(1)
    channel.emit(2)
    assert calls == [("a", 1), ("b", 1), ("a", 2), ("b", 2)]
    assert len(channel) == 2


def test_unsubscribe_stops_delivery():
    channel = EventChannel("test")
    calls = []
    unsubscribe = channel.subscribe(calls.append)
    channel.emit("x")
    unsubscribe()
    unsubscribe()  # second call is a no-op
    channel.emit("y")
    assert calls == ["x"]
    assert len(channel) == 0


def test_emit_from_listener_is_queued():
    channel = EventChannel("test")
    calls = []

    def first(payload):
        calls.append(("first", payload))
        if payload == 1:
            channel.emit(2)
            # nothing delivered yet for the nested emit
            assert ("second", 2) not in calls

    channel.subscribe(first)
    channel.subscribe(lambda p: calls.append(("second", p)))

    channel.emit(1)
    assert calls == [("first", 1), ("second", 1), ("first", 2), ("second", 2)]


def test_failing_listener_does_not_block_others(caplog):
    channel = EventChannel("test")
    calls = []

    def broken(_):
        raise RuntimeError("boom")

    channel.subscribe(broken)
    channel.subscribe(calls.append)

    channel.emit(5)
    channel.emit(6)
    assert calls == [5, 6]
    assert "boom" in caplog.text


def test_unsubscribe_during_dispatch():
    channel = EventChannel("test")
    calls = []
    holder = {}

    def once(payload):
        calls.append(("once", payload))
        holder["unsub"]()

    holder["unsub"] = channel.subscribe(once)
    channel.subscribe(lambda p: calls.append(("always", p)))

    channel.emit(1)
    channel.emit(2)
    assert calls == [("once", 1), ("always", 1), ("always", 2)]


def test_clear():
    channel = EventChannel("test")
    calls = []
    channel.subscribe(calls.append)
    channel.clear()
    channel.emit(1)
    assert calls == []
