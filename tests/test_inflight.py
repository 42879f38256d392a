import pytest

from mqttcore.inflight import InflightMap, InflightMessage

RECEIVE_MAXIMUM = 256


@pytest.fixture
def inflight():
    return InflightMap(RECEIVE_MAXIMUM)


def test_set(inflight):
    assert inflight.set(1, InflightMessage(packet=None, sent=0)) is True
    assert inflight.get_all()[1] == InflightMessage()
    assert inflight.set(1, InflightMessage(packet=None, sent=0)) is False


def test_get(inflight):
    inflight.set(2, InflightMessage(sent=5))
    msg = inflight.get(2)
    assert msg == InflightMessage(sent=5)
    assert inflight.get(9) is None


def test_get_all(inflight):
    inflight.set(2, InflightMessage())
    assert inflight.get_all() == {2: InflightMessage()}


def test_len(inflight):
    inflight.set(2, InflightMessage())
    assert len(inflight) == 1


def test_delete(inflight):
    inflight.set(3, InflightMessage())
    assert 3 in inflight.get_all()
    assert inflight.delete(3) is True
    assert inflight.get_all().get(3) is None
    assert inflight.get(3) is None
    assert inflight.delete(3) is False


def test_capacity_evicts_oldest():
    im = InflightMap(2)
    im.set(1, InflightMessage(sent=1))
    im.set(2, InflightMessage(sent=2))
    im.set(3, InflightMessage(sent=3))
    assert sorted(im.get_all()) == [2, 3]
    assert len(im) == 2


def test_capacity_replace_does_not_evict():
    im = InflightMap(2)
    im.set(1, InflightMessage(sent=1))
    im.set(2, InflightMessage(sent=2))
    assert im.set(2, InflightMessage(sent=20)) is False
    assert im.get_all() == {1: InflightMessage(sent=1), 2: InflightMessage(sent=20)}


def test_zero_capacity_is_unbounded():
    im = InflightMap(0)
    for key in range(1, 50):
        im.set(key, InflightMessage(sent=key))
    assert len(im) == 49


def test_key_out_of_range(inflight):
    with pytest.raises(ValueError):
        inflight.set(70000, InflightMessage())


def test_walk_calls_handler_with_force(inflight):
    inflight.set(1, InflightMessage(sent=1))
    inflight.set(2, InflightMessage(sent=2))
    seen = []
    inflight.walk("client", lambda cl, msg, force: seen.append((cl, msg.sent, force)))
    assert seen == [("client", 1, True), ("client", 2, True)]


def test_walk_stops_on_handler_error(inflight):
    inflight.set(1, InflightMessage(sent=1))
    inflight.set(2, InflightMessage(sent=2))
    seen = []

    def handler(cl, msg, force):
        seen.append(msg.sent)
        raise RuntimeError("fail")

    with pytest.raises(RuntimeError):
        inflight.walk(None, handler)
    assert seen == [1]