import socket

import pytest

from calcnet.poller import Events, Poller


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    yield a, b
    a.close()
    b.close()


def test_readable_after_write(pair):
    a, b = pair
    with Poller() as poller:
        poller.add(a, Events.IN)
        b.sendall(b"x")
        ready = poller.wait(timeout=1)
    assert ready == [(a, Events.IN)]


def test_not_readable_without_data(pair):
    a, _ = pair
    with Poller() as poller:
        poller.add(a, Events.IN)
        assert poller.wait(timeout=0) == []


def test_writable_immediately(pair):
    a, _ = pair
    with Poller() as poller:
        poller.add(a, Events.IN | Events.OUT)
        ready = poller.wait(timeout=1)
    assert ready == [(a, Events.OUT)]


def test_remove_stops_reports(pair):
    a, _ = pair
    with Poller() as poller:
        poller.add(a, Events.OUT)
        poller.remove(a)
        assert poller.wait(timeout=0) == []


def test_remove_unknown_raises(pair):
    a, _ = pair
    with Poller() as poller:
        with pytest.raises(KeyError):
            poller.remove(a)


def test_add_twice_raises(pair):
    a, _ = pair
    with Poller() as poller:
        poller.add(a, Events.IN)
        with pytest.raises(KeyError):
            poller.add(a, Events.OUT)


def test_max_events_limits_result(pair):
    a, b = pair
    with Poller() as poller:
        poller.add(a, Events.OUT)
        poller.add(b, Events.OUT)
        assert len(poller.wait(max_events=1, timeout=1)) == 1
        assert len(poller.wait(max_events=64, timeout=1)) == 2


def test_closed_poller_rejects_use(pair):
    a, _ = pair
    poller = Poller()
    poller.close()
    with pytest.raises(RuntimeError):
        poller.add(a, Events.IN)
    with pytest.raises(RuntimeError):
        poller.wait(timeout=0)


def test_hangup_reported_as_readable(pair):
    a, b = pair
    with Poller() as poller:
        poller.add(a, Events.IN)
        b.shutdown(socket.SHUT_WR)
        ready = poller.wait(timeout=1)
    assert ready == [(a, Events.IN)]