"""Readiness notification for sockets on top of :mod:`selectors`."""

from __future__ import annotations

import enum
import selectors
import socket


class Events(enum.IntFlag):
    """Kinds of readiness a socket can be watched for."""

    IN = selectors.EVENT_READ
    OUT = selectors.EVENT_WRITE


class Poller:
    """Watches a set of sockets and reports which of them are ready."""

    def __init__(self) -> None:
        self._selector: selectors.BaseSelector | None = selectors.DefaultSelector()

    def _require_open(self) -> selectors.BaseSelector:
        if self._selector is None:
            raise RuntimeError("poller is closed")
        return self._selector

    def add(self, sock: socket.socket, events: Events) -> None:
        """Start watching *sock*; raises KeyError if it is already watched."""
        self._require_open().register(sock, int(events))

    def remove(self, sock: socket.socket) -> None:
        """Stop watching *sock*; raises KeyError if it is not watched."""
        self._require_open().unregister(sock)

    def wait(
        self, max_events: int = 64, timeout: float | None = None
    ) -> list[tuple[socket.socket, Events]]:
        """Block until sockets are ready, at most *timeout* seconds.

        Returns up to *max_events* pairs of socket and ready events.
        """
        ready = self._require_open().select(timeout)
        return [(key.fileobj, Events(mask)) for key, mask in ready[:max_events]]

    def close(self) -> None:
        """Release the underlying selector."""
        if self._selector is not None:
            self._selector.close()
            self._selector = None

    def __enter__(self) -> Poller:
        return self

    def __exit__(self, *args) -> None:
        self.close()