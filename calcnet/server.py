"""TCP server that evaluates one expression per connection.

A client sends an expression and closes its writing side; the server
answers with the value printed to six decimals, or ``ERROR``, and
closes the connection.
"""

from __future__ import annotations

import socket
import sys
import threading
from dataclasses import dataclass, field
from typing import TextIO

from .parser import ParseError, evaluate
from .poller import Events, Poller

_BACKLOG = 10
_READ_SIZE = 1024
_MAX_EVENTS = 64


def format_result(value: float) -> str:
    """Format *value* with six digits after the point."""
    return "%f" % value


def handle_expression(text: str) -> str:
    """Return the reply the server sends for the expression *text*."""
    try:
        return format_result(evaluate(text, strict=True))
    except (ParseError, ValueError, OverflowError):
        return "ERROR"


@dataclass
class _Connection:
    sock: socket.socket
    fd: int
    received: bytearray = field(default_factory=bytearray)
    response: bytes = b""
    offset: int = 0


class CalcServer:
    """Non-blocking calculator server driven by a :class:`Poller`."""

    def __init__(self, port: int, host: str = "", out: TextIO | None = None) -> None:
        self._out = out if out is not None else sys.stdout
        self._stop = threading.Event()
        self._connections: dict[socket.socket, _Connection] = {}

        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._listener.bind((host, port))
            self._listener.listen(_BACKLOG)
            self._listener.setblocking(False)
        except OSError:
            self._listener.close()
            raise
        self.server_address = self._listener.getsockname()

        self._wake_reader, self._wake_writer = socket.socketpair()
        self._wake_reader.setblocking(False)
        self._poller = Poller()
        self._poller.add(self._listener, Events.IN)
        self._poller.add(self._wake_reader, Events.IN)

    def _log(self, message: str) -> None:
        print(message, file=self._out, flush=True)

    def serve_forever(self) -> None:
        """Handle connections until :meth:`shutdown` is called."""
        while not self._stop.is_set():
            for sock, events in self._poller.wait(_MAX_EVENTS):
                if sock is self._wake_reader:
                    self._drain_wakeup()
                elif sock is self._listener:
                    self._accept()
                else:
                    conn = self._connections.get(sock)
                    if conn is None:
                        continue
                    if events & Events.IN:
                        self._on_readable(conn)
                    if events & Events.OUT and sock in self._connections:
                        self._on_writable(conn)

    def shutdown(self) -> None:
        """Ask :meth:`serve_forever` to return."""
        self._stop.set()
        try:
            self._wake_writer.send(b"\0")
        except OSError:
            pass

    def close(self) -> None:
        """Close every connection and the listening socket."""
        for conn in list(self._connections.values()):
            self._drop(conn)
        self._poller.close()
        self._listener.close()
        self._wake_reader.close()
        self._wake_writer.close()

    def _drain_wakeup(self) -> None:
        try:
            while self._wake_reader.recv(_READ_SIZE):
                pass
        except BlockingIOError:
            pass

    def _accept(self) -> None:
        try:
            client, _ = self._listener.accept()
        except BlockingIOError:
            return
        client.setblocking(False)
        conn = _Connection(client, client.fileno())
        self._connections[client] = conn
        self._poller.add(client, Events.IN)
        self._log(f"[CONN] Accepted fd={conn.fd}")

    def _drop(self, conn: _Connection) -> None:
        self._connections.pop(conn.sock, None)
        try:
            self._poller.remove(conn.sock)
        except (KeyError, RuntimeError):
            pass
        conn.sock.close()

    def _on_readable(self, conn: _Connection) -> None:
        closed = False
        while True:
            try:
                chunk = conn.sock.recv(_READ_SIZE)
            except BlockingIOError:
                break
            except OSError as exc:
                print(f"read: {exc}", file=sys.stderr)
                closed = True
                break
            if not chunk:
                closed = True
                break
            conn.received += chunk
        if not closed:
            return
        if not conn.received:
            self._drop(conn)
            return
        expression = conn.received.decode("latin-1")
        self._log(f"[CLIENT fd={conn.fd}] Expr='{expression}'")
        conn.response = handle_expression(expression).encode("ascii")
        conn.offset = 0
        self._poller.remove(conn.sock)
        self._poller.add(conn.sock, Events.OUT)

    def _on_writable(self, conn: _Connection) -> None:
        while conn.offset < len(conn.response):
            try:
                conn.offset += conn.sock.send(conn.response[conn.offset:])
            except BlockingIOError:
                break
            except OSError as exc:
                print(f"write: {exc}", file=sys.stderr)
                self._drop(conn)
                return
        if conn.offset >= len(conn.response):
            self._log(f"[CLIENT fd={conn.fd}] Response sent, closing")
            self._drop(conn)


def main(argv: list[str] | None = None) -> int:
    """Run the server on the port given as the only argument."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        print("Usage: calc-server <port>", file=sys.stderr)
        return 1
    try:
        port = int(args[0])
    except ValueError:
        print(f"Invalid port: {args[0]}", file=sys.stderr)
        return 1
    print(f"Starting server on port {port}...", flush=True)
    server = CalcServer(port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())