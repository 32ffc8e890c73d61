"""Load-testing client for the calculator server.

Each session sends a random expression in random-sized fragments over a
non-blocking connection and checks the server's answer against a local
evaluation.
"""

from __future__ import annotations

import random
import socket
import sys
from dataclasses import dataclass
from typing import TextIO

from .parser import evaluate
from .poller import Events, Poller

_OPERATORS = "+-*/"
_MAX_CHUNK = 10
_RECV_SIZE = 127
_TOLERANCE = 1e-6
_MAX_EVENTS = 64


def generate_expression(n: int, rng: random.Random | None = None) -> str:
    """Return *n* numbers from 1 to 100 joined by random operators."""
    rng = rng if rng is not None else random.Random()
    parts = [str(rng.randint(1, 100))]
    for _ in range(1, n):
        parts.append(rng.choice(_OPERATORS))
        parts.append(str(rng.randint(1, 100)))
    return " ".join(parts)


@dataclass
class ClientSession:
    """State of one connection and, once finished, its outcome."""

    expr: str
    expected: float
    fd: int = -1
    sent: int = 0
    chunk_count: int = 0
    received: bytes = b""
    result: float | None = None

    @property
    def ok(self) -> bool:
        """Whether the server's answer matches the local value."""
        return self.result is not None and abs(self.result - self.expected) < _TOLERANCE


def _send_chunk(
    sock: socket.socket, session: ClientSession, poller: Poller, rng: random.Random, out: TextIO
) -> None:
    data = session.expr.encode("ascii")
    size = rng.randint(1, min(_MAX_CHUNK, len(data) - session.sent))
    try:
        sent = sock.send(data[session.sent:session.sent + size])
    except BlockingIOError:
        return
    if sent <= 0:
        return
    session.sent += sent
    session.chunk_count += 1
    fragment = session.expr[session.sent - sent:session.sent]
    print(f"[FD={session.fd}] Sent chunk {session.chunk_count} ('{fragment}')", file=out)
    if session.sent >= len(data):
        sock.shutdown(socket.SHUT_WR)
        poller.remove(sock)
        poller.add(sock, Events.IN)


def _report(session: ClientSession, out: TextIO, err: TextIO) -> None:
    text = session.received.decode("latin-1")
    try:
        session.result = float(text)
    except ValueError:
        print(
            f"[FD={session.fd}] \u2718 Mismatch: server={text} expected={session.expected:g}",
            file=err,
        )
        return
    print(f"[FD={session.fd}] Received={session.result:g}", file=out)
    if session.ok:
        print(f"[FD={session.fd}] \u2714 OK", file=out)
    else:
        print(
            f"[FD={session.fd}] \u2718 Mismatch: server={session.result:g} "
            f"expected={session.expected:g}",
            file=err,
        )


def run_client(
    n: int,
    connections: int,
    host: str,
    port: int,
    rng: random.Random | None = None,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> list[ClientSession]:
    """Run *connections* sessions of *n* numbers each; return them as they finish."""
    rng = rng if rng is not None else random.Random()
    out = out if out is not None else sys.stdout
    err = err if err is not None else sys.stderr

    print(f"Client: n={n}, sessions={connections}, server={host}:{port}", file=out)
    print("-" * 40, file=out)

    finished: list[ClientSession] = []
    active: dict[socket.socket, ClientSession] = {}
    with Poller() as poller:
        try:
            for _ in range(connections):
                sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
                sock.setblocking(False)
                sock.connect_ex((host, port))
                expr = generate_expression(n, rng)
                session = ClientSession(expr, evaluate(expr, strict=False), fd=sock.fileno())
                active[sock] = session
                poller.add(sock, Events.IN | Events.OUT)
                print(f"[FD={session.fd}] Expr='{expr}' expected={session.expected:g}", file=out)

            while active:
                for sock, events in poller.wait(_MAX_EVENTS):
                    session = active.get(sock)
                    if session is None:
                        continue
                    done = False
                    if events & Events.OUT and session.sent < len(session.expr):
                        try:
                            _send_chunk(sock, session, poller, rng, out)
                        except OSError:
                            done = True
                    if not done and events & Events.IN:
                        try:
                            data = sock.recv(_RECV_SIZE)
                        except BlockingIOError:
                            continue
                        except OSError:
                            data = b""
                        if data:
                            session.received += data
                        else:
                            done = True
                    if done:
                        _report(session, out, err)
                        poller.remove(sock)
                        sock.close()
                        del active[sock]
                        finished.append(session)
        finally:
            for sock in active:
                sock.close()

    print("All sessions completed", file=out)
    return finished


def main(argv: list[str] | None = None) -> int:
    """Command-line entry: <n> <connections> <server_addr> <server_port>."""
    args = sys.argv[1:] if argv is None else list(argv)
    usage = "Usage: calc-client <n> <connections> <server_addr> <server_port>"
    if len(args) != 4:
        print(usage, file=sys.stderr)
        return 1
    try:
        n, connections, port = int(args[0]), int(args[1]), int(args[3])
    except ValueError:
        print(usage, file=sys.stderr)
        return 1
    run_client(n, connections, args[2], port)
    return 0


if __name__ == "__main__":
    sys.exit(main())