import io
import socket
import threading

import pytest

from calcnet.server import CalcServer, format_result, handle_expression, main


@pytest.fixture
def running_server():
    out = io.StringIO()
    server = CalcServer(0, "127.0.0.1", out)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server, out
    server.shutdown()
    thread.join(5)
    server.close()


def _ask(server, payload: bytes) -> bytes:
    with socket.create_connection(server.server_address, timeout=5) as sock:
        if payload:
            sock.sendall(payload)
        sock.shutdown(socket.SHUT_WR)
        reply = b""
        while True:
            chunk = sock.recv(1024)
            if not chunk:
                return reply
            reply += chunk


def test_format_result_six_decimals():
    assert format_result(3.0) == "3.000000"


def test_handle_expression_value():
    assert handle_expression("2 * (3 + 4)") == "14.000000"


def test_handle_expression_matches_format():
    assert handle_expression("1.5 + 1.5") == format_result(3.0)


@pytest.mark.parametrize("text", ["1 / 0", "2 +", "abc", "(1", "1 1"])
def test_handle_expression_errors(text):
    assert handle_expression(text) == "ERROR"


def test_round_trip_over_tcp(running_server):
    server, out = running_server
    assert _ask(server, b"1 + 2") == format_result(3.0).encode()
    log = out.getvalue()
    assert "Expr='1 + 2'" in log
    assert "Response sent, closing" in log


def test_error_reply_over_tcp(running_server):
    server, _ = running_server
    assert _ask(server, b"5 / 0") == b"ERROR"


def test_fragmented_request(running_server):
    server, _ = running_server
    with socket.create_connection(server.server_address, timeout=5) as sock:
        for part in (b"2 ", b"* 2", b"1"):
            sock.sendall(part)
        sock.shutdown(socket.SHUT_WR)
        reply = b""
        while chunk := sock.recv(1024):
            reply += chunk
    assert reply == handle_expression("2 * 21").encode()


def test_empty_request_gets_no_reply(running_server):
    server, _ = running_server
    assert _ask(server, b"") == b""


def test_many_clients(running_server):
    server, _ = running_server
    replies = [_ask(server, f"{k} * 2".encode()) for k in range(5)]
    assert replies == [format_result(k * 2.0).encode() for k in range(5)]


def test_main_usage_error():
    assert main([]) == 1
    assert main(["1", "2"]) == 1


def test_main_bad_port():
    assert main(["not-a-port"]) == 1