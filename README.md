# calcnet

A small TCP calculator: a server that evaluates arithmetic expressions sent
over plain TCP connections, and a client that opens many concurrent sessions
to check the server's answers.

Both sides use non-blocking sockets driven by a single readiness poller
(`calcnet.poller.Poller`, built on the standard `selectors` module).

## Protocol

1. The client connects and sends an expression such as `12 + 7 * (3 - 1)`,
   possibly split across several writes.
2. The client shuts down its write side to mark the end of the expression.
3. The server evaluates the expression and replies with the result written
   with six digits after the decimal point (for example `26.000000`). If the
   expression is malformed or divides by zero, it replies `ERROR`.
4. The server then closes the connection. A connection closed without
   sending anything is closed without a reply.

Expressions support `+`, `-`, `*`, `/`, parentheses, decimal numbers and
spaces (only the space character counts as whitespace). `*` and `/` bind
tighter than `+` and `-`. There is no unary minus.

## Installation

```
pip install .
```

## Running the server

```
calc-server 5555
```

The server listens on all interfaces on the given port and runs until it is
interrupted with Ctrl-C. It logs each accepted connection, each received
expression, and each reply it sends to standard output.

## Running the client

```
calc-client <n> <connections> <server_addr> <server_port>
```

For example:

```
calc-client 5 20 127.0.0.1 5555
```

This opens 20 sessions. Each session sends a random expression of 5 numbers
between 1 and 100, joined by random operators, in chunks of 1 to 10 bytes,
and compares the server's answer with its own local evaluation. Matches are
reported as `OK` on standard output; mismatches, including an `ERROR`
reply, go to standard error.

## Library use

```python
from calcnet.parser import evaluate, ParseError
from calcnet.server import handle_expression

evaluate("2 + 3 * 4")          # 14.0
handle_expression("1 / 0")     # "ERROR"

try:
    evaluate("2 +", strict=True)
except ParseError as exc:
    print(exc)                 # Number expected
```

`evaluate(text, strict=True)` and `ExprParser(text, strict).parse()` raise
`ParseError` for a missing number, a missing `)`, division by zero or
trailing characters. With `strict=False` the parser stops at the first
character it does not know, does not check for `)`, and divides by zero as
IEEE floats do (giving `inf` or `nan`).

`calcnet.server.CalcServer(port, host="", out=None)` can be run inside a
program. Its `server_address` attribute holds the bound address (useful with
port 0). Call `serve_forever()` to run it, `shutdown()` from another thread
to stop the loop, and `close()` to close its sockets.

`calcnet.client.run_client(n, connections, host, port, rng=None, out=None,
err=None)` runs the client sessions and returns the finished
`ClientSession` objects; each holds the expression, the expected value, the
server's `result` (or `None` if the reply was not a number) and an `ok`
flag. `generate_expression(n, rng=None)` builds one random expression.

## Limits

The server command takes only a port; the listening address can be chosen
only through `CalcServer`. The client does not retry failed connections:
a session whose connection fails is reported as a mismatch.

## Tests

```
pip install .[test]
pytest
```