"""Non-blocking TCP arithmetic-expression server, checking client and evaluator."""

__version__ = "0.1.0"
__all__ = ["parser", "poller", "server", "client"]