"""Reactor-style TCP networking: event loop, buffers, connections, servers and an echo server."""

__version__ = "0.1.0"