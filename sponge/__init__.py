"""Byte streams, stream reassembly, TCP sequence numbers, segment parsing, sockets and an event loop."""

__version__ = "0.1.0"