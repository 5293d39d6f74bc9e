"""In-memory stand-ins for the network side of the socket client."""

from .fake_server import HELLO, FakeServer
from .fake_socket import FakeSocket

__all__ = ["FakeServer", "FakeSocket", "HELLO"]
