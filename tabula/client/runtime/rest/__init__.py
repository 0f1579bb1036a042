"""REST runtime abstractions."""

from .http_client import HTTPClient
from .runner import EndpointSpec, RestRunner
from .transport import RESTTransport, Transport

__all__ = [
    "EndpointSpec",
    "HTTPClient",
    "RESTTransport",
    "RestRunner",
    "Transport",
]
