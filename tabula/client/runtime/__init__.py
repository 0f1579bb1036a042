"""Runtime layer: transport and endpoint execution."""

from .rest import EndpointSpec, HTTPClient, RESTTransport, RestRunner, Transport

__all__ = [
    "EndpointSpec",
    "HTTPClient",
    "RESTTransport",
    "RestRunner",
    "Transport",
]
