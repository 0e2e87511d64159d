"""Retrying HTTP execution over httpx transports."""

from .async_client import AsyncRetryableClient, AsyncTransport
from .builder import ClientBuilder
from .client import RetryableClient, Transport
from .policy import DEFAULT_RETRY_STATUSES, Classifier, default_policy, status_policy
from .request import HttpMethod, RequestDescriptor
from .validation import is_valid_absolute_http_url

__all__ = [
    # Clients
    "RetryableClient", "AsyncRetryableClient", "ClientBuilder",
    "Transport", "AsyncTransport",
    # Classifiers
    "Classifier", "default_policy", "status_policy", "DEFAULT_RETRY_STATUSES",
    # Requests
    "RequestDescriptor", "HttpMethod", "is_valid_absolute_http_url",
]
