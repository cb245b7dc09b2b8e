"""Discovery module - HTTPU request/response exchange."""

from .client import HTTPUClient
from .deadline import Deadline
from .policy import (
    ExchangePolicy,
    RetryPolicy,
    default_exchange_policy,
    default_retry_policy,
    no_retry_policy,
)

__all__ = [
    "HTTPUClient",
    "Deadline",
    "ExchangePolicy",
    "RetryPolicy",
    "default_exchange_policy",
    "default_retry_policy",
    "no_retry_policy",
]
