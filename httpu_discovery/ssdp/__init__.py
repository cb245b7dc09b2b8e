"""SSDP module - M-SEARCH discovery on top of the HTTPU client."""

from .description import DescriptionFetcher, DeviceDescription
from .search import (
    SSDP_ADDR,
    SSDP_HOST,
    SSDP_PORT,
    ST_ALL,
    ST_ROOT_DEVICE,
    SearchResult,
    msearch_request,
    search,
)

__all__ = [
    "DescriptionFetcher",
    "DeviceDescription",
    "SSDP_ADDR",
    "SSDP_HOST",
    "SSDP_PORT",
    "ST_ALL",
    "ST_ROOT_DEVICE",
    "SearchResult",
    "msearch_request",
    "search",
]
