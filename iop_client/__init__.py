"""
IOP Client Library for the AliExpress Open Platform

A Python client library that builds HMAC-SHA256 signed requests for the
IOP gateway and maps its JSON replies into IopResponse objects.

Example usage:
    from iop_client import IopClient, IopRequest

    client = IopClient("https://api-sg.aliexpress.com/sync", "app-key", "app-secret")
    request = IopRequest("aliexpress.logistics.redefining.getlogisticsselleraddresses")
    request.add_api_param("seller_address_query", "pickup")
    response = client.execute(request, "access-token")
"""

from .api_log import ApiLogger
from .client import IopClient
from .exceptions import (
    IopClientError,
    ConfigurationError,
    InvalidRequestError
)
from .constants import (
    SDK_VERSION,
    LOG_LEVEL_DEBUG,
    LOG_LEVEL_INFO,
    LOG_LEVEL_ERROR,
    DEFAULT_CONFIG
)
from .models import IopRequest, IopResponse
from .signer import sign

__version__ = "1.0.0"
__all__ = [
    "ApiLogger",
    "IopClient",
    "IopRequest",
    "IopResponse",
    "IopClientError",
    "ConfigurationError",
    "InvalidRequestError",
    "SDK_VERSION",
    "LOG_LEVEL_DEBUG",
    "LOG_LEVEL_INFO",
    "LOG_LEVEL_ERROR",
    "DEFAULT_CONFIG",
    "sign"
]
