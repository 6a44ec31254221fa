"""
Request signing for the IOP gateway.

The signature is HMAC-SHA256 over a canonical string built from the sorted
request parameters, prefixed with the API path for REST style operations.
"""

import hashlib
import hmac
from typing import Any, Dict

from .exceptions import InvalidRequestError


def format_value(value: Any) -> str:
    """
    Render a parameter value in the textual form used on the wire.

    The same form is used for signing and for transmission, otherwise the
    gateway rejects the signature.

    Args:
        value: str, bool, int, float, Decimal or any object with a str()

    Returns:
        Textual form of the value

    Raises:
        InvalidRequestError: If value is None
    """
    if value is None:
        raise InvalidRequestError("parameter value cannot be None")
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    return str(value)


def canonical_string(api: str, parameters: Dict[str, Any]) -> str:
    """Build the string that gets signed."""
    prefix = api if '/' in api else ''
    body = ''.join(f"{key}{format_value(parameters[key])}" for key in sorted(parameters))
    return prefix + body


def sign(secret: str, api: str, parameters: Dict[str, Any]) -> str:
    """
    Generate the request signature.

    Args:
        secret: Application secret
        api: Operation name or path (e.g. "/auth/token/create")
        parameters: All parameters to be sent, without the signature itself

    Returns:
        Upper-case hex encoded HMAC-SHA256 signature
    """
    mac = hmac.new(
        secret.encode('utf-8'),
        canonical_string(api, parameters).encode('utf-8'),
        hashlib.sha256
    )
    return mac.hexdigest().upper()
