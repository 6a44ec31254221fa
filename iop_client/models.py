"""
Request and response objects for the IOP gateway.
"""

from typing import Any, Dict, Optional

from .constants import HTTP_METHODS, P_CODE, P_MESSAGE, P_REQUEST_ID, P_TYPE
from .exceptions import InvalidRequestError


class IopRequest:
    """
    A single API call: operation name, HTTP method and parameters.

    Example:
        request = IopRequest("aliexpress.logistics.redefining.getlogisticsselleraddresses")
        request.set_simplify()
        request.add_api_param("seller_address_query", "pickup")
    """

    def __init__(self, api_name: str, http_method: str = 'POST'):
        """
        Initialize request.

        Args:
            api_name: Operation name or REST path
            http_method: "GET" or "POST"

        Raises:
            InvalidRequestError: If api_name is empty or the method is unsupported
        """
        if not api_name:
            raise InvalidRequestError("api_name cannot be empty")

        method = (http_method or '').upper()
        if method not in HTTP_METHODS:
            raise InvalidRequestError(f"unsupported http method: {http_method}")

        self._api_name = api_name
        self._http_method = method
        self._api_params: Dict[str, Any] = {}
        self._file_params: Dict[str, Any] = {}
        self._simplify = "false"
        self._format = "json"

    def add_api_param(self, key: str, value: Any):
        """Add a string, number or boolean parameter."""
        self._api_params[key] = value

    def add_file_param(self, key: str, value: Any):
        """
        Add a file parameter.

        Args:
            key: Form field name
            value: bytes, binary file object or (filename, content) tuple
        """
        self._file_params[key] = value

    def set_simplify(self):
        """Ask the gateway for the simplified response shape."""
        self._simplify = "true"

    def set_format(self, value: str):
        self._format = value

    @property
    def api_name(self) -> str:
        return self._api_name

    @property
    def http_method(self) -> str:
        return self._http_method

    @property
    def api_params(self) -> Dict[str, Any]:
        return dict(self._api_params)

    @property
    def file_params(self) -> Dict[str, Any]:
        return dict(self._file_params)

    @property
    def simplify(self) -> str:
        return self._simplify

    @property
    def format(self) -> str:
        return self._format


class IopResponse:
    """Result of an API call as reported by the gateway."""

    def __init__(self):
        self.type: Optional[str] = None
        self.code: Optional[str] = None
        self.message: Optional[str] = None
        self.request_id: Optional[str] = None
        self.body: Any = None

    @classmethod
    def from_json(cls, json_obj: Any) -> 'IopResponse':
        """
        Build a response from a parsed JSON body.

        Recognised top-level keys are copied when present; the whole body is
        kept in `body`. A code of "0" means success, anything else (including
        no code at all) means failure.
        """
        response = cls()
        if isinstance(json_obj, dict):
            if P_CODE in json_obj:
                code = json_obj[P_CODE]
                response.code = None if code is None else str(code)
            if P_TYPE in json_obj:
                response.type = json_obj[P_TYPE]
            if P_MESSAGE in json_obj:
                response.message = json_obj[P_MESSAGE]
            if P_REQUEST_ID in json_obj:
                response.request_id = json_obj[P_REQUEST_ID]
        response.body = json_obj
        return response

    def __str__(self):
        return (
            f"type={self.type} code={self.code} "
            f"message={self.message} requestId={self.request_id}"
        )
