"""
IOP client for the AliExpress Open Platform gateway.

This module builds signed requests, sends them and maps the JSON reply
into an IopResponse. Every call may leave a record in the call log.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional

import requests

from .api_log import ApiLogger
from .constants import (
    DEFAULT_CONFIG,
    HTTP_ERROR_CODE,
    LOG_LEVEL_DEBUG,
    LOG_LEVEL_INFO,
    LOG_LEVELS,
    P_ACCESS_TOKEN,
    P_APPKEY,
    P_DEBUG,
    P_FORMAT,
    P_METHOD,
    P_PARTNER_ID,
    P_SIGN,
    P_SIGN_METHOD,
    P_SIMPLIFY,
    P_TIMESTAMP,
    SDK_VERSION,
    SIGN_METHOD,
    SUCCESS_CODE
)
from .exceptions import ConfigurationError
from .models import IopRequest, IopResponse
from .signer import format_value, sign

logger = logging.getLogger(__name__)


class IopClient:
    """
    Client for making signed requests to the IOP gateway.

    Example:
        client = IopClient("https://api-sg.aliexpress.com/sync", "app-key", "app-secret")
        response = client.execute(request, access_token)
        if response.code == "0":
            ...
    """

    def __init__(self, server_url: str, app_key: str, app_secret: str,
                 timeout: Optional[float] = None, *,
                 api_logger: Optional[ApiLogger] = None,
                 clock: Optional[Callable[[], float]] = None,
                 session: Optional[requests.Session] = None,
                 **config):
        """
        Initialize IOP client.

        Args:
            server_url: Gateway URL, e.g. https://api-sg.aliexpress.com/sync
            app_key: Application key
            app_secret: Application secret (signing key, never sent)
            timeout: HTTP timeout in seconds (default 30)
            api_logger: Call log writer (default writes to ~/logs)
            clock: Callable returning epoch seconds (default time.time)
            session: requests.Session to use (default creates one)
            **config: Configuration options (log_level)
        """
        self.server_url = server_url
        self.app_key = app_key
        self.app_secret = app_secret

        # Merge default config with user overrides
        self.config = {**DEFAULT_CONFIG, **config}
        if timeout is not None:
            self.config['timeout'] = timeout

        self._validate_config()

        self.log_level = self.config['log_level']
        self.api_logger = api_logger or ApiLogger()
        self.clock = clock or time.time
        self._owns_session = session is None
        self.session = session or requests.Session()

    def _validate_config(self):
        """Validate client configuration."""
        if not self.server_url:
            raise ConfigurationError("server_url cannot be empty")

        if not self.app_key:
            raise ConfigurationError("app_key cannot be empty")

        if not self.app_secret:
            raise ConfigurationError("app_secret cannot be empty")

        if self.config['timeout'] <= 0:
            raise ConfigurationError("timeout must be positive")

        if self.config['log_level'] not in LOG_LEVELS:
            raise ConfigurationError(f"log_level must be one of {', '.join(LOG_LEVELS)}")

    @property
    def timeout_ms(self) -> int:
        """Configured timeout in milliseconds."""
        return int(self.config['timeout'] * 1000)

    def build_parameters(self, request: IopRequest, access_token: Optional[str] = None) -> Dict[str, str]:
        """
        Build the full, signed parameter set for a request.

        System parameters come first; request parameters are laid over them,
        so a request parameter with a reserved name wins. The signature is
        computed over the merged set and added last.

        Args:
            request: Request to send
            access_token: Seller access token, sent as "session" when given

        Returns:
            Ordered mapping of parameter name to textual value
        """
        sys_parameters = {
            P_APPKEY: self.app_key,
            P_SIGN_METHOD: SIGN_METHOD,
            P_TIMESTAMP: str(int(self.clock() * 1000)),
            P_PARTNER_ID: SDK_VERSION,
            P_METHOD: request.api_name,
            P_SIMPLIFY: request.simplify,
            P_FORMAT: request.format,
        }

        if self.log_level == LOG_LEVEL_DEBUG:
            sys_parameters[P_DEBUG] = 'true'

        if access_token:
            sys_parameters[P_ACCESS_TOKEN] = access_token

        app_parameters = {key: format_value(value) for key, value in request.api_params.items()}
        parameters = {**sys_parameters, **app_parameters}

        parameters[P_SIGN] = sign(self.app_secret, request.api_name, parameters)
        return parameters

    def build_url(self, parameters: Dict[str, str]) -> str:
        """Render the request as a single URL for the call log (not encoded)."""
        query = '&'.join(f"{key}={value}" for key, value in parameters.items())
        return f"{self.server_url}?{query}"

    def _send(self, request: IopRequest, parameters: Dict[str, str]) -> requests.Response:
        """Perform the HTTP exchange, choosing the transport from the request shape."""
        kwargs: Dict[str, Any] = {'timeout': self.config['timeout']}

        file_params = request.file_params
        if file_params:
            method = 'POST'
            kwargs['data'] = parameters
            kwargs['files'] = file_params
        elif request.http_method == 'POST':
            method = 'POST'
            kwargs['params'] = parameters
        else:
            method = 'GET'
            kwargs['params'] = parameters

        logger.debug(
            "Calling %s via %s%s", request.api_name, method, " (multipart)" if file_params else ""
        )
        return self.session.request(method, self.server_url, **kwargs)

    def execute(self, request: IopRequest, access_token: Optional[str] = None) -> IopResponse:
        """
        Execute an API request.

        Args:
            request: Request to send
            access_token: Seller access token (optional)

        Returns:
            IopResponse; check `code` for application level success ("0")

        Raises:
            requests.RequestException: If the HTTP exchange fails
            ValueError: If the reply body is not JSON
            Exception: Any other failure during the exchange, re-raised unchanged
        """
        parameters = self.build_parameters(request, access_token)
        full_url = self.build_url(parameters)

        try:
            http_response = self._send(request, parameters)
            json_obj = http_response.json()
        except Exception as e:
            self.api_logger.log(self.app_key, SDK_VERSION, full_url, HTTP_ERROR_CODE, str(e))
            raise

        response = IopResponse.from_json(json_obj)

        if response.code is not None and response.code != SUCCESS_CODE:
            self.api_logger.log(self.app_key, SDK_VERSION, full_url, response.code, response.message)
        elif self.log_level in (LOG_LEVEL_DEBUG, LOG_LEVEL_INFO):
            self.api_logger.log(self.app_key, SDK_VERSION, full_url, "", "")

        return response

    def close(self):
        """Close HTTP session if this client created it."""
        if self.session and self._owns_session:
            self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
