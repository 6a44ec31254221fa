"""
Constants for IOP client library.
Parameter names and values understood by the AliExpress Open Platform gateway.
"""

# SDK identifier (sent as partner_id and written to the call log)
SDK_VERSION = "iop-sdk-python-20230701"

# System request parameters
P_APPKEY = "app_key"
P_ACCESS_TOKEN = "session"
P_TIMESTAMP = "timestamp"
P_SIGN = "sign"
P_SIGN_METHOD = "sign_method"
P_PARTNER_ID = "partner_id"
P_METHOD = "method"
P_DEBUG = "debug"
P_SIMPLIFY = "simplify"
P_FORMAT = "format"

SIGN_METHOD = "sha256"

# Response keys
P_CODE = "code"
P_TYPE = "type"
P_MESSAGE = "message"
P_REQUEST_ID = "request_id"

SUCCESS_CODE = "0"
HTTP_ERROR_CODE = "HTTP_ERROR"

# Log levels
LOG_LEVEL_DEBUG = "DEBUG"
LOG_LEVEL_INFO = "INFO"
LOG_LEVEL_ERROR = "ERROR"
LOG_LEVELS = (LOG_LEVEL_DEBUG, LOG_LEVEL_INFO, LOG_LEVEL_ERROR)

# Call log file
LOG_SEPARATOR = "^_^"
LOG_FILE_PREFIX = "iopsdk.log."

HTTP_METHODS = ("GET", "POST")

# Default configuration values
DEFAULT_CONFIG = {
    'timeout': 30,              # HTTP timeout in seconds
    'log_level': LOG_LEVEL_ERROR,
}
