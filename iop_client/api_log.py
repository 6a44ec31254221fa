"""
Append-only call log.

One line per API call, fields joined by "^_^", one file per day:

    app_key^_^sdk_version^_^2023-07-22 10:15:00^_^10.0.0.5^_^Linux 6.1^_^url^_^code^_^message
"""

import datetime
import logging
import os
import platform
import socket
import threading
from typing import Callable, Optional

from .constants import LOG_FILE_PREFIX, LOG_SEPARATOR

logger = logging.getLogger(__name__)

_write_lock = threading.Lock()


def local_ip() -> str:
    """
    Return the local IPv4 address used for outbound traffic, or 127.0.0.1.

    The default-route address is tried first, then the addresses the host
    name resolves to; loopback addresses are skipped.
    """
    try:
        # Connecting a UDP socket sends nothing; it only selects the outbound interface
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            address = sock.getsockname()[0]
        if not address.startswith("127."):
            return address
    except OSError:
        pass

    try:
        _, _, addresses = socket.gethostbyname_ex(socket.gethostname())
        for address in addresses:
            if not address.startswith("127."):
                return address
    except OSError:
        pass

    return "127.0.0.1"


def platform_type() -> str:
    """Return OS type and release, e.g. "Linux 6.1.0"."""
    return f"{platform.system()} {platform.release()}"


class ApiLogger:
    """
    Writes call records to <log_dir>/iopsdk.log.<YYYY-MM-DD>.

    Host address and OS string are looked up once, when the logger is built.

    The file name follows the clock's current date, so a long-running
    process starts a new file at midnight.
    """

    def __init__(self, log_dir: Optional[str] = None,
                 clock: Optional[Callable[[], datetime.datetime]] = None):
        """
        Initialize logger.

        Args:
            log_dir: Directory for log files (default ~/logs)
            clock: Callable returning the current local datetime
        """
        self.log_dir = log_dir or os.path.join(os.path.expanduser("~"), "logs")
        self.clock = clock or datetime.datetime.now
        self.host_ip = local_ip()
        self.platform = platform_type()

    @property
    def path(self) -> str:
        """Path of today's log file."""
        return self._path_for(self.clock())

    def _path_for(self, now: datetime.datetime) -> str:
        return os.path.join(self.log_dir, f"{LOG_FILE_PREFIX}{now.strftime('%Y-%m-%d')}")

    def format_line(self, app_key: str, sdk_version: str, request_url: str,
                    code: Optional[str], message: Optional[str],
                    now: Optional[datetime.datetime] = None) -> str:
        """Build a single log line, newline included."""
        now = now or self.clock()
        fields = [
            app_key,
            sdk_version,
            now.strftime('%Y-%m-%d %H:%M:%S'),
            self.host_ip,
            self.platform,
            request_url,
            code,
            message,
        ]
        return LOG_SEPARATOR.join('' if f is None else str(f) for f in fields) + "\n"

    def log(self, app_key: str, sdk_version: str, request_url: str,
            code: Optional[str], message: Optional[str]):
        """
        Append one record.

        Write failures are reported through the logging module and never
        propagate to the caller.
        """
        now = self.clock()
        line = self.format_line(app_key, sdk_version, request_url, code, message, now=now)
        path = self._path_for(now)

        try:
            with _write_lock:
                os.makedirs(self.log_dir, exist_ok=True)
                with open(path, 'a', encoding='utf-8') as fh:
                    fh.write(line)
        except OSError as e:
            logger.warning("Could not write call log %s: %s", path, e)
