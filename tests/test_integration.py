"""
Integration tests for the IOP client against a local HTTP server.

The server records what it receives and answers with a canned reply chosen
by the "method" parameter, so the real requests transport is exercised.
"""

import datetime
import json
import threading
from email.parser import BytesParser
from email.policy import default as default_policy
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlparse

import pytest
import requests

from iop_client import ApiLogger, IopClient, IopRequest, LOG_LEVEL_INFO


REPLIES = {
    "ok.method": {"code": "0", "type": "ISP", "request_id": "abc123", "result": {"addresses": []}},
    "bad.token": {"code": "IllegalAccessToken", "type": "ISV", "message": "expired", "request_id": "r2"},
}


class RecordingHandler(BaseHTTPRequestHandler):
    """Answers with REPLIES[method] and records each exchange."""

    received = []

    def _reply(self, method_name):
        if method_name == "not.json":
            payload = b"<html>gateway error</html>"
            content_type = "text/html"
        elif method_name == "slow.method":
            threading.Event().wait(1.5)
            payload = b"{}"
            content_type = "application/json"
        else:
            payload = json.dumps(REPLIES.get(method_name, {})).encode("utf-8")
            content_type = "application/json"

        self.send_response(200)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def do_GET(self):
        query = {k: v[0] for k, v in parse_qs(urlparse(self.path).query).items()}
        self.received.append({"verb": "GET", "query": query, "form": {}, "files": {}})
        self._reply(query.get("method"))

    def do_POST(self):
        query = {k: v[0] for k, v in parse_qs(urlparse(self.path).query).items()}
        form, files = {}, {}
        if self.headers.get("Content-Type", "").startswith("multipart/form-data"):
            body = self.rfile.read(int(self.headers["Content-Length"]))
            head = f"Content-Type: {self.headers['Content-Type']}\r\n\r\n".encode("utf-8")
            message = BytesParser(policy=default_policy).parsebytes(head + body)
            for part in message.iter_parts():
                name = part.get_param("name", header="content-disposition")
                payload = part.get_payload(decode=True)
                if part.get_filename():
                    files[name] = payload
                else:
                    form[name] = payload.decode("utf-8")
        self.received.append({"verb": "POST", "query": query, "form": form, "files": files})
        self._reply(query.get("method") or form.get("method"))

    def log_message(self, format, *args):
        pass


class TestIntegration:
    """Integration tests with a local HTTP server."""
    APP_KEY = "33505222"
    APP_SECRET = "integration-secret"
    ACCESS_TOKEN = "token-123"

    @pytest.fixture(scope="class")
    def server_url(self):
        """Start local HTTP server for integration tests."""
        server = ThreadingHTTPServer(("127.0.0.1", 0), RecordingHandler)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()

        yield f"http://127.0.0.1:{server.server_address[1]}/sync"

        server.shutdown()
        server.server_close()

    @pytest.fixture
    def api_logger(self, tmp_path):
        return ApiLogger(log_dir=str(tmp_path), clock=lambda: datetime.datetime(2023, 7, 22, 10, 0, 0))

    @pytest.fixture
    def client(self, server_url, api_logger):
        """Create client pointed at the local server."""
        RecordingHandler.received = []
        with IopClient(server_url, self.APP_KEY, self.APP_SECRET, api_logger=api_logger) as client:
            yield client

    def read_log(self, api_logger):
        try:
            with open(api_logger.path, encoding="utf-8") as fh:
                return fh.read().splitlines()
        except FileNotFoundError:
            return []

    def test_get_request(self, client, api_logger):
        request = IopRequest("ok.method", "GET")
        request.add_api_param("page_size", 20)

        response = client.execute(request, self.ACCESS_TOKEN)

        assert response.code == "0"
        assert response.request_id == "abc123"
        assert response.body["result"] == {"addresses": []}

        received = RecordingHandler.received[-1]
        assert received["verb"] == "GET"
        assert received["query"]["page_size"] == "20"
        assert received["query"]["session"] == self.ACCESS_TOKEN
        assert len(received["query"]["sign"]) == 64
        assert self.read_log(api_logger) == []

    def test_post_request_uses_query_string(self, client):
        request = IopRequest("ok.method")
        request.add_api_param("seller_address_query", "pickup")

        client.execute(request)

        received = RecordingHandler.received[-1]
        assert received["verb"] == "POST"
        assert received["query"]["seller_address_query"] == "pickup"
        assert received["form"] == {}

    def test_file_upload(self, client):
        request = IopRequest("ok.method", "GET")
        request.add_api_param("file_name", "example.txt")
        request.add_file_param("file_bytes", ("example.txt", b"sample file content"))

        response = client.execute(request, self.ACCESS_TOKEN)

        assert response.code == "0"
        received = RecordingHandler.received[-1]
        assert received["verb"] == "POST"
        assert received["query"] == {}
        assert received["form"]["file_name"] == "example.txt"
        assert received["form"]["method"] == "ok.method"
        assert received["files"]["file_bytes"] == b"sample file content"

    def test_application_error_written_to_log(self, client, api_logger):
        response = client.execute(IopRequest("bad.token"), self.ACCESS_TOKEN)

        assert response.code == "IllegalAccessToken"
        lines = self.read_log(api_logger)
        assert len(lines) == 1
        fields = lines[0].split("^_^")
        assert fields[0] == self.APP_KEY
        assert fields[2] == "2023-07-22 10:00:00"
        assert fields[6:] == ["IllegalAccessToken", "expired"]

    def test_success_written_at_info_level(self, client, api_logger):
        client.log_level = LOG_LEVEL_INFO

        client.execute(IopRequest("ok.method"))

        lines = self.read_log(api_logger)
        assert len(lines) == 1
        assert lines[0].endswith("^_^^_^")

    def test_non_json_reply(self, client, api_logger):
        with pytest.raises(ValueError):
            client.execute(IopRequest("not.json"))

        assert self.read_log(api_logger)[0].split("^_^")[6] == "HTTP_ERROR"

    def test_timeout(self, server_url, api_logger):
        client = IopClient(server_url, self.APP_KEY, self.APP_SECRET, 0.5, api_logger=api_logger)

        with pytest.raises(requests.Timeout):
            client.execute(IopRequest("slow.method"))

        assert self.read_log(api_logger)[0].split("^_^")[6] == "HTTP_ERROR"
        client.close()

    def test_connection_refused(self, api_logger):
        client = IopClient("http://127.0.0.1:1/sync", self.APP_KEY, self.APP_SECRET, api_logger=api_logger)

        with pytest.raises(requests.ConnectionError):
            client.execute(IopRequest("ok.method"))

        assert self.read_log(api_logger)[0].split("^_^")[6] == "HTTP_ERROR"
        client.close()
