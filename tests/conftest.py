"""
tests/conftest.py

Shared fixtures: a local echo server and a store rooted in tmp_path.
"""

import json
import socket
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from urllib.parse import urlsplit

import pytest

from mini_postman import RequestExecutor, RequestStore


class _EchoHandler(BaseHTTPRequestHandler):
    """
    Answers every method with a JSON description of the request it received.

    /multi      adds a header that appears twice
    /truncated  starts a chunked body and hangs up mid-stream
    /slow       waits a second before answering
    /drip       sends a twelve byte body one byte every 0.2s
    /plain      UTF-8 text/plain with no charset
    /latin      text/plain declared as iso-8859-1
    """
    protocol_version = "HTTP/1.1"

    def log_message(self, *args): pass

    def _handle(self):
        path = urlsplit(self.path).path
        length = self.headers.get("Content-Length")
        body = self.rfile.read(int(length)) if length else None

        if path == "/slow":
            time.sleep(1.0)
        if path == "/truncated":
            self.send_response(200)
            self.send_header("Transfer-Encoding", "chunked")
            self.end_headers()
            self.wfile.write(b"5\r\nhello\r\n")
            self.wfile.flush()
            self.close_connection = True
            return
        if path == "/drip":
            self.send_response(200)
            self.send_header("Content-Type", "text/plain")
            self.send_header("Content-Length", "12")
            self.end_headers()
            for _ in range(12):
                self.wfile.write(b"x")
                self.wfile.flush()
                time.sleep(0.2)
            return
        if path in ("/plain", "/latin"):
            charset = "iso-8859-1" if path == "/latin" else None
            text = "Zo\u00eb".encode(charset or "utf-8")
            self.send_response(200)
            self.send_header("Content-Type", f"text/plain; charset={charset}" if charset else "text/plain")
            self.send_header("Content-Length", str(len(text)))
            self.end_headers()
            self.wfile.write(text)
            return

        payload = json.dumps({
            "method": self.command,
            "path": self.path,
            "headers": list(self.headers.items()),
            "body": body.decode("utf-8") if body is not None else None,
        }).encode("utf-8")
        self.send_response(201 if path == "/created" else 200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        if path == "/multi":
            self.send_header("X-Multi", "a")
            self.send_header("X-Multi", "b")
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(payload)

    do_GET = do_POST = do_PUT = do_PATCH = do_DELETE = do_HEAD = do_OPTIONS = _handle


class _QuietServer(ThreadingHTTPServer):
    daemon_threads = True

    def handle_error(self, request, client_address):
        # clients that time out leave broken pipes behind
        pass


@pytest.fixture(scope="session")
def echo_server():
    """Base URL of a local echo server, e.g. http://127.0.0.1:54321."""
    server = _QuietServer(("127.0.0.1", 0), _EchoHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address[:2]
    yield f"http://{host}:{port}"
    server.shutdown()
    server.server_close()


@pytest.fixture
def closed_port() -> int:
    """A local port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def executor() -> RequestExecutor:
    return RequestExecutor(timeout=5)


@pytest.fixture
def store(tmp_path: Path) -> RequestStore:
    return RequestStore(tmp_path)
