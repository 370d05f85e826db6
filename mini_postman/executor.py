"""
mini_postman/executor.py

Runs a RequestSpec over HTTP and captures the outcome as a ResponseResult.
Every failure, including an empty URL, comes back on ResponseResult.error;
execute never raises.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from datetime import timedelta

import requests
from requests.structures import CaseInsensitiveDict

from .config import DEFAULT_CONTENT_TYPE, DEFAULT_TIMEOUT, Settings
from .models import HeaderEntry, RequestSpec, ResponseResult

logger = logging.getLogger(__name__)

URL_REQUIRED = "URL is required"
BODY_READ_FAILED = "Failed to read response body: "


def timeout_message(timeout: float) -> str:
    return f"Request timed out after {timeout:g}s"


def normalize_url(url: str) -> str:
    if url.startswith("http://") or url.startswith("https://"):
        return url
    return "http://" + url


def prepare_headers(headers: list[HeaderEntry], has_body: bool) -> CaseInsensitiveDict:
    """
    Build the outgoing header set.
    Only enabled rows with a key are sent, and a later row replaces an earlier
    one with the same key. A request with a body and no Content-Type gets JSON.
    """
    out = CaseInsensitiveDict()
    for h in headers:
        if h.enabled and h.key:
            out.pop(h.key, None)
            out[h.key] = h.value
    if has_body and "Content-Type" not in out:
        out["Content-Type"] = DEFAULT_CONTENT_TYPE
    return out


def _status_line(resp: requests.Response) -> str:
    return f"{resp.status_code} {resp.reason}" if resp.reason else str(resp.status_code)


def _charset(content_type: str) -> str | None:
    for param in content_type.split(";")[1:]:
        name, _, value = param.partition("=")
        if name.strip().lower() == "charset":
            return value.strip().strip("\"'") or None
    return None


def decode_body(content: bytes, content_type: str = "") -> str:
    """
    Decode a response body.
    A charset declared in Content-Type wins; otherwise the bytes are read as
    UTF-8, with invalid sequences replaced.
    """
    charset = _charset(content_type or "")
    if charset:
        try:
            return content.decode(charset, errors="replace")
        except LookupError:
            logger.debug("Unknown charset %r, decoding as utf-8", charset)
    return content.decode("utf-8", errors="replace")


class RequestExecutor:
    """
    Stateless HTTP runner. Each call opens its own session, with no shared
    connection pool or cookie jar, so one executor can serve concurrent callers.

    The timeout bounds the whole call, body included. requests only bounds each
    socket read, so the send runs on a worker thread and execute stops waiting
    once the deadline passes.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, verify_ssl: bool = True,
                 follow_redirects: bool = True):
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.follow_redirects = follow_redirects

    @classmethod
    def from_settings(cls, settings: Settings) -> "RequestExecutor":
        return cls(timeout=settings.timeout, verify_ssl=settings.verify_ssl,
                   follow_redirects=settings.follow_redirects)

    def __call__(self, spec: RequestSpec) -> ResponseResult: return self.execute(spec)

    def execute(self, spec: RequestSpec) -> ResponseResult:
        if not spec.url:
            return ResponseResult(error=URL_REQUIRED)
        method = (spec.method or "GET").strip().upper()
        url = normalize_url(spec.url)
        data = spec.body.encode("utf-8") if spec.body else None
        headers = prepare_headers(spec.headers, has_body=data is not None)

        abandoned = threading.Event()
        start = time.perf_counter()
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mini-postman")
        future = pool.submit(self._send, method, url, headers, data, start, abandoned)
        pool.shutdown(wait=False)
        try:
            result = future.result(timeout=self.timeout)
        except FutureTimeout:
            abandoned.set()
            elapsed = timedelta(seconds=time.perf_counter() - start)
            logger.debug("%s %s gave up after %.3fs", method, url, elapsed.total_seconds())
            return ResponseResult(elapsed=elapsed, error=timeout_message(self.timeout))
        logger.debug("%s %s -> %s in %.3fs", method, url, result.status_code, result.elapsed.total_seconds())
        return result

    def _send(self, method: str, url: str, headers: CaseInsensitiveDict, data: bytes | None,
              start: float, abandoned: threading.Event) -> ResponseResult:
        with requests.Session() as session:
            session.trust_env = False  # no proxy or netrc lookups from the environment
            try:
                resp = session.request(method, url, headers=headers, data=data, timeout=self.timeout,
                                       verify=self.verify_ssl, allow_redirects=self.follow_redirects,
                                       stream=True)
            except (requests.exceptions.RequestException, ValueError) as e:
                elapsed = timedelta(seconds=time.perf_counter() - start)
                logger.debug("%s %s failed after %.3fs: %s", method, url, elapsed.total_seconds(), e)
                return ResponseResult(elapsed=elapsed, error=str(e))
            return self._capture(resp, start, abandoned)

    def _capture(self, resp: requests.Response, start: float, abandoned: threading.Event) -> ResponseResult:
        elapsed = timedelta(seconds=time.perf_counter() - start)
        with resp:
            result = ResponseResult(status_code=resp.status_code, status=_status_line(resp),
                                    headers=dict(resp.headers.items()), elapsed=elapsed)
            try:
                content = self._read_body(resp, start + self.timeout, abandoned)
            except requests.exceptions.Timeout as e:
                logger.debug("%s deadline passed while reading body", resp.url)
                return ResponseResult(elapsed=timedelta(seconds=time.perf_counter() - start), error=str(e))
            except requests.exceptions.RequestException as e:
                logger.debug("%s body read failed: %s", resp.url, e)
                result.error = BODY_READ_FAILED + str(e)
                return result
            result.body = decode_body(content, resp.headers.get("Content-Type", ""))
        return result

    def _read_body(self, resp: requests.Response, deadline: float, abandoned: threading.Event) -> bytes:
        chunks = []
        for chunk in resp.iter_content(chunk_size=8192):
            chunks.append(chunk)
            if abandoned.is_set() or time.perf_counter() > deadline:
                raise requests.exceptions.Timeout(timeout_message(self.timeout))
        return b"".join(chunks)
