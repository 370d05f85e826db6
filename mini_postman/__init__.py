"""
Mini Postman core - compose, send and keep HTTP requests.

Usage:
    from mini_postman import RequestExecutor, RequestSpec, HeaderEntry, RequestStore

    store = RequestStore()
    executor = RequestExecutor()

    spec = RequestSpec(method="POST", url="httpbin.org/post", body='{"a": 1}',
                       headers=[HeaderEntry(key="X-Trace", value="1")])
    result = executor.execute(spec)
    if not result.failed:
        store.add_history(spec, result)
    store.save_template("echo", spec)
"""

__version__ = "0.1.0"

from .config import Settings, default_data_dir, load_settings, save_settings
from .curl import from_curl, to_curl
from .exceptions import CurlParseError, MiniPostmanError, StoreError, StoreInitError
from .executor import RequestExecutor, normalize_url, prepare_headers
from .formatting import format_pretty, format_size, is_structured, status_class, status_text, summarize
from .models import HeaderEntry, HistoryEntry, RequestSpec, ResponseResult, Template
from .store import ReadWriteLock, RequestStore

__all__ = [
    "Settings", "default_data_dir", "load_settings", "save_settings",
    "from_curl", "to_curl",
    "CurlParseError", "MiniPostmanError", "StoreError", "StoreInitError",
    "RequestExecutor", "normalize_url", "prepare_headers",
    "format_pretty", "format_size", "is_structured", "status_class", "status_text", "summarize",
    "HeaderEntry", "HistoryEntry", "RequestSpec", "ResponseResult", "Template",
    "ReadWriteLock", "RequestStore",
]
