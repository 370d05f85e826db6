import json

from .models import ResponseResult

_STATUS_TEXT = {
    200: "OK", 201: "Created", 204: "No Content",
    400: "Bad Request", 401: "Unauthorized", 403: "Forbidden", 404: "Not Found",
    500: "Server Error",
}


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def is_structured(text: str) -> bool:
    try:
        json.loads(text, parse_constant=_reject_constant)
        return True
    except (json.JSONDecodeError, TypeError, ValueError, RecursionError):
        return False


def format_pretty(text: str) -> str:
    """Re-indent JSON with two spaces and sorted keys; anything else comes back untouched."""
    if not text:
        return ""
    try:
        return json.dumps(json.loads(text, parse_constant=_reject_constant),
                          indent=2, sort_keys=True, ensure_ascii=False)
    except (json.JSONDecodeError, TypeError, ValueError, RecursionError):
        return text


def status_text(code: int) -> str: return _STATUS_TEXT.get(code, "")


def status_class(code: int) -> str:
    if 100 <= code < 300: return "success"
    if 300 <= code < 400: return "redirect"
    if 400 <= code < 500: return "client_error"
    return "server_error"


def format_size(n: int) -> str:
    if n < 1024: return f"{n} B"
    if n < 1024 * 1024: return f"{n / 1024:.2f} KB"
    return f"{n / (1024 * 1024):.2f} MB"


def summarize(result: ResponseResult) -> str:
    """One-line status, e.g. '200 OK | 123 ms | 1.21 KB'."""
    if result.failed:
        return f"Error: {result.error}"
    return f"{result.status} | {result.elapsed_ms} ms | {format_size(result.size_bytes)}"
