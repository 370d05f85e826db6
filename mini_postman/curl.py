import shlex

from .exceptions import CurlParseError
from .executor import normalize_url
from .models import HeaderEntry, RequestSpec

_DATA_FLAGS = ("-d", "--data", "--data-raw", "--data-binary", "--data-ascii")
# flags that map onto a plain header
_HEADER_FLAGS = {"-A": "User-Agent", "--user-agent": "User-Agent",
                 "-e": "Referer", "--referer": "Referer",
                 "-b": "Cookie", "--cookie": "Cookie"}
# flags with an argument we have no use for
_SKIP_WITH_ARG = ("-o", "--output", "-u", "--user", "-m", "--max-time", "--connect-timeout",
                  "-x", "--proxy", "-w", "--write-out", "--cacert", "--cert", "--key")


def to_curl(spec: RequestSpec) -> str:
    """Render the request as a copy-pasteable curl command line."""
    if not spec.url:
        raise ValueError("URL is required")
    parts = ["curl", "-X", (spec.method or "GET").upper()]
    for k, v in spec.enabled_headers():
        parts += ["-H", f"{k}: {v}"]
    if spec.body:
        parts += ["--data-raw", spec.body]
    parts.append(normalize_url(spec.url))
    return " ".join(shlex.quote(p) for p in parts)


def _arg(it, flag):
    try: return next(it)
    except StopIteration: raise CurlParseError(f"{flag} expects a value") from None


def from_curl(text: str) -> RequestSpec:
    try:
        parts = shlex.split(text.replace("\\\n", " "))
    except ValueError as e:
        raise CurlParseError(f"Could not parse cURL: {e}") from e
    if not parts or parts[0].lower() != "curl":
        raise CurlParseError("Not a curl command")
    method, url, data = None, None, []
    headers: list[HeaderEntry] = []
    it = iter(parts[1:])
    for p in it:
        if p in ("-X", "--request"): method = _arg(it, p).upper()
        elif p.startswith("-X") and len(p) > 2: method = p[2:].upper()
        elif p in ("-H", "--header"):
            h = _arg(it, p)
            if ":" in h:
                k, v = h.split(":", 1)
                headers.append(HeaderEntry(key=k.strip(), value=v.strip()))
        elif p in _HEADER_FLAGS: headers.append(HeaderEntry(key=_HEADER_FLAGS[p], value=_arg(it, p)))
        elif p in _DATA_FLAGS: data.append(_arg(it, p))
        elif p == "--url": url = _arg(it, p)
        elif p in _SKIP_WITH_ARG: _arg(it, p)
        elif p.startswith("-"): continue
        elif url is None: url = p
    if not url:
        raise CurlParseError("No URL in curl command")
    return RequestSpec(method=method or ("POST" if data else "GET"), url=url,
                       headers=headers, body="&".join(data))
