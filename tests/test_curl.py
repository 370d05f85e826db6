"""
tests/test_curl.py

Tests for cURL import/export.
"""

import pytest

from mini_postman import CurlParseError, HeaderEntry, RequestSpec, from_curl, to_curl


class TestToCurl:

    def test_basic(self) -> None:
        spec = RequestSpec(method="post", url="example.com/api", body='{"a": 1}', headers=[
            HeaderEntry(key="X-Token", value="abc"),
            HeaderEntry(key="X-Off", value="no", enabled=False),
        ])
        assert to_curl(spec) == (
            "curl -X POST -H 'X-Token: abc' --data-raw '{\"a\": 1}' http://example.com/api"
        )

    def test_requires_url(self) -> None:
        with pytest.raises(ValueError):
            to_curl(RequestSpec())


class TestFromCurl:

    def test_full_command(self) -> None:
        spec = from_curl(
            "curl -X PUT -H 'Content-Type: text/plain' -H 'X-A:1' \\\n"
            "  -d 'hello world' https://api.test/items/1"
        )
        assert spec.method == "PUT"
        assert spec.url == "https://api.test/items/1"
        assert spec.headers == [HeaderEntry(key="Content-Type", value="text/plain"),
                                HeaderEntry(key="X-A", value="1")]
        assert spec.body == "hello world"

    def test_data_implies_post(self) -> None:
        assert from_curl("curl --data a=1 http://x").method == "POST"
        assert from_curl("curl http://x").method == "GET"

    def test_attached_method_and_ignored_flags(self) -> None:
        spec = from_curl("curl -XDELETE -s -u user:pass -A agent/1 --url http://x/y")
        assert spec.method == "DELETE"
        assert spec.url == "http://x/y"
        assert spec.headers == [HeaderEntry(key="User-Agent", value="agent/1")]

    def test_export_then_import(self) -> None:
        spec = RequestSpec(method="PATCH", url="http://h/p", body="it's",
                           headers=[HeaderEntry(key="K", value="v w")])
        assert from_curl(to_curl(spec)) == spec

    @pytest.mark.parametrize("text", ["", "wget http://x", "curl -H 'A: b'", "curl 'unterminated", "curl -X"])
    def test_rejects(self, text: str) -> None:
        with pytest.raises(CurlParseError):
            from_curl(text)
