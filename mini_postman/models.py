"""
mini_postman/models.py

Value types shared by the executor and the store.

Contains:
- HeaderEntry: one header row, kept even when disabled
- RequestSpec: method, url, headers and body as the user wrote them
- ResponseResult: outcome of one execution (response data or an error)
- Template: named, saved RequestSpec
- HistoryEntry: one past execution
"""

import uuid
from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer


def _new_id() -> str: return str(uuid.uuid4())
def local_now() -> datetime: return datetime.now().astimezone()


class HeaderEntry(BaseModel):
    key: str = ""
    value: str = ""
    enabled: bool = True


class RequestSpec(BaseModel):
    method: str = "GET"
    url: str = ""
    headers: list[HeaderEntry] = Field(default_factory=list)
    body: str = ""

    def clone(self) -> "RequestSpec":
        return self.model_copy(deep=True)

    def enabled_headers(self) -> list[tuple[str, str]]:
        """(key, value) pairs that go on the wire, in insertion order."""
        return [(h.key, h.value) for h in self.headers if h.enabled and h.key]

    def upsert_header(self, key: str, value: str) -> HeaderEntry:
        for h in self.headers:
            if h.key.lower() == key.lower():
                h.key, h.value = key, value
                return h
        entry = HeaderEntry(key=key, value=value)
        self.headers.append(entry)
        return entry


class ResponseResult(BaseModel):
    """
    Outcome of one execution attempt.
    When error is set the other fields must not be trusted; a body read failure
    is the only case where status and headers are filled in next to an error.
    """
    model_config = ConfigDict(populate_by_name=True)

    status_code: int = 0
    status: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    body: str = ""
    elapsed: timedelta = Field(default=timedelta(0), alias="response_time")
    error: str | None = None

    @field_validator("elapsed", mode="before")
    @classmethod
    def _nanoseconds(cls, v):
        # integer durations on disk are nanoseconds
        if isinstance(v, int) and not isinstance(v, bool):
            return timedelta(microseconds=v / 1000)
        return v

    @field_validator("headers", mode="before")
    @classmethod
    def _null_headers(cls, v):
        # failed requests may be stored with "headers": null
        return {} if v is None else v

    @model_serializer(mode="wrap")
    def _omit_empty_error(self, handler):
        data = handler(self)
        if not data.get("error"):
            data.pop("error", None)
        return data

    @property
    def failed(self) -> bool: return bool(self.error)

    @property
    def ok(self) -> bool: return not self.failed and 200 <= self.status_code < 300

    @property
    def elapsed_ms(self) -> int: return self.elapsed // timedelta(milliseconds=1)

    @property
    def size_bytes(self) -> int: return len(self.body.encode("utf-8"))


class Template(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    request: RequestSpec = Field(default_factory=RequestSpec)
    created_at: datetime = Field(default_factory=local_now)
    updated_at: datetime = Field(default_factory=local_now)


class HistoryEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    request: RequestSpec
    response: ResponseResult
    timestamp: datetime = Field(default_factory=local_now)
