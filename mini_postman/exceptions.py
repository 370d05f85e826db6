"""
mini_postman/exceptions.py

Exceptions raised by mini_postman.

Request failures are never raised; they come back on ResponseResult.error.
Only persistence and cURL parsing raise.
"""


class MiniPostmanError(Exception):
    """
    Base class for all mini_postman errors.
    """


class StoreError(MiniPostmanError):
    """
    Raised when a store file cannot be read or written.
    A failed write does not roll back the in-memory change.
    """


class StoreInitError(StoreError):
    """
    Raised when the data directory cannot be resolved or created.
    """


class CurlParseError(MiniPostmanError, ValueError):
    """
    Raised when text cannot be parsed as a curl command.
    """
