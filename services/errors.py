"""Fetch failures raised by transports and retried by the fetcher"""

from typing import Optional


class FetchError(Exception):
    def __init__(self, message: str, url: Optional[str] = None):
        self.message = message
        self.url = url
        super().__init__(message)


class FetchTimeout(FetchError):
    """Remote did not answer in time, or the page never became ready."""


class TransportError(FetchError):
    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message, url)
