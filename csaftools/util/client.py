"""HTTP client abstraction with logging, rate limiting and extra headers."""

from __future__ import annotations

import copy
import logging
import math
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Mapping
from urllib.parse import urlencode

import requests
from requests.structures import CaseInsensitiveDict

__all__ = [
    "Client",
    "HeaderClient",
    "LimitingClient",
    "LoggingClient",
    "RateLimiter",
    "SessionClient",
]

_log = logging.getLogger(__name__)

Request = requests.Request | requests.PreparedRequest
FormData = Mapping[str, str | Iterable[str]]


class Client(ABC):
    """The operations an HTTP client offers."""

    @abstractmethod
    def do(self, request: Request) -> requests.Response:
        """Send a request and return the response."""

    @abstractmethod
    def get(self, url: str) -> requests.Response:
        """Issue a GET request."""

    @abstractmethod
    def head(self, url: str) -> requests.Response:
        """Issue a HEAD request."""

    @abstractmethod
    def post(self, url: str, content_type: str, body: Any) -> requests.Response:
        """Issue a POST request with the given content type and body."""

    @abstractmethod
    def post_form(self, url: str, data: FormData) -> requests.Response:
        """Issue a POST request with url-encoded form data."""


def _encode_form(data: FormData) -> str:
    items: list[tuple[str, str]] = []
    for key in sorted(data):
        values = data[key]
        if isinstance(values, str):
            items.append((key, values))
        else:
            items.extend((key, v) for v in values)
    return urlencode(items)


class SessionClient(Client):
    """A client backed by a requests session."""

    def __init__(self, session: requests.Session | None = None) -> None:
        self.session = session if session is not None else requests.Session()

    def do(self, request: Request) -> requests.Response:
        if isinstance(request, requests.Request):
            request = self.session.prepare_request(request)
        return self.session.send(request, allow_redirects=True)

    def get(self, url: str) -> requests.Response:
        return self.session.get(url)

    def head(self, url: str) -> requests.Response:
        return self.session.head(url, allow_redirects=True)

    def post(self, url: str, content_type: str, body: Any) -> requests.Response:
        return self.session.post(url, data=body, headers={"Content-Type": content_type})

    def post_form(self, url: str, data: FormData) -> requests.Response:
        return self.post(url, "application/x-www-form-urlencoded", _encode_form(data))


class RateLimiter:
    """A token bucket allowing rate events per second with bursts up to burst."""

    def __init__(
        self,
        rate: float,
        burst: int = 1,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if rate <= 0:
            raise ValueError("rate must be positive")
        if burst < 1:
            raise ValueError("burst must be at least 1")
        self.rate = rate
        self.burst = burst
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(burst)
        self._last = clock()
        self._lock = threading.Lock()

    def wait(self) -> None:
        """Block until the next event is allowed."""
        if math.isinf(self.rate):
            return
        with self._lock:
            now = self._clock()
            self._tokens = min(self.burst, self._tokens + (now - self._last) * self.rate)
            self._last = now
            self._tokens -= 1
            delay = -self._tokens / self.rate if self._tokens < 0 else 0.0
        if delay > 0:
            self._sleep(delay)


class LoggingClient(Client):
    """A client logging the method and URL of each call."""

    def __init__(self, client: Client, log: Callable[[str, str], None] | None = None) -> None:
        self.client = client
        self.log = log

    def _log(self, method: str, url: str) -> None:
        if self.log is not None:
            self.log(method, url)
        else:
            _log.info("[%s]: %s", method, url)

    def do(self, request: Request) -> requests.Response:
        self._log("DO", request.url)
        return self.client.do(request)

    def get(self, url: str) -> requests.Response:
        self._log("GET", url)
        return self.client.get(url)

    def head(self, url: str) -> requests.Response:
        self._log("HEAD", url)
        return self.client.head(url)

    def post(self, url: str, content_type: str, body: Any) -> requests.Response:
        self._log("POST", url)
        return self.client.post(url, content_type, body)

    def post_form(self, url: str, data: FormData) -> requests.Response:
        self._log("POST FORM", url)
        return self.client.post_form(url, data)


class LimitingClient(Client):
    """A client waiting on a rate limiter before each call."""

    def __init__(self, client: Client, limiter: RateLimiter) -> None:
        self.client = client
        self.limiter = limiter

    def do(self, request: Request) -> requests.Response:
        self.limiter.wait()
        return self.client.do(request)

    def get(self, url: str) -> requests.Response:
        self.limiter.wait()
        return self.client.get(url)

    def head(self, url: str) -> requests.Response:
        self.limiter.wait()
        return self.client.head(url)

    def post(self, url: str, content_type: str, body: Any) -> requests.Response:
        self.limiter.wait()
        return self.client.post(url, content_type, body)

    def post_form(self, url: str, data: FormData) -> requests.Response:
        self.limiter.wait()
        return self.client.post_form(url, data)


class HeaderClient(Client):
    """A client adding extra header fields to every request.

    Requests passed to do are copied, so the caller's headers stay untouched.
    """

    def __init__(self, client: Client, headers: Mapping[str, str | Iterable[str]]) -> None:
        self.client = client
        self.headers: dict[str, list[str]] = {
            key: [values] if isinstance(values, str) else list(values)
            for key, values in headers.items()
        }

    def do(self, request: Request) -> requests.Response:
        if isinstance(request, requests.PreparedRequest):
            request = request.copy()
        else:
            request = copy.copy(request)
        merged = CaseInsensitiveDict(request.headers or {})
        for key, values in self.headers.items():
            for value in values:
                existing = merged.get(key)
                merged[key] = value if existing is None else f"{existing}, {value}"
        request.headers = merged
        return self.client.do(request)

    def get(self, url: str) -> requests.Response:
        return self.do(requests.Request("GET", url))

    def head(self, url: str) -> requests.Response:
        return self.do(requests.Request("HEAD", url))

    def post(self, url: str, content_type: str, body: Any) -> requests.Response:
        return self.do(
            requests.Request("POST", url, data=body, headers={"Content-Type": content_type})
        )

    def post_form(self, url: str, data: FormData) -> requests.Response:
        return self.post(url, "application/x-www-form-urlencoded", _encode_form(data))