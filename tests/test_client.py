import logging

import pytest
import requests

from csaftools.util.client import (
    Client,
    HeaderClient,
    LimitingClient,
    LoggingClient,
    RateLimiter,
    SessionClient,
)

URL = "https://example.com/.well-known/csaf/provider-metadata.json"
FORM_TYPE = "application/x-www-form-urlencoded"


class RecordingClient(Client):
    def __init__(self, events=None):
        self.calls = []
        self.events = events if events is not None else []

    def _record(self, *call):
        self.calls.append(call)
        self.events.append(("call", call[0]))
        return call

    def do(self, request):
        return self._record("do", request)

    def get(self, url):
        return self._record("get", url)

    def head(self, url):
        return self._record("head", url)

    def post(self, url, content_type, body):
        return self._record("post", url, content_type, body)

    def post_form(self, url, data):
        return self._record("post_form", url, data)


class StubSession:
    def __init__(self):
        self.calls = []

    def prepare_request(self, request):
        return ("prepared", request)

    def send(self, prepared, **kwargs):
        self.calls.append(("send", prepared, kwargs))
        return "sent"

    def get(self, url, **kwargs):
        self.calls.append(("get", url, kwargs))
        return "got"

    def head(self, url, **kwargs):
        self.calls.append(("head", url, kwargs))
        return "headed"

    def post(self, url, **kwargs):
        self.calls.append(("post", url, kwargs))
        return "posted"


def test_header_client_adds_headers_without_touching_original():
    inner = RecordingClient()
    hc = HeaderClient(inner, {"X-Extra": ["one", "two"], "Accept": "text/plain"})
    req = requests.Request("GET", URL, headers={"Accept": "application/json"})
    hc.do(req)
    sent = inner.calls[0][1]
    assert sent.headers["X-Extra"] == "one, two"
    assert sent.headers["accept"] == "application/json, text/plain"
    assert req.headers == {"Accept": "application/json"}


def test_header_client_get_and_head_build_requests():
    inner = RecordingClient()
    hc = HeaderClient(inner, {"X-Extra": "v"})
    hc.get(URL)
    hc.head(URL)
    methods = [(c[1].method, c[1].url, c[1].headers["X-Extra"]) for c in inner.calls]
    assert methods == [("GET", URL, "v"), ("HEAD", URL, "v")]


def test_header_client_post_form_encodes_sorted():
    inner = RecordingClient()
    hc = HeaderClient(inner, {})
    hc.post_form(URL, {"b": "2", "a": ["1", "x y"]})
    req = inner.calls[0][1]
    assert req.method == "POST"
    assert req.headers["Content-Type"] == FORM_TYPE
    assert req.data == "a=1&a=x+y&b=2"


def test_header_client_prepared_request_is_copied():
    inner = RecordingClient()
    hc = HeaderClient(inner, {"X-Extra": "v"})
    prepared = requests.Request("GET", URL).prepare()
    hc.do(prepared)
    assert inner.calls[0][1].headers["X-Extra"] == "v"
    assert "X-Extra" not in prepared.headers


def test_logging_client_uses_callback():
    inner = RecordingClient()
    seen = []
    lc = LoggingClient(inner, lambda method, url: seen.append((method, url)))
    lc.get(URL)
    lc.head(URL)
    lc.post(URL, "application/json", b"{}")
    lc.post_form(URL, {"a": "1"})
    lc.do(requests.Request("GET", URL))
    assert seen == [
        ("GET", URL),
        ("HEAD", URL),
        ("POST", URL),
        ("POST FORM", URL),
        ("DO", URL),
    ]
    assert [c[0] for c in inner.calls] == ["get", "head", "post", "post_form", "do"]


def test_logging_client_default_logs(caplog):
    lc = LoggingClient(RecordingClient())
    with caplog.at_level(logging.INFO, logger="csaftools.util.client"):
        lc.get(URL)
    assert f"[GET]: {URL}" in caplog.messages


def test_limiting_client_waits_before_each_call():
    events = []

    class CountingLimiter:
        def wait(self):
            events.append(("wait", None))

    inner = RecordingClient(events)
    lc = LimitingClient(inner, CountingLimiter())
    got = lc.get(URL)
    posted = lc.post(URL, "application/json", b"{}")
    assert got == ("get", URL)
    assert posted == ("post", URL, "application/json", b"{}")
    assert events == [("wait", None), ("call", "get"), ("wait", None), ("call", "post")]


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def test_rate_limiter_allows_burst_then_sleeps():
    clock = FakeClock()
    limiter = RateLimiter(2.0, 3, clock=clock, sleep=clock.sleep)
    for _ in range(3):
        limiter.wait()
    assert clock.sleeps == []
    limiter.wait()
    assert clock.sleeps == [pytest.approx(0.5)]


def test_rate_limiter_refills_over_time():
    clock = FakeClock()
    limiter = RateLimiter(1.0, 1, clock=clock, sleep=clock.sleep)
    limiter.wait()
    clock.now += 1.0
    limiter.wait()
    assert clock.sleeps == []


@pytest.mark.parametrize("rate, burst", [(0, 1), (-1, 1), (1, 0)])
def test_rate_limiter_rejects_bad_parameters(rate, burst):
    with pytest.raises(ValueError):
        RateLimiter(rate, burst)


def test_session_client_delegates():
    session = StubSession()
    sc = SessionClient(session)
    req = requests.Request("GET", URL)
    assert sc.do(req) == "sent"
    assert session.calls[0][1] == ("prepared", req)
    assert sc.get(URL) == "got"
    assert sc.head(URL) == "headed"
    assert sc.post(URL, "application/json", b"{}") == "posted"
    assert session.calls[3][2]["headers"] == {"Content-Type": "application/json"}
    assert session.calls[3][2]["data"] == b"{}"


def test_session_client_post_form():
    session = StubSession()
    SessionClient(session).post_form(URL, {"z": "1", "a": "2"})
    kwargs = session.calls[0][2]
    assert kwargs["headers"] == {"Content-Type": FORM_TYPE}
    assert kwargs["data"] == "a=2&z=1"


def test_client_is_abstract():
    with pytest.raises(TypeError):
        Client()