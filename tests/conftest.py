from __future__ import annotations

import json
import threading
from typing import Any, Callable

import pytest
import requests

from untis import AppCredentials, Untis

HOST = "example.webuntis.com"
SCHOOL = "demo-school"
SCHOOL_B64 = "ZGVtby1zY2hvb2w="

SESSION = {"sessionId": "S1", "personType": 5, "personId": 42, "klasseId": 7}


class FakeResponse:
    def __init__(self, body: Any = None, status_code: int = 200, url: str = ""):
        if body is None:
            self.text = ""
        elif isinstance(body, str):
            self.text = body
        else:
            self.text = json.dumps(body)
        self.content = self.text.encode("utf-8")
        self.status_code = status_code
        self.url = url

    def json(self) -> Any:
        return json.loads(self.text)

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}", response=self)


class FakeBackend:
    """Stands in for the `requests.Session` of an `Untis` client and records every call."""

    def __init__(self):
        self.calls: list[dict[str, Any]] = []
        self.rpc: dict[str, Any] = {
            "authenticate": SESSION,
            "getLatestImportTime": 0,
            "logout": None,
        }
        self.rest: dict[str, Any] = {"token/new": "jwt-token"}
        self._lock = threading.Lock()

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        call = {"method": method, "url": url, "params": params, "json": json, "headers": dict(headers or {})}
        with self._lock:
            self.calls.append(call)

        if url.endswith("/WebUntis/jsonrpc.do"):
            answer = self.rpc[json["method"]]
            if callable(answer):
                answer = answer(json["params"])
            if isinstance(answer, Exception):
                raise answer
            if isinstance(answer, FakeResponse):
                return answer
            return FakeResponse({"jsonrpc": "2.0", "id": json["id"], "result": answer}, url=url)

        path = url.split("/WebUntis/api/", 1)[1]
        answer = self.rest.get(path)
        if callable(answer):
            answer = answer(params)
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, FakeResponse):
            return answer
        if answer is None:
            return FakeResponse({"error": "not found"}, status_code=404, url=url)
        return FakeResponse(answer, url=url)

    def close(self) -> None:
        pass

    def rpc_calls(self, method: str | None = None) -> list[dict[str, Any]]:
        return [
            call for call in self.calls
            if call["json"] is not None and (method is None or call["json"]["method"] == method)
        ]

    def rest_calls(self, path_suffix: str) -> list[dict[str, Any]]:
        return [call for call in self.calls if call["json"] is None and call["url"].endswith(path_suffix)]


class FakeTimer:
    def __init__(self, interval: float, function: Callable, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled:
            self.function(*self.args, **self.kwargs)


@pytest.fixture
def timers(monkeypatch) -> list[FakeTimer]:
    created: list[FakeTimer] = []

    def factory(*args, **kwargs):
        timer = FakeTimer(*args, **kwargs)
        created.append(timer)
        return timer

    monkeypatch.setattr(threading, "Timer", factory)
    return created


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


def make_client(backend: FakeBackend) -> Untis:
    client = Untis(creds=AppCredentials(host=HOST, school=SCHOOL, username="jdoe", password="secret"))
    client._http = backend
    return client


@pytest.fixture
def untis(backend, timers):
    client = make_client(backend)
    yield client
    client.close()
