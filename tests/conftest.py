import httpx
import pytest

from kubeding.models.event import Event
from kubeding.sinks.dingtalk import DingTalkClient


@pytest.fixture
def make_event():
    def _make(
        type="Warning",
        kind="Pod",
        namespace="default",
        name="web-0",
        reason="BackOff",
        message="Back-off restarting failed container",
        last_timestamp="2024-05-01T08:30:00Z",
    ) -> Event:
        return Event.model_validate({
            "metadata": {"name": name, "namespace": namespace},
            "involvedObject": {"kind": kind, "name": name, "namespace": namespace},
            "type": type,
            "reason": reason,
            "message": message,
            "lastTimestamp": last_timestamp,
        })

    return _make


class Recorder:
    """Fake DingTalk endpoint that records every request."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body: dict = {"errcode": 0, "errmsg": "ok"}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    def client(self) -> DingTalkClient:
        return DingTalkClient(httpx.Client(transport=httpx.MockTransport(self.handler)))


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture(autouse=True)
def no_throttle(monkeypatch):
    sleeps: list[float] = []
    monkeypatch.setattr("kubeding.sinks.dingtalk.sleep", sleeps.append)
    return sleeps
