import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest
import requests

from vcav_client import CredentialRegistry, CredentialSource, VcavClient, VcavConfig

API_HOST = "vcav.example.com"
TOKEN = "tok-123"
MEDIA_TYPE = "application/vnd.vmware.h4-v4+json;charset=UTF-8"


def make_response(status: int = 200, json_body: Any = None, headers: Optional[Dict[str, str]] = None,
                  text: Optional[str] = None) -> requests.Response:
    r = requests.Response()
    r.status_code = status
    r.encoding = "utf-8"
    if json_body is not None:
        r._content = json.dumps(json_body).encode()
        r.headers["Content-Type"] = "application/vnd.vmware.h4-v4+json;charset=UTF-8"
    elif text is not None:
        r._content = text.encode()
        r.headers["Content-Type"] = "text/plain"
    else:
        r._content = b""
    r.headers.update(headers or {})
    return r


def login_response(token: str = TOKEN) -> requests.Response:
    return make_response(200, json_body={"user": "admin", "org": "System"}, headers={"X-VCAV-Auth": token})


@dataclass
class Call:
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    data: Any = None
    kwargs: Dict[str, Any] = field(default_factory=dict)

    @property
    def json(self) -> Any:
        return json.loads(self.data) if self.data else None

    def header(self, name: str) -> Optional[str]:
        for k, v in self.headers.items():
            if k.lower() == name.lower():
                return v
        return None


class FakeSession:
    """Stands in for requests.Session: records calls and replays queued responses."""

    def __init__(self, responses=None):
        self.responses: List[Any] = list(responses or [])
        self.calls: List[Call] = []
        self.closed = False

    def queue(self, *responses) -> None:
        self.responses.extend(responses)

    def request(self, method, url, headers=None, data=None, **kwargs):
        self.calls.append(Call(method, url, dict(headers or {}), data, kwargs))
        if not self.responses:
            raise AssertionError(f"unexpected request: {method} {url}")
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)

    def delete(self, url, **kwargs):
        return self.request("DELETE", url, **kwargs)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def registry():
    return CredentialRegistry([CredentialSource(host="vcd.example.com", cookie="vcd-cookie")])


@pytest.fixture
def client(fake_session, registry):
    return VcavClient(VcavConfig(host=API_HOST), credentials=registry, session=fake_session)


@pytest.fixture
def connected_client(client, fake_session):
    fake_session.queue(login_response())
    client.login()
    fake_session.calls.clear()
    return client
