import json

import pytest
import requests

from pinmap.common.settings import Settings
from pinmap.domain.enums.error_code import ErrorCode
from pinmap.domain.errors import ConfigurationError, FileSystemError, NetworkError, PinataError
from pinmap.services.pinata.client import PinataClient


class _Resp:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text or json.dumps(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp


def _client(*responses, **kwargs):
    session = FakeSession(*responses)
    kwargs.setdefault("api_key", "key")
    kwargs.setdefault("api_secret", "secret")
    return PinataClient(session=session, **kwargs), session


def test_requires_credentials():
    with pytest.raises(ConfigurationError):
        PinataClient(api_key="only-key")


def test_pin_file_sends_multipart_and_metadata():
    client, session = _client(_Resp(200, {"IpfsHash": "QmA"}))
    assert client.pin_file("a.txt", b"hello") == "QmA"

    method, url, kw = session.calls[0]
    assert (method, url) == ("POST", "https://api.pinata.cloud/pinning/pinFileToIPFS")
    assert kw["files"] == {"file": ("a.txt", b"hello")}
    assert json.loads(kw["data"]["pinataMetadata"]) == {"name": "a.txt"}
    assert kw["headers"] == {"pinata_api_key": "key", "pinata_secret_api_key": "secret"}
    assert kw["timeout"] == 120


def test_jwt_header():
    client, session = _client(_Resp(200, {}), api_key=None, api_secret=None, jwt="tok")
    client.test_authentication()
    method, url, kw = session.calls[0]
    assert url.endswith("/data/testAuthentication")
    assert kw["headers"] == {"Authorization": "Bearer tok"}


def test_pin_files_one_part_per_file(tmp_path):
    a = tmp_path / "meta" / "a.json"
    a.parent.mkdir()
    a.write_bytes(b"A")
    client, session = _client(_Resp(200, {"IpfsHash": "QmDir"}))

    assert client.pin_files([("meta/a.json", a)], "meta") == "QmDir"
    kw = session.calls[0][2]
    assert kw["files"] == [("file", ("meta/a.json", b"A"))]
    assert json.loads(kw["data"]["pinataMetadata"]) == {"name": "meta"}


def test_pin_files_more_parts_than_open_file_limit(tmp_path):
    resource = pytest.importorskip("resource")
    soft, hard = resource.getrlimit(resource.RLIMIT_NOFILE)
    limit = 64
    parts = []
    for i in range(limit * 3):
        p = tmp_path / "meta" / f"{i}.json"
        p.parent.mkdir(exist_ok=True)
        p.write_bytes(str(i).encode())
        parts.append((f"meta/{i}.json", p))
    client, session = _client(_Resp(200, {"IpfsHash": "QmDir"}))

    resource.setrlimit(resource.RLIMIT_NOFILE, (limit, hard))
    try:
        assert client.pin_files(parts, "meta") == "QmDir"
    finally:
        resource.setrlimit(resource.RLIMIT_NOFILE, (soft, hard))

    sent = session.calls[0][2]["files"]
    assert len(sent) == limit * 3
    assert sent[-1] == ("file", (f"meta/{limit * 3 - 1}.json", str(limit * 3 - 1).encode()))


def test_pin_files_unreadable_part(tmp_path):
    client, session = _client(_Resp(200, {"IpfsHash": "QmDir"}))
    with pytest.raises(FileSystemError) as ei:
        client.pin_files([("meta/gone.json", tmp_path / "gone.json")], "meta")
    assert ei.value.code == ErrorCode.FILE_NOT_FOUND
    assert session.calls == []


def test_pin_list_query_params():
    client, session = _client(_Resp(200, {"count": 0, "rows": []}))
    assert client.pin_list(status="pinned", page_offset=1000, page_limit=1000) == {"count": 0, "rows": []}
    method, url, kw = session.calls[0]
    assert (method, url) == ("GET", "https://api.pinata.cloud/data/pinList")
    assert kw["params"] == {"status": "pinned", "pageOffset": 1000, "pageLimit": 1000}


@pytest.mark.parametrize(
    "status, code, retryable",
    [
        (401, ErrorCode.PINATA_AUTH_FAILED, False),
        (403, ErrorCode.PINATA_AUTH_FAILED, False),
        (429, ErrorCode.PINATA_RATE_LIMITED, True),
        (400, ErrorCode.PINATA_UPLOAD_FAILED, False),
        (502, ErrorCode.PINATA_UPLOAD_FAILED, True),
    ],
)
def test_http_errors_mapped(status, code, retryable):
    client, _ = _client(_Resp(status, None, text="nope"))
    with pytest.raises(PinataError) as ei:
        client.pin_file("a.txt", b"x")
    assert ei.value.code == code
    assert ei.value.retryable is retryable


def test_missing_cid_and_bad_json():
    client, _ = _client(_Resp(200, {"other": 1}), _Resp(200, None, text="<html>"))
    with pytest.raises(PinataError):
        client.pin_file("a.txt", b"x")
    with pytest.raises(PinataError):
        client.pin_list(status="all", page_offset=0, page_limit=10)


def test_transport_errors_normalised():
    client, _ = _client(requests.Timeout("slow"))
    with pytest.raises(NetworkError) as ei:
        client.test_authentication()
    assert ei.value.code == ErrorCode.NETWORK_TIMEOUT


def test_from_settings(monkeypatch):
    monkeypatch.setenv("PINATA_JWT", "tok")
    monkeypatch.setenv("PINATA_API_URL", "https://example.test/")
    client = PinataClient.from_settings(Settings())
    assert client.base_url == "https://example.test"
    assert client.jwt == "tok"
