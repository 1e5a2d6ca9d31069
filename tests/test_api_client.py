import base64

import pytest
import requests

from conftest import make_result
from generation.errors import (
    CVServiceError,
    ConfigurationError,
    EditError,
    ServiceTimeoutError,
    TransportError,
    UnsupportedFileError,
)
from schemas import FilePayload, PaginationConfig
from ui import api_client
from ui.api_client import ApiBackend


class FakeResponse:
    def __init__(self, status_code, body=None, content=b""):
        self.status_code = status_code
        self._body = body
        self.content = content
        self.url = "http://svc/test"

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


@pytest.fixture
def posts(monkeypatch):
    class Recorder(list):
        reply = None

    rec = Recorder()

    def fake_post(url, timeout=None, **kwargs):
        rec.append({"url": url, **kwargs})
        if isinstance(rec.reply, Exception):
            raise rec.reply
        return rec.reply

    monkeypatch.setattr(api_client.requests, "post", fake_post)
    return rec


def test_optimize_builds_multipart(posts):
    posts.reply = FakeResponse(200, make_result().model_dump(by_alias=True))
    photo = FilePayload(filename="me.png", mime_type="image/png", data=base64.b64encode(b"img").decode())
    jd = FilePayload(filename="jd.pdf", mime_type="application/pdf", data=base64.b64encode(b"%PDF").decode())

    result = ApiBackend("http://svc/").optimize("cv text", jd, photo, "notes")

    assert result.sidebar_info.name == "Jane Doe"
    call = posts[0]
    assert call["url"] == "http://svc/cv/optimize"
    assert call["data"] == {"notes": "notes", "cv_text": "cv text"}
    assert call["files"]["photo"] == ("me.png", b"img", "image/png")
    assert call["files"]["jd_file"] == ("jd.pdf", b"%PDF", "application/pdf")


def test_refine_posts_camel_case(posts):
    posts.reply = FakeResponse(200, make_result().model_dump(by_alias=True))
    ApiBackend("http://svc").refine(make_result(photo_url="X"), "Shorter")
    body = posts[0]["json"]
    assert body["instruction"] == "Shorter"
    assert body["result"]["photoUrl"] == "X"


@pytest.mark.parametrize("body, expected", [
    ({"error": "configuration", "detail": "Set the key"}, ConfigurationError),
    ({"error": "unsupported_file", "detail": "Paste it"}, UnsupportedFileError),
    ({"error": "timeout", "detail": "Too slow"}, ServiceTimeoutError),
    ({"error": "edit", "detail": "experience index 9 out of range (0..1)"}, EditError),
    ({"detail": [{"msg": "field required"}]}, CVServiceError),
])
def test_error_bodies_map_back(posts, body, expected):
    posts.reply = FakeResponse(400, body)
    with pytest.raises(expected) as exc:
        ApiBackend("http://svc").refine(make_result(), "x")
    if "error" in body:
        assert exc.value.user_message == body["detail"]


def test_unreachable_service(posts):
    posts.reply = requests.exceptions.ConnectionError("refused")
    with pytest.raises(TransportError) as exc:
        ApiBackend("http://svc").export(make_result())
    assert "http://svc" in exc.value.user_message


def test_export_returns_bytes(posts):
    posts.reply = FakeResponse(200, content=b"%PDF-1.7")
    assert ApiBackend("http://svc").export(make_result()) == b"%PDF-1.7"


def test_export_sends_pagination_config(posts):
    posts.reply = FakeResponse(200, content=b"%PDF-1.7")
    tight = PaginationConfig(page_one_limit=40, other_page_limit=40)

    ApiBackend("http://svc").export(make_result(), tight)

    assert posts[0]["url"] == "http://svc/cv/export"
    assert posts[0]["json"]["config"]["pageOneLimit"] == 40
    assert posts[0]["json"]["config"]["charsPerLine"] == 75


def test_pagination_config_comes_from_the_service(monkeypatch):
    seen = []

    def fake_get(url, timeout=None, **kwargs):
        seen.append(url)
        return FakeResponse(200, {"pageOneLimit": 40, "otherPageLimit": 40})

    monkeypatch.setattr(api_client.requests, "get", fake_get)

    cfg = ApiBackend("http://svc").pagination_config()

    assert seen == ["http://svc/pagination/config"]
    assert cfg.page_one_limit == 40
    assert cfg.line_weight == 6
