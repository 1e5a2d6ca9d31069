import base64

import fitz
import pytest

import config
from conftest import make_result
from export import pdf as pdf_export
from generation import pipeline
from generation.errors import CVServiceError, InputValidationError, MalformedResponseError, TransportError
from generation.session import COMPLETED, ERROR, IDLE, CVSession, LocalBackend
from parsers.inputs import from_data_uri
from schemas import EditOp, FilePayload, PaginationConfig


class FakeClient:
    def __init__(self, crop=None, optimize=None, refine=None):
        self.crop = crop
        self.optimize = optimize
        self.refine = refine
        self.log = []

    def crop_headshot(self, photo, mime_type):
        self.log.append("crop")
        if isinstance(self.crop, Exception):
            raise self.crop
        return self.crop

    def optimize_cv(self, cv, jd, notes=None):
        self.log.append("optimize")
        if isinstance(self.optimize, Exception):
            raise self.optimize
        return self.optimize

    def refine_cv(self, prior, instruction):
        self.log.append("refine")
        if isinstance(self.refine, Exception):
            raise self.refine
        return self.refine


@pytest.fixture
def photo():
    return FilePayload(filename="me.jpg", mime_type="image/jpeg", data=base64.b64encode(b"original").decode())


def test_submit_crops_then_optimizes_and_attaches_photo(photo):
    client = FakeClient(crop=(b"cropped", "image/png"), optimize=make_result())

    result = pipeline.submit(client, "cv text", "jd text", photo)

    assert client.log == ["crop", "optimize"]
    assert from_data_uri(result.photo_url) == (b"cropped", "image/png")


def test_submit_falls_back_to_original_photo_when_crop_fails(photo):
    client = FakeClient(crop=TransportError("offline"), optimize=make_result())

    result = pipeline.submit(client, "cv text", "jd text", photo)

    assert from_data_uri(result.photo_url) == (b"original", "image/jpeg")


def test_submit_falls_back_when_crop_returns_nothing(photo):
    client = FakeClient(crop=(b"", "image/png"), optimize=make_result())
    result = pipeline.submit(client, "cv text", "jd text", photo)
    assert from_data_uri(result.photo_url)[0] == b"original"


def test_submit_propagates_optimize_errors(photo):
    client = FakeClient(crop=(b"cropped", "image/png"), optimize=MalformedResponseError("bad"))
    with pytest.raises(MalformedResponseError):
        pipeline.submit(client, "cv text", "jd text", photo)


def test_refine_keeps_photo_from_prior():
    prior = make_result(photo_url="X", company_logo_url="logo")
    client = FakeClient(refine=make_result(match_score=90))

    refined = pipeline.refine(client, prior, "Emphasize IELTS")

    assert refined.photo_url == "X"
    assert refined.company_logo_url == "logo"
    assert refined.match_score == 90


def test_refine_needs_an_instruction():
    client = FakeClient(refine=make_result())
    with pytest.raises(InputValidationError):
        pipeline.refine(client, make_result(), "   ")
    assert client.log == []


def test_session_submit_then_failed_refine_keeps_result(photo):
    client = FakeClient(crop=(b"c", "image/png"), optimize=make_result(), refine=TransportError("down"))
    session = CVSession(LocalBackend(client))
    assert session.status == IDLE

    first = session.submit("cv text", "jd text", photo)
    assert session.status == COMPLETED
    assert session.result is first

    assert session.refine("Shorter please") is None
    assert session.status == ERROR
    assert session.result is first
    assert "reach the AI service" in session.error


def test_session_failed_submit_reports_message(photo):
    client = FakeClient(crop=(b"c", "image/png"), optimize=MalformedResponseError("bad"))
    session = CVSession(LocalBackend(client))

    session.submit("cv text", "jd text", photo)

    assert session.result is None
    assert session.status == ERROR
    assert session.error == MalformedResponseError.default_message


def test_session_edit_pages_and_reset(photo):
    client = FakeClient(crop=(b"c", "image/png"), optimize=make_result())
    session = CVSession(LocalBackend(client))
    session.submit("cv text", "jd text", photo)

    session.edit(EditOp(op="add_experience"))
    assert len(session.result.experience) == 3
    assert sum(len(p.entries) for p in session.pages()) == 3

    session.reset()
    assert session.result is None
    assert session.pages() == []
    assert session.status == IDLE


def test_session_refuses_refine_without_result():
    session = CVSession(LocalBackend(FakeClient()))
    with pytest.raises(RuntimeError):
        session.refine("anything")


def test_session_recovers_from_unexpected_errors(photo):
    client = FakeClient(crop=(b"c", "image/png"), optimize=AttributeError("'list' object has no attribute 'get'"))
    session = CVSession(LocalBackend(client))

    assert session.submit("cv text", "jd text", photo) is None
    assert session.status == ERROR
    assert not session.busy
    assert session.error == CVServiceError.default_message

    client.optimize = make_result()
    assert session.submit("cv text", "jd text", photo) is not None
    assert session.status == COMPLETED


def test_session_export_has_the_preview_page_count(photo, monkeypatch):
    monkeypatch.setattr(config, "EXPORT_DPI", 30)
    monkeypatch.setattr(pdf_export, "load_image", lambda url: None)
    tight = PaginationConfig(page_one_limit=40, other_page_limit=40)
    session = CVSession(LocalBackend(FakeClient(crop=(b"c", "image/png"), optimize=make_result())), tight)
    session.submit("cv text", "jd text", photo)

    preview = session.pages()
    assert len(preview) == 2
    with fitz.open(stream=session.export(), filetype="pdf") as doc:
        assert doc.page_count == len(preview)


def test_local_backend_reads_pagination_env(monkeypatch):
    monkeypatch.setenv("PAGINATION_PAGE_ONE_LIMIT", "40")
    cfg = LocalBackend(FakeClient()).pagination_config()
    assert cfg.page_one_limit == 40
    assert cfg.other_page_limit == 220


def test_session_refuses_export_without_result():
    with pytest.raises(RuntimeError):
        CVSession(LocalBackend(FakeClient())).export()
