"""Shared fixtures for the upload pipeline tests."""

import json

import pytest
import requests

from imageupload.schemas.uploads import SecurityConfig
from imageupload.services.aws import gen_key
from imageupload.utils.files import SelectedFile

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPEG_SIGNATURE = b"\xff\xd8\xff\xe0"


class FakeClock:
    """Stands in for time.time so windows can be advanced without sleeping."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUploader:
    """Records calls; returns a generated key or raises the configured error."""

    def __init__(self, errors=None):
        self.calls = []
        self.errors = dict(errors or {})

    def upload(self, file: SelectedFile) -> str:
        self.calls.append(file.name)
        if file.name in self.errors:
            raise self.errors[file.name]
        return gen_key(file.name)


def make_response(status_code=200, json_body=None, content=b"", reason=None):
    res = requests.Response()
    res.status_code = status_code
    res.reason = reason if reason is not None else {
        200: "OK",
        403: "Forbidden",
        500: "Internal Server Error",
    }.get(status_code, "")
    res._content = json.dumps(json_body).encode() if json_body is not None else content
    res.encoding = "utf-8"
    return res


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_uploader():
    return FakeUploader()


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def security_config():
    return SecurityConfig()


@pytest.fixture
def png_bytes():
    # 1000 bytes total
    return PNG_SIGNATURE + b"\x00" * 992


@pytest.fixture
def jpeg_bytes():
    return JPEG_SIGNATURE + b"\x00" * 996


@pytest.fixture
def make_png(png_bytes):
    def _make(name: str = "a.png") -> SelectedFile:
        return SelectedFile.from_bytes(name, png_bytes, "image/png")
    return _make
