"""Tests for the SiliconFlow proxy endpoints."""

import base64
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from creative_suite.api.main import create_app
from creative_suite.api.siliconflow_router import get_forwarder
from creative_suite.config import Settings
from creative_suite.services.siliconflow import SiliconFlowForwarder
from creative_suite.suite import build_suite


class Upstream:
    """Records forwarded requests and answers with a canned response."""

    def __init__(self, response=None, error=None):
        self.requests = []
        self.response = response or httpx.Response(200, json={"ok": True})
        self.error = error

    def __call__(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response


def make_client(settings, upstream):
    app = create_app(settings, suite=build_suite(settings))
    transport = httpx.MockTransport(upstream)
    app.dependency_overrides[get_forwarder] = lambda: SiliconFlowForwarder(settings, transport=transport)
    return TestClient(app)


@pytest.fixture
def upstream():
    return Upstream()


@pytest.fixture
def client(settings, upstream):
    return make_client(settings, upstream)


def audio_body(**overrides):
    body = {"fileName": "clip.wav", "fileBase64": base64.b64encode(b"RIFF-audio").decode()}
    body.update(overrides)
    return body


# === Method and body validation ===

@pytest.mark.parametrize("path", ["/siliconflow/audio", "/siliconflow/images"])
def test_non_post_is_rejected(client, upstream, path):
    response = client.get(path)

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}
    assert upstream.requests == []


def test_audio_requires_file_fields(client, upstream):
    response = client.post("/siliconflow/audio", json={"fileName": "clip.wav"})

    assert response.status_code == 400
    assert response.json() == {"error": "fileName and fileBase64 are required"}
    assert upstream.requests == []


@pytest.mark.parametrize(
    "overrides",
    [{"fileBase64": 123}, {"fileBase64": ["AAEC"]}, {"fileName": 7}, {"fileName": {"name": "clip.wav"}}],
)
def test_audio_rejects_non_string_file_fields(client, upstream, overrides):
    response = client.post("/siliconflow/audio", json=audio_body(**overrides))

    assert response.status_code == 400
    assert response.json() == {"error": "fileName and fileBase64 are required"}
    assert upstream.requests == []


def test_non_object_body_is_rejected(client, upstream):
    response = client.post("/siliconflow/images", json=["not", "an", "object"])

    assert response.status_code == 400
    assert upstream.requests == []


def test_oversized_body_is_rejected(clean_env, upstream):
    clean_env.setenv("SILICONFLOW_API_KEY", "test-sf-key")
    clean_env.setenv("PROXY_MAX_PAYLOAD_MB", "0")
    client = make_client(Settings(), upstream)

    response = client.post("/siliconflow/audio", json=audio_body())

    assert response.status_code == 413
    assert upstream.requests == []


@pytest.mark.parametrize(
    "path,body",
    [("/siliconflow/audio", audio_body()), ("/siliconflow/images", {"model": "m", "prompt": "p"})],
)
def test_missing_server_key(clean_env, upstream, path, body):
    client = make_client(Settings(), upstream)

    response = client.post(path, json=body)

    assert response.status_code == 500
    assert response.json() == {"error": "SILICONFLOW_API_KEY not configured"}
    assert upstream.requests == []


# === Forwarding ===

def test_audio_is_forwarded_as_multipart(client, upstream):
    upstream.response = httpx.Response(
        200, content=b'{"text":"hello"}', headers={"content-type": "application/json; charset=utf-8"}
    )

    response = client.post("/siliconflow/audio", json=audio_body())

    assert response.status_code == 200
    assert response.content == b'{"text":"hello"}'
    assert response.headers["content-type"] == "application/json; charset=utf-8"

    forwarded = upstream.requests[0]
    assert str(forwarded.url) == "https://sf.test/v1/audio/transcriptions"
    assert forwarded.headers["authorization"] == "Bearer test-sf-key"
    assert forwarded.headers["content-type"].startswith("multipart/form-data")
    assert b'name="model"' in forwarded.content
    assert b"FunAudioLLM/SenseVoiceSmall" in forwarded.content
    assert b'filename="clip.wav"' in forwarded.content
    assert b"RIFF-audio" in forwarded.content


def test_audio_model_override(client, upstream):
    client.post("/siliconflow/audio", json=audio_body(model="custom/asr"))

    assert b"custom/asr" in upstream.requests[0].content
    assert b"FunAudioLLM/SenseVoiceSmall" not in upstream.requests[0].content


def test_images_body_is_forwarded_verbatim(client, upstream):
    body = {"model": "Kwai-Kolors/Kolors", "prompt": "a red kettle", "image_size": "1024x1024"}

    client.post("/siliconflow/images", json=body)

    forwarded = upstream.requests[0]
    assert str(forwarded.url) == "https://sf.test/v1/images/generations"
    assert forwarded.headers["authorization"] == "Bearer test-sf-key"
    assert forwarded.headers["content-type"] == "application/json"
    assert json.loads(forwarded.content) == body


def test_empty_images_body_is_forwarded_as_empty_object(client, upstream):
    client.post("/siliconflow/images")

    assert json.loads(upstream.requests[0].content) == {}


def test_upstream_error_is_relayed_untouched(client, upstream):
    upstream.response = httpx.Response(
        429, content=b"slow down", headers={"content-type": "text/plain"}
    )

    response = client.post("/siliconflow/images", json={"model": "m", "prompt": "p"})

    assert response.status_code == 429
    assert response.text == "slow down"
    assert response.headers["content-type"].startswith("text/plain")


def test_missing_upstream_content_type_defaults_to_json(client, upstream):
    upstream.response = httpx.Response(200, content=b'{"images":[]}')

    response = client.post("/siliconflow/images", json={"model": "m", "prompt": "p"})

    assert response.headers["content-type"] == "application/json"
    assert response.content == b'{"images":[]}'


def test_transport_failure_is_a_proxy_error(settings):
    upstream = Upstream(error=httpx.ConnectError("connection refused"))
    client = make_client(settings, upstream)

    response = client.post("/siliconflow/images", json={"model": "m", "prompt": "p"})

    assert response.status_code == 500
    assert response.json() == {"error": "proxy error", "detail": "connection refused"}
