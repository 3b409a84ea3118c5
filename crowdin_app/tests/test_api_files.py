"""Tests for ``POST /api/file/process``."""

from __future__ import annotations

import base64
import json
from unittest.mock import patch

import pytest

from crowdin_app.tests.conftest import make_jwt, mock_async_client, mock_http_response

URL = "/api/file/process"


def _b64_json(value) -> str:
    return base64.b64encode(json.dumps(value).encode("utf-8")).decode("ascii")


def _decode(value: str) -> str:
    return base64.b64decode(value).decode("utf-8")


class TestAuth:
    @pytest.mark.asyncio
    async def test_missing_token(self, client):
        resp = await client.post(URL, json={"jobType": "parse-file"})

        assert resp.status_code == 401
        assert resp.json()["error"]["message"] == "User is not authorized. Missing or invalid token."

    @pytest.mark.asyncio
    async def test_bad_signature(self, client):
        headers = {"Authorization": f"Bearer {make_jwt(secret='wrong')}"}
        resp = await client.post(URL, json={"jobType": "parse-file"}, headers=headers)

        assert resp.status_code == 403
        assert resp.json()["error"]["message"].startswith("Token error:")

    @pytest.mark.asyncio
    async def test_payload_without_context(self, client):
        headers = {"Authorization": f"Bearer {make_jwt(organization_id=None)}"}
        resp = await client.post(URL, json={"jobType": "parse-file"}, headers=headers)

        assert resp.status_code == 403
        assert resp.json()["error"]["message"] == "Invalid token payload."

    @pytest.mark.asyncio
    async def test_token_in_query(self, client):
        resp = await client.post(f"{URL}?jwtToken={make_jwt()}", json={})

        assert resp.status_code == 400


class TestValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body,message",
        [
            ({}, "Missing jobType parameter in request"),
            ({"jobType": "compile-file"}, "Unknown job type: compile-file"),
            ({"jobType": 3}, "Unknown job type: unknown type"),
            ({"jobType": "x", "file": {"name": 1}}, "Unknown job type: x"),
            ({"file": {"name": 1}}, "Missing jobType parameter in request"),
            ({"jobType": "parse-file"}, "File is missing in request"),
            ({"jobType": "parse-file", "file": {"content": "e30="}}, "File name is missing"),
            ({"jobType": "parse-file", "file": {"name": "a.json"}}, "File content or URL is missing"),
            (
                {"jobType": "build-file", "file": {"name": "a.json", "content": "e30="}},
                "For build-file, you need to provide strings or stringsUrl",
            ),
        ],
    )
    async def test_rejects_with_message(self, client, auth_headers, body, message):
        with patch("httpx.AsyncClient") as MockClient:
            resp = await client.post(URL, json=body, headers=auth_headers)

        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == message
        MockClient.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_json(self, client, auth_headers):
        resp = await client.post(
            URL, content=b"{oops", headers={**auth_headers, "Content-Type": "application/json"}
        )

        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Invalid JSON body"

    @pytest.mark.asyncio
    async def test_stack_included_outside_production(self, client, auth_headers):
        resp = await client.post(URL, json={}, headers=auth_headers)

        assert "stack" in resp.json()["error"]


class TestParseFile:
    @pytest.mark.asyncio
    async def test_inline_parse(self, client, auth_headers):
        body = {
            "jobType": "parse-file",
            "file": {"name": "messages.json", "content": _b64_json({"hello": "Hello", "count": "5"})},
            "targetLanguages": [{"id": "de"}],
        }
        resp = await client.post(URL, json=body, headers=auth_headers)

        assert resp.status_code == 200
        assert resp.headers["cache-control"] == "no-cache, no-store, must-revalidate"
        data = resp.json()["data"]
        assert [s["identifier"] for s in data["strings"]] == ["hello", "count"]
        assert [s["previewId"] for s in data["strings"]] == [0, 1]
        assert data["strings"][0]["translations"] == {"de": {"text": "Hello"}}

        preview = _decode(data["preview"])
        assert "File Preview: messages.json" in preview
        assert '<li id="string-0"><strong>hello:</strong> Hello</li>' in preview
        assert '<li id="string-1"><strong>count:</strong> 5</li>' in preview

    @pytest.mark.asyncio
    async def test_preview_escapes_html(self, client, auth_headers):
        body = {
            "jobType": "parse-file",
            "file": {"name": "x.json", "content": _b64_json({"tag": "<b>bold</b>"})},
        }
        resp = await client.post(URL, json=body, headers=auth_headers)

        preview = _decode(resp.json()["data"]["preview"])
        assert "&lt;b&gt;bold&lt;/b&gt;" in preview
        assert "<b>bold</b>" not in preview

    @pytest.mark.asyncio
    async def test_empty_document_preview(self, client, auth_headers):
        body = {"jobType": "parse-file", "file": {"name": "x.json", "content": _b64_json({"n": 1})}}
        resp = await client.post(URL, json=body, headers=auth_headers)

        data = resp.json()["data"]
        assert data["strings"] == []
        assert "No strings to display." in _decode(data["preview"])

    @pytest.mark.asyncio
    async def test_large_result_is_uploaded(self, app, client, auth_headers, settings):
        app.state.externalizer.max_inline_bytes = 10
        body = {
            "jobType": "parse-file",
            "file": {"name": "messages.json", "content": _b64_json({"hello": "Hello"})},
        }
        resp = await client.post(URL, json=body, headers=auth_headers)

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert set(data) == {"stringsUrl", "previewUrl"}
        assert data["stringsUrl"].startswith("http://test/blobs/parsed_files/messages_strings-")
        assert data["previewUrl"].startswith("http://test/blobs/parsed_files/messages_preview-")

        stored = list((settings.blob_dir / "parsed_files").glob("messages_strings-*.json"))
        assert len(stored) == 1
        assert json.loads(stored[0].read_text(encoding="utf-8"))[0]["identifier"] == "hello"

    @pytest.mark.asyncio
    async def test_content_url_failure(self, client, auth_headers):
        body = {
            "jobType": "parse-file",
            "file": {"name": "a.json", "contentUrl": "https://files.example.test/a.json"},
        }
        mock_client = mock_async_client("get", mock_http_response(404))

        with patch("httpx.AsyncClient", return_value=mock_client):
            resp = await client.post(URL, json=body, headers=auth_headers)

        assert resp.status_code == 502
        assert "https://files.example.test/a.json" in resp.json()["error"]["message"]

    @pytest.mark.asyncio
    async def test_undecodable_content(self, client, auth_headers):
        body = {"jobType": "parse-file", "file": {"name": "a.json", "content": "bm90IGpzb24="}}
        resp = await client.post(URL, json=body, headers=auth_headers)

        assert resp.status_code == 500
        assert resp.json()["error"]["message"].startswith("Failed to parse file content")


class TestBuildFile:
    @pytest.mark.asyncio
    async def test_inline_build(self, client, auth_headers):
        body = {
            "jobType": "build-file",
            "file": {"name": "messages.json", "content": _b64_json({"greeting": "Hi", "n": 2})},
            "targetLanguages": [{"id": "de"}],
            "strings": [{"identifier": "greeting", "translations": {"de": {"text": "Hallo"}}}],
        }
        resp = await client.post(URL, json=body, headers=auth_headers)

        assert resp.status_code == 200
        content = _decode(resp.json()["data"]["content"])
        assert json.loads(content) == {"greeting": "Hallo", "n": 2}
        assert content == json.dumps({"greeting": "Hallo", "n": 2}, indent=2)

    @pytest.mark.asyncio
    async def test_null_translation_fields_fall_back(self, client, auth_headers):
        body = {
            "jobType": "build-file",
            "file": {
                "name": "messages.json",
                "content": _b64_json({"bye": "Bye", "greeting": "Hi", "title": "Title"}),
            },
            "targetLanguages": [{"id": "de"}],
            "strings": [
                {"identifier": "bye", "translations": None},
                {"identifier": "title", "translations": {"de": {"text": None}}},
                {"identifier": "greeting", "translations": {"de": {"text": "Hallo"}}},
            ],
        }
        resp = await client.post(URL, json=body, headers=auth_headers)

        assert resp.status_code == 200
        assert json.loads(_decode(resp.json()["data"]["content"])) == {
            "bye": "Bye",
            "greeting": "Hallo",
            "title": "Title",
        }

    @pytest.mark.asyncio
    async def test_untranslated_language_falls_back(self, client, auth_headers):
        body = {
            "jobType": "build-file",
            "file": {"name": "messages.json", "content": _b64_json({"greeting": "Hi"})},
            "targetLanguages": [{"id": "fr"}],
            "strings": [{"identifier": "greeting", "translations": {"de": {"text": "Hallo"}}}],
        }
        resp = await client.post(URL, json=body, headers=auth_headers)

        assert json.loads(_decode(resp.json()["data"]["content"])) == {"greeting": "Hi"}

    @pytest.mark.asyncio
    async def test_strings_url(self, client, auth_headers):
        strings = json.dumps(
            [{"identifier": "greeting", "translations": {"de": {"text": "Hallo"}}}]
        ).encode("utf-8")
        body = {
            "jobType": "build-file",
            "file": {"name": "messages.json", "content": _b64_json({"greeting": "Hi"})},
            "targetLanguages": [{"id": "de"}],
            "stringsUrl": "https://files.example.test/strings.json",
        }
        mock_client = mock_async_client("get", mock_http_response(200, content=strings))

        with patch("httpx.AsyncClient", return_value=mock_client):
            resp = await client.post(URL, json=body, headers=auth_headers)

        assert resp.status_code == 200
        assert json.loads(_decode(resp.json()["data"]["content"])) == {"greeting": "Hallo"}

    @pytest.mark.asyncio
    async def test_missing_target_language(self, client, auth_headers):
        body = {
            "jobType": "build-file",
            "file": {"name": "messages.json", "content": _b64_json({"greeting": "Hi"})},
            "strings": [],
        }
        resp = await client.post(URL, json=body, headers=auth_headers)

        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Target language ID is missing"

    @pytest.mark.asyncio
    async def test_empty_document(self, client, auth_headers):
        body = {
            "jobType": "build-file",
            "file": {"name": "messages.json", "content": _b64_json({})},
            "targetLanguages": [{"id": "de"}],
            "strings": [],
        }
        resp = await client.post(URL, json=body, headers=auth_headers)

        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == (
            "No content to translate or invalid file content format"
        )

    @pytest.mark.asyncio
    async def test_large_result_is_uploaded(self, app, client, auth_headers):
        app.state.externalizer.max_inline_bytes = 5
        body = {
            "jobType": "build-file",
            "file": {"name": "messages.json", "content": _b64_json({"greeting": "Hi"})},
            "targetLanguages": [{"id": "de"}],
            "strings": [],
        }
        resp = await client.post(URL, json=body, headers=auth_headers)

        data = resp.json()["data"]
        assert list(data) == ["contentUrl"]
        assert data["contentUrl"].startswith("http://test/blobs/built_files/messages_content-")
