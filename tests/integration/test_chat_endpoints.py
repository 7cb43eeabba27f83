"""
Integration tests for the chat endpoints.

Drive POST /api/v1/chat and GET /api/v1/chat/{id}/result through the FastAPI
app with the Open WebUI API scripted behind httpx.MockTransport.
"""

from pathlib import Path

import httpx
from fakes import FakeService, chat_state, script_happy_path


class TestCreateChat:
    def test_start_chat(self, client, fake_webui: FakeService, auth_headers) -> None:
        script_happy_path(fake_webui)

        response = client.post("/api/v1/chat", json={"prompt": "Hello"}, headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["chat_id"] == "chat-1"
        assert body["status"] == "chat process initiated"
        (completion,) = fake_webui.bodies("POST", "/api/chat/completions")
        assert body["message_id"] == completion["id"]
        assert "files" not in completion

    def test_start_then_fetch_result(self, client, fake_webui: FakeService, auth_headers) -> None:
        script_happy_path(fake_webui)
        started = client.post("/api/v1/chat", json={"prompt": "Hello"}, headers=auth_headers).json()
        message_id = started["message_id"]
        fake_webui.on(
            "GET",
            "/api/v1/chats/chat-1",
            httpx.Response(200, json=chat_state("chat-1", message_id)),
            httpx.Response(200, json=chat_state("chat-1", message_id, content="Hi there")),
        )

        response = client.get(
            "/api/v1/chat/chat-1/result", params={"message_id": message_id}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json() == {"chat_id": "chat-1", "message_id": message_id, "content": "Hi there"}
        assert len(fake_webui.calls("GET", "/api/v1/chats/chat-1")) == 2

    def test_content_ingested_into_knowledge(
        self, client, fake_webui: FakeService, auth_headers, test_settings
    ) -> None:
        script_happy_path(fake_webui)
        fake_webui.on("POST", "/api/v1/files/", httpx.Response(200, json={"id": "file-1"}))
        fake_webui.on("POST", "/api/v1/knowledge/kb-1/file/add", httpx.Response(200, json={}))

        response = client.post(
            "/api/v1/chat",
            json={"prompt": "Summarise", "content": "# Report", "knowledge_id": "kb-1"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert [r.url.path for r in fake_webui.requests][:2] == [
            "/api/v1/files/",
            "/api/v1/knowledge/kb-1/file/add",
        ]
        upload = fake_webui.requests[0]
        assert b'filename="chat-content-' in upload.content
        (completion,) = fake_webui.bodies("POST", "/api/chat/completions")
        assert completion["files"] == [
            {"type": "collection", "id": "kb-1"},
            {"type": "file", "id": "file-1"},
        ]
        assert list(Path(test_settings.temp_dir_path).iterdir()) == []

    def test_content_requires_knowledge_id(self, client, fake_webui: FakeService, auth_headers) -> None:
        response = client.post(
            "/api/v1/chat", json={"prompt": "Summarise", "content": "# Report"}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "knowledge_id is required when providing content"
        assert fake_webui.requests == []

    def test_ingestion_failure(self, client, fake_webui: FakeService, auth_headers) -> None:
        fake_webui.on("POST", "/api/v1/files/", httpx.Response(500, text="disk full"))

        response = client.post(
            "/api/v1/chat",
            json={"prompt": "Summarise", "content": "# Report", "knowledge_id": "kb-1"},
            headers=auth_headers,
        )

        assert response.status_code == 500
        assert response.json()["message"].startswith("failed to add content to knowledge collection")
        assert fake_webui.calls("POST", "/api/v1/chats/new") == []

    def test_blank_prompt(self, client, fake_webui: FakeService, auth_headers) -> None:
        response = client.post("/api/v1/chat", json={"prompt": "   "}, headers=auth_headers)

        assert response.status_code == 400
        assert fake_webui.requests == []

    def test_malformed_body(self, client, auth_headers) -> None:
        response = client.post("/api/v1/chat", json={"question": "Hello"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_invalid_json(self, client, auth_headers) -> None:
        response = client.post(
            "/api/v1/chat",
            content=b"{not json",
            headers={**auth_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 400

    def test_backend_failure_names_step(self, client, fake_webui: FakeService, auth_headers) -> None:
        fake_webui.on("POST", "/api/v1/chats/new", httpx.Response(500, text="boom"))

        response = client.post("/api/v1/chat", json={"prompt": "Hello"}, headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {
            "error": "WORKFLOW_STEP_FAILED",
            "message": "failed to create chat: API call failed with status 500: boom",
        }


class TestChatResult:
    def test_poll_timeout_is_504(self, client, fake_webui: FakeService, auth_headers) -> None:
        fake_webui.on(
            "GET", "/api/v1/chats/chat-1", httpx.Response(200, json=chat_state("chat-1", "msg-1"))
        )

        response = client.get(
            "/api/v1/chat/chat-1/result", params={"message_id": "msg-1"}, headers=auth_headers
        )

        assert response.status_code == 504
        assert response.json()["error"] == "POLL_TIMEOUT"
        assert len(fake_webui.calls("GET", "/api/v1/chats/chat-1")) == 15

    def test_backend_failure_while_polling(self, client, fake_webui: FakeService, auth_headers) -> None:
        fake_webui.on("GET", "/api/v1/chats/chat-1", httpx.Response(404, text="chat not found"))

        response = client.get(
            "/api/v1/chat/chat-1/result", params={"message_id": "msg-1"}, headers=auth_headers
        )

        assert response.status_code == 500
        assert "chat not found" in response.json()["message"]
        assert len(fake_webui.calls("GET", "/api/v1/chats/chat-1")) == 1

    def test_message_id_required(self, client, auth_headers) -> None:
        response = client.get("/api/v1/chat/chat-1/result", headers=auth_headers)

        assert response.status_code == 400
