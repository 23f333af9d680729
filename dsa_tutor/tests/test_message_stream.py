"""
Integration tests for the server-sent events chat endpoint.
"""

import json

from fastapi.testclient import TestClient

from dsa_tutor.exceptions import ProviderError
from dsa_tutor.services import fallback_templates as templates


STREAM_URL = "/api/v1/messages/stream"


def _events(response) -> list:
    """Parse the ``data:`` frames of an SSE body."""
    frames = [frame for frame in response.text.split("\n\n") if frame.strip()]
    events = []
    for frame in frames:
        assert frame.startswith("data: ")
        events.append(json.loads(frame[len("data: "):]))
    return events


def _session_id(client: TestClient, headers) -> str:
    return client.post("/api/v1/sessions", json={}, headers=headers).json()["id"]


class TestMessageStream:

    def test_stream_fallback_reply(self, client: TestClient, alice_headers):
        session_id = _session_id(client, alice_headers)

        response = client.post(
            STREAM_URL,
            json={"sessionId": session_id, "content": "Explain binary search trees"},
            headers=alice_headers
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        events = _events(response)
        assert events[0] == {"type": "content", "token": templates.BINARY_SEARCH_TREE}
        assert events[-1]["type"] == "complete"

        messages = client.get(f"/api/v1/sessions/{session_id}/messages", headers=alice_headers).json()
        assert [m["role"] for m in messages] == ["user", "assistant"]
        assert events[-1]["messageId"] == messages[1]["id"]

    def test_stream_provider_tokens(self, client: TestClient, alice_headers, use_provider, provider_factory):
        use_provider(provider_factory(chunks=["Binary ", "search ", "halves the range."]))
        session_id = _session_id(client, alice_headers)

        response = client.post(
            STREAM_URL,
            json={"sessionId": session_id, "content": "How does binary search work?"},
            headers=alice_headers
        )

        events = _events(response)
        assert [e["type"] for e in events] == ["content", "content", "content", "complete"]
        assert "".join(e["token"] for e in events[:3]) == "Binary search halves the range."

        session = client.get(f"/api/v1/sessions/{session_id}", headers=alice_headers).json()
        assert session["session"]["message_count"] == 2
        assert session["messages"][1]["content"] == "Binary search halves the range."

    def test_stream_error_after_tokens(self, client: TestClient, alice_headers, use_provider, provider_factory):
        use_provider(provider_factory(chunks=["First part. ", "Second part."], fail_after=1))
        session_id = _session_id(client, alice_headers)

        response = client.post(
            STREAM_URL,
            json={"sessionId": session_id, "content": "Explain stacks"},
            headers=alice_headers
        )

        events = _events(response)
        assert events == [
            {"type": "content", "token": "First part. "},
            {"type": "error", "error": "Failed to generate response"},
        ]
        session = client.get(f"/api/v1/sessions/{session_id}", headers=alice_headers).json()
        assert session["session"]["message_count"] == 0
        assert [m["role"] for m in session["messages"]] == ["user"]

    def test_stream_provider_failure_before_tokens(
        self, client: TestClient, alice_headers, use_provider, provider_factory
    ):
        use_provider(provider_factory(error=ProviderError("rate limited", status_code=429)))
        session_id = _session_id(client, alice_headers)

        response = client.post(
            STREAM_URL,
            json={"sessionId": session_id, "content": "Teach me dynamic programming"},
            headers=alice_headers
        )

        events = _events(response)
        assert events[0]["token"] == templates.DYNAMIC_PROGRAMMING
        assert events[-1]["type"] == "complete"

    def test_stream_empty_content(self, client: TestClient, alice_headers):
        session_id = _session_id(client, alice_headers)

        response = client.post(
            STREAM_URL, json={"sessionId": session_id, "content": "  "}, headers=alice_headers
        )

        assert response.status_code == 400
        assert response.headers["content-type"].startswith("application/json")

    def test_stream_accepts_snake_case_fields(self, client: TestClient, alice_headers):
        session_id = _session_id(client, alice_headers)

        response = client.post(
            STREAM_URL,
            json={"session_id": session_id, "content": "What is a queue?", "client_message_id": "c-1"},
            headers=alice_headers
        )

        assert response.status_code == 200
        assert _events(response)[-1]["type"] == "complete"
        messages = client.get(f"/api/v1/sessions/{session_id}/messages", headers=alice_headers).json()
        assert messages[0]["client_message_id"] == "c-1"

    def test_stream_missing_session_id(self, client: TestClient, alice_headers):
        response = client.post(STREAM_URL, json={"content": "Hello"}, headers=alice_headers)

        assert response.status_code == 400

    def test_stream_other_users_session(self, client: TestClient, alice_headers, bob_headers):
        session_id = _session_id(client, alice_headers)

        response = client.post(
            STREAM_URL, json={"sessionId": session_id, "content": "Hello"}, headers=bob_headers
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Session not found or access denied"

    def test_stream_requires_auth(self, client: TestClient):
        response = client.post(STREAM_URL, json={"sessionId": "session_x", "content": "Hello"})

        assert response.status_code == 401
