"""HTTP surface over a local-store service context."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import OTHER_OWNER, OWNER, ScriptedModel, reply, request_tools, tool_call
from planpal.domain.errors import UpstreamError
from planpal.services import ServiceContext
from planpal.services.http import create_app

HEADERS = {"X-User-Id": OWNER}


@pytest.fixture
def client(context: ServiceContext) -> TestClient:
    return TestClient(create_app(context))


def _conversation(client: TestClient, title: str | None = None) -> dict:
    body = {"title": title} if title is not None else None
    response = client.post("/api/chat/conversations", json=body, headers=HEADERS)
    assert response.status_code == 200
    return response.json()["conversation"]


def _event(client: TestClient, **overrides):
    payload = {
        "title": "Dentist",
        "startDateTime": "2024-01-11T15:00:00",
        "endDateTime": "2024-01-11T16:00:00",
        **overrides,
    }
    return client.post("/api/calendar/events", json=payload, headers=HEADERS)


class TestAuth:
    def test_missing_user_header(self, client: TestClient) -> None:
        response = client.get("/api/chat/conversations")

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_catalog_is_public(self, client: TestClient) -> None:
        response = client.get("/api/tools")

        assert response.status_code == 200
        assert response.json()["version"] == "1.0"
        assert len(response.json()["tools"]) == 8


class TestChat:
    def test_create_and_list_conversations(self, client: TestClient) -> None:
        untitled = _conversation(client)
        titled = _conversation(client, "  Trip planning ")

        assert untitled["title"] == "New Conversation"
        assert titled["title"] == "Trip planning"
        assert titled["userId"] == OWNER

        listed = client.get("/api/chat/conversations", headers=HEADERS).json()["conversations"]
        assert [item["id"] for item in listed] == [titled["id"], untitled["id"]]
        assert client.get("/api/chat/conversations", headers={"X-User-Id": OTHER_OWNER}).json() == {
            "conversations": []
        }

    def test_send_message(self, client: TestClient, model: ScriptedModel) -> None:
        conversation = _conversation(client)
        model.queue(
            request_tools(tool_call("call_1", "create_todo", '{"title": "Buy milk"}')),
            reply("Added **Buy milk** to your list."),
        )

        response = client.post(
            "/api/chat/messages",
            json={"conversationId": conversation["id"], "content": "Add buy milk"},
            headers=HEADERS,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["userMessage"]["role"] == "user"
        assert body["userMessage"]["conversationId"] == conversation["id"]
        assert body["assistantMessage"]["content"] == "Added **Buy milk** to your list."

        history = client.get(
            "/api/chat/messages", params={"conversationId": conversation["id"]}, headers=HEADERS
        ).json()["messages"]
        assert [message["role"] for message in history] == ["user", "assistant"]

        todos = client.get("/api/todos", headers=HEADERS).json()["tasks"]
        assert [(task["title"], task["createdBy"]) for task in todos] == [("Buy milk", "ai")]

        renamed = client.get("/api/chat/conversations", headers=HEADERS).json()["conversations"][0]
        assert renamed["title"] == "Add buy milk"

    def test_blank_content_is_rejected(self, client: TestClient, model: ScriptedModel) -> None:
        conversation = _conversation(client)

        response = client.post(
            "/api/chat/messages", json={"conversationId": conversation["id"], "content": "   "}, headers=HEADERS
        )

        assert response.status_code == 422
        assert model.calls == []

    def test_unknown_conversation(self, client: TestClient) -> None:
        response = client.post(
            "/api/chat/messages", json={"conversationId": "missing", "content": "Hello"}, headers=HEADERS
        )

        assert response.status_code == 404
        assert "missing" in response.json()["error"]

    def test_model_outage_is_a_bad_gateway(self, client: TestClient, model: ScriptedModel) -> None:
        conversation = _conversation(client)
        model.queue(UpstreamError("provider timed out"))

        response = client.post(
            "/api/chat/messages", json={"conversationId": conversation["id"], "content": "Hello"}, headers=HEADERS
        )

        assert response.status_code == 502
        assert response.json() == {"error": "The assistant is unavailable right now. Please try again."}

    def test_delete_conversation_removes_messages(self, client: TestClient, model: ScriptedModel) -> None:
        conversation = _conversation(client)
        model.queue(reply("Hi."))
        client.post(
            "/api/chat/messages", json={"conversationId": conversation["id"], "content": "Hello"}, headers=HEADERS
        )

        response = client.delete(f"/api/chat/conversations/{conversation['id']}", headers=HEADERS)

        assert response.status_code == 200
        assert response.json() == {"message": "Conversation deleted successfully"}
        missing = client.get(
            "/api/chat/messages", params={"conversationId": conversation["id"]}, headers=HEADERS
        )
        assert missing.status_code == 404


class TestCalendar:
    def test_crud(self, client: TestClient) -> None:
        created = _event(client, location="Main St", category="appointment")
        assert created.status_code == 201
        event = created.json()["event"]
        assert event["startDateTime"] == "2024-01-11T15:00:00"
        assert event["category"] == "appointment"
        assert event["reminderMinutes"] == 30

        fetched = client.get(f"/api/calendar/events/{event['id']}", headers=HEADERS)
        assert fetched.json()["event"]["location"] == "Main St"

        patched = client.patch(
            f"/api/calendar/events/{event['id']}", json={"title": "Dentist (moved)", "location": ""}, headers=HEADERS
        )
        assert patched.status_code == 200
        assert patched.json()["event"]["title"] == "Dentist (moved)"
        assert patched.json()["event"]["location"] is None
        assert patched.json()["event"]["startDateTime"] == "2024-01-11T15:00:00"

        deleted = client.delete(f"/api/calendar/events/{event['id']}", headers=HEADERS)
        assert deleted.json() == {"message": "Event deleted successfully"}
        assert client.get(f"/api/calendar/events/{event['id']}", headers=HEADERS).status_code == 404

    def test_end_must_follow_start(self, client: TestClient) -> None:
        response = _event(client, endDateTime="2024-01-11T15:00:00")

        assert response.status_code == 400
        assert response.json() == {"error": "End date must be after start date."}

    def test_patch_cannot_invert_the_range(self, client: TestClient) -> None:
        event = _event(client).json()["event"]

        response = client.patch(
            f"/api/calendar/events/{event['id']}", json={"endDateTime": "2024-01-11T14:00:00"}, headers=HEADERS
        )

        assert response.status_code == 400

    def test_title_length_is_limited(self, client: TestClient) -> None:
        assert _event(client, title="x" * 201).status_code == 422

    def test_range_filter(self, client: TestClient) -> None:
        _event(client, title="Thursday", startDateTime="2024-01-11T09:00:00", endDateTime="2024-01-11T10:00:00")
        _event(client, title="Friday", startDateTime="2024-01-12T09:00:00", endDateTime="2024-01-12T10:00:00")

        response = client.get(
            "/api/calendar/events",
            params={"start": "2024-01-12T00:00:00", "end": "2024-01-12T23:59:59"},
            headers=HEADERS,
        )

        assert response.json()["count"] == 1
        assert response.json()["events"][0]["title"] == "Friday"

    def test_events_are_private(self, client: TestClient) -> None:
        event = _event(client).json()["event"]

        response = client.get(f"/api/calendar/events/{event['id']}", headers={"X-User-Id": OTHER_OWNER})

        assert response.status_code == 404


class TestTodos:
    def test_sort_by_priority(self, client: TestClient) -> None:
        for title, priority in (("Low", "low"), ("High", "high"), ("Medium", "medium")):
            client.post("/api/todos", json={"title": title, "priority": priority}, headers=HEADERS)

        tasks = client.get("/api/todos", params={"sortBy": "priority"}, headers=HEADERS).json()["tasks"]

        assert [task["title"] for task in tasks] == ["High", "Medium", "Low"]
        assert {task["createdBy"] for task in tasks} == {"user"}

    def test_sort_by_due_date_puts_undated_last(self, client: TestClient) -> None:
        client.post("/api/todos", json={"title": "Undated"}, headers=HEADERS)
        client.post("/api/todos", json={"title": "Later", "dueDate": "2024-02-01T09:00:00"}, headers=HEADERS)
        client.post("/api/todos", json={"title": "Sooner", "dueDate": "2024-01-15T09:00:00"}, headers=HEADERS)

        tasks = client.get("/api/todos", params={"sortBy": "dueDate"}, headers=HEADERS).json()["tasks"]

        assert [task["title"] for task in tasks] == ["Sooner", "Later", "Undated"]

    def test_complete_and_reopen(self, client: TestClient) -> None:
        task = client.post("/api/todos", json={"title": "Floss"}, headers=HEADERS).json()["task"]

        done = client.patch(f"/api/todos/{task['id']}", json={"completed": True}, headers=HEADERS).json()["task"]
        assert done["completed"] is True
        assert done["completedAt"] == "2024-01-10T09:00:00"

        active = client.get("/api/todos", params={"filter": "active"}, headers=HEADERS).json()["tasks"]
        assert active == []

        reopened = client.patch(f"/api/todos/{task['id']}", json={"completed": False}, headers=HEADERS).json()["task"]
        assert reopened["completed"] is False
        assert reopened["completedAt"] is None

    def test_delete(self, client: TestClient) -> None:
        task = client.post("/api/todos", json={"title": "Floss"}, headers=HEADERS).json()["task"]

        response = client.delete(f"/api/todos/{task['id']}", headers=HEADERS)

        assert response.json()["message"] == "Todo deleted successfully"
        assert response.json()["task"]["title"] == "Floss"
        assert client.delete(f"/api/todos/{task['id']}", headers=HEADERS).status_code == 404
