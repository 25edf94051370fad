import pytest

from comment_translate.web import create_app
from tests.conftest import FakeAnthropic


@pytest.fixture
def fake():
    return FakeAnthropic()


@pytest.fixture
def client(fake, settings, api_key):
    app = create_app(settings=settings, transport=fake.transport)
    app.config["TESTING"] = True
    return app.test_client()


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_chat_page_renders(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "送信" in response.get_data(as_text=True)


def test_hover_is_translated(client, fake):
    fake.replies = ["戻り値: (true) を返す"]

    response = client.post("/api/hover/", json={"contents": ["Returns (true) if successful"]})

    hover = response.get_json()["hover"]
    assert hover["state"] == "succeeded"
    assert hover["markdown"].startswith("戻り値:(true)を返す")
    assert hover["action"]["arguments"] == ["Returns (true) if successful"]


def test_hover_without_content_is_null(client, fake):
    response = client.post("/api/hover/", json={"contents": []})

    assert response.get_json() == {"hover": None}
    assert fake.requests == []


def test_hover_requires_contents(client):
    assert client.post("/api/hover/", json={"line_text": "x"}).status_code == 400


def test_hover_reports_api_failure(client, fake):
    fake.status_code = 500
    fake.body = "overloaded"

    hover = client.post("/api/hover/", json={"contents": ["Hello"]}).get_json()["hover"]

    assert hover["state"] == "failed"
    assert "500" in hover["markdown"]


def test_message_before_open_is_rejected(client):
    response = client.post("/api/chat/messages", json={"command": "sendMessage", "text": "hi"})
    assert response.status_code == 409


def test_chat_round_trip(client, fake):
    fake.replies = ["こんにちは"]
    client.post("/api/chat/open", json={})

    state = client.post("/api/chat/messages", json={"command": "sendMessage", "text": "hi"}).get_json()

    assert state["messages"] == [{"command": "receiveMessage", "text": "こんにちは"}]
    history = client.get("/api/chat/history").get_json()["history"]
    assert history == [
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "こんにちは"},
    ]


def test_chat_failure_surfaces_notification(client, fake):
    fake.status_code = 401
    fake.body = "unauthorized"
    client.post("/api/chat/open", json={})

    state = client.post("/api/chat/messages", json={"command": "sendMessage", "text": "hi"}).get_json()

    assert state["messages"][0]["text"] == "Error: API request failed with status 401"
    assert len(state["notifications"]) == 1


def test_ask_question_command_opens_chat_with_context(client):
    response = client.post(
        "/api/commands/commentTranslateClaude.askQuestion",
        json={"arguments": ["Returns a value"]},
    )
    assert response.status_code == 200
    assert response.get_json()["panel"]

    state = client.get("/api/chat/messages").get_json()
    assert state["messages"] == [{"command": "setContext", "text": "Returns a value"}]


def test_open_chat_command_is_registered(client):
    commands = client.get("/api/commands/").get_json()["commands"]
    assert "commentTranslateClaude.openChat" in commands
    assert "commentTranslateClaude.askQuestion" in commands


def test_unknown_command_is_404(client):
    assert client.post("/api/commands/nope", json={}).status_code == 404


def test_closed_panel_is_replaced_on_open(client):
    first = client.post("/api/chat/open", json={}).get_json()["panel"]
    client.post("/api/chat/close")
    second = client.post("/api/chat/open", json={}).get_json()["panel"]

    assert first != second


def test_settings_mask_api_key(client, api_key):
    settings = client.get("/api/settings/").get_json()["settings"]

    assert settings["api_key_set"] is True
    assert settings["api_key"].endswith(api_key[-4:])
    assert api_key not in settings["api_key"]


def test_settings_update_switches_hover_mode(client, fake):
    response = client.put("/api/settings/", json={"settings": {"hover": {"mode": "comments"}}})
    assert response.status_code == 200

    hover = client.post("/api/hover/", json={"contents": ["Hello"], "line_text": "x = 1"}).get_json()
    assert hover == {"hover": None}
    assert fake.requests == []


def test_settings_update_rejects_invalid_mode(client):
    response = client.put("/api/settings/", json={"settings": {"hover": {"mode": "never"}}})
    assert response.status_code == 400


def test_settings_update_changes_api_key(client, fake):
    client.put("/api/settings/", json={"settings": {"api_key": "sk-new-9999"}})

    client.post("/api/hover/", json={"contents": ["Hello"]})

    assert fake.requests[0].headers["x-api-key"] == "sk-new-9999"


def test_settings_update_reaches_next_hover_request(client, fake):
    response = client.put("/api/settings/", json={"settings": {
        "translation": {"model": "claude-new", "max_tokens": 256},
        "anthropic_version": "2024-01-01",
        "api_url": "https://proxy.example.com/v1/messages",
    }})
    assert response.status_code == 200
    assert response.get_json()["settings"]["translation"]["model"] == "claude-new"

    client.post("/api/hover/", json={"contents": ["Hello"]})

    request = fake.requests[0]
    assert str(request.url) == "https://proxy.example.com/v1/messages"
    assert request.headers["anthropic-version"] == "2024-01-01"
    body = fake.sent_bodies()[0]
    assert body["model"] == "claude-new"
    assert body["max_tokens"] == 256


def test_settings_update_reaches_next_chat_request(client, fake):
    client.put("/api/settings/", json={"settings": {
        "chat": {"model": "claude-chat-new", "max_tokens": 64, "max_history": 2},
        "anthropic_version": "2024-01-01",
    }})
    client.post("/api/chat/open", json={})

    for text in ("one", "two"):
        client.post("/api/chat/messages", json={"command": "sendMessage", "text": text})

    body = fake.sent_bodies()[-1]
    assert body["model"] == "claude-chat-new"
    assert body["max_tokens"] == 64
    assert fake.requests[-1].headers["anthropic-version"] == "2024-01-01"
    history = client.get("/api/chat/history").get_json()
    assert len(history["history"]) == 2


def test_settings_update_rejects_invalid_max_history(client):
    response = client.put("/api/settings/", json={"settings": {"chat": {"max_history": 0}}})
    assert response.status_code == 400
