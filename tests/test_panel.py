import httpx

from comment_translate.ai.chat import ChatSession
from comment_translate.ai.schema import ChatTurn
from comment_translate.editor.panel import ChatPanelController, WebviewPanel
from tests.conftest import FakeAnthropic


def make_controller(settings, fake=None, api_key="sk-test"):
    fake = fake or FakeAnthropic()
    notifications = []
    session = ChatSession(settings=settings, transport=fake.transport)
    controller = ChatPanelController(session, lambda: api_key, notifier=notifications.append)
    return controller, notifications, fake


def test_open_chat_reuses_existing_panel(settings):
    controller, _, _ = make_controller(settings)

    first = controller.open_chat()
    first.visible = False
    second = controller.open_chat()

    assert first is second
    assert second.visible


def test_dispose_clears_panel_and_next_open_creates_fresh_one(settings):
    controller, _, _ = make_controller(settings)
    first = controller.open_chat()

    first.dispose()
    assert controller.panel is None

    second = controller.open_chat()
    assert second is not first
    assert not second.disposed


def test_context_is_pushed_as_set_context(settings):
    controller, _, _ = make_controller(settings)

    panel = controller.open_chat("Returns a value")

    assert panel.drain_messages() == [{"command": "setContext", "text": "Returns a value"}]


def test_empty_context_pushes_nothing(settings):
    controller, _, _ = make_controller(settings)

    panel = controller.open_chat()

    assert panel.drain_messages() == []


def test_send_message_emits_reply(settings):
    controller, notifications, fake = make_controller(settings, FakeAnthropic(replies=["はい"]))
    panel = controller.open_chat()

    panel.receive({"command": "sendMessage", "text": "質問です"})

    assert panel.drain_messages() == [{"command": "receiveMessage", "text": "はい"}]
    assert notifications == []
    assert len(fake.requests) == 1


def test_failure_emits_error_text_and_notification(settings):
    controller, notifications, fake = make_controller(settings, api_key="")
    panel = controller.open_chat()

    panel.receive({"command": "sendMessage", "text": "質問です"})

    messages = panel.drain_messages()
    assert len(messages) == 1
    assert messages[0]["command"] == "receiveMessage"
    assert messages[0]["text"].startswith("Error: Claude API key is not set")
    assert len(notifications) == 1
    assert "Claude API key is not set" in notifications[0]
    assert fake.requests == []


def test_unknown_command_is_ignored(settings):
    controller, notifications, fake = make_controller(settings)
    panel = controller.open_chat()

    panel.receive({"command": "reload", "text": ""})

    assert panel.drain_messages() == []
    assert fake.requests == []


def test_transcript_survives_panel_disposal(settings):
    controller, _, _ = make_controller(settings, FakeAnthropic(replies=["one"]))
    panel = controller.open_chat()
    panel.receive({"command": "sendMessage", "text": "first"})
    panel.dispose()

    controller.open_chat()

    assert controller.session.history == (ChatTurn("user", "first"), ChatTurn("assistant", "one"))


def test_disposed_panel_drops_messages():
    panel = WebviewPanel()
    panel.dispose()

    assert panel.post_message({"command": "receiveMessage", "text": "late"}) is False
    assert panel.drain_messages() == []


def make_controller_reopening_during_send(settings, fake):
    """The panel is closed and a new one opened while the request is in flight."""
    reopened = []

    def handler(request):
        controller.panel.dispose()
        reopened.append(controller.open_chat())
        return fake.handler(request)

    session = ChatSession(settings=settings, transport=httpx.MockTransport(handler))
    notifications = []
    controller = ChatPanelController(session, lambda: "sk-test", notifier=notifications.append)
    return controller, reopened, notifications


def test_reply_is_not_delivered_to_panel_opened_during_send(settings):
    controller, reopened, _ = make_controller_reopening_during_send(settings, FakeAnthropic(replies=["遅い返事"]))
    first = controller.open_chat()

    first.receive({"command": "sendMessage", "text": "質問です"})

    assert first.drain_messages() == []
    assert reopened[0] is controller.panel
    assert reopened[0].drain_messages() == []
    assert controller.session.history[-1] == ChatTurn("assistant", "遅い返事")


def test_error_is_not_delivered_to_panel_opened_during_send(settings):
    controller, reopened, notifications = make_controller_reopening_during_send(
        settings, FakeAnthropic(status_code=500, body="overloaded")
    )
    first = controller.open_chat()

    first.receive({"command": "sendMessage", "text": "質問です"})

    assert reopened[0].drain_messages() == []
    assert len(notifications) == 1
