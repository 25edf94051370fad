import json
import time

import httpx
import pytest

from comment_translate import config


def make_reply(text, **overrides):
    """A minimal well-formed Messages API reply."""
    reply = {
        "id": "msg_01",
        "type": "message",
        "role": "assistant",
        "content": [{"type": "text", "text": text}],
        "model": "claude-3-5-sonnet-20240620",
        "stop_reason": "end_turn",
        "stop_sequence": None,
        "usage": {"input_tokens": 12, "output_tokens": 34},
    }
    reply.update(overrides)
    return reply


class FakeAnthropic:
    """Stands in for the Messages API behind an httpx.MockTransport."""

    def __init__(self, replies=None, status_code=200, body=None, delay=0.0, error=None, gate=None):
        self.replies = list(replies) if replies is not None else None
        self.status_code = status_code
        self.body = body
        self.delay = delay
        self.error = error
        self.gate = gate
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error("simulated failure", request=request)
        if self.body is not None:
            return httpx.Response(self.status_code, text=self.body)
        if self.replies:
            text = self.replies.pop(0)
        else:
            text = f"reply {len(self.requests)}"
        return httpx.Response(self.status_code, json=make_reply(text))

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def sent_bodies(self):
        return [json.loads(request.content) for request in self.requests]


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config file at a temporary location."""
    config_file = tmp_path / "config" / "config.json"
    monkeypatch.setattr(config, "CONFIG_FILE", config_file)
    return config_file


@pytest.fixture
def api_key(isolated_config):
    current = config.load_config()
    current[config.CONFIG_NAMESPACE]["api_key"] = "sk-ant-test-1234"
    config.save_config(current)
    return "sk-ant-test-1234"


@pytest.fixture
def settings():
    return config.load_config()[config.CONFIG_NAMESPACE]
