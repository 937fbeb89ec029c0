from datetime import datetime

import pytest
import requests

from core.errors import WebhookConfigError
from services import discord_webhook as dw

URL = "https://discord.example/api/webhooks/1/abc"
SCHEDULED = datetime(2024, 5, 17, 14, 30)


class FakeResponse:
    def __init__(self, status_code=204):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")


@pytest.fixture
def posts(monkeypatch):
    calls = []

    def fake_post(url, json=None, **kwargs):
        calls.append((url, json, kwargs))
        return FakeResponse()

    monkeypatch.setattr(dw.requests, "post", fake_post)
    return calls


def test_read_webhook_url_trims(tmp_path):
    path = tmp_path / "discord.webhook"
    path.write_text(f"  {URL}\n", encoding="utf-8")
    assert dw.read_webhook_url(path) == URL


def test_read_webhook_url_missing_is_fatal(tmp_path):
    with pytest.raises(WebhookConfigError, match="missing"):
        dw.read_webhook_url(tmp_path / "discord.webhook")


def test_read_webhook_url_empty_is_fatal(tmp_path):
    path = tmp_path / "discord.webhook"
    path.write_text("\n", encoding="utf-8")
    with pytest.raises(WebhookConfigError):
        dw.read_webhook_url(path)


def test_launch_message_shape():
    msg = dw.launch_message("Launcher", "world", "1.20.4", "steve", SCHEDULED)
    assert msg["content"] == "Launching server..."
    assert msg["username"] == "Launcher"
    assert msg["avatar_url"] == dw.AVATAR_URL
    embed = msg["embeds"][0]
    assert embed["color"] == dw.EMBED_COLOR
    assert embed["footer"]["text"] == "Server Info"
    fields = {f["name"]: f for f in embed["fields"]}
    assert fields["Level Name:"]["value"] == "`world`"
    assert fields["Minecraft Version:"]["value"] == "`1.20.4`"
    assert fields["Server Host:"]["value"] == "`steve`"
    assert fields["Shutdown scheduled for:"]["value"] == "`2024-05-17 14:30:00`"
    assert fields["Level Name:"]["inline"] is True
    assert "inline" not in fields["Shutdown scheduled for:"]


def test_shutdown_message_shape():
    assert dw.shutdown_message("Launcher") == {
        "content": "Server has shutdown.",
        "username": "Launcher",
        "avatar_url": dw.AVATAR_URL,
    }


def test_notify_posts_once(posts):
    assert dw.notify_launch(URL, "Launcher", "world", "1.20.4", "steve", SCHEDULED) is True
    assert dw.notify_shutdown(URL, "Launcher") is True
    assert [c[0] for c in posts] == [URL, URL]
    assert posts[0][1]["content"] == "Launching server..."
    assert posts[1][1]["content"] == "Server has shutdown."


def test_transport_failure_is_swallowed(monkeypatch, caplog):
    def fake_post(url, json=None, **kwargs):
        raise requests.ConnectionError("no route to host")

    monkeypatch.setattr(dw.requests, "post", fake_post)
    assert dw.notify_shutdown(URL, "Launcher") is False
    assert "Failed to send message" in caplog.text


def test_http_error_is_swallowed(monkeypatch):
    monkeypatch.setattr(dw.requests, "post", lambda url, json=None, **kw: FakeResponse(500))
    assert dw.notify_launch(URL, "Launcher", "world", "1.20.4", "steve", SCHEDULED) is False
