"""Notification tests: event rendering, Telegram delivery, alert lock."""

import json
import logging
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime

import httpx
import pytest

from dnschecker.notifications.events import EventType, NotificationEvent
from dnschecker.notifications.lock import AlertLock
from dnschecker.notifications.telegram import TelegramChannel


def _make_event(**kwargs) -> NotificationEvent:
    defaults = {
        "event_type": EventType.IP_MISMATCH,
        "hostname": "home.example.com",
        "dns_ip": "203.0.113.5",
        "wan_ip": "203.0.113.9",
    }
    defaults.update(kwargs)
    return NotificationEvent(**defaults)


# ---------------------------------------------------------------------------
# Event model
# ---------------------------------------------------------------------------


class TestNotificationEvent:
    def test_mismatch_text(self):
        assert _make_event().render() == "home.example.com mismatch: DNS=203.0.113.5 WAN=203.0.113.9"

    def test_mismatch_text_with_interface(self):
        lines = _make_event(interface="igb3").render().splitlines()
        assert lines[0] == "home.example.com mismatch: DNS=203.0.113.5 WAN=203.0.113.9"
        assert lines[1] == "Router interface: igb3"

    def test_restored_text(self):
        event = _make_event(event_type=EventType.IP_RESTORED, dns_ip="203.0.113.9")
        assert event.render() == "home.example.com match again: DNS=203.0.113.9 WAN=203.0.113.9"


# ---------------------------------------------------------------------------
# Telegram channel
# ---------------------------------------------------------------------------


class TestTelegramChannel:
    @pytest.mark.asyncio
    async def test_send_message(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"ok": True, "result": {}})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            ch = TelegramChannel(token="123:ABC", chat_id="456", client=client)
            assert await ch.send(_make_event()) is True

        assert len(requests) == 1
        assert requests[0].method == "POST"
        assert str(requests[0].url) == "https://api.telegram.org/bot123:ABC/sendMessage"
        payload = json.loads(requests[0].content)
        assert payload["chat_id"] == "456"
        assert payload["disable_notification"] is False
        assert "home.example.com" in payload["text"]
        assert "203.0.113.5" in payload["text"]
        assert "203.0.113.9" in payload["text"]

    @pytest.mark.asyncio
    async def test_shared_client_not_closed(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"ok": True})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            ch = TelegramChannel(token="123:ABC", chat_id="456", client=client)
            assert await ch.send(_make_event()) is True
            assert await ch.send(_make_event()) is True
            assert not client.is_closed

        assert len(requests) == 2
        body = json.loads(requests[0].content)
        assert body["text"].startswith("home.example.com mismatch")

    @pytest.mark.asyncio
    async def test_http_error_returns_false_and_hides_token(self, caplog):
        caplog.set_level(logging.WARNING)
        transport = httpx.MockTransport(lambda request: httpx.Response(401, json={"ok": False}))
        async with httpx.AsyncClient(transport=transport) as client:
            ch = TelegramChannel(token="123:ABC", chat_id="456", client=client)
            assert await ch.send(_make_event()) is False

        assert "Failed to send Telegram message" in caplog.text
        assert "123:ABC" not in caplog.text

    @pytest.mark.asyncio
    async def test_not_ok_returns_false(self, caplog):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"ok": False, "description": "chat not found"})
        )
        async with httpx.AsyncClient(transport=transport) as client:
            ch = TelegramChannel(token="123:ABC", chat_id="456", client=client)
            assert await ch.send(_make_event()) is False
        assert "chat not found" in caplog.text

    @pytest.mark.asyncio
    async def test_non_json_returns_false(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
        async with httpx.AsyncClient(transport=transport) as client:
            ch = TelegramChannel(token="123:ABC", chat_id="456", client=client)
            assert await ch.send(_make_event()) is False

    @pytest.mark.asyncio
    async def test_network_error_returns_false(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            ch = TelegramChannel(token="123:ABC", chat_id="456", client=client)
            assert await ch.send(_make_event()) is False


# ---------------------------------------------------------------------------
# Alert lock
# ---------------------------------------------------------------------------


class TestAlertLock:
    def test_missing_file_is_inactive(self, temp_dir):
        lock = AlertLock(temp_dir / "telegram.lock")
        assert lock.exists() is False
        assert lock.is_active() is False

    def test_arm_then_active(self, temp_dir):
        lock = AlertLock(temp_dir / "telegram.lock")
        lock.arm()
        assert lock.exists() is True
        assert lock.is_active() is True

    def test_expired_after_cooldown(self, temp_dir):
        path = temp_dir / "telegram.lock"
        old = datetime.now(timezone.utc) - timedelta(hours=25)
        path.write_text(format_datetime(old))
        lock = AlertLock(path, cooldown=24 * 3600)
        assert lock.exists() is True
        assert lock.is_active() is False

    def test_explicit_now(self, temp_dir):
        lock = AlertLock(temp_dir / "telegram.lock", cooldown=60)
        sent = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        lock.arm(now=sent)
        assert lock.is_active(now=sent + timedelta(seconds=30)) is True
        assert lock.is_active(now=sent + timedelta(seconds=61)) is False

    def test_garbage_is_inactive(self, temp_dir):
        path = temp_dir / "telegram.lock"
        path.write_text("not a timestamp")
        assert AlertLock(path).is_active() is False

    def test_future_timestamp_is_inactive(self, temp_dir, caplog):
        caplog.set_level(logging.WARNING)
        path = temp_dir / "telegram.lock"
        ahead = datetime.now(timezone.utc) + timedelta(days=30)
        path.write_text(format_datetime(ahead))
        lock = AlertLock(path, cooldown=24 * 3600)
        assert lock.exists() is True
        assert lock.is_active() is False
        assert "in the future" in caplog.text

    def test_clear(self, temp_dir):
        lock = AlertLock(temp_dir / "telegram.lock")
        lock.arm()
        lock.clear()
        assert lock.exists() is False
        lock.clear()  # already gone
