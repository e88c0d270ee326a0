import logging
from typing import Any

import anyio
import pytest

from mcp_chat import CONTENT_UPDATED_METHOD, ChatMessageBus, ContentUpdatedNotification
from mcp_chat.accessor import ChatAccessor
from mcp_chat.notifications import NotificationDispatcher
from tests.test_helpers import InMemoryChat, RecordingSession, make_message

pytestmark = pytest.mark.anyio


def make_dispatcher(chat: InMemoryChat, timeout: float | None = None) -> NotificationDispatcher:
    accessor = ChatAccessor(chat.get_resources, chat.read_messages, chat.write_message)
    return NotificationDispatcher(accessor, timeout=timeout)


async def test_notify_new_message_sends_both(chat: InMemoryChat):
    session = RecordingSession()

    outcome = await make_dispatcher(chat).notify_new_message(session, "chat+irc:///general", "m1")

    assert session.resource_updates == ["chat+irc:///general"]
    assert len(session.notifications) == 1
    notification = session.notifications[0]
    assert isinstance(notification, ContentUpdatedNotification)
    assert notification.method == CONTENT_UPDATED_METHOD
    assert notification.params.content == chat.threads["chat+irc:///general"][0]
    assert outcome.ok
    assert outcome.message is not None and outcome.message.id == "m1"
    assert outcome.errors == []


async def test_notification_wire_format(chat: InMemoryChat):
    session = RecordingSession()

    await make_dispatcher(chat).notify_new_message(session, "chat+irc:///general", "m1")

    dumped = session.notifications[0].model_dump(by_alias=True, mode="json", exclude_none=True)
    assert dumped == {
        "method": "notifications/resources/content_updated",
        "params": {
            "content": {
                "id": "m1",
                "uri": "chat+irc:///general",
                "author": {"name": "alice", "id": "u1"},
                "content": "hello",
                "timestamp": "2024-01-01T00:00:00Z",
            }
        },
    }


async def test_notification_wire_format_without_message(chat: InMemoryChat):
    session = RecordingSession()

    await make_dispatcher(chat).notify_new_message(session, "chat+irc:///general", "nope")

    dumped = session.notifications[0].model_dump(by_alias=True, mode="json", exclude_none=True)
    assert dumped == {
        "method": "notifications/resources/content_updated",
        "params": {"content": None},
    }


async def test_notify_unknown_message_sends_null_content(chat: InMemoryChat):
    session = RecordingSession()

    outcome = await make_dispatcher(chat).notify_new_message(session, "chat+irc:///general", "nope")

    assert session.resource_updates == ["chat+irc:///general"]
    assert session.notifications[0].params.content is None
    assert outcome.message is None
    assert outcome.ok


async def test_notify_unknown_thread_sends_null_content(chat: InMemoryChat):
    session = RecordingSession()

    outcome = await make_dispatcher(chat).notify_new_message(session, "chat+irc:///gone", "m1")

    assert session.resource_updates == ["chat+irc:///gone"]
    assert session.notifications[0].params.content is None
    assert outcome.ok


async def test_notify_picks_message_by_id(chat: InMemoryChat):
    chat.threads["chat+irc:///random"] = [
        make_message("a", "chat+irc:///random", "first"),
        make_message("b", "chat+irc:///random", "second"),
    ]
    session = RecordingSession()

    outcome = await make_dispatcher(chat).notify_new_message(session, "chat+irc:///random", "b")

    assert outcome.message is not None
    assert outcome.message.content == "second"


async def test_resource_updated_failure_is_logged(chat: InMemoryChat, caplog: pytest.LogCaptureFixture):
    session = RecordingSession(fail_resource_updated=True)

    with caplog.at_level(logging.ERROR):
        outcome = await make_dispatcher(chat).notify_new_message(session, "chat+irc:///general", "m1")

    assert not outcome.resource_updated
    assert outcome.content_updated
    assert len(outcome.errors) == 1
    assert len(session.notifications) == 1
    assert "Failed to send channel resource update notification for chat+irc:///general" in caplog.text


async def test_content_updated_failure_is_logged(chat: InMemoryChat, caplog: pytest.LogCaptureFixture):
    session = RecordingSession(fail_notification=True)

    with caplog.at_level(logging.ERROR):
        outcome = await make_dispatcher(chat).notify_new_message(session, "chat+irc:///general", "m1")

    assert outcome.resource_updated
    assert not outcome.content_updated
    assert not outcome.ok
    assert session.resource_updates == ["chat+irc:///general"]
    assert "Failed to send content updated notification" in caplog.text


async def test_read_failure_during_notify_is_logged():
    chat = InMemoryChat()

    async def read_messages(uri: str) -> Any:
        raise ConnectionError("backend down")

    accessor = ChatAccessor(chat.get_resources, read_messages, chat.write_message)
    session = RecordingSession()

    outcome = await NotificationDispatcher(accessor).notify_new_message(session, "chat+irc:///x", "m1")

    assert outcome.resource_updated
    assert not outcome.content_updated
    assert isinstance(outcome.errors[0], ConnectionError)
    assert session.notifications == []


async def test_notification_timeout(chat: InMemoryChat):
    class SlowSession(RecordingSession):
        async def send_resource_updated(self, uri: Any) -> None:
            await anyio.sleep(10)

    outcome = await make_dispatcher(chat, timeout=0.05).notify_new_message(
        SlowSession(),
        "chat+irc:///general",
        "m1",
    )

    assert not outcome.resource_updated
    assert outcome.content_updated
    assert isinstance(outcome.errors[0], TimeoutError)


async def test_schedule_new_message_does_not_wait(chat: InMemoryChat):
    started = anyio.Event()
    release = anyio.Event()

    class BlockingSession(RecordingSession):
        async def send_resource_updated(self, uri: Any) -> None:
            started.set()
            await release.wait()
            await super().send_resource_updated(uri)

    session = BlockingSession()
    dispatcher = make_dispatcher(chat)

    async with anyio.create_task_group() as tg:
        dispatcher.schedule_new_message(tg, session, "chat+irc:///general", "m1")
        await started.wait()
        assert session.resource_updates == []
        release.set()

    assert session.resource_updates == ["chat+irc:///general"]
    assert len(session.notifications) == 1


async def test_bus_notifications(bus: ChatMessageBus):
    session = RecordingSession()

    outcome = await bus.notify_new_message(session, "chat+discord:///1234/5678", "m9")

    assert outcome.ok
    assert session.resource_updates == ["chat+discord:///1234/5678"]
    assert await bus.notify_resource_list_changed(session)
    assert session.list_changed == 1


async def test_resource_list_changed_failure(bus: ChatMessageBus):
    session = RecordingSession(fail_notification=True)
    assert not await bus.notify_resource_list_changed(session)
