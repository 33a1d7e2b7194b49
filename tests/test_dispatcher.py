from __future__ import annotations

import json

import pytest

from chat_dumper.irc.dispatcher import sanitize_plan_name
from chat_dumper.irc.models import ConnectionState
from tests.fixtures.chat_lines import (
    CAP_ACK_LINE,
    CAP_NAK_LINE,
    NAMES_LINE,
    PING_LINE,
    RECONNECT_LINE,
    SCENARIO_LINE,
    SUB_LINE,
    WELCOME_LINE,
    clearchat,
    privmsg,
)


@pytest.mark.asyncio
async def test_ping_replies_with_single_pong(client, events):
    await client.feed(PING_LINE + "\r\n")
    assert client.sent == ["PONG :tmi.twitch.tv"]
    assert events.names() == ["message", "command"]


@pytest.mark.asyncio
async def test_cap_ack_emits_connected_once(client, events):
    await client.feed(CAP_ACK_LINE + "\r\n" + CAP_ACK_LINE + "\r\n")
    assert events.names().count("connected") == 1
    assert client.state is ConnectionState.READY
    assert client.is_ready


@pytest.mark.asyncio
async def test_cap_nak_does_not_connect(client, events):
    await client.feed(CAP_NAK_LINE + "\r\n")
    assert "connected" not in events.names()
    assert not client.is_ready


@pytest.mark.asyncio
async def test_partial_lines_wait_for_terminator(client, events):
    await client.feed("PING :tmi")
    assert client.sent == []
    assert client.message_buffer == "PING :tmi"
    await client.feed(".twitch.tv\r\n")
    assert client.sent == ["PONG :tmi.twitch.tv"]
    assert client.message_buffer == ""


@pytest.mark.asyncio
async def test_lines_are_processed_in_order(client, events):
    payload = "\r\n".join([privmsg("first"), privmsg("second"), privmsg("third")]) + "\r\n"
    await client.feed(payload)
    chats = [args[0].parameters for args in events.args_of("chat")]
    assert chats == ["first", "second", "third"]


@pytest.mark.asyncio
async def test_dropped_lines_emit_nothing(client, events):
    await client.feed(NAMES_LINE + "\r\n" + WELCOME_LINE + "\r\n")
    assert events.names() == ["message", "command"]


@pytest.mark.asyncio
async def test_reconnect_is_only_logged(client, events):
    await client.feed(RECONNECT_LINE + "\r\n")
    assert events.names() == ["message", "command"]
    assert client.sent == []


@pytest.mark.asyncio
async def test_scenario_message_links_user_and_archives_emote(client, events, tmp_path):
    target = tmp_path / "dump.json"
    client.start_dump(target)
    await client.feed(SCENARIO_LINE + "\r\n")

    (message,) = events.args_of("chat")[0]
    assert message.user is not None
    assert message.user.id == "42"
    assert message.user.display_name == "Ann"
    assert client.channel_id == "7"

    assert client.stop_dump() == target
    document = json.loads(target.read_text(encoding="utf-8"))
    (comment,) = document["comments"]
    assert comment["commenter"]["_id"] == "42"
    assert comment["message"]["body"] == "Kappa hello"
    first = comment["message"]["fragments"][0]
    assert first["text"] == "Kappa"
    assert first["emoticon"] == {"emoticon_id": "25"}
    assert document["streamer"] == {"name": "chan", "id": 7}


@pytest.mark.asyncio
async def test_clearchat_emits_ban_with_duration(client, events):
    await client.feed(privmsg("spam", user_id="3", login="spammer") + "\r\n")
    await client.feed(clearchat("spammer", "3", duration=600) + "\r\n")
    (login, duration, message) = events.args_of("ban")[0]
    assert (login, duration) == ("spammer", 600)
    assert message.command.command == "CLEARCHAT"
    assert client.banned_user_count == 1


@pytest.mark.asyncio
async def test_resub_emits_sub_with_clean_plan(client, events):
    await client.feed(SUB_LINE + "\r\n")
    (display_name, months, plan, text, message) = events.args_of("sub")[0]
    assert display_name == "Subby"
    assert months == 3
    assert plan == "Channel Subscription (chan)"
    assert text == "three months already"
    assert message.user.id == "77"


@pytest.mark.asyncio
async def test_other_usernotice_does_not_emit_sub(client, events):
    line = "@msg-id=raid;user-id=8;login=raider :tmi.twitch.tv USERNOTICE #chan"
    await client.feed(line + "\r\n")
    assert "sub" not in events.names()


@pytest.mark.asyncio
async def test_live_inference_emits_once(client, events):
    lines = [privmsg("hello")] * 4 + [privmsg("pog live")] * 7
    await client.feed("\r\n".join(lines) + "\r\n")
    assert len(events.args_of("live")) == 1


@pytest.mark.asyncio
async def test_failing_observer_does_not_stop_others(client, events):
    seen = []

    @client.on("chat")
    def broken(message):
        raise RuntimeError("observer bug")

    @client.on("chat")
    async def healthy(message):
        seen.append(message.parameters)

    await client.feed(privmsg("one") + "\r\n" + privmsg("two") + "\r\n")
    assert seen == ["one", "two"]


@pytest.mark.asyncio
async def test_bad_line_is_isolated(client, events, monkeypatch):
    original = client.store.apply_message

    def flaky(message):
        if message.parameters == "boom":
            raise ValueError("bad state")
        return original(message)

    monkeypatch.setattr(client.store, "apply_message", flaky)
    await client.feed(privmsg("boom") + "\r\n" + privmsg("fine") + "\r\n")
    assert [args[0].parameters for args in events.args_of("chat")] == ["fine"]


@pytest.mark.asyncio
async def test_message_without_text_is_not_archived(client, tmp_path):
    target = tmp_path / "dump.json"
    client.start_dump(target)
    await client.feed("@user-id=5;room-id=7 :v!v@v.tmi.twitch.tv PRIVMSG #chan\r\n")
    await client.feed(privmsg("kept") + "\r\n")
    client.stop_dump()
    comments = json.loads(target.read_text(encoding="utf-8"))["comments"]
    assert [c["message"]["body"] for c in comments] == ["kept"]


def test_sanitize_plan_name():
    assert sanitize_plan_name("Tier\\s1") == "Tier 1"
    assert sanitize_plan_name("Tier\\\\s1") == "Tier 1"
    assert sanitize_plan_name(None) is None


@pytest.mark.asyncio
async def test_whole_chat_clear_emits_ban_without_target(client, events):
    await client.feed("@room-id=7;tmi-sent-ts=1700000000000 :tmi.twitch.tv CLEARCHAT #chan\r\n")
    (login, duration, message) = events.args_of("ban")[0]
    assert login is None
    assert duration == 0
    assert client.banned_user_count == 0
