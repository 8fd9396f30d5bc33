"""Tests for ChatDispatcher message classification."""
import pytest

from conftest import make_settings
from twitchkit.api.errors import EmoteTableNotLoadedError
from twitchkit.chat.dispatcher import ChatDispatcher, parse_command, tokenize
from twitchkit.chat.emotes import EmoteTable
from twitchkit.models.chat import UserState


class TestParseCommand:
    def test_plain_command(self):
        assert parse_command("!hello", "!") == ("hello", "")

    def test_command_with_message(self):
        assert parse_command("  !ban   spammer for real  ", "!") == ("ban", "spammer for real")

    def test_case_is_preserved(self):
        assert parse_command("!HeLLo", "!").name == "HeLLo"

    def test_not_a_command(self):
        assert parse_command("hello !there", "!") is None

    def test_bare_prefix(self):
        assert parse_command("!", "!") is None
        assert parse_command("! hello", "!") is None

    def test_multichar_prefix(self):
        assert parse_command("?!dice 2d6", "?!") == ("dice", "2d6")


class TestTokenize:
    def test_strips_punctuation(self):
        assert tokenize("good game, gg!") == ["good", "game", "gg"]

    def test_empty(self):
        assert tokenize("  ...  ") == []


class TestSelfFilter:
    async def test_own_message_is_dropped(self, dispatcher, connection, events, recorder):
        parsed = recorder()
        events.chat_parsed(parsed)
        me = UserState(username="testbot", display_name="TestBot")

        await dispatcher.handle_chat("chan", me, "!hello", True)
        await dispatcher.handle_chat("chan", me, "gg", True)

        assert connection.said == []
        assert parsed.calls == []

    async def test_self_flag_with_other_username_is_kept(self, dispatcher, connection):
        other = UserState(username="someoneelse")
        await dispatcher.handle_chat("chan", other, "!hello", True)
        assert connection.said == [("chan", "Hi @someoneelse!")]

    async def test_ignore_self_disabled(self, connection, emotes, events):
        dispatcher = ChatDispatcher(connection, make_settings(ignore_self=False), emotes, events=events)
        me = UserState(username="testbot")
        await dispatcher.handle_chat("chan", me, "!hello", True)
        assert connection.said == [("chan", "Hi @testbot!")]

    async def test_own_whisper_is_dropped(self, dispatcher, connection):
        me = UserState(username="TESTBOT", message_type="whisper")
        await dispatcher.handle_whisper("testbot", me, "!hello", True)
        assert connection.whispered == []


class TestChatCommands:
    async def test_basic_command_replies(self, dispatcher, connection, events, bob, recorder):
        handler = recorder()
        events.chat_command("hello")(handler)

        await dispatcher.handle_chat("chan", bob, "!hello", False)

        assert connection.said == [("chan", "Hi @bob!")]
        assert handler.calls == []

    async def test_basic_command_is_case_insensitive(self, dispatcher, connection, bob):
        await dispatcher.handle_chat("chan", bob, "!HELLO", False)
        assert connection.said == [("chan", "Hi @bob!")]

    async def test_reply_uses_display_name(self, dispatcher, connection):
        user = UserState(username="bob", display_name="Bobby")
        await dispatcher.handle_chat("chan", user, "!hello", False)
        assert connection.said == [("chan", "Hi @Bobby!")]

    async def test_unknown_command_emits_event(self, dispatcher, connection, events, bob, recorder):
        handler = recorder()
        events.chat_command("foo")(handler)

        await dispatcher.handle_chat("chan", bob, "!foo bar", False)

        assert handler.calls == [("chan", "bob", "foo", False)]
        assert connection.said == []

    async def test_event_name_is_lowercased(self, dispatcher, events, bob, recorder):
        handler = recorder()
        events.on("chat_cmd_foo")(handler)

        await dispatcher.handle_chat("chan", bob, "!FoO", False)

        assert handler.calls == [("chan", "bob", "FoO", False)]

    async def test_command_does_not_emit_chat_parsed(self, dispatcher, events, bob, recorder):
        parsed = recorder()
        events.chat_parsed(parsed)

        await dispatcher.handle_chat("chan", bob, "!foo gg Kappa", False)

        assert parsed.calls == []

    async def test_event_without_handler_is_dropped(self, dispatcher, connection, bob):
        await dispatcher.handle_chat("chan", bob, "!nobody", False)
        assert connection.said == []


class TestChatParsed:
    async def test_word_trigger_replies_and_emits(self, dispatcher, connection, events, bob, recorder):
        parsed = recorder()
        events.chat_parsed(parsed)

        await dispatcher.handle_chat("chan", bob, "good game gg", False)

        assert connection.said == [("chan", "Well played!")]
        assert parsed.calls == [("chan", bob, "good game gg", False)]

    async def test_trigger_fires_per_matching_token(self, dispatcher, connection, bob):
        await dispatcher.handle_chat("chan", bob, "gg GG, gg!", False)
        assert connection.said == [("chan", "Well played!")] * 3

    async def test_emote_is_inlined(self, dispatcher, events, bob, recorder):
        parsed = recorder()
        events.chat_parsed(parsed)

        await dispatcher.handle_chat("chan", bob, "Kappa test", False)

        message = parsed.calls[0][2]
        assert message.startswith("<img")
        assert "https://static-cdn.jtvnw.net/emoticons/v1/25/1.0" in message
        assert message.endswith(" test")

    async def test_emotes_are_case_sensitive(self, dispatcher, events, bob, recorder):
        parsed = recorder()
        events.chat_parsed(parsed)

        await dispatcher.handle_chat("chan", bob, "kappa", False)

        assert parsed.calls[0][2] == "kappa"

    async def test_emote_replaces_first_literal_occurrence(self, dispatcher, events, bob, recorder):
        parsed = recorder()
        events.chat_parsed(parsed)

        await dispatcher.handle_chat("chan", bob, "xKappa Kappa", False)

        message = parsed.calls[0][2]
        assert message.startswith("x<img")
        assert message.endswith(" Kappa")

    async def test_token_can_trigger_and_be_replaced(self, connection, events, bob, recorder):
        emotes = EmoteTable(http=None)  # type: ignore[arg-type]
        emotes.set({"gg": "7"})
        settings = make_settings()
        dispatcher = ChatDispatcher(connection, settings, emotes, events=events)
        parsed = recorder()
        events.chat_parsed(parsed)

        await dispatcher.handle_chat("chan", bob, "gg", False)

        assert connection.said == [("chan", "Well played!")]
        assert "/v1/7/" in parsed.calls[0][2]

    async def test_emote_table_must_be_loaded(self, connection, events, bob):
        dispatcher = ChatDispatcher(
            connection, make_settings(), EmoteTable(http=None), events=events  # type: ignore[arg-type]
        )

        with pytest.raises(EmoteTableNotLoadedError):
            await dispatcher.handle_chat("chan", bob, "hello there", False)

        # Commands never touch the emote table
        await dispatcher.handle_chat("chan", bob, "!hello", False)
        assert connection.said == [("chan", "Hi @bob!")]


class TestWhispers:
    async def test_whisper_command_carries_message(self, dispatcher, events, recorder):
        handler = recorder()
        events.whisper_command("ban")(handler)
        user = UserState(username="mod", message_type="whisper")

        await dispatcher.handle_whisper("mod", user, "!ban   spammer  ", False)

        assert handler.calls == [(user, "ban", "spammer", False)]

    async def test_basic_command_is_whispered_back(self, dispatcher, connection):
        user = UserState(username="bob", display_name="Bob", message_type="whisper")

        await dispatcher.handle_whisper("bob", user, "!hello", False)

        assert connection.whispered == [("bob", "Hi @Bob!")]
        assert connection.said == []

    async def test_plain_whisper_is_ignored(self, dispatcher, connection, events, recorder):
        parsed = recorder()
        events.chat_parsed(parsed)
        user = UserState(username="bob", message_type="whisper")

        await dispatcher.handle_whisper("bob", user, "gg Kappa", False)

        assert connection.said == []
        assert connection.whispered == []
        assert parsed.calls == []

    async def test_separate_whisper_prefix(self, connection, emotes, events, recorder):
        settings = make_settings(chat_prefix="!", whisper_prefix="~")
        dispatcher = ChatDispatcher(connection, settings, emotes, events=events)
        handler = recorder()
        events.whisper_command("roll")(handler)
        user = UserState(username="bob", message_type="whisper")

        await dispatcher.handle_whisper("bob", user, "!roll", False)
        assert handler.calls == []

        await dispatcher.handle_whisper("bob", user, "~roll d20", False)
        assert handler.calls == [(user, "roll", "d20", False)]


class TestAttach:
    def test_attach_subscribes_once(self, dispatcher, connection):
        dispatcher.attach()
        dispatcher.attach()

        assert connection.handlers["chat"] == [dispatcher.handle_chat]
        assert connection.handlers["whisper"] == [dispatcher.handle_whisper]

    def test_unhandled_event_commands(self, connection, emotes, events, recorder):
        settings = make_settings(event_commands=["Roll", "quote"])
        dispatcher = ChatDispatcher(connection, settings, emotes, events=events)
        events.whisper_command("quote")(recorder())

        assert dispatcher.unhandled_event_commands() == ["roll"]

    async def test_raw_chat_reaches_dispatcher(self, dispatcher, connection, bob):
        dispatcher.attach()
        await connection.receive("chat", "chan", bob, "!hello")
        assert connection.said == [("chan", "Hi @bob!")]
