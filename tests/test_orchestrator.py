"""Tests for turn orchestration, the screen-side session and wiring."""
import asyncio

import pytest
from hypothesis import given
from hypothesis import strategies as st

from neurolink.chat import (
    OVERLOADED_REPLY,
    TIMEOUT_REPLY,
    ChatOrchestrator,
    ChatSession,
    DisplayType,
    Message,
    ResiliencePolicy,
    Sender,
    create_backend_from_settings,
    create_chat_orchestrator,
)
from neurolink.chat.session import GREETING
from neurolink.config import Settings
from neurolink.llm import (
    BackendHTTPError,
    CompletionClient,
    ConfigurationError,
    GeminiBackend,
    HistoryItem,
    ProxyBackend,
)
from neurolink.prompts import get_persona_prompt

from conftest import FALLBACK, PRIMARY, FakeBackend, conversation, no_sleep


def overloaded() -> BackendHTTPError:
    return BackendHTTPError(503, "The model is overloaded. Please try again later.")


class TestSendTurn:
    """Tests for ChatOrchestrator.send_turn."""

    @pytest.mark.asyncio
    async def test_first_turn_is_classified(self, make_orchestrator):
        backend = FakeBackend("Let's break this into small steps...")
        orchestrator = make_orchestrator(backend)

        reply = await orchestrator.send_turn([], "I'm really stressed about exams")

        assert reply.sender == Sender.BOT
        assert reply.text == "Let's break this into small steps..."
        assert reply.display_type == DisplayType.RESOURCE
        request, model = backend.calls[0]
        assert model == PRIMARY
        assert request.history == []
        assert request.user_text == "I'm really stressed about exams"
        assert request.system_instruction == "Be kind."

    @pytest.mark.asyncio
    async def test_crisis_reply_is_escalated(self, make_orchestrator):
        orchestrator = make_orchestrator(FakeBackend("If you feel like you want to end it all, call 988."))

        reply = await orchestrator.send_turn([], "everything feels heavy")

        assert reply.display_type == DisplayType.ESCALATION

    @pytest.mark.asyncio
    async def test_history_excludes_greeting_and_new_turn(self, make_orchestrator):
        backend = FakeBackend("ok")
        orchestrator = make_orchestrator(backend)
        messages = conversation(
            ("bot", "Hi! How's your day going?"),
            ("user", "Not great"),
            ("bot", "I'm sorry to hear that. What happened?"),
        )

        await orchestrator.send_turn(messages, "My exam went badly")

        request, _ = backend.calls[0]
        assert request.history == [
            HistoryItem(role="user", parts=["Not great"]),
            HistoryItem(role="model", parts=["I'm sorry to hear that. What happened?"]),
        ]
        assert request.user_text == "My exam went badly"

    @pytest.mark.asyncio
    async def test_pending_user_message_is_not_duplicated(self, make_orchestrator):
        backend = FakeBackend("ok")
        orchestrator = make_orchestrator(backend)
        messages = conversation(("bot", "Hi!"), ("user", "I'm stressed"))

        await orchestrator.send_turn(messages, "I'm stressed")

        request, _ = backend.calls[0]
        assert request.history == []
        assert request.user_text == "I'm stressed"

    @pytest.mark.asyncio
    async def test_turn_after_error_reply_alternates(self, make_orchestrator):
        backend = FakeBackend("I'm here.")
        orchestrator = make_orchestrator(backend)
        messages = [
            Message.user("hi"),
            Message.bot("Something went wrong", DisplayType.ERROR),
        ]

        await orchestrator.send_turn(messages, "are you there?")

        request, _ = backend.calls[0]
        assert request.history == []
        assert request.user_text == "are you there?"

    @pytest.mark.asyncio
    async def test_error_reply_mid_conversation_keeps_earlier_turns(self, make_orchestrator):
        backend = FakeBackend("ok")
        orchestrator = make_orchestrator(backend)
        messages = conversation(("user", "one"), ("bot", "two"), ("user", "three"))
        messages.append(Message.bot("Details: HTTP 400", DisplayType.ERROR))

        await orchestrator.send_turn(messages, "four")

        request, _ = backend.calls[0]
        assert [(item.role, item.text) for item in request.history] == [("user", "one"), ("model", "two")]

    @given(
        st.lists(st.tuples(st.sampled_from(["user", "bot", "error"]), st.text(min_size=1, max_size=5)), max_size=12),
        st.integers(min_value=1, max_value=8),
    )
    def test_sent_roles_always_alternate(self, log, history_limit):
        """Property test: history plus the new turn never repeats a role."""
        backend = FakeBackend("ok")
        orchestrator = ChatOrchestrator(
            client=CompletionClient(backend, system_instruction="Be kind."),
            policy=ResiliencePolicy.interactive(PRIMARY, FALLBACK, sleep=no_sleep),
            history_limit=history_limit,
        )
        messages = [
            Message.user(text) if kind == "user"
            else Message.bot(text, DisplayType.ERROR if kind == "error" else DisplayType.NORMAL)
            for kind, text in log
        ]

        asyncio.run(orchestrator.send_turn(messages, "new turn"))

        request, _ = backend.calls[0]
        roles = [item.role for item in request.history] + ["user"]
        for previous, current in zip(roles, roles[1:]):
            assert previous != current

    @pytest.mark.asyncio
    async def test_history_limit_applies(self, make_orchestrator):
        backend = FakeBackend("ok")
        orchestrator = make_orchestrator(backend, history_limit=2)
        messages = conversation(
            ("user", "one"), ("bot", "two"), ("user", "three"), ("bot", "four"),
        )

        await orchestrator.send_turn(messages, "five")

        request, _ = backend.calls[0]
        assert [item.text for item in request.history] == ["three", "four"]

    @pytest.mark.asyncio
    async def test_overload_falls_back(self, make_orchestrator):
        backend = FakeBackend(overloaded(), overloaded(), "Fallback says hi")
        orchestrator = make_orchestrator(backend)

        reply = await orchestrator.send_turn([], "hello")

        assert reply.text == "Fallback says hi"
        assert [model for _, model in backend.calls] == [PRIMARY, PRIMARY, FALLBACK]

    @pytest.mark.asyncio
    async def test_persistent_overload_gives_canned_reply(self, make_orchestrator):
        backend = FakeBackend(overloaded())
        orchestrator = make_orchestrator(backend)

        reply = await orchestrator.send_turn([], "hello")

        assert reply.text == OVERLOADED_REPLY
        assert reply.display_type != DisplayType.ERROR
        assert len(backend.calls) == 3

    @pytest.mark.asyncio
    async def test_hanging_backend_gives_timeout_reply(self, make_orchestrator):
        orchestrator = make_orchestrator(FakeBackend(None), timeout=0.05)

        reply = await orchestrator.send_turn([], "hello")

        assert reply.text == TIMEOUT_REPLY

    @pytest.mark.asyncio
    async def test_hard_failure_becomes_error_message(self, make_orchestrator):
        backend = FakeBackend(BackendHTTPError(400, "Invalid argument"))
        orchestrator = make_orchestrator(backend)

        reply = await orchestrator.send_turn([], "hello")

        assert reply.display_type == DisplayType.ERROR
        assert "Details: HTTP 400: Invalid argument" in reply.text
        assert len(backend.calls) == 1

    @pytest.mark.asyncio
    async def test_empty_reply_becomes_error_message(self, make_orchestrator):
        orchestrator = make_orchestrator(FakeBackend("   "))

        reply = await orchestrator.send_turn([], "hello")

        assert reply.display_type == DisplayType.ERROR

    @pytest.mark.asyncio
    async def test_blank_text_rejected(self, make_orchestrator):
        backend = FakeBackend("ok")
        orchestrator = make_orchestrator(backend)

        with pytest.raises(ValueError):
            await orchestrator.send_turn([], "   ")
        assert backend.calls == []


class TestRetryTurn:
    """Tests for ChatOrchestrator.retry_turn."""

    @pytest.mark.asyncio
    async def test_resends_latest_user_message(self, make_orchestrator):
        backend = FakeBackend("Here's a tip that might help.")
        orchestrator = make_orchestrator(backend)
        messages = conversation(
            ("bot", "Hi!"),
            ("user", "exam stress"),
            ("bot", OVERLOADED_REPLY),
        )

        reply = await orchestrator.retry_turn(messages)

        assert reply.text == "Here's a tip that might help."
        request, _ = backend.calls[0]
        assert request.history == []
        assert request.user_text == "exam stress"

    @pytest.mark.asyncio
    async def test_uses_patient_plan(self, make_orchestrator):
        backend = FakeBackend(overloaded())
        orchestrator = make_orchestrator(backend)

        reply = await orchestrator.retry_turn(conversation(("user", "hello")))

        assert reply.text == OVERLOADED_REPLY
        assert [model for _, model in backend.calls] == [PRIMARY, FALLBACK]

    @pytest.mark.asyncio
    async def test_requires_a_user_message(self, make_orchestrator):
        orchestrator = make_orchestrator(FakeBackend("ok"))

        with pytest.raises(ValueError):
            await orchestrator.retry_turn(conversation(("bot", "Hi!")))


class TestChatSession:
    """Tests for ChatSession."""

    def test_starts_with_greeting(self, make_orchestrator):
        session = ChatSession(make_orchestrator(FakeBackend("ok")))

        assert [m.text for m in session.messages] == [GREETING]
        assert not session.awaiting_reply

    def test_without_greeting(self, make_orchestrator):
        session = ChatSession(make_orchestrator(FakeBackend("ok")), greeting=None)

        assert session.messages == []

    @pytest.mark.asyncio
    async def test_submit_appends_user_and_bot_messages(self, make_orchestrator):
        backend = FakeBackend("That sounds hard. Want to talk about it?")
        session = ChatSession(make_orchestrator(backend))

        reply = await session.submit("I'm stressed")

        assert reply is not None
        assert [m.sender for m in session.messages] == [Sender.BOT, Sender.USER, Sender.BOT]
        assert session.messages[-1] == reply
        assert not session.awaiting_reply
        request, _ = backend.calls[0]
        assert request.history == []
        assert request.user_text == "I'm stressed"

    @pytest.mark.asyncio
    async def test_message_ids_increase(self, make_orchestrator):
        session = ChatSession(make_orchestrator(FakeBackend("ok")))

        await session.submit("one")
        await session.submit("two")

        ids = [m.id for m in session.messages]
        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)

    @pytest.mark.asyncio
    async def test_blank_input_is_ignored(self, make_orchestrator):
        backend = FakeBackend("ok")
        session = ChatSession(make_orchestrator(backend))

        assert await session.submit("   ") is None
        assert len(session.messages) == 1
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_single_turn_in_flight(self, make_orchestrator):
        backend = FakeBackend("ok")
        session = ChatSession(make_orchestrator(backend))

        session.add_user_message("first")

        assert session.awaiting_reply
        assert not session.can_submit("second")
        assert await session.submit("second") is None
        assert await session.retry() is None
        with pytest.raises(RuntimeError):
            session.add_user_message("second")
        session.clear()
        assert len(session.messages) == 2

        await session.complete_turn()

        assert not session.awaiting_reply
        assert session.can_submit("second")
        assert len(backend.calls) == 1

    @pytest.mark.asyncio
    async def test_retry_after_canned_reply(self, make_orchestrator):
        backend = FakeBackend(overloaded(), overloaded(), overloaded(), "Better now")
        session = ChatSession(make_orchestrator(backend))

        first = await session.submit("hello")
        second = await session.retry()

        assert first.text == OVERLOADED_REPLY
        assert second is not None and second.text == "Better now"
        assert session.messages[-1] == second

    @pytest.mark.asyncio
    async def test_retry_without_user_message(self, make_orchestrator):
        session = ChatSession(make_orchestrator(FakeBackend("ok")))

        assert await session.retry() is None

    @pytest.mark.asyncio
    async def test_clear_resets_to_greeting(self, make_orchestrator):
        session = ChatSession(make_orchestrator(FakeBackend("ok")))
        await session.submit("hello")

        session.clear()

        assert [m.text for m in session.messages] == [GREETING]

    @pytest.mark.asyncio
    async def test_error_reply_is_shown(self, make_orchestrator):
        session = ChatSession(make_orchestrator(FakeBackend(BackendHTTPError(400, "bad request"))))

        reply = await session.submit("hello")

        assert isinstance(reply, Message)
        assert reply.display_type == DisplayType.ERROR
        assert not session.awaiting_reply


class TestWiring:
    """Tests for building the orchestrator from settings."""

    @pytest.mark.asyncio
    async def test_orchestrator_uses_settings(self, settings: Settings):
        backend = FakeBackend("ok")
        orchestrator = create_chat_orchestrator(settings, backend=backend)

        await orchestrator.send_turn([], "hello")

        request, model = backend.calls[0]
        assert model == PRIMARY
        assert request.system_instruction == get_persona_prompt()
        assert request.generation == settings.generation_config()
        assert orchestrator.client.timeout == settings.request_timeout

    def test_persona_prompt_is_packaged(self):
        assert "Neurolink" in get_persona_prompt()

    def test_direct_backend(self, settings: Settings):
        assert isinstance(create_backend_from_settings(settings), GeminiBackend)

    def test_direct_backend_requires_key(self):
        with pytest.raises(ConfigurationError):
            create_backend_from_settings(Settings(google_api_key=None))

    @pytest.mark.asyncio
    async def test_proxy_backend(self):
        settings = Settings(transport="proxy", proxy_url="http://neurolink.test")

        backend = create_backend_from_settings(settings)

        assert isinstance(backend, ProxyBackend)
        assert backend.base_url == "http://neurolink.test"
        await backend.close()
