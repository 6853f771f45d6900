"""Smoke tests for the Textual chat screen."""
import pytest

from neurolink.chat import DisplayType
from neurolink.ui import ChatInputBar, NeurolinkChatApp

from conftest import FakeBackend


@pytest.mark.asyncio
async def test_submitted_turn_appends_reply(make_orchestrator):
    backend = FakeBackend("Try a slow breath in for four counts.")
    app = NeurolinkChatApp(make_orchestrator(backend), model_name="primary-model")

    async with app.run_test() as pilot:
        app.on_chat_input_bar_submitted(ChatInputBar.Submitted("I can't focus"))
        await app.workers.wait_for_complete()
        await pilot.pause()

        messages = app.session.messages
        assert [m.text for m in messages[1:]] == ["I can't focus", "Try a slow breath in for four counts."]
        assert messages[-1].display_type == DisplayType.RESOURCE
        assert not app.session.awaiting_reply


@pytest.mark.asyncio
async def test_clear_resets_conversation(make_orchestrator):
    app = NeurolinkChatApp(make_orchestrator(FakeBackend("ok")))

    async with app.run_test() as pilot:
        app.on_chat_input_bar_submitted(ChatInputBar.Submitted("hello"))
        await app.workers.wait_for_complete()
        app.action_clear_chat()
        await pilot.pause()

        assert len(app.session.messages) == 1


@pytest.mark.asyncio
async def test_input_history_browsing(make_orchestrator):
    app = NeurolinkChatApp(make_orchestrator(FakeBackend("ok")))

    async with app.run_test() as pilot:
        bar = app.query_one(ChatInputBar)
        for text in ("first", "second"):
            bar._text_area.text = text
            bar._submit()
            await pilot.pause()
            await app.workers.wait_for_complete()
            await pilot.pause()

        bar._navigate_history(1)
        assert bar._text_area.text == ""

        steps = [-1, -1, -1, 1, 1]
        seen = []
        for direction in steps:
            bar._navigate_history(direction)
            seen.append(bar._text_area.text)

        assert seen == ["second", "first", "first", "second", ""]
