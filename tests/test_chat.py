"""
Tests for the chat exchange loop.
"""

import tempfile
from pathlib import Path

import pytest

from kog_shell.chat import MAX_ROUNDS_MESSAGE, ChatService
from kog_shell.filesystem import ShellTools, ShellToolsConfig
from kog_shell.llm import DummyProvider, LLMConfig, MessageRole, ProviderType


@pytest.fixture
def work_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def tools(work_dir):
    return ShellTools(ShellToolsConfig(initial_directory=work_dir, environment={}))


@pytest.fixture
def provider():
    return DummyProvider(LLMConfig(provider=ProviderType.DUMMY, model="dummy"))


class TestChatService:
    """Tests for ChatService.exchange."""

    @pytest.mark.asyncio
    async def test_plain_reply(self, provider, tools):
        provider.queue_text("Hello there")
        service = ChatService(provider, tools)

        assert await service.exchange("hi") == "Hello there"
        assert provider.call_count == 1
        assert [schema["function"]["name"] for schema in provider.last_tools][0] == (
            "getCurrentDateTimeLocal"
        )

    @pytest.mark.asyncio
    async def test_tool_call_executed_and_fed_back(self, provider, tools, work_dir):
        """Test that a requested tool runs and its result reaches the model."""
        provider.queue_tool_call(
            "writeFile", {"fileName": "notes.txt", "content": "hello"}, call_id="c1"
        )
        provider.queue_text("Created notes.txt")
        service = ChatService(provider, tools)

        reply = await service.exchange("create notes.txt containing 'hello'")

        assert reply == "Created notes.txt"
        assert (work_dir / "notes.txt").read_text() == "hello"

        conversation = provider.last_prompt
        assert [m.role for m in conversation] == [
            MessageRole.USER,
            MessageRole.ASSISTANT,
            MessageRole.TOOL,
        ]
        assert conversation[1].tool_calls[0]["id"] == "c1"
        assert conversation[2].tool_call_id == "c1"
        assert conversation[2].content == f"Wrote file: {work_dir / 'notes.txt'}"

    @pytest.mark.asyncio
    async def test_tool_failure_is_text_for_model(self, provider, tools, work_dir):
        provider.queue_tool_call("removePath", {"target": "../x"}, call_id="c1")
        provider.queue_text("I cannot do that")
        service = ChatService(provider, tools)

        assert await service.exchange("delete ../x") == "I cannot do that"
        tool_message = provider.last_prompt[-1]
        assert tool_message.content.startswith(
            "Refusing to delete outside current working directory: "
        )

    @pytest.mark.asyncio
    async def test_unknown_tool_reported(self, provider, tools):
        provider.queue_tool_call("formatDisk", {}, call_id="c1")
        provider.queue_text("ok")
        service = ChatService(provider, tools)

        await service.exchange("format")

        assert provider.last_prompt[-1].content == "Unknown tool: formatDisk"

    @pytest.mark.asyncio
    async def test_max_tool_rounds(self, provider, tools):
        for _ in range(3):
            provider.queue_tool_call("getCurrentDirectory")
        service = ChatService(provider, tools, max_tool_rounds=2)

        assert await service.exchange("loop") == MAX_ROUNDS_MESSAGE
        assert provider.call_count == 3

    @pytest.mark.asyncio
    async def test_provider_failure_returned_as_text(self, provider, tools):
        provider.set_should_fail(True, "connection refused")
        service = ChatService(provider, tools)

        reply = await service.exchange("hi")

        assert reply.startswith("LLM request failed: connection refused")

    @pytest.mark.asyncio
    async def test_listener_sees_each_call(self, provider, tools, work_dir):
        seen = []
        provider.queue_tool_call("getCurrentDirectory", call_id="c1")
        provider.queue_text("done")
        service = ChatService(
            provider, tools, on_tool_call=lambda call, result: seen.append((call.name, result))
        )

        await service.exchange("where am I")

        assert seen == [("getCurrentDirectory", str(work_dir))]

    @pytest.mark.asyncio
    async def test_directory_persists_across_exchanges(self, provider, tools, work_dir):
        """Test that the only state carried over is the working directory."""
        (work_dir / "sub").mkdir()
        provider.queue_tool_call("setCurrentDirectory", {"newDirectory": "sub"})
        provider.queue_text("moved")
        provider.queue_tool_call("createFile", {"fileName": "a.txt"})
        provider.queue_text("created")
        service = ChatService(provider, tools)

        await service.exchange("cd sub")
        await service.exchange("create a.txt")

        assert (work_dir / "sub" / "a.txt").exists()
        assert provider.last_prompt[0].content == "create a.txt"

    @pytest.mark.asyncio
    async def test_without_tools(self, provider):
        provider.queue_tool_call("getCurrentDirectory")
        service = ChatService(provider)

        assert await service.exchange("hi") == ""
        assert provider.last_tools is None
