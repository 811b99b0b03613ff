"""Tests for the Claude-backed engine options. No SDK session is started."""

import asyncio

import pytest

from codesentinel.tools import ClaudeEngine, EngineError
from codesentinel.tools import engine as engine_module


class RecordingClient:
    """ClaudeSDKClient stand-in that records its options and replies with nothing."""

    instances = []

    def __init__(self, options=None):
        self.options = options
        self.queries = []
        RecordingClient.instances.append(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def query(self, prompt):
        self.queries.append(prompt)

    async def receive_response(self):
        for message in ():
            yield message


@pytest.fixture
def recording_client(monkeypatch):
    RecordingClient.instances = []
    monkeypatch.setattr(engine_module, "ClaudeSDKClient", RecordingClient)
    return RecordingClient


class TestClaudeEngineOptions:
    """The output budget must reach the SDK."""

    def test_budget_is_passed_to_sdk_env(self):
        options = ClaudeEngine(model="claude-sonnet-4-5")._options("Review this", 4096)

        assert options.env == {"CLAUDE_CODE_MAX_OUTPUT_TOKENS": "4096"}
        assert options.max_turns == 1
        assert options.allowed_tools == []
        assert options.model == "claude-sonnet-4-5"

    def test_no_budget_leaves_env_empty(self):
        assert ClaudeEngine()._options("Review this").env == {}

    def test_call_budget_overrides_engine_default(self, recording_client):
        """Given a per-call max_tokens, the session should be opened with it."""
        # Given
        engine = ClaudeEngine(max_tokens=8192)

        # When - the empty reply is reported as an engine error
        with pytest.raises(EngineError, match="empty response"):
            asyncio.run(engine.generate("x = 1", system_prompt="Review", max_tokens=1024))

        # Then
        client = recording_client.instances[0]
        assert client.options.env["CLAUDE_CODE_MAX_OUTPUT_TOKENS"] == "1024"
        assert client.queries == ["x = 1"]

    def test_engine_default_budget_is_used(self, recording_client):
        with pytest.raises(EngineError):
            asyncio.run(ClaudeEngine(max_tokens=8192).generate("x = 1"))

        assert recording_client.instances[0].options.env == {
            "CLAUDE_CODE_MAX_OUTPUT_TOKENS": "8192",
        }
