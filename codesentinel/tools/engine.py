"""Analysis engine: the model call behind every agent."""

from typing import List, Optional, Protocol

from claude_agent_sdk import (
    ClaudeSDKClient,
    ClaudeAgentOptions,
    AssistantMessage,
    TextBlock,
    ResultMessage,
)

from ..utils import get_logger


MAX_OUTPUT_TOKENS_ENV = "CLAUDE_CODE_MAX_OUTPUT_TOKENS"


class EngineError(RuntimeError):
    """The analysis engine failed to produce a response."""


class AnalysisEngine(Protocol):
    """Anything that turns a prompt into free-form model text."""

    async def generate(
        self,
        prompt: str,
        system_prompt: str = "",
        max_tokens: Optional[int] = None,
    ) -> str:
        ...


class ClaudeEngine:
    """
    AnalysisEngine backed by the Claude Agent SDK.

    Runs a single tool-less turn and returns the concatenated text blocks.
    Timeouts and retries are left to the SDK.
    """

    def __init__(self, model: Optional[str] = None, max_tokens: Optional[int] = None):
        self.model = model
        self.max_tokens = max_tokens
        self.logger = get_logger("codesentinel.engine")

    def _options(self, system_prompt: str, max_tokens: Optional[int] = None) -> ClaudeAgentOptions:
        env = {}
        if max_tokens:
            # The CLI transport reads its output budget from the environment
            env[MAX_OUTPUT_TOKENS_ENV] = str(max_tokens)
        return ClaudeAgentOptions(
            system_prompt=system_prompt or None,
            allowed_tools=[],
            max_turns=1,
            model=self.model,
            env=env,
        )

    async def generate(
        self,
        prompt: str,
        system_prompt: str = "",
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Send one prompt and collect the reply.

        Args:
            prompt: User prompt with the code to analyze
            system_prompt: Reviewer instructions
            max_tokens: Output budget; falls back to the engine's own

        Returns:
            The model's reply text

        Raises:
            EngineError: If the SDK reports an error or no text comes back
        """
        budget = max_tokens or self.max_tokens
        self.logger.debug(f"Engine call: {len(prompt)} chars, max_tokens={budget}")

        chunks: List[str] = []
        fallback: Optional[str] = None

        async with ClaudeSDKClient(options=self._options(system_prompt, budget)) as client:
            await client.query(prompt)

            async for message in client.receive_response():
                if isinstance(message, AssistantMessage):
                    for block in message.content:
                        if isinstance(block, TextBlock):
                            chunks.append(block.text)

                elif isinstance(message, ResultMessage):
                    self.logger.debug(f"Engine call completed in {message.duration_ms}ms")
                    if message.is_error:
                        raise EngineError(f"Engine returned an error result: {message.result}")
                    fallback = message.result

        text = "".join(chunks) or (fallback or "")
        if not text.strip():
            raise EngineError("Engine returned an empty response")
        return text
