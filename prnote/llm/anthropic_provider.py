"""Anthropic Claude provider implementation."""

from anthropic import Anthropic

from prnote.config import API_KEY_ENV_VARS, LLMProvider
from prnote.llm.base import (
    BaseLLMProvider,
    FinishStatus,
    GenerationRequest,
    GenerationResult,
    TokenUsage,
    _int_or_zero,
)


def map_stop_reason(stop_reason) -> FinishStatus:
    if stop_reason == "max_tokens":
        return FinishStatus.LENGTH_LIMITED
    if stop_reason in ("end_turn", "stop_sequence"):
        return FinishStatus.COMPLETE
    return FinishStatus.OTHER


class AnthropicProvider(BaseLLMProvider):
    """Anthropic Claude LLM provider."""

    name = "Anthropic"
    api_key_env_var = API_KEY_ENV_VARS[LLMProvider.ANTHROPIC]

    def _create_client(self, api_key: str):
        return Anthropic(api_key=api_key)

    def _submit(self, request: GenerationRequest) -> GenerationResult:
        message = self.client.messages.create(
            model=request.model_name,
            max_tokens=request.max_output_tokens,
            temperature=request.temperature,
            system=request.system_instruction,
            messages=[{"role": m.role, "content": m.content} for m in request.messages()],
        )

        # Only text blocks are user-visible output
        text = "".join(
            getattr(block, "text", "") for block in message.content if getattr(block, "type", "") == "text"
        ).strip()

        input_tokens = _int_or_zero(message.usage.input_tokens)
        output_tokens = _int_or_zero(message.usage.output_tokens)

        return GenerationResult(
            text=text,
            finish_status=map_stop_reason(message.stop_reason),
            usage=TokenUsage(
                prompt_tokens=input_tokens,
                output_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
            ),
            model=request.model_name,
        )
