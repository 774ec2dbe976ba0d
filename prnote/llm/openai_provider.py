"""OpenAI provider implementation."""

from openai import OpenAI

from prnote.config import API_KEY_ENV_VARS, LLMProvider
from prnote.llm.base import (
    BaseLLMProvider,
    FinishStatus,
    GenerationRequest,
    GenerationResult,
    TokenUsage,
    _int_or_zero,
)


def map_finish_reason(finish_reason) -> FinishStatus:
    """Map a chat-completions finish_reason to a FinishStatus."""
    if finish_reason == "length":
        return FinishStatus.LENGTH_LIMITED
    if finish_reason == "stop":
        return FinishStatus.COMPLETE
    return FinishStatus.OTHER


def build_chat_messages(request: GenerationRequest) -> list[dict]:
    """Build an OpenAI-style message list with the system turn first."""
    messages = [{"role": "system", "content": request.system_instruction}]
    messages.extend({"role": m.role, "content": m.content} for m in request.messages())
    return messages


def usage_from_chat_completion(usage) -> TokenUsage:
    """Read token usage from a chat-completions response (OpenAI-compatible)."""
    if usage is None:
        return TokenUsage()
    details = getattr(usage, "completion_tokens_details", None)
    reasoning = getattr(details, "reasoning_tokens", None) if details else None
    return TokenUsage(
        prompt_tokens=_int_or_zero(usage.prompt_tokens),
        output_tokens=_int_or_zero(usage.completion_tokens),
        total_tokens=_int_or_zero(usage.total_tokens),
        reasoning_tokens=_int_or_zero(reasoning) if reasoning is not None else None,
    )


class OpenAIProvider(BaseLLMProvider):
    """OpenAI LLM provider."""

    name = "OpenAI"
    api_key_env_var = API_KEY_ENV_VARS[LLMProvider.OPENAI]

    def _create_client(self, api_key: str):
        return OpenAI(api_key=api_key)

    def _submit(self, request: GenerationRequest) -> GenerationResult:
        response = self.client.chat.completions.create(
            model=request.model_name,
            max_tokens=request.max_output_tokens,
            temperature=request.temperature,
            messages=build_chat_messages(request),
        )

        choice = response.choices[0] if response.choices else None
        text = ((choice.message.content if choice else None) or "").strip()

        return GenerationResult(
            text=text,
            finish_status=map_finish_reason(choice.finish_reason if choice else None),
            usage=usage_from_chat_completion(response.usage),
            model=request.model_name,
        )
