"""Cohere provider implementation."""

import cohere

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
    value = str(finish_reason or "").upper()
    if value == "MAX_TOKENS":
        return FinishStatus.LENGTH_LIMITED
    if value in ("COMPLETE", "STOP_SEQUENCE"):
        return FinishStatus.COMPLETE
    return FinishStatus.OTHER


class CohereProvider(BaseLLMProvider):
    """Cohere LLM provider."""

    name = "Cohere"
    api_key_env_var = API_KEY_ENV_VARS[LLMProvider.COHERE]

    def _create_client(self, api_key: str):
        return cohere.ClientV2(api_key=api_key)

    def _submit(self, request: GenerationRequest) -> GenerationResult:
        messages = [{"role": "system", "content": request.system_instruction}]
        messages.extend({"role": m.role, "content": m.content} for m in request.messages())

        response = self.client.chat(
            model=request.model_name,
            max_tokens=request.max_output_tokens,
            temperature=request.temperature,
            messages=messages,
        )

        content = response.message.content or []
        text = "".join(getattr(item, "text", "") or "" for item in content).strip()

        usage = TokenUsage()
        tokens = getattr(response.usage, "tokens", None) if response.usage else None
        if tokens:
            input_tokens = _int_or_zero(tokens.input_tokens)
            output_tokens = _int_or_zero(tokens.output_tokens)
            usage = TokenUsage(
                prompt_tokens=input_tokens,
                output_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
            )

        return GenerationResult(
            text=text,
            finish_status=map_finish_reason(response.finish_reason),
            usage=usage,
            model=request.model_name,
        )
